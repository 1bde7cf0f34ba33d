from app.models.aspect_keyword import AspectKeywordRule
from app.models.category_mapping import CategoryMapping
from app.models.category_requirement import CategoryRequirement
from app.schemas.product import SourceProduct


class MockData:
    """Mock data for testing"""
    @staticmethod
    def keepa_product(**overrides):
        raw = {
            "asin": "B000TEST01",
            "title": "Acme Widget",
            "brand": "Acme",
            "model": "AW-100",
            "partNumber": "AW100-BLK",
            "color": "Black",
            "manufacturer": "Acme Corp",
            "features": ["Bluetooth 5.3", "30 hour battery"],
            "description": None,
            "imagesCSV": "51abc.jpg,61def.jpg",
            "upcList": ["012345678905"],
            "eanList": [],
            "productGroup": "Electronics",
            "type": "HEADPHONES",
            "csv": [[3000000, 2199, 3000100, -1, 3000200, 1999]],
        }
        raw.update(overrides)
        return raw

    @staticmethod
    def source_product(**overrides):
        fields = {
            "asin": "B000TEST01",
            "title": "Acme Widget",
            "brand": "Acme",
        }
        fields.update(overrides)
        return SourceProduct(**fields)

    @staticmethod
    def mapping(source_category, source_subtype, category_id, category_name, priority=0, is_default=False, id=None):
        return CategoryMapping(
            id=id,
            source_category=source_category,
            source_subtype=source_subtype,
            ebay_category_id=category_id,
            ebay_category_name=category_name,
            priority=priority,
            is_default=is_default,
        )

    @staticmethod
    def requirement(category_id, category_name, parent_category_id=None, is_leaf=True, required_aspects=None):
        return CategoryRequirement(
            category_id=category_id,
            category_name=category_name,
            parent_category_id=parent_category_id,
            is_leaf=is_leaf,
            required_aspects=required_aspects,
        )

    @staticmethod
    def keyword_rule(id, aspect_name, pattern, value, category_id=None):
        return AspectKeywordRule(
            id=id,
            aspect_name=aspect_name,
            keyword_pattern=pattern,
            aspect_value=value,
            category_id=category_id,
        )
