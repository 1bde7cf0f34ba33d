"""
Fills the item specifics ("aspects") eBay requires for a category.

Each required aspect is tried against the product's own fields first, then
against the regex keyword rules in ``ebay_aspect_keywords``. Whatever is left
is returned as unresolved and recorded in ``ebay_aspect_misses`` so the rule
table can be extended later.
"""
import logging
import re
from typing import Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from app.core.enums import AspectSource
from app.core.exceptions import DatabaseError
from app.schemas.listing import AspectResolution, ResolvedAspect
from app.schemas.product import SourceProduct

logger = logging.getLogger(__name__)

# eBay rejects longer aspect values; applies to title-derived aspects
ASPECT_VALUE_MAX_LENGTH = 65


def _first(values: List[str]) -> Optional[str]:
    return values[0] if values else None


# Aspect name (lowercased) -> how to read it off the product, and whether it is title-derived
DIRECT_FIELD_MAP: Dict[str, tuple] = {
    "brand": (lambda p: p.brand, False),
    "model": (lambda p: p.model, False),
    "mpn": (lambda p: p.part_number, False),
    "manufacturer part number": (lambda p: p.part_number, False),
    "manufacturer": (lambda p: p.manufacturer, False),
    "color": (lambda p: p.color, False),
    "colour": (lambda p: p.color, False),
    "upc": (lambda p: _first(p.upc_list), False),
    "ean": (lambda p: _first(p.ean_list), False),
    "size": (lambda p: p.size, False),
    "item size": (lambda p: p.size, False),
    "material": (lambda p: p.material, False),
    "material type": (lambda p: p.material, False),
    "game name": (lambda p: p.title, True),
    "movie/tv title": (lambda p: p.title, True),
    "book title": (lambda p: p.title, True),
}


def direct_value(aspect_name: str, product: SourceProduct) -> Optional[str]:
    """Value for an aspect taken straight from a product field, or None"""
    entry = DIRECT_FIELD_MAP.get(aspect_name.strip().lower())
    if entry is None:
        return None

    getter, title_derived = entry
    value = getter(product)
    if value is None:
        return None
    value = str(value).strip()
    if not value:
        return None
    if title_derived:
        value = value[:ASPECT_VALUE_MAX_LENGTH].rstrip()
    return value


def _rule_order(rule) -> tuple:
    # category-scoped rules before global ones, then by id
    return (rule.category_id is None, rule.id or 0)


def ordered_rules(rules: list) -> list:
    return sorted(rules, key=_rule_order)


def match_keyword(aspect_name: str, rules: list, text: str) -> Optional[str]:
    """First rule for ``aspect_name`` whose pattern matches ``text``; rules must already be ordered"""
    wanted = aspect_name.lower()
    for rule in rules:
        if rule.aspect_name.lower() != wanted:
            continue
        try:
            pattern = re.compile(rule.keyword_pattern, re.IGNORECASE)
        except re.error as e:
            logger.warning(f"Skipping invalid keyword pattern {rule.keyword_pattern!r} for {aspect_name}: {e}")
            continue
        if pattern.search(text):
            return rule.aspect_value
    return None


class AspectResolver:
    """
    Resolves required aspects for one product in one category.

    Args:
        store: ListingStore (keyword rules and aspect misses)
    """

    def __init__(self, store):
        self.store = store

    async def resolve(
        self,
        category_id: str,
        required_aspects: List[str],
        product: SourceProduct,
        category_name: Optional[str] = None,
    ) -> AspectResolution:
        resolution = AspectResolution()
        if not required_aspects:
            return resolution

        try:
            rules = await self.store.get_keyword_rules(category_id)
        except DatabaseError as e:
            logger.warning(f"Keyword rules unavailable for category {category_id}: {e}")
            rules = []
        rules = ordered_rules(rules)
        text = product.search_text

        for aspect_name in required_aspects:
            value = direct_value(aspect_name, product)
            if value is not None:
                resolution.resolved[aspect_name] = ResolvedAspect(
                    name=aspect_name, value=value, source=AspectSource.DIRECT
                )
                continue

            value = match_keyword(aspect_name, rules, text)
            if value is not None:
                resolution.resolved[aspect_name] = ResolvedAspect(
                    name=aspect_name, value=value, source=AspectSource.KEYWORD
                )
                continue

            resolution.unresolved.append(aspect_name)

        logger.info(
            f"Aspects for {product.asin} in {category_id}: "
            f"{len(resolution.resolved)} resolved, {len(resolution.unresolved)} unresolved"
        )

        if resolution.unresolved and product.asin:
            await self._record_misses(product, category_id, category_name, resolution.unresolved)

        return resolution

    async def _record_misses(
        self,
        product: SourceProduct,
        category_id: str,
        category_name: Optional[str],
        unresolved: List[str],
    ):
        """Non-critical: failures are logged and discarded"""
        for aspect_name in unresolved:
            try:
                if await self.store.aspect_miss_exists(product.asin, aspect_name):
                    continue
                recorded = await self.store.add_aspect_miss(
                    asin=product.asin,
                    aspect_name=aspect_name,
                    product_title=product.title,
                    category_id=category_id,
                    category_name=category_name,
                    source_brand=product.brand,
                    source_model=product.model,
                )
                if recorded:
                    logger.info(f"Recorded aspect miss {product.asin}/{aspect_name}")
            except (DatabaseError, SQLAlchemyError) as e:
                logger.warning(f"Failed to record aspect miss {product.asin}/{aspect_name}: {e}")
