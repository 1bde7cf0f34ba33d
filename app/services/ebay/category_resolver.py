"""
Purpose: Picks the eBay category a product is listed under.

Functionality: Two interchangeable strategies produce a first choice:
    - MappingCategoryResolver walks the ``ebay_category_mappings`` table
      (exact productGroup/type -> group -> default row -> "Everything Else").
    - TaxonomyCategoryResolver asks eBay's category-suggestion endpoint and
      falls back to "Everything Else" on any failure.
Both then run the same leaf check against ``ebay_category_requirements``,
swapping a non-leaf category for its single known leaf child when there is
exactly one.

Role: Called by ListingPublisher before aspect resolution. Never raises for
"no match", remote failures or store read failures; the worst outcome is
the default category.
"""
import logging
from typing import Optional

from app.core.enums import CategoryMatchType, CategoryStrategy
from app.core.exceptions import DatabaseError, EbayAPIError
from app.schemas.listing import CategoryResolution
from app.schemas.product import SourceProduct

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY_ID = "99"
DEFAULT_CATEGORY_NAME = "Everything Else"

# get_category_suggestions rejects longer queries
SUGGESTION_QUERY_MAX_LENGTH = 100


def default_resolution() -> CategoryResolution:
    return CategoryResolution(
        category_id=DEFAULT_CATEGORY_ID,
        category_name=DEFAULT_CATEGORY_NAME,
        match_type=CategoryMatchType.DEFAULT.value,
        is_leaf=True,
    )


class BaseCategoryResolver:
    """Shared leaf enforcement; subclasses implement _choose"""

    def __init__(self, store):
        self.store = store

    async def resolve(self, product: SourceProduct) -> CategoryResolution:
        try:
            chosen = await self._choose(product)
        except DatabaseError as e:
            logger.warning(f"Category lookup failed for {product.asin}, using default: {e}")
            chosen = default_resolution()

        try:
            resolution = await self._enforce_leaf(chosen)
        except DatabaseError as e:
            logger.warning(f"Leaf check skipped for category {chosen.category_id}: {e}")
            resolution = chosen
        logger.info(
            f"Resolved {product.asin} to category {resolution.category_id} "
            f"({resolution.category_name}) via {resolution.match_type}"
        )
        return resolution

    async def _choose(self, product: SourceProduct) -> CategoryResolution:
        raise NotImplementedError

    async def _enforce_leaf(self, resolution: CategoryResolution) -> CategoryResolution:
        requirement = await self.store.get_category_requirement(resolution.category_id)
        if requirement is None or requirement.is_leaf:
            # Unknown categories are left for eBay to accept or reject
            return resolution

        children = await self.store.get_leaf_children(resolution.category_id)
        if len(children) == 1:
            leaf = children[0]
            logger.info(
                f"Category {resolution.category_id} is not a leaf, using child "
                f"{leaf.category_id} ({leaf.category_name})"
            )
            return CategoryResolution(
                category_id=leaf.category_id,
                category_name=leaf.category_name,
                match_type=f"{resolution.match_type}+leaf",
                is_leaf=True,
            )

        logger.warning(
            f"Category {resolution.category_id} is not a leaf and has {len(children)} known "
            f"leaf children; keeping it and letting eBay decide"
        )
        return resolution.model_copy(update={"is_leaf": False})


class MappingCategoryResolver(BaseCategoryResolver):
    """Table-driven resolution from Keepa productGroup/type"""

    async def _choose(self, product: SourceProduct) -> CategoryResolution:
        group = product.source_category
        subtype = product.source_subtype

        if group and subtype:
            mapping = await self.store.get_category_mapping(group, subtype)
            if mapping:
                return self._from_mapping(mapping, CategoryMatchType.EXACT)

        if group:
            mapping = await self.store.get_group_mapping(group)
            if mapping:
                return self._from_mapping(mapping, CategoryMatchType.GROUP)

        mapping = await self.store.get_default_mapping()
        if mapping:
            return self._from_mapping(mapping, CategoryMatchType.DEFAULT)

        logger.warning(f"No category mapping for {product.asin} and no default row; using {DEFAULT_CATEGORY_ID}")
        return default_resolution()

    @staticmethod
    def _from_mapping(mapping, match_type: CategoryMatchType) -> CategoryResolution:
        return CategoryResolution(
            category_id=mapping.ebay_category_id,
            category_name=mapping.ebay_category_name,
            match_type=match_type.value,
        )


class TaxonomyCategoryResolver(BaseCategoryResolver):
    """Resolution via eBay's category-suggestion endpoint"""

    def __init__(self, store, client):
        super().__init__(store)
        self.client = client

    async def _choose(self, product: SourceProduct) -> CategoryResolution:
        title = (product.title or "").strip()
        if not title:
            return default_resolution()

        try:
            suggestions = await self.client.suggest_category(title[:SUGGESTION_QUERY_MAX_LENGTH])
        except (EbayAPIError, ValueError, KeyError) as e:
            logger.warning(f"Category suggestion failed for {product.asin}: {e}")
            return default_resolution()

        if not suggestions:
            logger.warning(f"No category suggestions for {product.asin}")
            return default_resolution()

        top = suggestions[0]
        return CategoryResolution(
            category_id=top["category_id"],
            category_name=top["category_name"],
            match_type=CategoryMatchType.API_SUGGESTED.value,
        )


def build_category_resolver(strategy: str, store, client: Optional[object] = None) -> BaseCategoryResolver:
    """Build the resolver named by EBAY_CATEGORY_STRATEGY"""
    if strategy == CategoryStrategy.TAXONOMY.value:
        if client is None:
            raise ValueError("The taxonomy category strategy needs an eBay client")
        return TaxonomyCategoryResolver(store, client)
    if strategy == CategoryStrategy.MAPPING.value:
        return MappingCategoryResolver(store)
    raise ValueError(f"Unknown category strategy: {strategy}")
