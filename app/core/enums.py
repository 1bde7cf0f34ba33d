"""
Shared enums and constants used across the application.
"""

from enum import Enum


class CategoryMatchType(str, Enum):
    """How a category was chosen for a product"""
    EXACT = "exact"
    GROUP = "group"
    API_SUGGESTED = "api-suggested"
    DEFAULT = "default"

    def with_leaf(self) -> str:
        # Composite marker used when a leaf descendant was substituted
        return f"{self.value}+leaf"


class AspectSource(str, Enum):
    """Resolution tier that produced an aspect value"""
    DIRECT = "direct"
    KEYWORD = "keyword"


class AspectMissStatus(str, Enum):
    PENDING = "pending"
    RESOLVED = "resolved"


class PublicationStage(str, Enum):
    """Linear stages of one publication run"""
    START = "start"
    PRODUCT_FETCHED = "product_fetched"
    CATEGORY_RESOLVED = "category_resolved"
    ASPECTS_RESOLVED = "aspects_resolved"
    INVENTORY_ITEM_CREATED = "inventory_item_created"
    OFFER_CREATED = "offer_created"
    PUBLISHED = "published"
    UNPUBLISHED = "unpublished"
    DONE = "done"


class CategoryStrategy(str, Enum):
    MAPPING = "mapping"
    TAXONOMY = "taxonomy"


class EbayListingStatus(str, Enum):
    DRAFT = "draft"
    ACTIVE = "active"
