"""
Core module exports.
"""
from .enums import (
    AspectMissStatus,
    AspectSource,
    CategoryMatchType,
    CategoryStrategy,
    EbayListingStatus,
    PublicationStage,
)

from .exceptions import (
    BaseServiceError,
    ValidationError,
    ProductServiceError,
    ProductNotFoundError,
    PlatformServiceError,
    KeepaAPIError,
    EbayServiceError,
    EbayAPIError,
    AspectResolutionError,
    ListingPublicationError,
    DatabaseError,
)
