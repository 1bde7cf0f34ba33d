"""
Schema exports for the application.
"""

from .product import SourceProduct

from .listing import (
    CategoryResolution,
    ResolvedAspect,
    AspectResolution,
    ListingPolicies,
    PublishRequest,
    PublicationResult,
)
