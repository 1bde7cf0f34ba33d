from .category_mapping import CategoryMapping
from .category_requirement import CategoryRequirement
from .category_aspects import CategoryAspectCacheEntry
from .aspect_keyword import AspectKeywordRule
from .aspect_miss import AspectMiss
from .ebay import EbayListing

# This ensures all models are registered with SQLAlchemy
__all__ = [
    'CategoryMapping',
    'CategoryRequirement',
    'CategoryAspectCacheEntry',
    'AspectKeywordRule',
    'AspectMiss',
    'EbayListing',
]
