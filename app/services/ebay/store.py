"""
Database access for the listing publication pipeline.

Everything the resolvers, the aspect cache and the publisher read or write
locally goes through ListingStore, so those components can be tested
against an in-memory fake with the same methods.
"""
import logging
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import select, and_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enums import AspectMissStatus
from app.core.exceptions import DatabaseError
from app.models.aspect_keyword import AspectKeywordRule
from app.models.aspect_miss import AspectMiss
from app.models.category_aspects import CategoryAspectCacheEntry
from app.models.category_mapping import CategoryMapping
from app.models.category_requirement import CategoryRequirement
from app.models.ebay import EbayListing

logger = logging.getLogger(__name__)


class ListingStore:
    """Key-based reads and insert/upsert writes over the pipeline's tables"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _execute(self, query, description: str):
        """Run a read; failures roll the session back and surface as DatabaseError"""
        try:
            return await self.db.execute(query)
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise DatabaseError(f"Failed to read {description}: {str(e)}") from e

    # -------------------------------------------------------------------------
    # Category mappings
    # -------------------------------------------------------------------------

    async def get_category_mapping(self, source_category: str, source_subtype: str) -> Optional[CategoryMapping]:
        """Highest-priority row matching both the product group and the type"""
        query = (
            select(CategoryMapping)
            .where(
                CategoryMapping.source_category == source_category,
                CategoryMapping.source_subtype == source_subtype,
            )
            .order_by(CategoryMapping.priority.desc(), CategoryMapping.id)
            .limit(1)
        )
        result = await self._execute(query, "category mapping")
        return result.scalars().first()

    async def get_group_mapping(self, source_category: str) -> Optional[CategoryMapping]:
        """Highest-priority row for the product group with no subtype constraint"""
        query = (
            select(CategoryMapping)
            .where(
                CategoryMapping.source_category == source_category,
                CategoryMapping.source_subtype.is_(None),
            )
            .order_by(CategoryMapping.priority.desc(), CategoryMapping.id)
            .limit(1)
        )
        result = await self._execute(query, "group mapping")
        return result.scalars().first()

    async def get_default_mapping(self) -> Optional[CategoryMapping]:
        query = (
            select(CategoryMapping)
            .where(CategoryMapping.is_default.is_(True))
            .order_by(CategoryMapping.priority.desc(), CategoryMapping.id)
            .limit(1)
        )
        result = await self._execute(query, "default mapping")
        return result.scalars().first()

    # -------------------------------------------------------------------------
    # Category requirements
    # -------------------------------------------------------------------------

    async def get_category_requirement(self, category_id: str) -> Optional[CategoryRequirement]:
        query = select(CategoryRequirement).where(CategoryRequirement.category_id == category_id)
        result = await self._execute(query, f"requirement for category {category_id}")
        return result.scalar_one_or_none()

    async def get_leaf_children(self, parent_category_id: str) -> List[CategoryRequirement]:
        query = (
            select(CategoryRequirement)
            .where(
                and_(
                    CategoryRequirement.parent_category_id == parent_category_id,
                    CategoryRequirement.is_leaf.is_(True),
                )
            )
            .order_by(CategoryRequirement.category_id)
        )
        result = await self._execute(query, f"leaf children of {parent_category_id}")
        return list(result.scalars().all())

    # -------------------------------------------------------------------------
    # Required-aspect cache
    # -------------------------------------------------------------------------

    async def get_cached_aspects(self, category_id: str) -> Optional[CategoryAspectCacheEntry]:
        try:
            return await self.db.get(CategoryAspectCacheEntry, category_id)
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise DatabaseError(f"Failed to read aspect cache for category {category_id}: {str(e)}") from e

    async def upsert_cached_aspects(
        self,
        category_id: str,
        required_aspects: List[str],
        fetched_at: datetime,
        expires_at: datetime,
        category_name: Optional[str] = None,
    ) -> CategoryAspectCacheEntry:
        """
        Insert or refresh the cache row for a category.

        Keyed by category id, so concurrent writers converge on the same row.
        """
        try:
            entry = await self.db.get(CategoryAspectCacheEntry, category_id)
            if entry is None:
                entry = CategoryAspectCacheEntry(category_id=category_id)
                self.db.add(entry)
            entry.category_name = category_name or entry.category_name
            entry.required_aspects = list(required_aspects)
            entry.fetched_at = fetched_at
            entry.expires_at = expires_at
            await self.db.commit()
            return entry
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise DatabaseError(f"Failed to cache aspects for category {category_id}: {str(e)}") from e

    # -------------------------------------------------------------------------
    # Keyword rules
    # -------------------------------------------------------------------------

    async def get_keyword_rules(self, category_id: str) -> List[AspectKeywordRule]:
        """Rules scoped to ``category_id`` plus global (NULL-scoped) rules"""
        query = (
            select(AspectKeywordRule)
            .where(
                (AspectKeywordRule.category_id == category_id)
                | (AspectKeywordRule.category_id.is_(None))
            )
            .order_by(AspectKeywordRule.id)
        )
        result = await self._execute(query, f"keyword rules for category {category_id}")
        return list(result.scalars().all())

    # -------------------------------------------------------------------------
    # Aspect misses
    # -------------------------------------------------------------------------

    async def aspect_miss_exists(self, asin: str, aspect_name: str) -> bool:
        query = select(AspectMiss.id).where(
            AspectMiss.asin == asin,
            AspectMiss.aspect_name == aspect_name,
        )
        result = await self._execute(query, f"aspect miss {asin}/{aspect_name}")
        return result.first() is not None

    async def add_aspect_miss(
        self,
        asin: str,
        aspect_name: str,
        product_title: str,
        category_id: Optional[str] = None,
        category_name: Optional[str] = None,
        source_brand: Optional[str] = None,
        source_model: Optional[str] = None,
    ) -> bool:
        """
        Record an unresolved aspect for curation.

        Returns:
            bool: False if the (asin, aspect_name) pair was already recorded
        """
        self.db.add(AspectMiss(
            asin=asin,
            aspect_name=aspect_name,
            product_title=product_title,
            category_id=category_id,
            category_name=category_name,
            source_brand=source_brand,
            source_model=source_model,
            status=AspectMissStatus.PENDING.value,
        ))
        try:
            await self.db.commit()
            return True
        except IntegrityError:
            # Another request recorded the same miss first
            await self.db.rollback()
            return False
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise DatabaseError(f"Failed to record aspect miss {asin}/{aspect_name}: {str(e)}") from e

    async def get_pending_aspect_misses(self, limit: Optional[int] = None) -> List[AspectMiss]:
        """Oldest pending misses first"""
        query = (
            select(AspectMiss)
            .where(AspectMiss.status == AspectMissStatus.PENDING.value)
            .order_by(AspectMiss.created_at, AspectMiss.id)
        )
        if limit:
            query = query.limit(limit)
        result = await self._execute(query, "pending aspect misses")
        return list(result.scalars().all())

    async def resolve_aspect_miss(self, miss_id: int, value: str, reviewed_at: datetime) -> bool:
        """
        Mark a miss resolved with the value a keyword rule now produces.

        Returns:
            bool: False if the miss no longer exists
        """
        try:
            miss = await self.db.get(AspectMiss, miss_id)
            if miss is None:
                return False
            miss.status = AspectMissStatus.RESOLVED.value
            miss.resolved_value = value
            miss.reviewed_at = reviewed_at
            await self.db.commit()
            return True
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise DatabaseError(f"Failed to resolve aspect miss {miss_id}: {str(e)}") from e

    # -------------------------------------------------------------------------
    # Listing records
    # -------------------------------------------------------------------------

    async def save_listing_record(
        self,
        sku: str,
        asin: str,
        title: str,
        offer_id: str,
        category_id: str,
        category_name: str,
        price: Decimal,
        quantity: int,
        condition: str,
        listing_status: str,
        ebay_item_id: Optional[str] = None,
        listing_url: Optional[str] = None,
    ) -> EbayListing:
        """Upsert the local listing row for a SKU"""
        try:
            result = await self.db.execute(select(EbayListing).where(EbayListing.sku == sku))
            listing = result.scalar_one_or_none()
            if listing is None:
                listing = EbayListing(sku=sku)
                self.db.add(listing)

            listing.asin = asin
            listing.title = title
            listing.offer_id = offer_id
            listing.ebay_item_id = ebay_item_id
            listing.listing_status = listing_status
            listing.listing_url = listing_url
            listing.ebay_category_id = category_id
            listing.ebay_category_name = category_name
            listing.price = price
            listing.quantity = quantity
            listing.condition = condition

            await self.db.commit()
            return listing
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise DatabaseError(f"Failed to save listing record for {sku}: {str(e)}") from e
