"""
Required-aspect lookup with a persisted TTL cache.

The Taxonomy API call behind get_required_aspects is slow and rate limited,
so results are kept in ``ebay_category_aspects`` for a week. Curated
requirements always win over both the cache and the API.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional

from app.core.exceptions import DatabaseError, EbayAPIError

logger = logging.getLogger(__name__)

DEFAULT_TTL = timedelta(days=7)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # sqlite hands back naive datetimes
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class CategoryAspectCache:
    """
    Args:
        store: ListingStore (or anything with the same cache methods)
        client: EbayClient used on a cache miss
        ttl: How long a fetched aspect list stays fresh
        clock: Returns the current aware datetime; injected so expiry is testable
    """

    def __init__(self, store, client, ttl: timedelta = DEFAULT_TTL, clock: Callable[[], datetime] = utc_now):
        self.store = store
        self.client = client
        self.ttl = ttl
        self.clock = clock

    async def get_required_aspects(self, category_id: str, category_name: Optional[str] = None) -> List[str]:
        """Ordered required aspect names for a category; [] if unknown and the API is unavailable"""
        try:
            requirement = await self.store.get_category_requirement(category_id)
        except DatabaseError as e:
            logger.warning(f"Curated requirement lookup failed for category {category_id}: {e}")
            requirement = None
        if requirement is not None and requirement.required_aspects:
            logger.debug(f"Using curated required aspects for category {category_id}")
            return list(requirement.required_aspects)

        now = self.clock()
        try:
            cached = await self.store.get_cached_aspects(category_id)
        except DatabaseError as e:
            logger.warning(f"Aspect cache read failed for category {category_id}: {e}")
            cached = None
        if cached is not None and cached.expires_at is not None and _as_utc(cached.expires_at) > now:
            logger.debug(f"Aspect cache hit for category {category_id}")
            return list(cached.required_aspects or [])

        try:
            required = await self.client.get_required_aspects(category_id)
        except EbayAPIError as e:
            logger.warning(f"Could not fetch required aspects for category {category_id}: {e}")
            return []

        try:
            await self.store.upsert_cached_aspects(
                category_id,
                required,
                fetched_at=now,
                expires_at=now + self.ttl,
                category_name=category_name,
            )
        except DatabaseError as e:
            logger.warning(f"Failed to cache aspects for category {category_id}: {e}")

        logger.info(f"Fetched {len(required)} required aspects for category {category_id}")
        return required
