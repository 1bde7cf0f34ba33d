from datetime import datetime
from typing import Dict, List, Optional

from app.core.enums import AspectMissStatus
from app.core.exceptions import DatabaseError
from app.models.aspect_miss import AspectMiss
from app.models.category_aspects import CategoryAspectCacheEntry


class MockListingStore:
    """In-memory stand-in for ListingStore with the same method names"""

    def __init__(self, mappings=None, requirements=None, keyword_rules=None):
        self.mappings = list(mappings or [])
        self.requirements = {r.category_id: r for r in (requirements or [])}
        self.keyword_rules = list(keyword_rules or [])
        self.cached_aspects: Dict[str, CategoryAspectCacheEntry] = {}
        self.aspect_misses: Dict[tuple, dict] = {}
        self.listing_records: Dict[str, dict] = {}

        self.keyword_rule_reads = 0
        self.cache_writes = 0
        self.fail_writes = False  # Toggle to test error scenarios
        self.fail_reads = False

    def _check_write(self):
        if self.fail_writes:
            raise DatabaseError("database is unavailable")

    def _check_read(self):
        if self.fail_reads:
            raise DatabaseError("Failed to read: connection reset")

    def _best(self, rows):
        rows = sorted(rows, key=lambda m: (-(m.priority or 0), m.id or 0))
        return rows[0] if rows else None

    async def get_category_mapping(self, source_category: str, source_subtype: str):
        self._check_read()
        return self._best([
            m for m in self.mappings
            if m.source_category == source_category and m.source_subtype == source_subtype
        ])

    async def get_group_mapping(self, source_category: str):
        self._check_read()
        return self._best([
            m for m in self.mappings
            if m.source_category == source_category and m.source_subtype is None
        ])

    async def get_default_mapping(self):
        self._check_read()
        return self._best([m for m in self.mappings if m.is_default])

    async def get_category_requirement(self, category_id: str):
        self._check_read()
        return self.requirements.get(category_id)

    async def get_leaf_children(self, parent_category_id: str) -> List:
        self._check_read()
        return [
            r for r in self.requirements.values()
            if r.parent_category_id == parent_category_id and r.is_leaf
        ]

    async def get_cached_aspects(self, category_id: str):
        self._check_read()
        return self.cached_aspects.get(category_id)

    async def upsert_cached_aspects(
        self,
        category_id: str,
        required_aspects: List[str],
        fetched_at: datetime,
        expires_at: datetime,
        category_name: Optional[str] = None,
    ):
        self._check_write()
        self.cache_writes += 1
        entry = CategoryAspectCacheEntry(
            category_id=category_id,
            category_name=category_name,
            required_aspects=list(required_aspects),
            fetched_at=fetched_at,
            expires_at=expires_at,
        )
        self.cached_aspects[category_id] = entry
        return entry

    async def get_keyword_rules(self, category_id: str) -> List:
        self._check_read()
        self.keyword_rule_reads += 1
        return [r for r in self.keyword_rules if r.category_id in (category_id, None)]

    async def aspect_miss_exists(self, asin: str, aspect_name: str) -> bool:
        self._check_read()
        return (asin, aspect_name) in self.aspect_misses

    async def add_aspect_miss(self, asin: str, aspect_name: str, product_title: str, **fields) -> bool:
        self._check_write()
        key = (asin, aspect_name)
        if key in self.aspect_misses:
            return False
        self.aspect_misses[key] = {
            "id": len(self.aspect_misses) + 1,
            "asin": asin,
            "aspect_name": aspect_name,
            "product_title": product_title,
            "status": AspectMissStatus.PENDING.value,
            **fields,
        }
        return True

    async def get_pending_aspect_misses(self, limit: Optional[int] = None) -> List:
        self._check_read()
        pending = [
            AspectMiss(**row)
            for row in self.aspect_misses.values()
            if row["status"] == AspectMissStatus.PENDING.value
        ]
        return pending[:limit] if limit else pending

    async def resolve_aspect_miss(self, miss_id: int, value: str, reviewed_at: datetime) -> bool:
        self._check_write()
        for row in self.aspect_misses.values():
            if row["id"] == miss_id:
                row.update(status=AspectMissStatus.RESOLVED.value, resolved_value=value, reviewed_at=reviewed_at)
                return True
        return False

    async def save_listing_record(self, sku: str, **fields):
        self._check_write()
        self.listing_records[sku] = {"sku": sku, **fields}
        return self.listing_records[sku]
