"""
Curation pass over recorded aspect misses.

Misses pile up while the keyword rule table is incomplete. Once new rules are
added, re-running them against the stored product titles closes the misses
they now cover; the rest stay pending for a human to write rules for.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, List, Optional

from app.core.exceptions import DatabaseError
from app.services.ebay.aspect_cache import utc_now
from app.services.ebay.aspect_resolver import match_keyword, ordered_rules

logger = logging.getLogger(__name__)

DEFAULT_REVIEW_LIMIT = 50


@dataclass
class AspectReviewSummary:
    reviewed: int = 0
    resolved: int = 0
    failed: int = 0
    resolved_misses: List[str] = field(default_factory=list)

    @property
    def still_pending(self) -> int:
        return self.reviewed - self.resolved - self.failed


def miss_text(miss) -> str:
    """What the keyword rules are matched against for a stored miss"""
    parts = [miss.product_title, miss.source_brand, miss.source_model]
    return " ".join(part for part in parts if part)


class AspectMissReviewer:
    """
    Args:
        store: ListingStore
        clock: Returns the current aware datetime, stamped on resolved misses
    """

    def __init__(self, store, clock: Callable[[], datetime] = utc_now):
        self.store = store
        self.clock = clock

    async def review(self, limit: Optional[int] = DEFAULT_REVIEW_LIMIT) -> AspectReviewSummary:
        summary = AspectReviewSummary()
        misses = await self.store.get_pending_aspect_misses(limit)
        if not misses:
            logger.info("No pending aspect misses")
            return summary

        logger.info(f"Reviewing {len(misses)} pending aspect misses")
        rules_by_category: Dict[Optional[str], list] = {}

        for miss in misses:
            summary.reviewed += 1
            if miss.category_id not in rules_by_category:
                rules = await self.store.get_keyword_rules(miss.category_id)
                rules_by_category[miss.category_id] = ordered_rules(rules)

            value = match_keyword(miss.aspect_name, rules_by_category[miss.category_id], miss_text(miss))
            if value is None:
                continue

            try:
                await self.store.resolve_aspect_miss(miss.id, value, self.clock())
            except DatabaseError as e:
                logger.error(f"Could not resolve miss {miss.asin}/{miss.aspect_name}: {e}")
                summary.failed += 1
                continue

            logger.info(f"Resolved {miss.asin}/{miss.aspect_name} -> {value}")
            summary.resolved += 1
            summary.resolved_misses.append(f"{miss.asin} {miss.aspect_name}={value}")

        return summary
