"""
Purpose: Turns an ASIN and a price into a live eBay listing.

Functionality: ListingPublisher.publish runs one linear workflow:
    fetch product (Keepa) -> resolve category -> resolve required aspects ->
    PUT inventory item -> POST offer -> publish offer (optional).
Every remote object created along the way gets a compensating delete pushed
onto a CompensationStack. If a later step fails the stack is unwound newest
first and the caller gets a single ListingPublicationError that carries the
original eBay message and the stage reached.

Role: The only entry point used by the /api/ebay/auto-list route and the
publish_asin CLI. Variants of the workflow (curated aspects required,
sandbox, custom policies) are PublisherConfig fields, not separate code paths.

Limitations: calls for the same ASIN are not serialised. Two concurrent runs
target the same SKU and may create two offers.
"""
import logging
import re
from dataclasses import dataclass, field
from datetime import timedelta
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Awaitable, Callable, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import Settings, get_settings
from app.core.enums import EbayListingStatus, PublicationStage
from app.core.exceptions import (
    AspectResolutionError,
    DatabaseError,
    EbayAPIError,
    ListingPublicationError,
    ValidationError,
)
from app.schemas.listing import ListingPolicies, PublicationResult
from app.services.ebay.aspect_cache import CategoryAspectCache
from app.services.ebay.aspect_resolver import AspectResolver
from app.services.ebay.category_resolver import build_category_resolver
from app.services.ebay.client import EbayClient
from app.services.ebay.listing_builder import (
    build_inventory_payload,
    build_offer_payload,
    build_title,
    listing_url,
)
from app.services.ebay.store import ListingStore
from app.services.keepa.client import KeepaClient

logger = logging.getLogger(__name__)

ASIN_PATTERN = re.compile(r"^B[0-9A-Z]{9}$")


@dataclass
class PublisherConfig:
    """Everything that differs between listing variants"""
    policies: ListingPolicies
    location_key: str
    marketplace_id: str = "EBAY_US"
    currency: str = "USD"
    sku_prefix: str = "wi_"
    require_curated_aspects: bool = False
    sandbox: bool = False

    @classmethod
    def from_settings(cls, settings: Settings) -> "PublisherConfig":
        return cls(
            policies=ListingPolicies(
                fulfillment_policy_id=settings.EBAY_FULFILLMENT_POLICY_ID,
                payment_policy_id=settings.EBAY_PAYMENT_POLICY_ID,
                return_policy_id=settings.EBAY_RETURN_POLICY_ID,
            ),
            location_key=settings.EBAY_MERCHANT_LOCATION_KEY,
            marketplace_id=settings.EBAY_MARKETPLACE_ID,
            currency=settings.EBAY_CURRENCY,
            sku_prefix=settings.EBAY_SKU_PREFIX,
            require_curated_aspects=settings.EBAY_REQUIRE_CURATED_ASPECTS,
            sandbox=settings.EBAY_SANDBOX_MODE,
        )


class CompensationStack:
    """Undo actions for remote objects, run newest first"""

    def __init__(self):
        self._actions: List[Tuple[str, Callable[[], Awaitable]]] = []

    def push(self, description: str, action: Callable[[], Awaitable]):
        self._actions.append((description, action))

    def __len__(self) -> int:
        return len(self._actions)

    async def unwind(self) -> List[str]:
        """
        Run every compensation in LIFO order.

        Returns:
            List[str]: One entry per compensation that failed. Failures are
            never raised and never retried.
        """
        failures = []
        while self._actions:
            description, action = self._actions.pop()
            try:
                await action()
                logger.info(f"Rollback: {description}")
            except Exception as e:
                logger.error(f"Rollback failed ({description}): {e}. Manual cleanup required.")
                failures.append(f"{description}: {e}")
        return failures


@dataclass
class PublicationAttempt:
    """Remote state created by one publish call"""
    asin: str
    sku: str
    stage: PublicationStage = PublicationStage.START
    offer_id: Optional[str] = None
    listing_id: Optional[str] = None
    compensations: CompensationStack = field(default_factory=CompensationStack)
    rollback_failures: List[str] = field(default_factory=list)

    def advance(self, stage: PublicationStage):
        self.stage = stage
        logger.info(f"[{self.sku}] {stage.value}")


def validate_publish_input(asin: str, price, quantity: int) -> Tuple[str, Decimal]:
    """Normalise and check caller input; raises ValidationError"""
    normalized = (asin or "").strip().upper()
    if not ASIN_PATTERN.match(normalized):
        raise ValidationError(f"Invalid ASIN: {asin!r}")

    try:
        amount = Decimal(str(price))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"Invalid price: {price!r}")
    if not amount.is_finite() or amount <= 0:
        raise ValidationError(f"Price must be greater than zero, got {price}")
    amount = amount.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    if amount <= 0:
        raise ValidationError(f"Price rounds to zero at two decimal places, got {price}")

    if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity < 1:
        raise ValidationError(f"Quantity must be a positive integer, got {quantity!r}")

    return normalized, amount


class ListingPublisher:
    """
    Args:
        product_client: KeepaClient or anything with fetch_product(asin)
        ebay_client: EbayClient
        category_resolver: Mapping or taxonomy resolver
        aspect_cache: CategoryAspectCache
        aspect_resolver: AspectResolver
        store: ListingStore, used for the listing record
        config: PublisherConfig
    """

    def __init__(
        self,
        product_client,
        ebay_client,
        category_resolver,
        aspect_cache,
        aspect_resolver,
        store,
        config: PublisherConfig,
    ):
        self.product_client = product_client
        self.ebay_client = ebay_client
        self.category_resolver = category_resolver
        self.aspect_cache = aspect_cache
        self.aspect_resolver = aspect_resolver
        self.store = store
        self.config = config

    @classmethod
    def from_settings(cls, db: AsyncSession, settings: Optional[Settings] = None) -> "ListingPublisher":
        """Wire the production collaborators from settings"""
        settings = settings or get_settings()
        store = ListingStore(db)
        ebay_client = EbayClient(
            sandbox=settings.EBAY_SANDBOX_MODE,
            marketplace_id=settings.EBAY_MARKETPLACE_ID,
            category_tree_id=settings.EBAY_CATEGORY_TREE_ID,
            max_retries=settings.EBAY_API_MAX_RETRIES,
            backoff_seconds=settings.EBAY_API_BACKOFF_SECONDS,
        )
        return cls(
            product_client=KeepaClient(settings.KEEPA_API_KEY, domain=settings.KEEPA_DOMAIN),
            ebay_client=ebay_client,
            category_resolver=build_category_resolver(settings.EBAY_CATEGORY_STRATEGY, store, ebay_client),
            aspect_cache=CategoryAspectCache(
                store, ebay_client, ttl=timedelta(days=settings.CATEGORY_ASPECT_CACHE_TTL_DAYS)
            ),
            aspect_resolver=AspectResolver(store),
            store=store,
            config=PublisherConfig.from_settings(settings),
        )

    def sku_for(self, asin: str) -> str:
        return f"{self.config.sku_prefix}{asin}"

    async def publish(
        self,
        asin: str,
        price,
        quantity: int = 1,
        condition: str = "NEW",
        publish: bool = True,
    ) -> PublicationResult:
        """
        Create (and optionally publish) an eBay listing for an ASIN.

        Raises:
            ValidationError: Bad input; nothing was called
            ProductNotFoundError: Keepa has no such ASIN; nothing was created
            AspectResolutionError: Curated aspects required but some are missing; nothing was created
            ListingPublicationError: A remote create failed; everything created so far was rolled back
        """
        asin, amount = validate_publish_input(asin, price, quantity)
        attempt = PublicationAttempt(asin=asin, sku=self.sku_for(asin))
        attempt.advance(PublicationStage.START)

        product = await self.product_client.fetch_product(asin)
        attempt.advance(PublicationStage.PRODUCT_FETCHED)

        category = await self.category_resolver.resolve(product)
        attempt.advance(PublicationStage.CATEGORY_RESOLVED)

        required = await self.aspect_cache.get_required_aspects(category.category_id, category.category_name)
        aspects = await self.aspect_resolver.resolve(
            category.category_id, required, product, category_name=category.category_name
        )
        attempt.advance(PublicationStage.ASPECTS_RESOLVED)

        if aspects.unresolved and self.config.require_curated_aspects:
            raise AspectResolutionError(
                f"Missing required aspects for category {category.category_id}: "
                f"{', '.join(aspects.unresolved)}",
                unresolved=aspects.unresolved,
            )

        try:
            inventory_payload = build_inventory_payload(product, condition, quantity, aspects.values())
            await self.ebay_client.create_or_update_inventory_item(attempt.sku, inventory_payload)
            attempt.compensations.push(
                f"delete inventory item {attempt.sku}",
                lambda: self.ebay_client.delete_inventory_item(attempt.sku),
            )
            attempt.advance(PublicationStage.INVENTORY_ITEM_CREATED)

            offer_payload = build_offer_payload(
                attempt.sku,
                category.category_id,
                amount,
                quantity,
                self.config.policies,
                self.config.location_key,
                marketplace_id=self.config.marketplace_id,
                currency=self.config.currency,
            )
            offer = await self.ebay_client.create_offer(offer_payload)
            attempt.offer_id = offer["offerId"]
            offer_id = attempt.offer_id
            attempt.compensations.push(
                f"delete offer {offer_id}",
                lambda: self.ebay_client.delete_offer(offer_id),
            )
            attempt.advance(PublicationStage.OFFER_CREATED)

            if publish:
                published = await self.ebay_client.publish_offer(attempt.offer_id)
                attempt.listing_id = published.get("listingId")
                if not attempt.listing_id:
                    raise EbayAPIError(f"Publishing offer {attempt.offer_id} returned no listingId")
                attempt.advance(PublicationStage.PUBLISHED)
            else:
                attempt.advance(PublicationStage.UNPUBLISHED)
        except Exception as e:
            raise await self._fail(attempt, e) from e

        url = listing_url(attempt.listing_id, self.config.sandbox) if attempt.listing_id else None
        result = PublicationResult(
            sku=attempt.sku,
            asin=asin,
            title=build_title(product),
            category_id=category.category_id,
            category_name=category.category_name,
            match_type=category.match_type,
            offer_id=attempt.offer_id,
            listing_id=attempt.listing_id,
            listing_url=url,
            published=attempt.listing_id is not None,
            unresolved_aspects=list(aspects.unresolved),
        )

        await self._record_listing(result, amount, quantity, condition)
        attempt.advance(PublicationStage.DONE)
        return result

    async def _fail(self, attempt: PublicationAttempt, error: Exception) -> ListingPublicationError:
        logger.error(f"[{attempt.sku}] Failed after {attempt.stage.value}: {error}")
        if len(attempt.compensations):
            attempt.rollback_failures = await attempt.compensations.unwind()
            if attempt.rollback_failures:
                logger.error(
                    f"[{attempt.sku}] Partial rollback, reconcile manually: {attempt.rollback_failures}"
                )

        return ListingPublicationError(
            f"Failed to create listing for {attempt.asin}: {error}",
            stage=attempt.stage.value,
            original_error=error,
            rollback_failures=attempt.rollback_failures,
        )

    async def _record_listing(self, result: PublicationResult, price: Decimal, quantity: int, condition: str):
        """Non-critical: the listing exists on eBay whether or not this write succeeds"""
        try:
            await self.store.save_listing_record(
                sku=result.sku,
                asin=result.asin,
                title=result.title,
                offer_id=result.offer_id,
                category_id=result.category_id,
                category_name=result.category_name,
                price=price,
                quantity=quantity,
                condition=condition,
                listing_status=(
                    EbayListingStatus.ACTIVE.value if result.published else EbayListingStatus.DRAFT.value
                ),
                ebay_item_id=result.listing_id,
                listing_url=result.listing_url,
            )
        except (DatabaseError, SQLAlchemyError) as e:
            logger.warning(f"[{result.sku}] Listing is live but the local record was not saved: {e}")
