import asyncio
import logging
import httpx

from typing import Dict, List, Optional, Any
from urllib.parse import quote
from tenacity import AsyncRetrying, retry_if_exception, stop_after_attempt, wait_exponential

from app.core.exceptions import EbayAPIError
from app.services.ebay.auth import EbayAuthManager

logger = logging.getLogger(__name__)

# Status codes worth retrying; everything else fails immediately
RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}
MAX_BACKOFF_SECONDS = 8


def is_retryable(error: BaseException) -> bool:
    """Network errors, throttling and server errors"""
    if isinstance(error, httpx.RequestError):
        return True
    return isinstance(error, EbayAPIError) and error.status_code in RETRYABLE_STATUS_CODES


def is_retryable_without_replay(error: BaseException) -> bool:
    """
    Failures where a non-idempotent request never reached eBay.

    A 5xx or read timeout on ``POST /offer`` may still have created the
    offer, so only connection failures and 429 are retried.
    """
    if isinstance(error, (httpx.ConnectError, httpx.ConnectTimeout)):
        return True
    return isinstance(error, EbayAPIError) and error.status_code == 429


class EbayClient:
    """
    Client for the eBay Sell Inventory and Commerce Taxonomy REST APIs.
    Handles authentication, retry/backoff and error normalisation.
    """

    # eBay API endpoints
    API_BASE = "https://api.ebay.com"
    SANDBOX_API_BASE = "https://api.sandbox.ebay.com"

    def __init__(
        self,
        sandbox: bool = False,
        marketplace_id: str = "EBAY_US",
        category_tree_id: str = "0",
        max_retries: int = 3,
        backoff_seconds: float = 1.0,
        auth_manager: Optional[EbayAuthManager] = None,
    ):
        """Initialize with auth manager"""
        self.auth_manager = auth_manager or EbayAuthManager(sandbox=sandbox)
        self.sandbox = sandbox
        self.marketplace_id = marketplace_id
        self.category_tree_id = category_tree_id
        self.max_retries = max(1, max_retries)
        self.backoff_seconds = backoff_seconds

        base = self.SANDBOX_API_BASE if sandbox else self.API_BASE
        self.INVENTORY_API = f"{base}/sell/inventory/v1"
        self.TAXONOMY_API = f"{base}/commerce/taxonomy/v1"

    async def _get_headers(self) -> Dict[str, str]:
        """Get headers with auth token for API requests"""
        token = await self.auth_manager.get_access_token()
        return {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
            "Content-Language": "en-US",
            "X-EBAY-C-MARKETPLACE-ID": self.marketplace_id,
        }

    @staticmethod
    def _parse_error(response: httpx.Response, action: str) -> EbayAPIError:
        """Turn an eBay error response into an EbayAPIError with the structured errors attached"""
        errors: List[Dict[str, Any]] = []
        try:
            body = response.json()
            if isinstance(body, dict) and isinstance(body.get("errors"), list):
                errors = body["errors"]
        except ValueError:
            pass

        if errors:
            first = errors[0]
            detail = first.get("longMessage") or first.get("message") or response.text
            if first.get("errorId") is not None:
                detail = f"[{first.get('errorId')}] {detail}"
        else:
            detail = response.text

        return EbayAPIError(
            f"Failed to {action}: {detail}",
            status_code=response.status_code,
            errors=errors,
        )

    @staticmethod
    def _json(response: httpx.Response, action: str) -> Dict[str, Any]:
        """Decode a JSON object body; anything else is an EbayAPIError"""
        try:
            data = response.json()
        except ValueError as e:
            raise EbayAPIError(
                f"Failed to {action}: response was not valid JSON",
                status_code=response.status_code,
            ) from e
        if not isinstance(data, dict):
            raise EbayAPIError(
                f"Failed to {action}: expected a JSON object, got {type(data).__name__}",
                status_code=response.status_code,
            )
        return data

    async def _send(self, method: str, url: str, json: Optional[Dict[str, Any]]) -> httpx.Response:
        headers = await self._get_headers()
        async with httpx.AsyncClient() as client:
            return await client.request(method, url, headers=headers, json=json)

    async def _request(
        self,
        method: str,
        url: str,
        action: str,
        ok_statuses: tuple = (200,),
        json: Optional[Dict[str, Any]] = None,
        idempotent: bool = True,
    ) -> httpx.Response:
        """
        Send a request, retrying network errors, 429 and 5xx with exponential backoff.

        Args:
            method: HTTP method
            url: Absolute URL
            action: Human readable description used in error messages
            ok_statuses: Status codes treated as success
            json: Optional JSON body
            idempotent: False for requests that must not be replayed after
                they may have reached eBay (only connection errors and 429 retry)

        Returns:
            httpx.Response: The successful response

        Raises:
            EbayAPIError: If the request fails or retries are exhausted
        """
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_retries),
            wait=wait_exponential(multiplier=self.backoff_seconds, max=MAX_BACKOFF_SECONDS),
            retry=retry_if_exception(is_retryable if idempotent else is_retryable_without_replay),
            before_sleep=lambda retry_state: logger.warning(
                f"Retry attempt {retry_state.attempt_number} to {action}: "
                f"{retry_state.outcome.exception()}"
            ),
            sleep=asyncio.sleep,
            reraise=True,
        )

        try:
            async for attempt in retrying:
                with attempt:
                    response = await self._send(method, url, json)
                    if response.status_code not in ok_statuses:
                        if response.status_code not in RETRYABLE_STATUS_CODES:
                            logger.error(f"eBay API error: {response.text}")
                        raise self._parse_error(response, action)
        except httpx.RequestError as e:
            logger.error(f"Network error trying to {action}: {str(e)}")
            raise EbayAPIError(f"Network error trying to {action}: {str(e)}") from e

        return response

    # -------------------------------------------------------------------------
    # Inventory items
    # -------------------------------------------------------------------------

    async def create_or_update_inventory_item(self, sku: str, item_data: Dict) -> bool:
        """
        Create or replace an inventory item

        Args:
            sku: The SKU of the item
            item_data: Data for the inventory item

        Returns:
            bool: Success status

        Raises:
            EbayAPIError: If the API request fails
        """
        url = f"{self.INVENTORY_API}/inventory_item/{quote(sku, safe='')}"
        await self._request(
            "PUT", url, f"create/update inventory item {sku}",
            ok_statuses=(200, 201, 204), json=item_data
        )
        return True

    async def delete_inventory_item(self, sku: str) -> bool:
        """
        Delete an inventory item

        Args:
            sku: The SKU of the item

        Returns:
            bool: Success status

        Raises:
            EbayAPIError: If the API request fails
        """
        url = f"{self.INVENTORY_API}/inventory_item/{quote(sku, safe='')}"
        await self._request("DELETE", url, f"delete inventory item {sku}", ok_statuses=(200, 204))
        return True

    # -------------------------------------------------------------------------
    # Offers
    # -------------------------------------------------------------------------

    async def create_offer(self, offer_data: Dict) -> Dict:
        """
        Create an offer for an inventory item

        Args:
            offer_data: Data for the offer

        Returns:
            Dict: Response with offer ID

        Raises:
            EbayAPIError: If the API request fails or no offerId is returned
        """
        url = f"{self.INVENTORY_API}/offer"
        response = await self._request(
            "POST", url, "create offer",
            ok_statuses=(200, 201), json=offer_data, idempotent=False
        )
        data = self._json(response, "create offer")
        if not data.get("offerId"):
            raise EbayAPIError(
                f"Failed to create offer: response had no offerId ({response.text})",
                status_code=response.status_code,
            )
        return data

    async def publish_offer(self, offer_id: str) -> Dict:
        """
        Publish an offer to make it active on eBay

        Args:
            offer_id: The ID of the offer to publish

        Returns:
            Dict: Response with listing ID

        Raises:
            EbayAPIError: If the API request fails or no listingId is returned
        """
        url = f"{self.INVENTORY_API}/offer/{offer_id}/publish"
        response = await self._request("POST", url, f"publish offer {offer_id}")
        data = self._json(response, f"publish offer {offer_id}")
        if not data.get("listingId"):
            raise EbayAPIError(
                f"Failed to publish offer {offer_id}: response had no listingId ({response.text})",
                status_code=response.status_code,
            )
        return data

    async def delete_offer(self, offer_id: str) -> bool:
        """
        Delete an offer

        Args:
            offer_id: The ID of the offer

        Returns:
            bool: Success status

        Raises:
            EbayAPIError: If the API request fails
        """
        url = f"{self.INVENTORY_API}/offer/{offer_id}"
        await self._request("DELETE", url, f"delete offer {offer_id}", ok_statuses=(200, 204))
        return True

    # -------------------------------------------------------------------------
    # Taxonomy
    # -------------------------------------------------------------------------

    async def get_category_suggestions(self, query: str) -> List[Dict]:
        """
        Get category suggestions based on a query

        Args:
            query: The query string

        Returns:
            List[Dict]: Raw categorySuggestions entries

        Raises:
            EbayAPIError: If the API request fails
        """
        url = (
            f"{self.TAXONOMY_API}/category_tree/{self.category_tree_id}"
            f"/get_category_suggestions?q={quote(query)}"
        )
        response = await self._request("GET", url, "get category suggestions")
        return self._json(response, "get category suggestions").get('categorySuggestions', [])

    async def suggest_category(self, query: str) -> List[Dict[str, str]]:
        """Category suggestions flattened to ``{"category_id", "category_name"}``"""
        suggestions = await self.get_category_suggestions(query)
        flattened = []
        for suggestion in suggestions:
            category = suggestion.get("category") or {}
            if category.get("categoryId"):
                flattened.append({
                    "category_id": str(category["categoryId"]),
                    "category_name": category.get("categoryName", ""),
                })
        return flattened

    async def get_category_aspects(self, category_id: str) -> Dict:
        """
        Get aspects (item specifics) for a category

        Args:
            category_id: The category ID

        Returns:
            Dict: Category aspect data

        Raises:
            EbayAPIError: If the API request fails
        """
        url = (
            f"{self.TAXONOMY_API}/category_tree/{self.category_tree_id}"
            f"/get_item_aspects_for_category?category_id={category_id}"
        )
        response = await self._request("GET", url, f"get aspects for category {category_id}")
        return self._json(response, f"get aspects for category {category_id}")

    async def get_required_aspects(self, category_id: str) -> List[str]:
        """Names of the aspects eBay marks as required for a category, in API order"""
        data = await self.get_category_aspects(category_id)
        required = []
        for aspect in data.get("aspects", []):
            constraint = aspect.get("aspectConstraint") or {}
            name = aspect.get("localizedAspectName")
            if name and constraint.get("aspectRequired"):
                required.append(name)
        return required
