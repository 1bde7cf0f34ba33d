import logging
import httpx

from typing import Any, Dict

from app.core.exceptions import KeepaAPIError, ProductNotFoundError
from app.schemas.product import SourceProduct

logger = logging.getLogger(__name__)


class KeepaClient:
    """
    Async client for the Keepa product API, the source of Amazon product data.

    Only the single-ASIN product lookup is used. Keepa returns HTTP 200 with
    an empty ``products`` array for unknown ASINs, which is reported as
    ProductNotFoundError so callers can treat it as terminal.

    Documentation: https://keepa.com/#!discuss/t/request-products/110
    """

    BASE_URL = "https://api.keepa.com"

    def __init__(self, api_key: str, domain: int = 1, timeout: float = 30.0):
        """
        Args:
            api_key: Keepa API access key
            domain: Keepa marketplace domain (1 = amazon.com)
            timeout: Request timeout in seconds
        """
        if not api_key:
            raise ValueError("Keepa API key is required")
        self.api_key = api_key
        self.domain = domain
        self.timeout = timeout

    async def get_product_raw(self, asin: str) -> Dict[str, Any]:
        """
        Fetch the raw Keepa product record for an ASIN

        Returns:
            Dict: First entry of Keepa's ``products`` array

        Raises:
            ProductNotFoundError: If Keepa has no record for the ASIN
            KeepaAPIError: On transport or HTTP errors
        """
        params = {
            "key": self.api_key,
            "domain": self.domain,
            "asin": asin,
            "stats": 180,
            "offers": 20,
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(f"{self.BASE_URL}/product", params=params)
        except httpx.RequestError as e:
            logger.error(f"Network error fetching {asin} from Keepa: {str(e)}")
            raise KeepaAPIError(f"Network error: {str(e)}")

        if response.status_code != 200:
            logger.error(f"Keepa API error ({response.status_code}): {response.text}")
            raise KeepaAPIError(f"Keepa request failed with status {response.status_code}: {response.text}")

        data = response.json()
        error = data.get("error")
        if error:
            message = error.get("message") if isinstance(error, dict) else error
            raise KeepaAPIError(f"Keepa returned an error: {message or error}")

        products = data.get("products") or []
        if not products:
            raise ProductNotFoundError(f"Product not found: {asin}")

        logger.debug(f"Keepa tokens left: {data.get('tokensLeft')}")
        return products[0]

    async def fetch_product(self, asin: str) -> SourceProduct:
        """Fetch an ASIN and convert it to a SourceProduct"""
        raw = await self.get_product_raw(asin)
        product = SourceProduct.from_keepa(raw)
        logger.info(f"Fetched {asin} from Keepa: {product.title[:50]}")
        return product
