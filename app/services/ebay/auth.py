"""
eBay OAuth access for the Sell Inventory and Taxonomy APIs.

Uses the refresh-token grant only; obtaining the refresh token in the first
place happens outside this service.
"""

import logging
from typing import Optional

import httpx

from app.core.config import get_settings
from app.core.exceptions import EbayAPIError
from .token_manager import SecureTokenManager

logger = logging.getLogger(__name__)

SCOPES = [
    "https://api.ebay.com/oauth/api_scope",
    "https://api.ebay.com/oauth/api_scope/sell.inventory",
]


class EbayAuthManager:
    """
    Manages eBay OAuth authentication using secure in-memory storage
    """

    def __init__(self, sandbox: bool = False, token_manager: Optional[SecureTokenManager] = None):
        self.sandbox_mode = sandbox
        self.settings = get_settings()

        if sandbox:
            self.client_id = self.settings.EBAY_SANDBOX_CLIENT_ID
            self.client_secret = self.settings.EBAY_SANDBOX_CLIENT_SECRET
            self.token_refresh_url = "https://api.sandbox.ebay.com/identity/v1/oauth2/token"
        else:
            self.client_id = self.settings.EBAY_CLIENT_ID
            self.client_secret = self.settings.EBAY_CLIENT_SECRET
            self.token_refresh_url = "https://api.ebay.com/identity/v1/oauth2/token"

        if not self.client_id or not self.client_secret:
            raise ValueError(
                f"Missing required eBay {'sandbox' if sandbox else 'production'} credentials. "
                f"Please check your .env file."
            )

        self.token_manager = token_manager or SecureTokenManager(sandbox=sandbox)
        self.scopes = SCOPES

        logger.debug(f"EbayAuthManager initialized. Sandbox: {sandbox}")

    async def get_access_token(self) -> str:
        """
        Get a valid access token, refreshing if necessary

        Raises:
            EbayAPIError: If the refresh grant is rejected or the network fails
        """
        access_token = self.token_manager.get_access_token()
        if access_token:
            return access_token

        logger.info("No valid access token in memory, refreshing...")

        refresh_data = {
            "grant_type": "refresh_token",
            "refresh_token": self.token_manager.get_refresh_token(),
            "scope": " ".join(self.scopes),
        }

        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    self.token_refresh_url,
                    data=refresh_data,
                    auth=httpx.BasicAuth(self.client_id, self.client_secret),
                )
        except httpx.RequestError as e:
            logger.error(f"Network error refreshing token: {str(e)}")
            raise EbayAPIError(f"Network error refreshing access token: {str(e)}")

        if response.status_code != 200:
            error_text = response.text
            logger.error(f"Token refresh failed: {error_text}")
            if "invalid_grant" in error_text:
                raise EbayAPIError(
                    "Invalid refresh token. Please regenerate your eBay tokens.",
                    status_code=response.status_code,
                )
            raise EbayAPIError(
                f"Failed to refresh access token: {error_text}",
                status_code=response.status_code,
            )

        token_data = response.json()
        access_token = token_data["access_token"]
        self.token_manager.save_access_token(access_token, token_data.get("expires_in", 7200))

        logger.info("Successfully refreshed access token")
        return access_token

    def clear_tokens(self):
        """Clear all tokens from memory"""
        self.token_manager.clear_tokens()
