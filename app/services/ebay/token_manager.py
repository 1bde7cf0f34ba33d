"""
In-memory access token storage for the eBay REST APIs.
The refresh token comes from settings; access tokens never touch disk.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Optional

from app.core.config import get_settings

logger = logging.getLogger(__name__)

# Refresh this long before eBay says the token expires
EXPIRY_BUFFER = timedelta(minutes=5)


class SecureTokenManager:
    """
    Holds the refresh token for one environment (production or sandbox) and
    caches the short-lived access token at class level, so every client in
    the process shares it.
    """

    _access_tokens: Dict[str, Dict] = {}

    def __init__(
        self,
        sandbox: bool = False,
        refresh_token: Optional[str] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.sandbox = sandbox
        self.key = "sandbox" if sandbox else "production"
        self.clock = clock

        if refresh_token is None:
            settings = get_settings()
            refresh_token = settings.EBAY_SANDBOX_REFRESH_TOKEN if sandbox else settings.EBAY_REFRESH_TOKEN

        if not refresh_token:
            prefix = "EBAY_SANDBOX_" if sandbox else "EBAY_"
            raise ValueError(f"Missing {prefix}REFRESH_TOKEN setting")
        self.refresh_token = refresh_token

    def get_access_token(self) -> Optional[str]:
        """Return the cached access token if it is still outside the expiry buffer"""
        token_data = self._access_tokens.get(self.key)
        if not token_data:
            return None

        if self.clock() < token_data["expires_at"] - EXPIRY_BUFFER:
            return token_data["access_token"]

        logger.debug(f"Access token for {self.key} expired or expiring soon")
        return None

    def save_access_token(self, access_token: str, expires_in: int):
        expires_at = self.clock() + timedelta(seconds=expires_in)
        self._access_tokens[self.key] = {
            "access_token": access_token,
            "expires_at": expires_at,
        }
        logger.info(f"Saved {self.key} access token to memory (expires: {expires_at})")

    def get_refresh_token(self) -> str:
        return self.refresh_token

    def clear_tokens(self):
        if self._access_tokens.pop(self.key, None) is not None:
            logger.info(f"Cleared {self.key} access token from memory")


def clear_all_tokens():
    """Drop every cached access token (used between tests)"""
    SecureTokenManager._access_tokens.clear()
