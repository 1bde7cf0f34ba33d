# app/core/config.py - Consolidated

import os
from functools import lru_cache
from typing import Optional
from pydantic import ConfigDict
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings.
    Loads values from environment variables (.env file)
    """
    # Database settings
    DATABASE_URL: str = ""

    # eBay API
    EBAY_SANDBOX_MODE: bool = False # Change to True if in Sandbox test mode
    EBAY_MARKETPLACE_ID: str = "EBAY_US"
    EBAY_CURRENCY: str = "USD"
    EBAY_CATEGORY_TREE_ID: str = "0"  # 0 = US tree

    # eBay OAuth
    EBAY_CLIENT_ID: str = ""
    EBAY_CLIENT_SECRET: str = ""
    EBAY_RU_NAME: str = ""
    EBAY_REFRESH_TOKEN: str = ""
    EBAY_SANDBOX_CLIENT_ID: str = ""
    EBAY_SANDBOX_CLIENT_SECRET: str = ""
    EBAY_SANDBOX_RU_NAME: str = ""
    EBAY_SANDBOX_REFRESH_TOKEN: str = ""

    # Business policies + inventory location used on every offer
    EBAY_FULFILLMENT_POLICY_ID: str = "107540197026"
    EBAY_PAYMENT_POLICY_ID: str = "243561626026"
    EBAY_RETURN_POLICY_ID: str = "243561625026"
    EBAY_MERCHANT_LOCATION_KEY: str = "loc-94e1f3a0-6e1b-4d23-befc-750fe183"

    # Listing pipeline
    EBAY_SKU_PREFIX: str = "wi_"
    EBAY_CATEGORY_STRATEGY: str = "mapping"  # "mapping" or "taxonomy"
    EBAY_REQUIRE_CURATED_ASPECTS: bool = False
    EBAY_API_MAX_RETRIES: int = 3
    EBAY_API_BACKOFF_SECONDS: float = 1.0
    CATEGORY_ASPECT_CACHE_TTL_DAYS: int = 7

    # Keepa (Amazon product data)
    KEEPA_API_KEY: str = ""
    KEEPA_DOMAIN: int = 1  # 1 = amazon.com

    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: Optional[str] = None

    model_config = ConfigDict(
        env_file=os.environ.get('ENV_FILE', '.env') if os.path.exists('.env') else None,
        case_sensitive=True,
        extra="ignore",
    )


@lru_cache()
def get_settings():
    """Cached settings to avoid loading .env file for every request"""
    return Settings()

def get_settings_no_cache():
    """Get settings without caching - useful for testing different environments"""
    return Settings()

def clear_settings_cache():
    """Clear the settings cache - useful when switching between environments"""
    get_settings.cache_clear()
