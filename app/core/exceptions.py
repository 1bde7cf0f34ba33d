from typing import Any, Dict, List, Optional


class BaseServiceError(Exception):
    """Base exception for all service-related errors."""
    pass

class ValidationError(BaseServiceError):
    """Raised when request data validation fails."""
    pass

class ProductServiceError(BaseServiceError):
    """Base exception for product data errors."""
    pass

class ProductNotFoundError(ProductServiceError):
    """Raised when the product data provider has no record for an ASIN."""
    pass

class PlatformServiceError(BaseServiceError):
    """Base exception for platform service errors."""
    pass

class KeepaAPIError(PlatformServiceError):
    """Raised when Keepa API calls fail."""
    pass

class EbayServiceError(PlatformServiceError):
    """Base exception for eBay-specific errors."""
    pass

class EbayAPIError(EbayServiceError):
    """
    Raised when eBay API calls fail.

    Carries the HTTP status and eBay's structured ``errors`` list when the
    response had one, so callers can branch on ``error_id``.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        errors: Optional[List[Dict[str, Any]]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.errors = errors or []

    @property
    def error_id(self) -> Optional[int]:
        if self.errors:
            return self.errors[0].get("errorId")
        return None

class AspectResolutionError(EbayServiceError):
    """Raised when curated aspects are required and some could not be resolved."""

    def __init__(self, message: str, unresolved: List[str]):
        super().__init__(message)
        self.unresolved = unresolved

class ListingPublicationError(EbayServiceError):
    """
    Raised when a publication run fails after remote state may have been created.

    ``stage`` is the last stage reached before the failure. Compensation
    failures are attached for logging only; the message always describes
    the original error.
    """

    def __init__(
        self,
        message: str,
        stage: str,
        original_error: Optional[BaseException] = None,
        rollback_failures: Optional[List[str]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.stage = stage
        self.original_error = original_error
        self.rollback_failures = rollback_failures or []

class DatabaseError(Exception):
    """Exception raised for database-related errors."""
    pass
