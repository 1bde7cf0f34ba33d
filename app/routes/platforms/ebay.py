import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.dependencies import get_db
from app.core.config import Settings, get_settings
from app.core.exceptions import (
    AspectResolutionError,
    KeepaAPIError,
    ListingPublicationError,
    ProductNotFoundError,
    ValidationError,
)
from app.schemas.listing import PublishRequest, PublicationResult
from app.services.ebay.publisher import ListingPublisher

router = APIRouter(prefix="/api", tags=["ebay"])

logger = logging.getLogger(__name__)


def get_listing_publisher(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> ListingPublisher:
    return ListingPublisher.from_settings(db, settings)


@router.post("/ebay/auto-list", response_model=PublicationResult)
async def auto_list(
    request: PublishRequest,
    publisher: ListingPublisher = Depends(get_listing_publisher),
):
    """Create an eBay listing for one ASIN (fetch, categorise, list, publish)"""
    logger.info(f"Auto-list requested for {request.asin} at {request.price}")
    try:
        return await publisher.publish(
            request.asin,
            request.price,
            quantity=request.quantity,
            condition=request.condition,
            publish=request.publish,
        )
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ProductNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except AspectResolutionError as e:
        raise HTTPException(
            status_code=422,
            detail={"error": "Missing required aspects", "message": str(e), "unresolved": e.unresolved},
        )
    except KeepaAPIError as e:
        logger.error(f"Keepa lookup failed for {request.asin}: {e}")
        raise HTTPException(status_code=502, detail={"error": "Product lookup failed", "message": str(e)})
    except ListingPublicationError as e:
        raise HTTPException(
            status_code=502,
            detail={"error": "Failed to create listing", "message": e.message, "stage": e.stage},
        )
