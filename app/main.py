# app/main.py

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.core.config import get_settings
from app.core.logging_config import configure_logging
from app.database import engine
from app.routes import health
from app.routes.platforms.ebay import router as ebay_router

from app import models  # noqa: F401  registers tables on Base.metadata

configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    logger.info(
        f"Starting ASIN eBay Lister ({settings.ENVIRONMENT}, "
        f"{'sandbox' if settings.EBAY_SANDBOX_MODE else 'production'} eBay, "
        f"category strategy: {settings.EBAY_CATEGORY_STRATEGY})"
    )
    yield
    await engine.dispose()
    logger.info("Database engine disposed")


app = FastAPI(
    title="ASIN eBay Lister",
    description="Publishes eBay listings from Amazon product data",
    version="1.0.0",
    lifespan=lifespan,
)

app.include_router(ebay_router)
app.include_router(health.router)
