# ebay.py
from sqlalchemy import Column, Integer, String, Numeric, DateTime
from sqlalchemy.sql import func

from app.core.enums import EbayListingStatus
from ..database import Base


class EbayListing(Base):
    """Local record of a listing created by the publication pipeline"""
    __tablename__ = "ebay_listings"

    id = Column(Integer, primary_key=True, index=True)
    sku = Column(String, unique=True, nullable=False, index=True)
    asin = Column(String, nullable=False, index=True)
    title = Column(String)

    offer_id = Column(String, index=True)
    ebay_item_id = Column(String, index=True)  # listingId returned by publish
    listing_status = Column(String, default=EbayListingStatus.DRAFT.value)
    listing_url = Column(String)

    ebay_category_id = Column(String)
    ebay_category_name = Column(String)
    price = Column(Numeric(10, 2))
    quantity = Column(Integer)
    condition = Column(String)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
