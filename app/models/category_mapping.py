# app/models/category_mapping.py
from sqlalchemy import Column, Integer, String, Boolean, DateTime, Index
from sqlalchemy.sql import func

from app.database import Base

class CategoryMapping(Base):
    """
    Maps an Amazon classification (Keepa productGroup / type) to an eBay category.

    A row with both source fields NULL and ``is_default`` set is the
    catch-all fallback. Rows with only ``source_category`` set match the
    whole product group.
    """
    __tablename__ = "ebay_category_mappings"
    __table_args__ = (
        Index("ix_ebay_category_mappings_source", "source_category", "source_subtype"),
    )

    id = Column(Integer, primary_key=True)
    source_category = Column(String, nullable=True)
    source_subtype = Column(String, nullable=True)
    ebay_category_id = Column(String, nullable=False)
    ebay_category_name = Column(String, nullable=False)
    priority = Column(Integer, nullable=False, default=0, server_default="0")
    is_default = Column(Boolean, nullable=False, default=False, server_default="0")

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self) -> str:
        return (
            f"<CategoryMapping(source={self.source_category}/{self.source_subtype}, "
            f"ebay={self.ebay_category_id}, priority={self.priority})>"
        )
