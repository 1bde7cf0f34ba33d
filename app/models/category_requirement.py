from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text, JSON
from sqlalchemy.sql import func

from app.database import Base


class CategoryRequirement(Base):
    """
    Curated knowledge about an eBay category: whether it accepts listings
    (leaf) and which aspects it needs.
    """

    __tablename__ = "ebay_category_requirements"

    id = Column(Integer, primary_key=True)
    category_id = Column(String, unique=True, nullable=False, index=True)
    category_name = Column(String, nullable=False)
    parent_category_id = Column(String, nullable=True, index=True)
    is_leaf = Column(Boolean, nullable=False, default=True)
    required_aspects = Column(JSON, nullable=True)
    optional_aspects = Column(JSON, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self) -> str:
        return (
            f"<CategoryRequirement(category_id={self.category_id}, "
            f"is_leaf={self.is_leaf}, parent={self.parent_category_id})>"
        )
