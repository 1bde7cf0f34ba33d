from sqlalchemy import Column, String, DateTime, JSON

from app.database import Base


class CategoryAspectCacheEntry(Base):
    """Cached required-aspect names per category, fetched from the Taxonomy API"""

    __tablename__ = "ebay_category_aspects"

    category_id = Column(String, primary_key=True)
    category_name = Column(String, nullable=True)
    required_aspects = Column(JSON, nullable=False, default=list)
    fetched_at = Column(DateTime(timezone=True), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)
