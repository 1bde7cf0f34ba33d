from sqlalchemy import Column, Integer, String, Text, DateTime, UniqueConstraint
from sqlalchemy.sql import func

from app.database import Base


class AspectKeywordRule(Base):
    """
    Regex rule that assigns an aspect value when it matches product text.
    ``category_id`` NULL means the rule applies to every category.
    """

    __tablename__ = "ebay_aspect_keywords"
    __table_args__ = (
        UniqueConstraint("aspect_name", "keyword_pattern", "category_id", name="uq_aspect_keyword_rule"),
    )

    id = Column(Integer, primary_key=True)
    aspect_name = Column(String, nullable=False, index=True)
    keyword_pattern = Column(Text, nullable=False)
    aspect_value = Column(String, nullable=False)
    category_id = Column(String, nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
