from sqlalchemy import Column, Integer, String, DateTime, UniqueConstraint
from sqlalchemy.sql import func

from app.database import Base
from app.core.enums import AspectMissStatus


class AspectMiss(Base):
    """Required aspect we could not fill for a product; queued for curation"""

    __tablename__ = "ebay_aspect_misses"
    __table_args__ = (
        UniqueConstraint("asin", "aspect_name", name="uq_aspect_miss_asin_aspect"),
    )

    id = Column(Integer, primary_key=True)
    asin = Column(String, nullable=False, index=True)
    category_id = Column(String, nullable=True)
    category_name = Column(String, nullable=True)
    aspect_name = Column(String, nullable=False)
    product_title = Column(String, nullable=False)
    source_brand = Column(String, nullable=True)
    source_model = Column(String, nullable=True)
    status = Column(String, nullable=False, default=AspectMissStatus.PENDING.value, index=True)
    resolved_value = Column(String, nullable=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self) -> str:
        return f"<AspectMiss(asin={self.asin}, aspect={self.aspect_name}, status={self.status})>"
