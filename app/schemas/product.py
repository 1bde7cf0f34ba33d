# app/schemas/product.py
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field

AMAZON_IMAGE_BASE = "https://m.media-amazon.com/images/I/"

# Keepa csv index of the Amazon (first-party) price series
KEEPA_CSV_AMAZON = 0


class SourceProduct(BaseModel):
    """
    Product data for one ASIN as returned by the product-data provider.
    Read-only input to the publication pipeline; never persisted.
    """
    asin: str
    title: str = ""
    brand: Optional[str] = None
    model: Optional[str] = None
    manufacturer: Optional[str] = None
    color: Optional[str] = None
    part_number: Optional[str] = None
    size: Optional[str] = None
    material: Optional[str] = None
    features: List[str] = Field(default_factory=list)
    description: Optional[str] = None
    images: List[str] = Field(default_factory=list)
    upc_list: List[str] = Field(default_factory=list)
    ean_list: List[str] = Field(default_factory=list)
    source_category: Optional[str] = None  # Keepa productGroup
    source_subtype: Optional[str] = None   # Keepa type
    price_history: List[int] = Field(default_factory=list)  # cents, newest last

    model_config = ConfigDict(frozen=True)

    @property
    def search_text(self) -> str:
        """Lowercased title + features, the text keyword rules are matched against"""
        return f"{self.title} {' '.join(self.features)}".lower()

    @classmethod
    def from_keepa(cls, raw: Dict[str, Any]) -> "SourceProduct":
        """Build from a single entry of Keepa's ``products`` array."""
        return cls(
            asin=raw.get("asin", ""),
            title=raw.get("title") or "",
            brand=raw.get("brand") or None,
            model=raw.get("model") or None,
            manufacturer=raw.get("manufacturer") or None,
            color=raw.get("color") or None,
            part_number=raw.get("partNumber") or None,
            size=raw.get("size") or None,
            material=raw.get("material") or None,
            features=[f for f in (raw.get("features") or []) if f],
            description=raw.get("description") or None,
            images=_extract_keepa_images(raw),
            upc_list=[str(u) for u in (raw.get("upcList") or [])],
            ean_list=[str(e) for e in (raw.get("eanList") or [])],
            source_category=raw.get("productGroup") or None,
            source_subtype=raw.get("type") or None,
            price_history=_extract_price_history(raw),
        )


def _extract_keepa_images(raw: Dict[str, Any]) -> List[str]:
    images: List[str] = []
    image_objects = raw.get("images")
    if isinstance(image_objects, list) and image_objects:
        for img in image_objects:
            if not isinstance(img, dict):
                continue
            variant = img.get("l") or img.get("m")
            if variant:
                images.append(f"{AMAZON_IMAGE_BASE}{variant}")
    elif raw.get("imagesCSV"):
        for filename in raw["imagesCSV"].split(","):
            trimmed = filename.strip()
            if trimmed:
                images.append(f"{AMAZON_IMAGE_BASE}{trimmed}")
    return images


def _extract_price_history(raw: Dict[str, Any]) -> List[int]:
    """Keepa csv series interleave [keepaTime, price, keepaTime, price, ...]; -1 means no offer."""
    csv = raw.get("csv") or []
    if len(csv) <= KEEPA_CSV_AMAZON or not csv[KEEPA_CSV_AMAZON]:
        return []
    series = csv[KEEPA_CSV_AMAZON]
    return [price for price in series[1::2] if isinstance(price, int) and price >= 0]
