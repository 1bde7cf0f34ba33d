"""
Builds the JSON bodies sent to the Sell Inventory API.

Pure functions: no I/O, no logging. eBay's field limits (80-char title,
4000-char description, 12 images) are applied here.
"""
import html
import re
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Optional

from app.schemas.listing import ListingPolicies
from app.schemas.product import SourceProduct

TITLE_MAX_LENGTH = 80
DESCRIPTION_MAX_LENGTH = 4000
MAX_IMAGES = 12

UNTITLED_PRODUCT = "Untitled Product"
PLACEHOLDER_DESCRIPTION = "See photos for details."

LISTING_URL = "https://www.ebay.com/itm/"
SANDBOX_LISTING_URL = "https://sandbox.ebay.com/itm/"

# Inventory API ConditionEnum values, plus the short names callers send
CONDITION_MAP = {
    "NEW": "NEW",
    "LIKE_NEW": "LIKE_NEW",
    "NEW_OTHER": "NEW_OTHER",
    "NEW_WITH_DEFECTS": "NEW_WITH_DEFECTS",
    "CERTIFIED_REFURBISHED": "CERTIFIED_REFURBISHED",
    "EXCELLENT_REFURBISHED": "EXCELLENT_REFURBISHED",
    "VERY_GOOD_REFURBISHED": "VERY_GOOD_REFURBISHED",
    "GOOD_REFURBISHED": "GOOD_REFURBISHED",
    "SELLER_REFURBISHED": "SELLER_REFURBISHED",
    "USED_EXCELLENT": "USED_EXCELLENT",
    "USED_VERY_GOOD": "USED_VERY_GOOD",
    "USED_GOOD": "USED_GOOD",
    "USED_ACCEPTABLE": "USED_ACCEPTABLE",
    "FOR_PARTS_OR_NOT_WORKING": "FOR_PARTS_OR_NOT_WORKING",
    "EXCELLENT": "USED_EXCELLENT",
    "VERY_GOOD": "USED_VERY_GOOD",
    "GOOD": "USED_GOOD",
    "ACCEPTABLE": "USED_ACCEPTABLE",
}
DEFAULT_CONDITION = "NEW"

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")
_SCRIPT_BLOCKS = re.compile(r"<script[^>]*>.*?</script>", re.IGNORECASE | re.DOTALL)
_STYLE_BLOCKS = re.compile(r"<style[^>]*>.*?</style>", re.IGNORECASE | re.DOTALL)
_BARE_AMPERSAND = re.compile(r"&(?!(amp|lt|gt|quot|apos|#\d+|#x[0-9a-f]+);)", re.IGNORECASE)
# Trailing tag or entity left open by a length cut
_PARTIAL_TAG = re.compile(r"<[^>]*$")
_PARTIAL_ENTITY = re.compile(r"&[#\w]*$")

FEATURES_HEADER = "<h3>Features</h3><ul>"
FEATURES_FOOTER = "</ul>"


def map_condition(condition: Optional[str]) -> str:
    if not condition:
        return DEFAULT_CONDITION
    return CONDITION_MAP.get(condition.strip().upper(), DEFAULT_CONDITION)


def truncate_markup(text: str, limit: int) -> str:
    """Cut to limit without leaving a half tag or half entity at the end"""
    if len(text) <= limit:
        return text
    cut = _PARTIAL_TAG.sub("", text[:limit])
    return _PARTIAL_ENTITY.sub("", cut)


def build_features_html(features: List[str], limit: int = DESCRIPTION_MAX_LENGTH) -> str:
    """
    Features as an HTML list of whole <li> items that fit within limit.

    A first feature too long on its own is shortened so the list is never empty.
    """
    budget = limit - len(FEATURES_HEADER) - len(FEATURES_FOOTER)
    items: List[str] = []
    used = 0
    for feature in features:
        item = f"<li>{html.escape(feature, quote=False)}</li>"
        if used + len(item) > budget:
            break
        items.append(item)
        used += len(item)

    if not items and features:
        text = truncate_markup(html.escape(features[0], quote=False), budget - len("<li></li>"))
        items.append(f"<li>{text}</li>")

    return FEATURES_HEADER + "".join(items) + FEATURES_FOOTER


def sanitize_description(description: Optional[str]) -> Optional[str]:
    """Clean a source description for eBay; None if nothing usable remains"""
    if not description:
        return None
    cleaned = _CONTROL_CHARS.sub("", str(description))
    cleaned = _SCRIPT_BLOCKS.sub("", cleaned)
    cleaned = _STYLE_BLOCKS.sub("", cleaned)
    cleaned = _BARE_AMPERSAND.sub("&amp;", cleaned)
    cleaned = truncate_markup(cleaned, DESCRIPTION_MAX_LENGTH)
    return cleaned if cleaned.strip() else None


def build_description(product: SourceProduct) -> str:
    sanitized = sanitize_description(product.description)
    if sanitized:
        return sanitized

    features = [f for f in product.features if f and f.strip()]
    if features:
        return build_features_html(features)

    return PLACEHOLDER_DESCRIPTION


def build_title(product: SourceProduct) -> str:
    title = (product.title or "").strip()
    return title[:TITLE_MAX_LENGTH] if title else UNTITLED_PRODUCT


def _default_aspects(product: SourceProduct) -> Dict[str, str]:
    candidates = {
        "Brand": product.brand,
        "Model": product.model,
        "MPN": product.part_number,
        "Manufacturer": product.manufacturer,
        "Color": product.color,
    }
    return {name: value.strip() for name, value in candidates.items() if value and value.strip()}


def build_inventory_payload(
    product: SourceProduct,
    condition: str,
    quantity: int,
    resolved_aspects: Optional[Dict[str, str]] = None,
) -> Dict:
    """
    Body for PUT /inventory_item/{sku}

    Args:
        product: Source product data
        condition: Caller's condition value, mapped through map_condition
        quantity: Available quantity
        resolved_aspects: Aspect name -> value from the AspectResolver; wins over field defaults

    Returns:
        Dict: Inventory item payload
    """
    aspects = _default_aspects(product)
    aspects.update(resolved_aspects or {})

    images = [url.strip() for url in product.images if url and url.strip()][:MAX_IMAGES]

    product_block = {
        "title": build_title(product),
        "description": build_description(product),
        "aspects": {name: [value] for name, value in aspects.items()},
        "imageUrls": images,
    }

    if product.brand:
        product_block["brand"] = product.brand
    if product.part_number:
        product_block["mpn"] = product.part_number
    if product.upc_list:
        product_block["upc"] = [product.upc_list[0]]
    if product.ean_list:
        product_block["ean"] = [product.ean_list[0]]

    return {
        "availability": {
            "shipToLocationAvailability": {"quantity": quantity},
        },
        "condition": map_condition(condition),
        "product": product_block,
    }


def format_price(price) -> str:
    return str(Decimal(str(price)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def build_offer_payload(
    sku: str,
    category_id: str,
    price,
    quantity: int,
    policies: ListingPolicies,
    location_key: str,
    marketplace_id: str = "EBAY_US",
    currency: str = "USD",
) -> Dict:
    """Body for POST /offer"""
    return {
        "sku": sku,
        "marketplaceId": marketplace_id,
        "format": "FIXED_PRICE",
        "availableQuantity": quantity,
        "categoryId": category_id,
        "listingPolicies": policies.to_ebay(),
        "pricingSummary": {
            "price": {"currency": currency, "value": format_price(price)},
        },
        "merchantLocationKey": location_key,
    }


def listing_url(listing_id: str, sandbox: bool = False) -> str:
    base = SANDBOX_LISTING_URL if sandbox else LISTING_URL
    return f"{base}{listing_id}"
