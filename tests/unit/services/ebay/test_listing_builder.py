# tests/unit/services/ebay/test_listing_builder.py
import pytest
from decimal import Decimal

from app.services.ebay.listing_builder import (
    build_description,
    build_inventory_payload,
    build_offer_payload,
    listing_url,
    map_condition,
    sanitize_description,
)
from tests.mocks import MockData


"""
1. Inventory item payload
"""

def test_title_is_truncated_to_80_chars():
    product = MockData.source_product(title="A" * 120)

    payload = build_inventory_payload(product, "NEW", 1)

    assert payload["product"]["title"] == "A" * 80

def test_missing_title_falls_back():
    payload = build_inventory_payload(MockData.source_product(title=""), "NEW", 1)

    assert payload["product"]["title"] == "Untitled Product"

def test_images_are_trimmed_filtered_and_capped():
    images = [" https://m.media-amazon.com/images/I/a.jpg ", "", "   "] + [
        f"https://m.media-amazon.com/images/I/{i}.jpg" for i in range(20)
    ]
    product = MockData.source_product(images=images)

    urls = build_inventory_payload(product, "NEW", 1)["product"]["imageUrls"]

    assert len(urls) == 12
    assert urls[0] == "https://m.media-amazon.com/images/I/a.jpg"
    assert all(url.strip() == url and url for url in urls)

def test_identifiers_only_when_present():
    bare = build_inventory_payload(MockData.source_product(brand=None), "NEW", 1)["product"]
    assert "brand" not in bare and "mpn" not in bare and "upc" not in bare and "ean" not in bare

    full = build_inventory_payload(
        MockData.source_product(
            part_number="AW100", upc_list=["012345678905", "999"], ean_list=["4006381333931"]
        ),
        "NEW",
        1,
    )["product"]
    assert full["brand"] == "Acme"
    assert full["mpn"] == "AW100"
    assert full["upc"] == ["012345678905"]
    assert full["ean"] == ["4006381333931"]

def test_resolved_aspects_override_field_defaults():
    product = MockData.source_product(model="AW-100", color="Black")

    aspects = build_inventory_payload(
        product, "NEW", 1, {"Color": "Midnight Black", "Connectivity": "Wireless"}
    )["product"]["aspects"]

    assert aspects == {
        "Brand": ["Acme"],
        "Model": ["AW-100"],
        "Color": ["Midnight Black"],
        "Connectivity": ["Wireless"],
    }

def test_quantity_and_condition():
    payload = build_inventory_payload(MockData.source_product(), "very_good", 4)

    assert payload["availability"]["shipToLocationAvailability"]["quantity"] == 4
    assert payload["condition"] == "USED_VERY_GOOD"


"""
2. Description
"""

def test_sanitize_strips_control_chars_scripts_and_styles():
    raw = "Great\x00 item\x07<script>alert(1)</script><style>p{}</style><p>ok</p>"

    assert sanitize_description(raw) == "Great item<p>ok</p>"

def test_sanitize_strips_multiline_script_blocks():
    raw = "<p>Hi</p><SCRIPT type='text/javascript'>\nvar x = 1;\n</SCRIPT>"

    assert sanitize_description(raw) == "<p>Hi</p>"

def test_sanitize_escapes_only_bare_ampersands():
    raw = "Salt & Pepper &amp; Co &lt;tm&gt; &#169; &#xA9; &nbsp"

    assert sanitize_description(raw) == "Salt &amp; Pepper &amp; Co &lt;tm&gt; &#169; &#xA9; &amp;nbsp"

def test_sanitize_truncates_to_4000():
    assert len(sanitize_description("x" * 5000)) == 4000

def test_feature_list_is_escaped_when_no_description():
    product = MockData.source_product(description=None, features=["Fits 3<4 & more", "Lightweight"])

    assert build_description(product) == (
        "<h3>Features</h3><ul><li>Fits 3&lt;4 &amp; more</li><li>Lightweight</li></ul>"
    )

def test_sanitize_truncation_does_not_split_entities():
    raw = "x" * 3998 + " & more"

    result = sanitize_description(raw)

    assert result == "x" * 3998 + " "
    assert not result.endswith("&am")

def test_sanitize_truncation_does_not_split_tags():
    raw = "x" * 3998 + "<b>bold</b>"

    assert sanitize_description(raw) == "x" * 3998

def test_long_feature_list_keeps_whole_items_within_limit():
    features = [f"Feature {n} " + "y" * 200 for n in range(30)]
    product = MockData.source_product(description=None, features=features)

    description = build_description(product)

    assert len(description) <= 4000
    assert description.startswith("<h3>Features</h3><ul><li>Feature 0 ")
    assert description.endswith("</li></ul>")
    assert description.count("<li>") == description.count("</li>")
    assert "Feature 29" not in description

def test_single_oversized_feature_is_shortened_not_dropped():
    product = MockData.source_product(description=None, features=["Fits & " * 1000])

    description = build_description(product)

    assert len(description) <= 4000
    assert description.endswith("</li></ul>")
    assert "&am<" not in description and "&<" not in description

def test_placeholder_when_nothing_to_describe():
    product = MockData.source_product(description="<script>x</script>", features=[])

    assert build_description(product) == "See photos for details."


"""
3. Condition, offer, URL
"""

@pytest.mark.parametrize("value, expected", [
    ("NEW", "NEW"),
    ("like_new", "LIKE_NEW"),
    ("GOOD", "USED_GOOD"),
    ("ACCEPTABLE", "USED_ACCEPTABLE"),
    ("EXCELLENT", "USED_EXCELLENT"),
    ("FOR_PARTS_OR_NOT_WORKING", "FOR_PARTS_OR_NOT_WORKING"),
    ("mint", "NEW"),
    ("", "NEW"),
    (None, "NEW"),
])
def test_map_condition(value, expected):
    assert map_condition(value) == expected

def test_offer_payload(policies):
    payload = build_offer_payload("wi_B000TEST01", "112529", Decimal("19.995"), 2, policies, "loc-1")

    assert payload == {
        "sku": "wi_B000TEST01",
        "marketplaceId": "EBAY_US",
        "format": "FIXED_PRICE",
        "availableQuantity": 2,
        "categoryId": "112529",
        "listingPolicies": {
            "fulfillmentPolicyId": "107540197026",
            "paymentPolicyId": "243561626026",
            "returnPolicyId": "243561625026",
        },
        "pricingSummary": {"price": {"currency": "USD", "value": "20.00"}},
        "merchantLocationKey": "loc-1",
    }

def test_listing_url():
    assert listing_url("110551234567") == "https://www.ebay.com/itm/110551234567"
    assert listing_url("110551234567", sandbox=True) == "https://sandbox.ebay.com/itm/110551234567"
