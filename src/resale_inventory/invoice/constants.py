"""Ordered rule tables for invoice extraction.

Every table is a tuple evaluated top to bottom; the first rule that matches
wins. Keep entries in priority order when extending them.
"""

from __future__ import annotations

import re
from typing import Tuple

# Vendor lines are only looked for near the top of the invoice.
VENDOR_SCAN_LINES = 10

VENDOR_PATTERNS: Tuple[Tuple[str, re.Pattern[str]], ...] = (
    ("labeled", re.compile(r"\b(?:from|vendor|seller|sold by)\s*:\s*(.+)", re.IGNORECASE)),
    ("corporate", re.compile(r"^([A-Z][A-Za-z\s&]+(?:Inc|LLC|Ltd|Store|Shop))\b")),
)

_DATE_TOKEN = r"(\d{1,2}[-/]\d{1,2}[-/]\d{2,4})"

DATE_PATTERNS: Tuple[Tuple[str, re.Pattern[str]], ...] = (
    ("labeled", re.compile(r"\b(?:invoice date|purchase date|date)[:\s]+" + _DATE_TOKEN, re.IGNORECASE)),
    ("bare", re.compile(r"\b" + _DATE_TOKEN + r"\b")),
)

# Amount with optional thousands separators: 1,234.56 | 1234.56 | 45
AMOUNT_TOKEN = r"(\d{1,3}(?:,\d{3})+(?:\.\d{1,2})?|\d+(?:\.\d{1,2})?)"

# More specific labels come first so "Grand Total" is not read as "Total".
TOTAL_PATTERN: re.Pattern[str] = re.compile(
    r"\b(?:grand total|amount due|total|balance)\b[:\s]*\$?\s*" + AMOUNT_TOKEN,
    re.IGNORECASE,
)

# Substring match: header, metadata and summary lines never become items.
EXCLUDED_LINE_PATTERN: re.Pattern[str] = re.compile(
    r"invoice|receipt|total|subtotal|tax|shipping|date|from|vendor",
    re.IGNORECASE,
)
MIN_ITEM_LINE_LENGTH = 3

# Quantity lines above this are treated as noise rather than expanded.
MAX_LINE_QUANTITY = 1000

_PRICE = r"\$?\s*" + AMOUNT_TOKEN

SHAPE_NAME_PRICE = "name_price"
SHAPE_QUANTITY = "quantity"
SHAPE_COLUMNS = "columns"

# Shapes are tried in this order. The name/price shape refuses lines that
# start like a quantity line or contain column pipes so the later shapes stay
# reachable.
ITEM_LINE_PATTERNS: Tuple[Tuple[str, re.Pattern[str]], ...] = (
    (SHAPE_NAME_PRICE, re.compile(r"^(?!\d+\s*x\s)([^|]+?)\s+" + _PRICE + r"$", re.IGNORECASE)),
    (SHAPE_QUANTITY, re.compile(r"^(\d+)\s*x\s+(.+?)\s+[-â]\s*" + _PRICE + r"$", re.IGNORECASE)),
    (SHAPE_COLUMNS, re.compile(r"^(.+?)\s*\|\s*(.+?)\s*\|\s*(.+?)\s*\|\s*" + _PRICE + r"$")),
)

# Letter sizes may be lower case ("hoodie xl"); a letter right after an
# apostrophe is a possessive ("Levi's"), never a size.
SIZE_PATTERNS: Tuple[Tuple[str, re.Pattern[str]], ...] = (
    ("letter", re.compile(r"(?<!['’])\b(XXS|XS|S|M|L|XL|XXL|XXXL)\b", re.IGNORECASE)),
    ("word", re.compile(r"\b(Small|Medium|Large)\b", re.IGNORECASE)),
    ("measure", re.compile(r"\b(\d+(?:\.\d+)?\s*(?:oz|lb|kg|g|ml|L))\b", re.IGNORECASE)),
    ("labeled", re.compile(r"\b(?:Size|sz)[:\s]+(\d+(?:\.\d+)?[A-Z]?)\b", re.IGNORECASE)),
)

BRAND_KEYWORDS: Tuple[str, ...] = (
    "Nike",
    "Adidas",
    "Puma",
    "Gucci",
    "Prada",
    "Louis Vuitton",
    "Chanel",
    "Zara",
    "H&M",
)

CATEGORY_KEYWORDS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("Clothing", ("shirt", "pants", "dress", "jacket", "coat", "sweater", "jeans", "shorts")),
    ("Shoes", ("shoes", "boots", "sneakers", "sandals", "heels")),
    ("Accessories", ("bag", "purse", "wallet", "belt", "scarf", "hat")),
    ("Electronics", ("phone", "laptop", "tablet", "camera", "headphones")),
    ("Home", ("lamp", "chair", "table", "decor", "art")),
)


def _whole_word(keyword: str) -> re.Pattern[str]:
    return re.compile(r"\b" + re.escape(keyword) + r"\b", re.IGNORECASE)


BRAND_PATTERNS: Tuple[Tuple[str, re.Pattern[str]], ...] = tuple(
    (brand, _whole_word(brand)) for brand in BRAND_KEYWORDS
)

CATEGORY_PATTERNS: Tuple[Tuple[str, Tuple[re.Pattern[str], ...]], ...] = tuple(
    (category, tuple(_whole_word(kw) for kw in keywords)) for category, keywords in CATEGORY_KEYWORDS
)
