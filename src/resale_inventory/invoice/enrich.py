from __future__ import annotations

from dataclasses import replace

from ..domain.models import ItemDraft
from ..logging import get_logger
from .constants import BRAND_PATTERNS, CATEGORY_PATTERNS, SIZE_PATTERNS

LOG = get_logger("invoice-enrich")


def infer_size(name: str) -> str:
    for label, pattern in SIZE_PATTERNS:
        m = pattern.search(name or "")
        if m:
            LOG.debug(f"size {m.group(1)!r} via {label} rule in {name!r}")
            return m.group(1)
    return ""


def infer_brand(name: str) -> str:
    for brand, pattern in BRAND_PATTERNS:
        if pattern.search(name or ""):
            return brand
    return ""


def infer_category(name: str) -> str:
    for category, patterns in CATEGORY_PATTERNS:
        if any(p.search(name or "") for p in patterns):
            return category
    return ""


def enrich_item(item: ItemDraft) -> ItemDraft:
    """Return a copy with empty size/brand/category inferred from the name.

    Fields already set (e.g. brand and category from a column line) are kept.
    """
    name = item.item_name
    return replace(
        item,
        size=item.size or infer_size(name),
        brand=item.brand or infer_brand(name),
        category=item.category or infer_category(name),
    )
