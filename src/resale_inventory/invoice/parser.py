"""Heuristic invoice text extraction.

Turns a block of pasted invoice text into a :class:`PurchaseDraft` plus a list
of :class:`ItemDraft` objects and, when a total is known, spreads that total
over the items. Extraction is best effort: fields that cannot be found fall
back to defaults and lines that fit no item shape are skipped.
"""

from __future__ import annotations

import re
from datetime import date
from decimal import Decimal
from typing import Callable, List, Optional, Sequence, Tuple

from ..domain.models import (
    FAILURE_INVALID_INPUT,
    FAILURE_PARSE_ERROR,
    InvoiceParseResult,
    ItemDraft,
    PurchaseDraft,
)
from ..domain.normalize import normalize_date, parse_amount
from ..logging import get_logger
from .allocation import allocate_costs
from .constants import (
    DATE_PATTERNS,
    EXCLUDED_LINE_PATTERN,
    ITEM_LINE_PATTERNS,
    MAX_LINE_QUANTITY,
    MIN_ITEM_LINE_LENGTH,
    SHAPE_COLUMNS,
    SHAPE_NAME_PRICE,
    SHAPE_QUANTITY,
    TOTAL_PATTERN,
    VENDOR_PATTERNS,
    VENDOR_SCAN_LINES,
)
from .enrich import enrich_item

LOG = get_logger("invoice-parser")


def split_lines(text: str) -> List[str]:
    """Trimmed, non-empty lines; blank lines do not count toward positions."""
    return [ln.strip() for ln in text.splitlines() if ln.strip()]


def find_vendor(lines: Sequence[str]) -> str:
    head = lines[:VENDOR_SCAN_LINES]
    for label, pattern in VENDOR_PATTERNS:
        for line in head:
            m = pattern.search(line)
            if m and m.group(1).strip():
                vendor = m.group(1).strip()
                LOG.debug(f"vendor {vendor!r} via {label} rule")
                return vendor
    return ""


def find_purchase_date(text: str) -> Optional[str]:
    for label, pattern in DATE_PATTERNS:
        m = pattern.search(text)
        if not m:
            continue
        normalized = normalize_date(m.group(1))
        if normalized:
            LOG.debug(f"date {normalized} via {label} rule")
            return normalized
    return None


def find_total(text: str) -> Decimal:
    m = TOTAL_PATTERN.search(text)
    if not m:
        return Decimal("0")
    return parse_amount(m.group(1))


def extract_purchase_info(lines: Sequence[str], full_text: str, *, today: Optional[date] = None) -> PurchaseDraft:
    vendor = find_vendor(lines)
    purchase_date = find_purchase_date(full_text) or (today or date.today()).isoformat()
    prefix = vendor or "Purchase"
    return PurchaseDraft(
        purchase_name=f"{prefix} - {purchase_date}",
        vendor=vendor,
        purchase_date=purchase_date,
        total_purchase_cost=find_total(full_text),
        notes="",
    )


def _clean_name(raw: str) -> str:
    # "Jacket - $35.00" leaves a dangling separator on the name
    return raw.strip().rstrip("-–:").strip()


def _items_from_name_price(m: re.Match[str]) -> List[ItemDraft]:
    name = _clean_name(m.group(1))
    if not name:
        return []
    return [ItemDraft(item_name=name, allocated_cost=parse_amount(m.group(2)))]


def _items_from_quantity(m: re.Match[str]) -> List[ItemDraft]:
    qty = int(m.group(1))
    name = _clean_name(m.group(2))
    if qty <= 0 or not name:
        return []
    if qty > MAX_LINE_QUANTITY:
        LOG.warning(f"Skipping quantity line with implausible quantity {qty}: {name!r}")
        return []
    each = parse_amount(m.group(3)) / qty
    return [ItemDraft(item_name=name, allocated_cost=each) for _ in range(qty)]


def _items_from_columns(m: re.Match[str]) -> List[ItemDraft]:
    name = _clean_name(m.group(1))
    if not name:
        return []
    return [
        ItemDraft(
            item_name=name,
            category=m.group(2).strip(),
            brand=m.group(3).strip(),
            allocated_cost=parse_amount(m.group(4)),
        )
    ]


_SHAPE_BUILDERS = {
    SHAPE_NAME_PRICE: _items_from_name_price,
    SHAPE_QUANTITY: _items_from_quantity,
    SHAPE_COLUMNS: _items_from_columns,
}

ITEM_SHAPES: Tuple[Tuple[str, re.Pattern[str], Callable[[re.Match[str]], List[ItemDraft]]], ...] = tuple(
    (shape, pattern, _SHAPE_BUILDERS[shape]) for shape, pattern in ITEM_LINE_PATTERNS
)


def is_item_candidate(line: str) -> bool:
    return len(line) >= MIN_ITEM_LINE_LENGTH and not EXCLUDED_LINE_PATTERN.search(line)


def extract_items(lines: Sequence[str]) -> List[ItemDraft]:
    """Match each candidate line against the item shapes, first shape wins."""
    items: List[ItemDraft] = []
    for line in lines:
        if not is_item_candidate(line):
            continue
        for shape, pattern, build in ITEM_SHAPES:
            m = pattern.match(line)
            if not m:
                continue
            built = build(m)
            LOG.debug(f"{shape} line -> {len(built)} item(s): {line!r}")
            items.extend(enrich_item(it) for it in built)
            break
    return items


def parse_invoice(invoice_text: object, *, today: Optional[date] = None) -> InvoiceParseResult:
    """Extract a purchase draft and item drafts from raw invoice text.

    Never raises: unusable input yields an ``InvalidInput`` failure and any
    unexpected error while parsing yields a ``ParseError`` failure carrying
    the exception message. Zero items is still a success.
    """
    if not invoice_text or not isinstance(invoice_text, str):
        return InvoiceParseResult.failed(FAILURE_INVALID_INPUT, "Invalid invoice text")

    try:
        lines = split_lines(invoice_text)
        purchase = extract_purchase_info(lines, invoice_text, today=today)
        items = extract_items(lines)
        if items and purchase.total_purchase_cost > 0:
            items = allocate_costs(items, purchase.total_purchase_cost)
    except Exception as exc:
        LOG.exception("Error parsing invoice")
        return InvoiceParseResult.failed(FAILURE_PARSE_ERROR, str(exc))

    LOG.info(
        f"Parsed invoice: vendor={purchase.vendor!r} date={purchase.purchase_date} "
        f"total={purchase.total_purchase_cost} items={len(items)}"
    )
    return InvoiceParseResult.ok(purchase, items)
