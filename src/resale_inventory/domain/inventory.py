from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .models import ITEM_STATUS_LISTED, ITEM_STATUS_SOLD

PURCHASE_STATUS_COMPLETED = "Completed"
PURCHASE_STATUS_NOT_STARTED = "Not Started"
PURCHASE_STATUS_ACTIVE = "Active"

_SEARCH_FIELDS = ("item_name", "category", "brand", "notes")

CONDITION_REPORT_TEMPLATE = """CONDITION REPORT

Overall Condition:
[ ] New with tags
[ ] New without tags
[ ] Excellent - minimal wear
[ ] Good - light wear
[ ] Fair - moderate wear
[ ] Poor - significant wear

Material & Construction:
- Material type:
- Quality:
- Construction notes:

Wear & Damage:
- Visible wear:
- Stains/marks:
- Holes/tears:
- Fading:
- Pilling:

Hardware & Closures:
- Zippers:
- Buttons:
- Snaps:
- Other hardware:

Odors:
[ ] None
[ ] Light musty smell
[ ] Smoke smell
[ ] Other:

Measurements:
(Add relevant measurements)

Additional Notes:
"""


def _dec(v: Any) -> Decimal:
    return Decimal(str(v)) if v is not None else Decimal("0")


def calculate_net_profit(sale_price: Any, platform_fees: Any, allocated_cost: Any) -> Optional[float]:
    """sale price minus fees minus allocated cost; None while unsold."""
    if sale_price is None:
        return None
    return float(_dec(sale_price) - _dec(platform_fees) - _dec(allocated_cost))


def calculate_purchase_stats(purchase: Dict[str, Any], items: Sequence[Dict[str, Any]]) -> Dict[str, Any]:
    pid = purchase.get("purchase_id")
    own = [it for it in items if it.get("purchase_id") == pid]
    item_count = len(own)
    sold_count = sum(1 for it in own if it.get("status") == ITEM_STATUS_SOLD)
    listed_count = sum(1 for it in own if it.get("status") == ITEM_STATUS_LISTED)
    revenue = sum((_dec(it.get("sale_price")) for it in own), Decimal("0"))
    fees = sum((_dec(it.get("platform_fees")) for it in own), Decimal("0"))
    profit = revenue - fees - _dec(purchase.get("total_purchase_cost"))

    if item_count > 0 and sold_count == item_count:
        status = PURCHASE_STATUS_COMPLETED
    elif listed_count == 0 and sold_count == 0:
        status = PURCHASE_STATUS_NOT_STARTED
    else:
        status = PURCHASE_STATUS_ACTIVE

    return {
        "item_count": item_count,
        "sold_count": sold_count,
        "listed_count": listed_count,
        "revenue": float(revenue),
        "profit": float(profit),
        "status": status,
    }


def calculate_days_listed(listing_date: Optional[str], sale_date: Optional[str] = None, *, today: Optional[date] = None) -> Optional[int]:
    """Days between listing and sale (or today while still listed)."""
    if not listing_date:
        return None
    start = date.fromisoformat(listing_date[:10])
    end = date.fromisoformat(sale_date[:10]) if sale_date else (today or date.today())
    return abs((end - start).days)


def generate_listing_description(item: Dict[str, Any]) -> str:
    parts: List[str] = []
    if item.get("item_name"):
        parts.append(item["item_name"])
    if item.get("brand"):
        parts.append(f"\n\nBrand: {item['brand']}")
    if item.get("category"):
        parts.append(f"Category: {item['category']}")
    if item.get("size"):
        parts.append(f"Size: {item['size']}")
    parts.extend(
        [
            "\n\nDescription:",
            "[Add detailed description here]",
            "\n\nCondition:",
            "[See condition report for details]",
            "\n\nShipping:",
            "[Add shipping information]",
            "\n\nReturns:",
            "[Add return policy]",
        ]
    )
    return "\n".join(parts)


def generate_condition_report() -> str:
    return CONDITION_REPORT_TEMPLATE


def _sort_key(value: Any) -> Tuple[int, Any]:
    # missing < numbers < text, so mixed columns never compare float to str
    if value is None or value == "":
        return (0, "")
    if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
        return (1, value)
    return (2, str(value).lower())


def sort_items(items: Sequence[Dict[str, Any]], field: str, direction: str = "asc") -> List[Dict[str, Any]]:
    """Stable sort by one field; numbers numerically, text case-insensitively.

    Missing values sort first ascending and last descending.
    """
    return sorted(items, key=lambda it: _sort_key(it.get(field)), reverse=direction == "desc")


def filter_items(items: Sequence[Dict[str, Any]], filters: Dict[str, Any]) -> List[Dict[str, Any]]:
    purchase = filters.get("purchase") or filters.get("purchase_id")
    category = filters.get("category")
    brand = filters.get("brand")
    status = filters.get("status")
    search = (filters.get("search") or "").lower()

    out: List[Dict[str, Any]] = []
    for it in items:
        if purchase and it.get("purchase_id") != purchase:
            continue
        if category and it.get("category") != category:
            continue
        if brand and it.get("brand") != brand:
            continue
        if status and it.get("status") != status:
            continue
        if search and not any(search in str(it.get(f) or "").lower() for f in _SEARCH_FIELDS):
            continue
        out.append(it)
    return out


def get_unique_values(items: Sequence[Dict[str, Any]], field: str) -> List[Any]:
    return sorted({it.get(field) for it in items if it.get(field) not in (None, "")})


def format_currency(amount: Any) -> str:
    if amount is None:
        return "-"
    value = _dec(amount)
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.2f}"
