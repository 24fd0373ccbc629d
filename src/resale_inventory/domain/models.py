from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

# Item lifecycle states; drafts always start as Unlisted.
ITEM_STATUS_UNLISTED = "Unlisted"
ITEM_STATUS_LISTED = "Listed"
ITEM_STATUS_SOLD = "Sold"

ITEM_STATUS_CHOICES: Tuple[str, ...] = (
    ITEM_STATUS_UNLISTED,
    ITEM_STATUS_LISTED,
    ITEM_STATUS_SOLD,
)

# Failure reasons reported by the extractor and its callers.
FAILURE_INVALID_INPUT = "InvalidInput"
FAILURE_PARSE_ERROR = "ParseError"
FAILURE_NO_ITEMS_FOUND = "NoItemsFound"


def _money(value: Decimal) -> float:
    return float(value.quantize(Decimal("0.01")))


@dataclass
class PurchaseDraft:
    """Purchase inferred from invoice text; carries no identity until stored."""

    purchase_name: str
    vendor: str
    purchase_date: str  # YYYY-MM-DD
    total_purchase_cost: Decimal = Decimal("0")
    notes: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "purchase_name": self.purchase_name,
            "vendor": self.vendor,
            "purchase_date": self.purchase_date,
            "total_purchase_cost": _money(self.total_purchase_cost),
            "notes": self.notes,
        }


@dataclass
class ItemDraft:
    item_name: str
    category: str = ""
    brand: str = ""
    size: str = ""
    allocated_cost: Decimal = Decimal("0")
    status: str = ITEM_STATUS_UNLISTED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "item_name": self.item_name,
            "category": self.category,
            "brand": self.brand,
            "size": self.size,
            "allocated_cost": _money(self.allocated_cost),
            "status": self.status,
        }


@dataclass
class InvoiceParseResult:
    """Outcome of one extraction run.

    On success ``purchase`` is set and ``items`` may be empty; on failure
    ``failure`` names the reason and ``error`` carries the message.
    """

    success: bool
    purchase: Optional[PurchaseDraft] = None
    items: List[ItemDraft] = field(default_factory=list)
    failure: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, purchase: PurchaseDraft, items: List[ItemDraft]) -> "InvoiceParseResult":
        return cls(success=True, purchase=purchase, items=list(items))

    @classmethod
    def failed(cls, failure: str, error: str) -> "InvoiceParseResult":
        return cls(success=False, failure=failure, error=error)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "purchase": self.purchase.to_dict() if self.purchase else None,
            "items": [it.to_dict() for it in self.items],
            "failure": self.failure,
            "error": self.error,
        }
