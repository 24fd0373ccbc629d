from __future__ import annotations

import sys
from decimal import Decimal
from typing import Any, Dict, Optional

from ..domain.models import FAILURE_NO_ITEMS_FOUND, InvoiceParseResult
from ..invoice import parse_invoice
from ..logging import get_logger
from .db import InventoryDatabase


LOG = get_logger("store-service")


class NoItemsFoundError(Exception):
    """Extraction succeeded but produced nothing worth importing."""

    reason = FAILURE_NO_ITEMS_FOUND


class InvoiceExtractionError(Exception):
    """Extractor reported a failure; `reason` is InvalidInput or ParseError."""

    def __init__(self, reason: str, message: str) -> None:
        super().__init__(message)
        self.reason = reason


def read_invoice_text(path: str) -> str:
    """Read invoice text from a file, or from stdin when path is "-"."""
    if path == "-":
        return sys.stdin.read()
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


class InvoiceImportService:
    """Coordinates extraction, review policy and persistence of invoice drafts."""

    def __init__(self, db: Optional[InventoryDatabase] = None) -> None:
        self.db = db or InventoryDatabase()

    def preview(self, text: Any) -> InvoiceParseResult:
        """Run the extractor and apply the caller-side "no items" policy."""
        result = parse_invoice(text)
        if not result.success:
            LOG.warning(f"Invoice extraction failed ({result.failure}): {result.error}")
            raise InvoiceExtractionError(result.failure or "", result.error or "")
        if not result.items:
            LOG.warning("No items found in invoice text")
            raise NoItemsFoundError("No items found in invoice. Please check the format.")
        return result

    def confirm(self, result: InvoiceParseResult) -> Dict[str, Any]:
        """Persist a reviewed extraction: purchase first, then its items."""
        if result.purchase is None:
            raise ValueError("cannot persist a failed extraction result")
        purchase = self.db.create_purchase(result.purchase.to_dict())
        purchase_id = purchase["purchase_id"]
        rows = [{**it.to_dict(), "purchase_id": purchase_id} for it in result.items]
        created = self.db.create_items(rows)
        total_allocated = sum((it.allocated_cost for it in result.items), Decimal("0"))
        summary = {
            "purchase_id": purchase_id,
            "item_ids": [it["item_id"] for it in created],
            "item_count": len(created),
            "total_allocated": float(total_allocated),
        }
        LOG.info(f"Persisted invoice import: {summary['item_count']} item(s) under purchase {purchase_id}")
        return summary

    def import_text(self, text: Any) -> Dict[str, Any]:
        return self.confirm(self.preview(text))
