from __future__ import annotations

from pathlib import Path

import pytest

from resale_inventory.invoice import SAMPLE_INVOICE
from resale_inventory.store import (
    InventoryDatabase,
    InvoiceExtractionError,
    InvoiceImportService,
    NoItemsFoundError,
    read_invoice_text,
)


def _service(tmp_path: Path) -> InvoiceImportService:
    return InvoiceImportService(InventoryDatabase(db_path=str(tmp_path / "inventory.sqlite3")))


def test_import_sample_invoice(tmp_path: Path) -> None:
    svc = _service(tmp_path)

    summary = svc.import_text(SAMPLE_INVOICE)

    assert summary["item_count"] == 4
    assert summary["total_allocated"] == pytest.approx(130.8)
    purchase = svc.db.get_purchase(summary["purchase_id"])
    assert purchase is not None
    assert purchase["purchase_name"] == "Vintage Threads LLC - 2024-12-15"
    assert purchase["total_purchase_cost"] == 130.8
    items = svc.db.list_items(purchase_id=summary["purchase_id"])
    assert [it["item_id"] for it in items] == summary["item_ids"]
    assert [it["allocated_cost"] for it in items] == [49.05, 38.15, 16.35, 27.25]
    assert {it["status"] for it in items} == {"Unlisted"}


def test_preview_does_not_write(tmp_path: Path) -> None:
    svc = _service(tmp_path)

    result = svc.preview(SAMPLE_INVOICE)

    assert len(result.items) == 4
    assert svc.db.list_purchases() == []


def test_preview_reports_extractor_failure(tmp_path: Path) -> None:
    svc = _service(tmp_path)

    with pytest.raises(InvoiceExtractionError) as excinfo:
        svc.preview("")

    assert excinfo.value.reason == "InvalidInput"


def test_preview_refuses_invoice_without_items(tmp_path: Path) -> None:
    svc = _service(tmp_path)

    with pytest.raises(NoItemsFoundError):
        svc.import_text("Total: $5.00")

    assert svc.db.list_purchases() == []


def test_read_invoice_text_from_file(tmp_path: Path) -> None:
    src = tmp_path / "invoice.txt"
    src.write_text(SAMPLE_INVOICE, encoding="utf-8")

    assert read_invoice_text(str(src)) == SAMPLE_INVOICE


def test_import_with_tiny_total_is_accepted_by_store(tmp_path: Path) -> None:
    svc = _service(tmp_path)

    summary = svc.import_text("Freebie 0.00\nShirt 1.00\nHat 1.00\nTotal: 0.01")

    costs = [it["allocated_cost"] for it in svc.db.list_items(purchase_id=summary["purchase_id"])]
    assert costs == [0.0, 0.0, 0.01]
