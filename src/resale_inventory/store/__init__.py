"""Persistence and orchestration for purchases and items.

Modules:
- db: SQLite record store (purchases, items, JSON backup/restore)
- service: invoice import flow (extract -> review policy -> persist)
- frontend: Starlette JSON API
"""

from .db import InventoryDatabase, RecordValidationError
from .service import InvoiceExtractionError, InvoiceImportService, NoItemsFoundError, read_invoice_text
from .frontend.app import create_app

__all__ = [
    "InventoryDatabase",
    "InvoiceExtractionError",
    "InvoiceImportService",
    "NoItemsFoundError",
    "RecordValidationError",
    "create_app",
    "read_invoice_text",
]
