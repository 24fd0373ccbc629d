from __future__ import annotations

import os
import sqlite3
import time
import uuid
from contextlib import contextmanager
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from ..config import default_db_path
from ..domain.inventory import calculate_net_profit
from ..domain.models import ITEM_STATUS_CHOICES, ITEM_STATUS_UNLISTED
from ..domain.normalize import from_cents, to_cents
from ..logging import get_logger


LOG = get_logger("store-db")

STATUS_ENUM_SQL = ", ".join(f"'{value}'" for value in ITEM_STATUS_CHOICES)

SCHEMA_SQL = f"""
PRAGMA foreign_keys = ON;

CREATE TABLE IF NOT EXISTS purchases (
  purchase_id               TEXT PRIMARY KEY,
  purchase_name             TEXT NOT NULL DEFAULT '',
  vendor                    TEXT NOT NULL DEFAULT '',
  purchase_date             TEXT NOT NULL,          -- "YYYY-MM-DD"
  total_purchase_cost_cents INTEGER NOT NULL DEFAULT 0 CHECK(total_purchase_cost_cents >= 0),
  notes                     TEXT NOT NULL DEFAULT '',
  created_at                TEXT DEFAULT (datetime('now'))
);

CREATE TABLE IF NOT EXISTS items (
  item_id               TEXT PRIMARY KEY,
  purchase_id           TEXT REFERENCES purchases(purchase_id) ON DELETE CASCADE,
  item_name             TEXT NOT NULL DEFAULT '',
  category              TEXT NOT NULL DEFAULT '',
  brand                 TEXT NOT NULL DEFAULT '',
  size                  TEXT NOT NULL DEFAULT '',
  allocated_cost_cents  INTEGER NOT NULL DEFAULT 0 CHECK(allocated_cost_cents >= 0),
  listing_description   TEXT NOT NULL DEFAULT '',
  condition_report      TEXT NOT NULL DEFAULT '',
  listing_date          TEXT,
  listing_price_cents   INTEGER,
  sale_date             TEXT,
  sale_price_cents      INTEGER,
  platform_fees_cents   INTEGER NOT NULL DEFAULT 0,
  net_profit_cents      INTEGER,                -- may be negative
  status                TEXT NOT NULL DEFAULT '{ITEM_STATUS_UNLISTED}'
                        CHECK(status IN ({STATUS_ENUM_SQL})),
  notes                 TEXT NOT NULL DEFAULT '',
  created_at            TEXT DEFAULT (datetime('now'))
);

CREATE INDEX IF NOT EXISTS idx_items_purchase ON items(purchase_id);
CREATE INDEX IF NOT EXISTS idx_items_status   ON items(status);
"""

PURCHASE_TEXT_FIELDS: Tuple[str, ...] = ("purchase_name", "vendor", "purchase_date", "notes")

ITEM_TEXT_FIELDS: Tuple[str, ...] = (
    "purchase_id",
    "item_name",
    "category",
    "brand",
    "size",
    "listing_description",
    "condition_report",
    "listing_date",
    "sale_date",
    "status",
    "notes",
)
ITEM_MONEY_FIELDS: Tuple[str, ...] = (
    "allocated_cost",
    "listing_price",
    "sale_price",
    "platform_fees",
    "net_profit",
)
# Money fields that may legitimately go below zero.
SIGNED_MONEY_FIELDS = {"net_profit"}


class RecordValidationError(ValueError):
    pass


def generate_id() -> str:
    """`<epoch-ms>_<9 hex chars>`: sortable by creation time, unique enough for a local store."""
    return f"{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


def _purchase_defaults() -> Dict[str, Any]:
    return {
        "purchase_name": "",
        "vendor": "",
        "purchase_date": date.today().isoformat(),
        "total_purchase_cost": 0,
        "notes": "",
    }


def _item_defaults() -> Dict[str, Any]:
    return {
        "purchase_id": None,
        "item_name": "",
        "category": "",
        "brand": "",
        "size": "",
        "allocated_cost": 0,
        "listing_description": "",
        "condition_report": "",
        "listing_date": None,
        "listing_price": None,
        "sale_date": None,
        "sale_price": None,
        "platform_fees": 0,
        "net_profit": None,
        "status": ITEM_STATUS_UNLISTED,
        "notes": "",
    }


def _money_column(value: Any, field: str, *, nullable: bool) -> Optional[int]:
    if value is None or value == "":
        return None if nullable else 0
    try:
        cents = to_cents(value)
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise RecordValidationError(f"{field} must be a number, got {value!r}") from exc
    if cents < 0 and field not in SIGNED_MONEY_FIELDS:
        raise RecordValidationError(f"{field} must not be negative")
    return cents


class InventoryDatabase:
    """SQLite-backed store for purchases and items.

    - Defaults to `<repo-root>/var/inventory/inventory.sqlite3`; pass
      `db_path` to use an explicit file.
    - Money is stored as integer cents and returned as dollars.
    - Records are plain dicts keyed like the JSON export format.
    """

    def __init__(self, root_dir: Optional[str] = None, *, db_path: Optional[str] = None) -> None:
        self.db_path = os.path.abspath(db_path) if db_path else default_db_path(root_dir)
        os.makedirs(os.path.dirname(self.db_path), exist_ok=True)
        LOG.info(f"Inventory DB path: {self.db_path}")
        self._ensure_schema()

    @contextmanager
    def connect(self) -> Iterator[sqlite3.Connection]:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys=ON;")
        try:
            yield conn
        finally:
            conn.close()

    def _ensure_schema(self) -> None:
        with self.connect() as conn:
            LOG.debug("Ensuring inventory DB schema is present")
            conn.executescript(SCHEMA_SQL)
            conn.commit()

    # --------------- Row conversion ---------------
    @staticmethod
    def _purchase_columns(data: Dict[str, Any]) -> Dict[str, Any]:
        cols: Dict[str, Any] = {f: ("" if data.get(f) is None else str(data[f])) for f in PURCHASE_TEXT_FIELDS}
        if not cols["purchase_date"]:
            cols["purchase_date"] = date.today().isoformat()
        cols["total_purchase_cost_cents"] = _money_column(data.get("total_purchase_cost"), "total_purchase_cost", nullable=False)
        return cols

    @staticmethod
    def _item_columns(data: Dict[str, Any]) -> Dict[str, Any]:
        status = data.get("status") or ITEM_STATUS_UNLISTED
        if status not in ITEM_STATUS_CHOICES:
            raise RecordValidationError(f"status must be one of {', '.join(ITEM_STATUS_CHOICES)}")
        cols: Dict[str, Any] = {}
        for f in ITEM_TEXT_FIELDS:
            v = data.get(f)
            if f in ("purchase_id", "listing_date", "sale_date"):
                cols[f] = str(v) if v else None
            else:
                cols[f] = "" if v is None else str(v)
        cols["status"] = status
        for f in ITEM_MONEY_FIELDS:
            nullable = f not in ("allocated_cost", "platform_fees")
            cols[f"{f}_cents"] = _money_column(data.get(f), f, nullable=nullable)
        return cols

    @staticmethod
    def _row_to_purchase(row: sqlite3.Row) -> Dict[str, Any]:
        out = {"purchase_id": row["purchase_id"]}
        out.update({f: row[f] for f in PURCHASE_TEXT_FIELDS})
        out["total_purchase_cost"] = from_cents(row["total_purchase_cost_cents"])
        out["created_at"] = row["created_at"]
        return out

    @staticmethod
    def _row_to_item(row: sqlite3.Row) -> Dict[str, Any]:
        out = {"item_id": row["item_id"]}
        out.update({f: row[f] for f in ITEM_TEXT_FIELDS})
        for f in ITEM_MONEY_FIELDS:
            out[f] = from_cents(row[f"{f}_cents"])
        out["created_at"] = row["created_at"]
        return out

    @staticmethod
    def _insert(cur: sqlite3.Cursor, table: str, cols: Dict[str, Any]) -> None:
        names = ", ".join(cols)
        marks = ", ".join("?" for _ in cols)
        cur.execute(f"INSERT INTO {table} ({names}) VALUES ({marks});", tuple(cols.values()))

    @staticmethod
    def _update(cur: sqlite3.Cursor, table: str, key: str, key_value: str, cols: Dict[str, Any]) -> None:
        assignments = ", ".join(f"{c} = ?" for c in cols)
        cur.execute(f"UPDATE {table} SET {assignments} WHERE {key} = ?;", (*cols.values(), key_value))

    # --------------- Purchases ---------------
    def create_purchase(self, data: Dict[str, Any]) -> Dict[str, Any]:
        merged = {**_purchase_defaults(), **(data or {})}
        purchase_id = str(merged.get("purchase_id") or generate_id())
        cols = {"purchase_id": purchase_id, **self._purchase_columns(merged)}
        with self.connect() as conn:
            self._insert(conn.cursor(), "purchases", cols)
            conn.commit()
        LOG.info(f"Created purchase {purchase_id} ({cols['purchase_name']!r})")
        return self.get_purchase(purchase_id)  # type: ignore[return-value]

    def get_purchase(self, purchase_id: str) -> Optional[Dict[str, Any]]:
        with self.connect() as conn:
            row = conn.execute("SELECT * FROM purchases WHERE purchase_id = ?;", (purchase_id,)).fetchone()
        return self._row_to_purchase(row) if row else None

    def list_purchases(self) -> List[Dict[str, Any]]:
        with self.connect() as conn:
            rows = conn.execute("SELECT * FROM purchases ORDER BY rowid;").fetchall()
        return [self._row_to_purchase(r) for r in rows]

    def update_purchase(self, purchase_id: str, updates: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        current = self.get_purchase(purchase_id)
        if current is None:
            return None
        merged = {**current, **(updates or {})}
        cols = self._purchase_columns(merged)
        with self.connect() as conn:
            self._update(conn.cursor(), "purchases", "purchase_id", purchase_id, cols)
            conn.commit()
        LOG.debug(f"Updated purchase {purchase_id}")
        return self.get_purchase(purchase_id)

    def delete_purchase(self, purchase_id: str) -> bool:
        """Delete a purchase and every item that belongs to it."""
        with self.connect() as conn:
            cur = conn.cursor()
            cur.execute("DELETE FROM items WHERE purchase_id = ?;", (purchase_id,))
            removed_items = cur.rowcount
            cur.execute("DELETE FROM purchases WHERE purchase_id = ?;", (purchase_id,))
            conn.commit()
        LOG.info(f"Deleted purchase {purchase_id} and {removed_items} item(s)")
        return True

    # --------------- Items ---------------
    def _prepare_item(self, data: Dict[str, Any]) -> Dict[str, Any]:
        merged = {**_item_defaults(), **(data or {})}
        item_id = str(merged.get("item_id") or generate_id())
        return {"item_id": item_id, **self._item_columns(merged)}

    def _insert_items(self, conn: sqlite3.Connection, prepared: Iterable[Dict[str, Any]]) -> None:
        cur = conn.cursor()
        try:
            for cols in prepared:
                self._insert(cur, "items", cols)
        except sqlite3.IntegrityError as exc:
            conn.rollback()
            raise RecordValidationError(f"item rejected by store: {exc}") from exc

    def create_item(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return self.create_items([data])[0]

    def create_items(self, items: Sequence[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Insert several items in a single transaction."""
        prepared = [self._prepare_item(it) for it in items]
        with self.connect() as conn:
            self._insert_items(conn, prepared)
            conn.commit()
        LOG.info(f"Created {len(prepared)} item(s)")
        return [self.get_item(cols["item_id"]) for cols in prepared]  # type: ignore[misc]

    def get_item(self, item_id: str) -> Optional[Dict[str, Any]]:
        with self.connect() as conn:
            row = conn.execute("SELECT * FROM items WHERE item_id = ?;", (item_id,)).fetchone()
        return self._row_to_item(row) if row else None

    def list_items(self, purchase_id: Optional[str] = None) -> List[Dict[str, Any]]:
        with self.connect() as conn:
            if purchase_id is None:
                rows = conn.execute("SELECT * FROM items ORDER BY rowid;").fetchall()
            else:
                rows = conn.execute(
                    "SELECT * FROM items WHERE purchase_id = ? ORDER BY rowid;", (purchase_id,)
                ).fetchall()
        return [self._row_to_item(r) for r in rows]

    def update_item(self, item_id: str, updates: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Merge updates into an item; net profit follows once a sale price is set."""
        current = self.get_item(item_id)
        if current is None:
            return None
        merged = {**current, **(updates or {})}
        if merged.get("sale_price") is not None and merged.get("allocated_cost") is not None:
            merged["net_profit"] = calculate_net_profit(
                merged["sale_price"], merged.get("platform_fees") or 0, merged["allocated_cost"]
            )
        cols = self._item_columns(merged)
        with self.connect() as conn:
            try:
                self._update(conn.cursor(), "items", "item_id", item_id, cols)
            except sqlite3.IntegrityError as exc:
                raise RecordValidationError(f"item rejected by store: {exc}") from exc
            conn.commit()
        LOG.debug(f"Updated item {item_id}")
        return self.get_item(item_id)

    def delete_item(self, item_id: str) -> bool:
        with self.connect() as conn:
            conn.execute("DELETE FROM items WHERE item_id = ?;", (item_id,))
            conn.commit()
        LOG.debug(f"Deleted item {item_id}")
        return True

    # --------------- Backup / restore ---------------
    def export_data(self) -> Dict[str, Any]:
        return {
            "purchases": self.list_purchases(),
            "items": self.list_items(),
            "exportDate": datetime.now(timezone.utc).isoformat(),
        }

    def import_data(self, data: Any) -> bool:
        """Replace each collection present in `data` as a list.

        Collections that are missing are left untouched, so purchases may be
        restored without wiping items and vice versa.
        """
        if not isinstance(data, dict):
            raise RecordValidationError("import payload must be a JSON object")
        purchases = data.get("purchases")
        items = data.get("items")
        prepared_purchases = None
        prepared_items = None
        if isinstance(purchases, list):
            prepared_purchases = []
            for p in purchases:
                if not isinstance(p, dict):
                    raise RecordValidationError("purchases entries must be objects")
                merged = {**_purchase_defaults(), **p}
                prepared_purchases.append(
                    {"purchase_id": str(merged.get("purchase_id") or generate_id()), **self._purchase_columns(merged)}
                )
        if isinstance(items, list):
            prepared_items = []
            for it in items:
                if not isinstance(it, dict):
                    raise RecordValidationError("items entries must be objects")
                prepared_items.append(self._prepare_item(it))

        with self.connect() as conn:
            # Replacing purchases must not cascade into the items table.
            conn.execute("PRAGMA foreign_keys=OFF;")
            cur = conn.cursor()
            try:
                if prepared_purchases is not None:
                    cur.execute("DELETE FROM purchases;")
                    for cols in prepared_purchases:
                        self._insert(cur, "purchases", cols)
                if prepared_items is not None:
                    cur.execute("DELETE FROM items;")
                    for cols in prepared_items:
                        self._insert(cur, "items", cols)
                conn.commit()
            except sqlite3.IntegrityError as exc:
                conn.rollback()
                raise RecordValidationError(f"import rejected by store: {exc}") from exc
        n_purchases = "-" if prepared_purchases is None else len(prepared_purchases)
        n_items = "-" if prepared_items is None else len(prepared_items)
        LOG.info(f"Imported {n_purchases} purchase(s), {n_items} item(s)")
        return True

    def clear_all(self) -> bool:
        with self.connect() as conn:
            conn.execute("DELETE FROM items;")
            conn.execute("DELETE FROM purchases;")
            conn.commit()
        LOG.info("Cleared all purchases and items")
        return True
