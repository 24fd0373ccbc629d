from __future__ import annotations

import argparse
import json
import os
import sys
from typing import Optional, Sequence

from ..config import load_db_path, load_settings
from ..invoice import SAMPLE_INVOICE, parse_invoice
from ..logging import get_logger
from ..paths import expand_abs
from ..store import (
    InventoryDatabase,
    InvoiceExtractionError,
    InvoiceImportService,
    NoItemsFoundError,
    RecordValidationError,
    read_invoice_text,
)

LOG = get_logger("cli-main")


def _open_db(db_override: Optional[str]) -> InventoryDatabase:
    path = expand_abs(db_override) if db_override else load_db_path(os.getcwd())
    return InventoryDatabase(db_path=path)


def _read_source(ns: argparse.Namespace) -> Optional[str]:
    if getattr(ns, "sample", False):
        return SAMPLE_INVOICE
    try:
        return read_invoice_text(ns.source)
    except OSError as exc:
        LOG.error(f"Could not read invoice text from {ns.source}: {exc}")
        return None


def _handle_parse(ns: argparse.Namespace) -> int:
    text = _read_source(ns)
    if text is None:
        return 2
    result = parse_invoice(text)
    print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
    if not result.success:
        LOG.error(f"Extraction failed ({result.failure}): {result.error}")
        return 1
    if not result.items:
        LOG.warning("No items found in invoice. Please check the format.")
    return 0


def _handle_sample(_: argparse.Namespace) -> int:
    print(SAMPLE_INVOICE)
    return 0


def _handle_import(ns: argparse.Namespace) -> int:
    text = _read_source(ns)
    if text is None:
        return 2
    svc = InvoiceImportService(_open_db(ns.db))
    try:
        result = svc.preview(text)
        if ns.dry_run:
            print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
            return 0
        summary = svc.confirm(result)
    except (InvoiceExtractionError, NoItemsFoundError, RecordValidationError) as exc:
        LOG.error(f"Import failed: {exc}")
        return 1
    print(json.dumps(summary, ensure_ascii=False))
    return 0


def _handle_export(ns: argparse.Namespace) -> int:
    data = _open_db(ns.db).export_data()
    out = expand_abs(ns.output)
    os.makedirs(os.path.dirname(out) or ".", exist_ok=True)
    with open(out, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)
    LOG.info(f"Exported {len(data['purchases'])} purchase(s) and {len(data['items'])} item(s) to {out}")
    print(out)
    return 0


def _handle_load(ns: argparse.Namespace) -> int:
    try:
        with open(expand_abs(ns.input), "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        LOG.error(f"Could not read backup {ns.input}: {exc}")
        return 2
    try:
        _open_db(ns.db).import_data(data)
    except RecordValidationError as exc:
        LOG.error(f"Import failed: {exc}")
        return 1
    return 0


def _handle_init(ns: argparse.Namespace) -> int:
    db = _open_db(ns.db)
    LOG.info(f"Inventory DB ready at: {db.db_path}")
    print(db.db_path)
    return 0


def _handle_serve(ns: argparse.Namespace) -> int:
    import uvicorn

    from ..store.frontend.app import create_app

    settings = load_settings(os.getcwd())
    allow_origins = ns.allow_origins or settings.allow_origins
    db_path = expand_abs(ns.db) if ns.db else settings.db_path
    app = create_app(db_path=db_path, allow_origins=allow_origins)
    uvicorn.run(
        app,
        host=ns.host or settings.api_host,
        port=ns.port or settings.api_port,
        reload=ns.reload,
        log_level=ns.log_level,
    )
    return 0


def _add_source_args(p: argparse.ArgumentParser) -> None:
    group = p.add_mutually_exclusive_group(required=True)
    group.add_argument("--source", help="Path to a text file with the pasted invoice ('-' reads stdin)")
    group.add_argument("--sample", action="store_true", help="Use the built-in sample invoice")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="resale-inv",
        description="Resale inventory tracker: parse invoices, manage purchases and items.",
    )
    parser.add_argument("--db", help="SQLite file to use (defaults to RESALE_DB_PATH or var/inventory/)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    parse_cmd = subparsers.add_parser("parse", help="Extract a purchase and items from invoice text (no DB writes).")
    _add_source_args(parse_cmd)
    parse_cmd.set_defaults(handler=_handle_parse)

    sample_cmd = subparsers.add_parser("sample", help="Print the sample invoice text.")
    sample_cmd.set_defaults(handler=_handle_sample)

    import_cmd = subparsers.add_parser("import", help="Parse invoice text and store the purchase with its items.")
    _add_source_args(import_cmd)
    import_cmd.add_argument("--dry-run", action="store_true", help="Show what would be stored without writing")
    import_cmd.set_defaults(handler=_handle_import)

    export_cmd = subparsers.add_parser("export", help="Write all purchases and items to a JSON backup.")
    export_cmd.add_argument("--output", required=True)
    export_cmd.set_defaults(handler=_handle_export)

    load_cmd = subparsers.add_parser("load", help="Restore purchases and items from a JSON backup.")
    load_cmd.add_argument("--input", required=True)
    load_cmd.set_defaults(handler=_handle_load)

    init_cmd = subparsers.add_parser("init", help="Create/ensure the inventory DB schema exists")
    init_cmd.set_defaults(handler=_handle_init)

    serve_cmd = subparsers.add_parser("serve", help="Run the inventory JSON API.")
    serve_cmd.add_argument("--host", help="Bind address (default RESALE_API_HOST or 127.0.0.1)")
    serve_cmd.add_argument("--port", type=int, help="Port (default RESALE_API_PORT or 8002)")
    serve_cmd.add_argument("--reload", action="store_true", help="Enable auto-reload (development only)")
    serve_cmd.add_argument("--log-level", default="info")
    serve_cmd.add_argument(
        "--allow-origin",
        action="append",
        dest="allow_origins",
        help="Allowed CORS origin (can be provided multiple times, use '*' for any).",
    )
    serve_cmd.set_defaults(handler=_handle_serve)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    provided = list(argv) if argv is not None else sys.argv[1:]
    LOG.debug(f"CLI invoked with arguments: {provided}")
    args = build_parser().parse_args(provided)
    code = args.handler(args)
    LOG.info(f"Subcommand '{args.command}' finished with exit code {code}.")
    return code


if __name__ == "__main__":
    sys.exit(main())
