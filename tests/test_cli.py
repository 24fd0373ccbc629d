from __future__ import annotations

import json
from pathlib import Path

from resale_inventory.cli.main import main
from resale_inventory.invoice import SAMPLE_INVOICE
from resale_inventory.store import InventoryDatabase


def test_parse_sample_prints_json(tmp_path: Path, capsys) -> None:
    db = str(tmp_path / "inv.sqlite3")

    assert main(["--db", db, "parse", "--sample"]) == 0

    payload = json.loads(capsys.readouterr().out)
    assert payload["success"] is True
    assert len(payload["items"]) == 4


def test_parse_reports_failures(tmp_path: Path) -> None:
    db = str(tmp_path / "inv.sqlite3")
    empty = tmp_path / "empty.txt"
    empty.write_text("", encoding="utf-8")

    assert main(["--db", db, "parse", "--source", str(tmp_path / "missing.txt")]) == 2
    assert main(["--db", db, "parse", "--source", str(empty)]) == 1


def test_sample_command(capsys) -> None:
    assert main(["sample"]) == 0
    assert capsys.readouterr().out.rstrip("\n") == SAMPLE_INVOICE.rstrip("\n")


def test_import_dry_run_then_store(tmp_path: Path, capsys) -> None:
    db = str(tmp_path / "inv.sqlite3")

    assert main(["--db", db, "import", "--sample", "--dry-run"]) == 0
    assert InventoryDatabase(db_path=db).list_purchases() == []
    capsys.readouterr()

    assert main(["--db", db, "import", "--sample"]) == 0

    summary = json.loads(capsys.readouterr().out)
    assert summary["item_count"] == 4
    assert len(InventoryDatabase(db_path=db).list_items()) == 4


def test_import_without_items_fails(tmp_path: Path) -> None:
    src = tmp_path / "invoice.txt"
    src.write_text("Total: $12.00\n", encoding="utf-8")

    assert main(["--db", str(tmp_path / "inv.sqlite3"), "import", "--source", str(src)]) == 1


def test_export_and_load(tmp_path: Path, capsys) -> None:
    db = str(tmp_path / "inv.sqlite3")
    backup = tmp_path / "backups" / "inventory.json"
    main(["--db", db, "import", "--sample"])

    assert main(["--db", db, "export", "--output", str(backup)]) == 0
    data = json.loads(backup.read_text(encoding="utf-8"))
    assert len(data["items"]) == 4

    restored = str(tmp_path / "restored.sqlite3")
    assert main(["--db", restored, "load", "--input", str(backup)]) == 0
    assert len(InventoryDatabase(db_path=restored).list_items()) == 4
    assert main(["--db", restored, "load", "--input", str(tmp_path / "nope.json")]) == 2


def test_init_creates_database(tmp_path: Path, capsys) -> None:
    db = tmp_path / "fresh" / "inv.sqlite3"

    assert main(["--db", str(db), "init"]) == 0

    assert db.exists()
    assert capsys.readouterr().out.strip() == str(db)
