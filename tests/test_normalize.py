from decimal import Decimal, InvalidOperation

import pytest

from resale_inventory.domain.normalize import from_cents, normalize_date, parse_amount, round_cents, to_cents


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("12/15/2024", "2024-12-15"),
        ("15/12/2024", "2024-12-15"),
        ("1-2-2024", "2024-01-02"),
        ("1/2/24", "2024-01-02"),
        ("1/2/49", "2049-01-02"),
        ("1/2/50", "1950-01-02"),
        ("1/2/75", "1975-01-02"),
    ],
)
def test_normalize_date_accepts(raw, expected):
    assert normalize_date(raw) == expected


@pytest.mark.parametrize(
    "raw",
    ["", "13/13/2024", "12/32/2024", "0/10/2024", "12/15/1899", "1-2", "1/2/3/4", "ab/cd/efgh"],
)
def test_normalize_date_rejects(raw):
    assert normalize_date(raw) is None


def test_normalize_date_round_trips_month_day_year():
    for year in (1900, 1999, 2024):
        for month in range(1, 13):
            for day in (1, 9, 28):
                raw = f"{month:02d}/{day:02d}/{year}"
                assert normalize_date(raw) == f"{year:04d}-{month:02d}-{day:02d}"


def test_parse_amount_strips_symbols_and_separators():
    assert parse_amount("$1,234.56") == Decimal("1234.56")
    assert parse_amount("45") == Decimal("45")
    with pytest.raises(InvalidOperation):
        parse_amount("12.3.4")


def test_cent_helpers():
    assert round_cents(Decimal("2.345")) == Decimal("2.35")
    assert to_cents("12.34") == 1234
    assert to_cents(None) == 0
    assert from_cents(1234) == 12.34
    assert from_cents(None) is None
