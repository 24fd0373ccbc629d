import re
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional

from ..logging import get_logger

_LOG = get_logger("normalize")

CENT = Decimal("0.01")

_DATE_SPLIT = re.compile(r"[-/]")


def normalize_date(value: str) -> Optional[str]:
    """Normalize a ``D[-/]D[-/]D`` token to ISO YYYY-MM-DD.

    - First part <= 12 reads as month/day/year, else second part <= 12 reads
      as day/month/year; anything else is rejected.
    - Two-digit years map to 20xx below 50 and 19xx otherwise.
    - Returns None for out-of-range parts or years before 1900.
    """
    if not value:
        return None
    parts = _DATE_SPLIT.split(str(value).strip())
    if len(parts) != 3 or not all(p.isdigit() for p in parts):
        return None
    first, second, year = (int(p) for p in parts)
    if first <= 12:
        month, day = first, second
    elif second <= 12:
        day, month = first, second
    else:
        return None
    if year < 100:
        year += 2000 if year < 50 else 1900
    if not (1 <= month <= 12) or not (1 <= day <= 31) or year < 1900:
        _LOG.debug(f"Rejected date token {value!r}")
        return None
    return f"{year:04d}-{month:02d}-{day:02d}"


def parse_amount(token: Any) -> Decimal:
    """Parse a US-style amount (``$1,234.56``) to Decimal.

    Raises decimal.InvalidOperation when the token is not numeric.
    """
    s = str(token).strip().replace("$", "").replace(",", "").replace(" ", "")
    return Decimal(s)


def round_cents(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def to_cents(value: Any) -> int:
    """Convert a dollar amount (str/float/Decimal) to integer cents."""
    if value is None or value == "":
        return 0
    return int(round_cents(Decimal(str(value))) * 100)


def from_cents(cents: Optional[int]) -> Optional[float]:
    if cents is None:
        return None
    return float(Decimal(int(cents)) / 100)
