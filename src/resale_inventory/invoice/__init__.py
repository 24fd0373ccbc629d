"""Invoice text extraction.

Modules:
- constants: ordered rule tables (vendor/date/total patterns, item shapes,
  size patterns, brand list, category keywords)
- enrich: size/brand/category inference from item names
- allocation: spread a purchase total across items
- parser: the extractor entry point
- sample: canonical sample invoice text
"""

from .allocation import allocate_costs
from .parser import parse_invoice
from .sample import SAMPLE_INVOICE

__all__ = [
    "SAMPLE_INVOICE",
    "allocate_costs",
    "parse_invoice",
]
