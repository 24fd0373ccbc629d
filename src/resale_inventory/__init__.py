"""
Resale Inventory – purchase and item tracking for resellers.

The interesting part lives in :mod:`resale_inventory.invoice`: a heuristic
extractor that turns pasted invoice text into a purchase draft plus item
drafts and spreads the purchase total across the items. Persistence
(:mod:`resale_inventory.store`) and the CLI/API surfaces consume its output.
"""

__version__ = "0.1.0"

__all__ = [
    "config",
    "logging",
    "paths",
]
