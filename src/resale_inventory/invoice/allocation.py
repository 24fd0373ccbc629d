from __future__ import annotations

from dataclasses import replace
from decimal import Decimal
from typing import Any, List, Sequence

from ..domain.models import ItemDraft
from ..domain.normalize import round_cents
from ..logging import get_logger

LOG = get_logger("invoice-allocation")


def allocate_costs(items: Sequence[ItemDraft], total_cost: Any) -> List[ItemDraft]:
    """Spread ``total_cost`` across items in proportion to their current cost.

    - All-zero provisional costs split the total evenly.
    - Otherwise every cost is scaled by total / provisional sum.
    - Each cost is rounded to cents on its own; whatever residual is left
      after rounding goes to the first item, so the result always sums to the
      total exactly. A negative residual that would push the first cost below
      zero stops at zero there and carries on to the next items.

    Returns new ItemDraft objects; the input is left untouched. An empty list
    or a non-positive total returns plain copies.
    """
    total = round_cents(Decimal(str(total_cost)))
    if not items or total <= 0:
        return [replace(it) for it in items]

    costs = [Decimal(str(it.allocated_cost or 0)) for it in items]
    provisional = sum(costs, Decimal("0"))
    if provisional == 0:
        share = total / len(items)
        scaled = [share] * len(items)
        LOG.debug(f"Even split of {total} across {len(items)} item(s)")
    elif provisional != total:
        ratio = total / provisional
        scaled = [c * ratio for c in costs]
        LOG.debug(f"Scaling {len(items)} item cost(s) by {ratio:.6f} ({provisional} -> {total})")
    else:
        scaled = costs

    rounded = [round_cents(c) for c in scaled]
    residual = total - sum(rounded, Decimal("0"))
    if residual:
        LOG.debug(f"Assigning rounding residual {residual} starting at the first item")
        rounded = _settle_residual(rounded, residual)

    return [replace(it, allocated_cost=cost) for it, cost in zip(items, rounded)]


def _settle_residual(costs: List[Decimal], residual: Decimal) -> List[Decimal]:
    """Add the residual to the first item; a negative one carries on to later
    items once a cost reaches zero, so no cost drops below zero."""
    out = list(costs)
    for i, cost in enumerate(out):
        adjusted = cost + residual
        if adjusted >= 0:
            out[i] = adjusted
            break
        out[i] = Decimal("0.00")
        residual = adjusted
    return out
