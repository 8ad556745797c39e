"""
Weighted-average merge of same-security holdings.

Used both for duplicate rows on one page and for the same security held
across several portfolios.
"""
from dataclasses import replace
from typing import Iterable, Optional

from foliosync.models.holding import Holding, HoldingsTable


def merge(existing: Optional[Holding], incoming: Holding) -> Holding:
    if existing is None:
        return incoming

    quantity = existing.quantity + incoming.quantity
    if quantity:
        avg_price = (
            existing.avg_price * existing.quantity + incoming.avg_price * incoming.quantity
        ) / quantity
    else:
        avg_price = existing.avg_price

    portfolios = list(existing.portfolios)
    for name in incoming.portfolios:
        if name not in portfolios:
            portfolios.append(name)

    return replace(
        existing,
        quantity=quantity,
        avg_price=avg_price,
        total_value=existing.total_value + incoming.total_value,
        portfolios=portfolios,
    )


def fold(table: HoldingsTable, holdings: Iterable[Holding]) -> HoldingsTable:
    """Return a new table with ``holdings`` merged into ``table``."""
    result = dict(table)
    for holding in holdings:
        result[holding.key] = merge(result.get(holding.key), holding)
    return result
