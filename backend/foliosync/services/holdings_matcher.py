from typing import Optional

from foliosync.models.holding import Holding, HoldingsTable, holding_key


def match_holding(
    table: HoldingsTable,
    symbol: Optional[str] = None,
    exchange: Optional[str] = None,
    isin: Optional[str] = None,
    pair_id: Optional[str] = None,
) -> Optional[Holding]:
    """
    Resolve a display-layer query against the holdings table.

    Most specific identity first: ``symbol:exchange``, bare symbol, then a
    scan on pair id, then a scan on ISIN. The first hit wins.
    """
    if symbol and exchange:
        holding = table.get(holding_key(symbol, exchange))
        if holding is not None:
            return holding

    if symbol:
        holding = table.get(symbol)
        if holding is not None:
            return holding

    if pair_id:
        for holding in table.values():
            if holding.pair_id == pair_id:
                return holding

    if isin:
        for holding in table.values():
            if holding.isin == isin:
                return holding

    return None
