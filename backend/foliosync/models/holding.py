from dataclasses import asdict, dataclass, field, fields
from typing import Any, Dict, List, Optional


def holding_key(symbol: str, exchange: Optional[str] = None) -> str:
    """Composite table key: bare symbol, or ``symbol:exchange`` when a venue is known."""
    if exchange:
        return f"{symbol}:{exchange}"
    return symbol


@dataclass
class Holding:
    """
    A single owned position in one security on one venue.
    """
    symbol: str
    exchange: str = ""
    name: str = ""
    full_name: str = ""
    pair_id: str = ""
    isin: str = ""
    quantity: float = 0.0
    avg_price: float = 0.0
    total_value: float = 0.0
    currency_symbol: str = ""
    open_time: str = ""
    url: str = ""
    portfolios: List[str] = field(default_factory=list)

    @property
    def key(self) -> str:
        return holding_key(self.symbol, self.exchange)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Holding":
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


# Mapping of composite key -> Holding
HoldingsTable = Dict[str, Holding]


def table_to_dict(table: HoldingsTable) -> Dict[str, Dict[str, Any]]:
    return {key: holding.to_dict() for key, holding in table.items()}


def table_from_dict(data: Optional[Dict[str, Any]]) -> HoldingsTable:
    return {key: Holding.from_dict(value) for key, value in (data or {}).items()}
