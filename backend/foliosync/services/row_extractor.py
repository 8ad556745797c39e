"""
Open-position row extraction.

Each position is a ``<tr class="openPositionTR">`` whose own ``data-*``
attributes carry quantity, cost basis and descriptive fields; symbol,
exchange and market value live in cells tagged by ``data-column-name``.
"""
import logging
import re
from typing import Optional

from bs4 import Tag

from foliosync.models.holding import Holding, HoldingsTable
from foliosync.services.holdings_aggregator import fold
from foliosync.services.markup import attr, parse_document, parse_money, text, to_float

logger = logging.getLogger(__name__)

ROW_CLASS = "openPositionTR"
SYMBOL_COLUMN = "sum_pos_fpb_symbols"
EXCHANGE_COLUMN = "sum_pos_exchange"
MARKET_VALUE_COLUMN = "sum_pos_market_value"
DEFAULT_CURRENCY = "$"

_ASSET_URL_RE = re.compile(r"^/(?:equities|etfs)/", re.IGNORECASE)


def _cell(row: Tag, column: str) -> Optional[Tag]:
    return row.find(attrs={"data-column-name": column})


def _symbol(row: Tag) -> str:
    cell = _cell(row, SYMBOL_COLUMN)
    if cell is None:
        return ""
    link = cell.find("a")
    return text(link) if link is not None else ""


def _exchange(row: Tag) -> str:
    symbol_cell = _cell(row, SYMBOL_COLUMN)
    if symbol_cell is not None:
        labels = symbol_cell.find_all(
            lambda tag: any("exchange" in token.lower() for token in tag.get("class") or [])
        )
        for label in labels:
            if text(label):
                return text(label)
    return text(_cell(row, EXCHANGE_COLUMN))


def _market_value(row: Tag, quantity: float) -> float:
    value = parse_money(attr(_cell(row, MARKET_VALUE_COLUMN), "title"))
    if value:
        return value
    current_price = to_float(attr(row, "data-curprice"))
    if quantity > 0 and current_price > 0:
        return quantity * current_price
    return 0.0


def _url(row: Tag) -> str:
    for link in row.find_all("a", href=True):
        href = attr(link, "href")
        if _ASSET_URL_RE.match(href):
            return href
    return ""


def parse_row(row: Tag) -> Optional[Holding]:
    """Build a Holding from one row, or None when the row has no symbol."""
    symbol = _symbol(row)
    if not symbol:
        return None
    quantity = to_float(attr(row, "data-amount"))
    return Holding(
        symbol=symbol,
        exchange=_exchange(row),
        name=attr(row, "data-pair-name"),
        full_name=attr(row, "data-fullname"),
        pair_id=attr(row, "data-pair-id"),
        quantity=quantity,
        avg_price=to_float(attr(row, "data-open-price")),
        total_value=_market_value(row, quantity),
        currency_symbol=attr(row, "data-commission-cur") or DEFAULT_CURRENCY,
        open_time=attr(row, "data-open-time"),
        url=_url(row),
    )


def extract(portfolio_page_markup: str) -> HoldingsTable:
    """Parse one portfolio page into a table keyed by symbol[:exchange]."""
    soup = parse_document(portfolio_page_markup)
    holdings = []
    for row in soup.find_all("tr", class_=ROW_CLASS):
        holding = parse_row(row)
        if holding is None:
            logger.debug("Skipping position row without a symbol")
            continue
        holdings.append(holding)
    return fold({}, holdings)
