"""
Portfolio tab discovery.

Landing-page tabs are ``<li class="portfolioTab ...">`` elements. Holdings
tabs carry a ``positionIcon`` marker, watchlists a ``watchlistIcon`` one; the
public identifier sits on a nested ``data-publicid`` attribute and is
percent-encoded.
"""
import logging
import re
from typing import List, Optional
from urllib.parse import unquote

from bs4 import Tag

from foliosync.models.portfolio_tab import PortfolioTab
from foliosync.services.markup import attr, has_class, parse_document

logger = logging.getLogger(__name__)

TAB_CLASS = "portfolioTab"
POSITION_MARKER = "positionIcon"
WATCHLIST_MARKER = "watchlistIcon"
SELECTED_MARKERS = ("selected", "active")

_DIGITS_RE = re.compile(r"(\d+)")


def _numeric_id(element: Tag) -> str:
    explicit = attr(element, "data-portfolio-id")
    if explicit.isdigit():
        return explicit
    match = _DIGITS_RE.search(attr(element, "id"))
    return match.group(1) if match else ""


def _title(element: Tag) -> str:
    title = attr(element, "title")
    if title:
        return title
    named = element.find(attrs={"value": True})
    return attr(named, "value")


def _public_id(element: Tag) -> str:
    if element.has_attr("data-publicid"):
        holder = element
    else:
        holder = element.find(attrs={"data-publicid": True})
    return unquote(attr(holder, "data-publicid"))


def is_holdings_tab(element: Tag) -> bool:
    markup = str(element)
    return POSITION_MARKER in markup and WATCHLIST_MARKER not in markup


def discover(landing_page_markup: str) -> List[PortfolioTab]:
    """Return holdings-type tabs in first-seen order, deduplicated by numeric id."""
    soup = parse_document(landing_page_markup)
    tabs: List[PortfolioTab] = []
    seen: set[str] = set()

    for element in soup.find_all("li", class_=TAB_CLASS):
        numeric_id = _numeric_id(element)
        if not numeric_id or numeric_id in seen:
            continue
        if not is_holdings_tab(element):
            continue
        seen.add(numeric_id)
        tabs.append(
            PortfolioTab(
                numeric_id=numeric_id,
                public_id=_public_id(element),
                name=_title(element),
            )
        )

    logger.debug("Discovered %d holdings tabs", len(tabs))
    return tabs


def selected_tab_id(portfolio_page_markup: str) -> Optional[str]:
    """Numeric id of the tab the page reports as currently selected, if any."""
    soup = parse_document(portfolio_page_markup)
    for element in soup.find_all("li", class_=TAB_CLASS):
        if any(has_class(element, marker) for marker in SELECTED_MARKERS):
            numeric_id = _numeric_id(element)
            if numeric_id:
                return numeric_id
    return None
