"""
Tolerant accessors over parsed portfolio markup.

Every accessor returns an empty string, ``None`` or ``0.0`` when the data is
missing or malformed; none of them raise.
"""
import html
import math
import re
import unicodedata
from typing import Optional

from bs4 import BeautifulSoup, Tag

MAGNITUDES = {"K": 1e3, "M": 1e6, "B": 1e9}

_MONEY_RE = re.compile(
    r"^([-+]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][-+]?\d+)?)([KMB])?", re.IGNORECASE
)


def parse_document(markup: str) -> BeautifulSoup:
    return BeautifulSoup(markup or "", "html.parser")


def decode_entities(value: Optional[str]) -> str:
    """Decode named and numeric character references left in scraped text."""
    if not value:
        return ""
    return html.unescape(value).strip()


def attr(element: Optional[Tag], name: str) -> str:
    if element is None:
        return ""
    value = element.get(name)
    if value is None:
        return ""
    if isinstance(value, list):
        value = " ".join(value)
    return decode_entities(str(value))


def text(element: Optional[Tag]) -> str:
    if element is None:
        return ""
    return decode_entities(element.get_text(" ", strip=True))


def has_class(element: Tag, token: str) -> bool:
    classes = element.get("class") or []
    return token in classes


def _finite(number: float) -> float:
    return number if math.isfinite(number) else 0.0


def to_float(value: Optional[str]) -> float:
    if value is None:
        return 0.0
    try:
        return _finite(float(str(value).replace(",", "").strip()))
    except (TypeError, ValueError):
        return 0.0


def parse_money(value: Optional[str]) -> float:
    """
    Parse display money strings such as ``$173,982.64`` or ``$51.17K``.

    Currency glyphs, thousands separators and whitespace are dropped, and a
    trailing K/M/B scales the numeric prefix. Anything unparsable or
    non-finite is 0.
    """
    if not value:
        return 0.0
    cleaned = "".join(
        ch
        for ch in decode_entities(value)
        if not ch.isspace() and ch != "," and unicodedata.category(ch) != "Sc"
    )
    match = _MONEY_RE.match(cleaned)
    if not match:
        return 0.0
    number = float(match.group(1))
    suffix = (match.group(2) or "").upper()
    return _finite(number * MAGNITUDES.get(suffix, 1.0))
