"""
Tolerant number parsing for listing text (prices, areas, result counts).

Every parser here degrades to a zero sentinel (or None for counts) instead of
raising: listing markup is inconsistent and a field that cannot be read is a
routine outcome, not an error.
"""
import math
import re
from decimal import Context, Decimal, ROUND_HALF_UP
from typing import Optional, Union

from loguru import logger

_SPACES_RE = re.compile(r"[\u00a0\u2009\u202f]")

# "zł/m²", "/m2", "/mkw": keeps the superscript or trailing 2 out of the digits
_PER_AREA_RE = re.compile(r"/\s*m(?:²|2|kw)?", re.I)
_PRICE_KEEP_RE = re.compile(r"[^0-9,.\s]")
_DECIMAL_TAIL_RE = re.compile(r"^(?P<head>.*?)[.,](?P<frac>[0-9]{1,2})$")

_NUMBER = r"[0-9]+(?:[ ][0-9]{3})*(?:[.,][0-9]+)?"
_AREA_UNIT_RE = re.compile(rf"(?P<value>{_NUMBER})\s*(?:m²|m2|mkw|m(?![^\W\d_]))", re.I)
_FIRST_NUMBER_RE = re.compile(r"[0-9]+(?:[.,][0-9]+)?")

_COUNT = r"([0-9]+(?:[ ][0-9]{3})*)"
_REPORTED_COUNT_PATTERNS = [
    re.compile(_COUNT + r"\s*ogłosz", re.I),
    re.compile(r"znaleziono\s+" + _COUNT, re.I),
    re.compile(_COUNT + r"\s*ofert", re.I),
    re.compile(_COUNT + r"\s*mieszk", re.I),
    re.compile(r"([0-9]+)"),
]


def _normalize_spaces(text: str) -> str:
    return _SPACES_RE.sub(" ", text)


def _finite(value: float, text: str) -> float:
    # digit runs past float range come back as inf
    if not math.isfinite(value):
        logger.debug(f"number out of range in {text!r}")
        return 0.0
    return value


def _to_float(value: str) -> float:
    return float(value.replace(" ", "").replace(",", "."))


def parse_price(text: Optional[str]) -> float:
    """
    Parse a locale-formatted price into whole currency units.

    "1 350 000 zł" -> 1350000.0, "1.350.000" -> 1350000.0, "450 000,50" -> 450000.5.
    A separator is read as decimal only when it is the last one and is followed
    by one or two digits; any other separator groups thousands.

    Returns 0.0 when nothing numeric is found.
    """
    if not isinstance(text, str) or not text:
        return 0.0

    cleaned = _PER_AREA_RE.sub("", _normalize_spaces(text))
    cleaned = _PRICE_KEEP_RE.sub("", cleaned)
    cleaned = re.sub(r"\s+", "", cleaned).strip(".,")
    if not cleaned:
        logger.debug(f"unparseable price: {text!r}")
        return 0.0

    m = _DECIMAL_TAIL_RE.match(cleaned)
    if m:
        head = re.sub(r"[^0-9]", "", m.group("head")) or "0"
        return _finite(float(f"{head}.{m.group('frac')}"), text)

    digits = re.sub(r"[^0-9]", "", cleaned)
    if not digits:
        logger.debug(f"unparseable price: {text!r}")
        return 0.0
    return _finite(float(digits), text)


def parse_area(text: Optional[str], strict: bool = False) -> float:
    """
    Parse an area in square meters: "75,5 m²" -> 75.5, "1 200 m2" -> 1200.0.

    The number right before a unit marker (m², m2, mkw, m) wins. Without a
    unit-qualified number, strict mode gives 0.0 and lenient mode falls back to
    the first number in the text.
    """
    if not isinstance(text, str) or not text:
        return 0.0

    normalized = _normalize_spaces(text)
    m = _AREA_UNIT_RE.search(normalized)
    if m:
        return _finite(_to_float(m.group("value")), text)
    if strict:
        logger.debug(f"no unit-qualified area in {text!r}")
        return 0.0

    m = _FIRST_NUMBER_RE.search(normalized)
    if not m:
        logger.debug(f"unparseable area: {text!r}")
        return 0.0
    return _finite(_to_float(m.group(0)), text)


def round_half_up(value: float, places: int = 0) -> Union[int, float]:
    """Round halves away from zero. Integer result when places == 0."""
    quantum = Decimal(1).scaleb(-places)
    # a finite float has at most 309 integer digits
    ctx = Context(prec=400 + places)
    rounded = Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP, context=ctx)
    return int(rounded) if places == 0 else float(rounded)


def parse_reported_count(text: Optional[str]) -> Optional[int]:
    """Number of listings a results page claims ("1 234 ogłoszeń", "Znaleziono 58")."""
    if not isinstance(text, str) or not text:
        return None
    normalized = _normalize_spaces(text)
    for pattern in _REPORTED_COUNT_PATTERNS:
        m = pattern.search(normalized)
        if m:
            return int(m.group(1).replace(" ", ""))
    return None
