import json
import re
from pathlib import Path
from typing import Dict, Optional, Tuple
from urllib.parse import parse_qsl, urlencode, urlparse, urlunparse
from loguru import logger

from listing_stats import config

SelectorTable = Dict[str, Tuple[str, ...]]

OTODOM_URL_RE = re.compile(r"^https?://(www\.)?otodom\.pl/", re.I)

# Order matters: the first selector that matches inside a listing node wins.
FIELD_SELECTORS: SelectorTable = {
    "title": (
        '[data-cy="listing-item-title"]',
        "h3",
        ".css-1rhbnlm",
        ".css-1r0si1e",
    ),
    "price": (
        '[data-cy="listing-item-price"]',
        '[data-testid="listing-item-price"]',
        ".css-s8lxhp",
        ".e1jyrtvq0",
        ".css-1mojcj4 span",
        'span[aria-label*="price"]',
        'span:-soup-contains("zł")',
    ),
    "area": (
        '[data-cy="listing-item-area"]',
        'span[aria-label*="area"]',
        'span[aria-label*="powierzchnia"]',
        ".css-1dyvuwm",
        'dd:-soup-contains("m²")',
        'span:-soup-contains("m²")',
    ),
    "address": (
        '[data-cy="listing-item-address"]',
        "address",
        ".css-19fzh93",
        ".css-1en4bli",
        'div[aria-label*="address"]',
    ),
    "url": (
        '[data-cy="listing-item-link"]',
        "a[href]",
    ),
}

LISTING_CONTAINER_SELECTORS: Tuple[str, ...] = (
    "article",
    '[data-cy="listing-item"]',
    '[data-testid="listing-item"]',
)

REPORTED_COUNT_SELECTORS: Tuple[str, ...] = (
    '[data-cy="search.listing-panel.label.ads-number"]',
    '[data-cy="search.listing-panel.label"]',
    'h1:-soup-contains("ogłosz")',
    'span:-soup-contains("ogłosz")',
    "h1",
)

PAGINATION_SELECTORS: Tuple[str, ...] = (
    '[data-cy^="pagination.page-"]',
    'nav a[href*="page="]',
    'a[href*="page="]',
)


def is_supported_url(url: str) -> bool:
    return bool(OTODOM_URL_RE.match(url or ""))


def page_url(url: str, page: int) -> str:
    """Same search URL with its page= query parameter set."""
    parts = urlparse(url)
    query = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k != "page"]
    query.append(("page", str(page)))
    return urlunparse(parts._replace(query=urlencode(query)))


def load_selector_table(path: str) -> SelectorTable:
    """
    Read a JSON object {field: [selector, ...]} and merge it over FIELD_SELECTORS.
    Raises ValueError when the file is not shaped like that.
    """
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected an object mapping field -> selector list")

    table = dict(FIELD_SELECTORS)
    for field, selectors in data.items():
        if not isinstance(selectors, list) or not all(isinstance(s, str) for s in selectors):
            raise ValueError(f"{path}: selectors for {field!r} must be a list of strings")
        table[field] = tuple(s.strip() for s in selectors if s.strip())
    logger.info(f"Loaded selector overrides for {sorted(data)} from {path}")
    return table


_table: Optional[SelectorTable] = None


def get_selector_table() -> SelectorTable:
    """Selector table for this process: defaults, or SELECTORS_FILE merged over them."""
    global _table
    if _table is None:
        _table = load_selector_table(config.SELECTORS_FILE) if config.SELECTORS_FILE else FIELD_SELECTORS
    return _table
