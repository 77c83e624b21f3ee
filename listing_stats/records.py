import math
import re
import unicodedata
from typing import Optional
from urllib.parse import urljoin
from bs4 import Tag
from loguru import logger

from listing_stats import config
from listing_stats.parsing import parse_area, parse_price, parse_reported_count, round_half_up
from listing_stats.schemas import ExtractionResult, ListingRecord
from listing_stats.scrapers.common import parse_html, resolve_attr, resolve_field, select_nodes
from listing_stats.scrapers.otodom import (
    LISTING_CONTAINER_SELECTORS,
    PAGINATION_SELECTORS,
    REPORTED_COUNT_SELECTORS,
    SelectorTable,
    get_selector_table,
)

ROOM_BUCKETS = {1: "one_room", 2: "two_rooms", 3: "three_rooms"}
FOUR_PLUS = "four_plus_rooms"

_PAGE_CY_RE = re.compile(r"pagination\.page-(\d+)$")
_PAGE_HREF_RE = re.compile(r"[?&]page=(\d+)")


def room_bucket(rooms: int) -> str:
    if rooms < 1:
        raise ValueError(f"room count must be positive, got {rooms}")
    return ROOM_BUCKETS.get(rooms, FOUR_PLUS)


def _slug(text: str) -> str:
    s = text.replace("ł", "l").replace("Ł", "L")
    s = unicodedata.normalize("NFKD", s).encode("ascii", "ignore").decode("ascii")
    return re.sub(r"[^a-z0-9]+", "-", s.lower()).strip("-")


def category_key(district: str, rooms: int) -> str:
    """'Śródmieście', 3 -> 'srodmiescie/three_rooms'"""
    return f"{_slug(district)}/{room_bucket(rooms)}"


def assemble(
    price_text: str,
    area_text: str,
    category: str,
    *,
    title: str = "",
    address: str = "",
    url: str = "",
    strict_area: Optional[bool] = None,
) -> ListingRecord:
    """
    Build a listing record from raw field text.

    Unparseable price or area become 0 and price_per_area stays 0; the record
    is still returned so the batch keeps going and the raw text stays around
    for debugging.
    """
    strict = config.STRICT_AREA if strict_area is None else strict_area
    price = parse_price(price_text)
    area = parse_area(area_text, strict=strict)

    price_per_area = 0
    if price > 0 and area > 0:
        ratio = price / area
        if math.isfinite(ratio):
            price_per_area = round_half_up(ratio)
        else:
            logger.debug(f"[{category}] price per area out of range: {price_text!r} / {area_text!r}")

    return ListingRecord(
        category=category,
        price_raw=price_text or "",
        area_raw=area_text or "",
        price=price,
        area=area,
        price_per_area=price_per_area,
        title=title or "",
        address=address or "",
        url=url or "",
    )


def assemble_from_node(
    node: Tag,
    category: str,
    selectors: Optional[SelectorTable] = None,
    base_url: str = "",
) -> ListingRecord:
    table = selectors or get_selector_table()
    href = resolve_attr(node, table.get("url", ()), "href")
    return assemble(
        resolve_field(node, table.get("price", ())),
        resolve_field(node, table.get("area", ())),
        category,
        title=resolve_field(node, table.get("title", ())),
        address=resolve_field(node, table.get("address", ())),
        url=urljoin(base_url, href) if (href and base_url) else href,
    )


def extract_listings(
    html: str,
    category: str,
    selectors: Optional[SelectorTable] = None,
    base_url: str = "",
) -> ExtractionResult:
    """One record per listing node on a results page, valid or not."""
    soup = parse_html(html)
    nodes = select_nodes(soup, LISTING_CONTAINER_SELECTORS)
    listings = [assemble_from_node(n, category, selectors, base_url) for n in nodes]
    reported = parse_reported_count(resolve_field(soup, REPORTED_COUNT_SELECTORS))

    valid = sum(1 for r in listings if r.is_valid)
    logger.info(f"[{category}] {len(nodes)} listing nodes, {valid} with price and area, reported={reported}")
    if nodes and not valid:
        logger.warning(f"[{category}] no listing had both price and area; selectors may be stale")

    return ExtractionResult(listings=listings, articles_count=len(nodes), reported_count=reported)


def parse_page_count(html: str) -> int:
    """Highest page number the pagination controls link to; 1 without pagination."""
    soup = parse_html(html)
    pages = [1]
    for sel in PAGINATION_SELECTORS:
        for el in select_nodes(soup, (sel,)):
            m = _PAGE_CY_RE.search(str(el.get("data-cy") or ""))
            if m:
                pages.append(int(m.group(1)))
            text = el.get_text(strip=True)
            if re.fullmatch(r"[0-9]{1,5}", text):
                pages.append(int(text))
            m = _PAGE_HREF_RE.search(str(el.get("href") or ""))
            if m:
                pages.append(int(m.group(1)))
    return max(pages)


def merge_results(*results: ExtractionResult) -> ExtractionResult:
    """Concatenate the passes over several result pages of one search."""
    reported = next((r.reported_count for r in results if r.reported_count is not None), None)
    return ExtractionResult(
        listings=[rec for r in results for rec in r.listings],
        articles_count=sum(r.articles_count for r in results),
        reported_count=reported,
    )
