import re
from typing import List, Sequence
from bs4 import BeautifulSoup, Tag
from loguru import logger
from soupsieve import SelectorSyntaxError

_WS_RE = re.compile(r"\s+")


def parse_html(html: str) -> BeautifulSoup:
    return BeautifulSoup(html or "", "lxml")


def node_text(el: Tag) -> str:
    # get_text keeps nbsp; collapse everything to single plain spaces
    return _WS_RE.sub(" ", el.get_text(" ").replace("\xa0", " ")).strip()


def _select_one(root: Tag, selector: str):
    try:
        return root.select_one(selector)
    except SelectorSyntaxError as e:
        logger.debug(f"skipping invalid selector {selector!r}: {e}")
        return None


def resolve_field(root: Tag, selectors: Sequence[str]) -> str:
    """
    Text of the first element found by the first selector that matches under
    ``root``. Later selectors are not tried once one matches. Returns "" when
    no selector matches.
    """
    if root is None:
        return ""
    for sel in selectors:
        el = _select_one(root, sel)
        if el is not None:
            return node_text(el)
    return ""


def resolve_attr(root: Tag, selectors: Sequence[str], attr: str) -> str:
    """Same cascade as resolve_field, but returns an attribute of the first element carrying it."""
    if root is None:
        return ""
    for sel in selectors:
        el = _select_one(root, sel)
        if el is not None and el.get(attr):
            return str(el.get(attr)).strip()
    return ""


def select_nodes(root: Tag, selectors: Sequence[str]) -> List[Tag]:
    """All nodes of the first selector that matches at least one node."""
    for sel in selectors:
        try:
            nodes = root.select(sel)
        except SelectorSyntaxError as e:
            logger.debug(f"skipping invalid selector {sel!r}: {e}")
            continue
        if nodes:
            return nodes
    return []
