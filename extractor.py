"""
Disc detail page extraction.

Each field is read through an ordered list of named strategies. A strategy
returns the value it found or None; the first non-None value wins and the
field default applies when every strategy comes up empty. Nothing in here
raises on unexpected markup.
"""
import logging
import re
from typing import Callable, List, NamedTuple, Optional

from bs4 import BeautifulSoup, Tag

from models import Disc


logger = logging.getLogger(__name__)

# ── Selectors ────────────────────────────────────────────────────────────────

COVER_SELECTOR: str = "img#disc-cover"

TITLE_SELECTOR: str = "h1"

CANONICAL_SELECTOR: str = 'link[rel="canonical"]'
DISC_HREF_PATTERN: re.Pattern = re.compile(r"/d/([^/?#]+)/?(?:[?#].*)?$")

# Label link inside the fixed layout column of the detail page; its <p> holds
# the label name and its <img> the label cover.
LABEL_REGION_SELECTOR: str = 'div.container > div.row > div.col-md-4 > a[href*="/l/"]'

# Class-based shape seen on other revisions of the page.
CLASS_LABEL_NAME_SELECTOR: str = ".label-name"
CLASS_LABEL_COVER_SELECTOR: str = "img.label-cover"

LABEL_HREF_PATTERN: re.Pattern = re.compile(r"/l/([^/?#]+)/?(?:[?#].*)?$")

IMAGE_ATTRIBUTES = ("data-src", "src")


class Strategy(NamedTuple):
    name: str
    find: Callable[[BeautifulSoup], Optional[str]]


# ── Public API ───────────────────────────────────────────────────────────────


def extract(html: str, disc_id: str = "") -> Disc:
    """Build a best-effort Disc from a detail page; missing nodes give field defaults"""
    soup = BeautifulSoup(html or "", "html.parser")
    region_anchor = _region_label_anchor(soup)
    label_anchor = region_anchor if region_anchor is not None else _first_label_anchor(soup)

    return Disc(
        id=disc_id or _first_match("id", ID_STRATEGIES, soup) or "",
        cover=_first_match("cover", COVER_STRATEGIES, soup) or "",
        title=_first_match("title", TITLE_STRATEGIES, soup) or "",
        label=_first_match("label", label_name_strategies(label_anchor, region_anchor), soup) or "",
        label_id=_label_id(label_anchor),
        label_cover=_first_match("label_cover", label_cover_strategies(region_anchor), soup) or "",
    )


def label_name_strategies(label_anchor: Optional[Tag], region_anchor: Optional[Tag]) -> List[Strategy]:
    """Label name lookups in priority order; all but the class lookup hang off the label link"""
    return [
        Strategy("positional", lambda soup: _child_text(region_anchor, "p")),
        Strategy("class", lambda soup: _select_text(soup, CLASS_LABEL_NAME_SELECTOR)),
        Strategy("sibling-span", lambda soup: _sibling_span_text(label_anchor)),
        Strategy("anchor-text", lambda soup: _tag_text(label_anchor)),
    ]


def label_cover_strategies(region_anchor: Optional[Tag]) -> List[Strategy]:
    return [
        Strategy("positional", lambda soup: _image(_child(region_anchor, "img"))),
        Strategy("class", lambda soup: _image(soup.select_one(CLASS_LABEL_COVER_SELECTOR))),
    ]


# ── Strategy tables ──────────────────────────────────────────────────────────

ID_STRATEGIES: List[Strategy] = [
    Strategy("canonical-link", lambda soup: _canonical_disc_id(soup)),
]

COVER_STRATEGIES: List[Strategy] = [
    Strategy("data-src", lambda soup: _select_attr(soup, COVER_SELECTOR, "data-src")),
    Strategy("src", lambda soup: _select_attr(soup, COVER_SELECTOR, "src")),
]

TITLE_STRATEGIES: List[Strategy] = [
    Strategy("heading", lambda soup: _select_text(soup, TITLE_SELECTOR)),
]


# ── Private helpers ──────────────────────────────────────────────────────────


def _first_match(field: str, strategies: List[Strategy], soup: BeautifulSoup) -> Optional[str]:
    for strategy in strategies:
        value = strategy.find(soup)
        if value is not None:
            logger.debug("Extracted %s using %s strategy", field, strategy.name)
            return value
    logger.debug("No strategy matched %s", field)
    return None


def _canonical_disc_id(soup: BeautifulSoup) -> Optional[str]:
    href = _select_attr(soup, CANONICAL_SELECTOR, "href")
    if href is None:
        return None
    match = DISC_HREF_PATTERN.search(href)
    return match.group(1) if match else None


def _is_label_link(anchor: Tag) -> bool:
    href = anchor.get("href")
    return isinstance(href, str) and LABEL_HREF_PATTERN.search(href.strip()) is not None


def _region_label_anchor(soup: BeautifulSoup) -> Optional[Tag]:
    for anchor in soup.select(LABEL_REGION_SELECTOR):
        if _is_label_link(anchor):
            return anchor
    return None


def _first_label_anchor(soup: BeautifulSoup) -> Optional[Tag]:
    for anchor in soup.find_all("a", href=True):
        if _is_label_link(anchor):
            return anchor
    return None


def _label_id(label_anchor: Optional[Tag]) -> int:
    if label_anchor is None:
        return 0
    match = LABEL_HREF_PATTERN.search(label_anchor["href"].strip())
    if not match:
        return 0
    try:
        return int(match.group(1))
    except ValueError:
        return 0


def _tag_text(tag: Optional[Tag]) -> Optional[str]:
    if tag is None:
        return None
    text = tag.get_text().strip()
    return text or None


def _child(tag: Optional[Tag], name: str) -> Optional[Tag]:
    if tag is None:
        return None
    return tag.find(name, recursive=False)


def _child_text(tag: Optional[Tag], name: str) -> Optional[str]:
    return _tag_text(_child(tag, name))


def _select_text(soup: BeautifulSoup, selector: str) -> Optional[str]:
    return _tag_text(soup.select_one(selector))


def _attr(node: Optional[Tag], attribute: str) -> Optional[str]:
    if node is None:
        return None
    value = node.get(attribute)
    if isinstance(value, list):
        value = " ".join(value)
    if not value or not value.strip():
        return None
    return value.strip()


def _select_attr(soup: BeautifulSoup, selector: str, attribute: str) -> Optional[str]:
    return _attr(soup.select_one(selector), attribute)


def _image(node: Optional[Tag]) -> Optional[str]:
    for attribute in IMAGE_ATTRIBUTES:
        value = _attr(node, attribute)
        if value is not None:
            return value
    return None


def _sibling_span_text(label_anchor: Optional[Tag]) -> Optional[str]:
    if label_anchor is None:
        return None
    sibling = label_anchor.find_previous_sibling()
    if sibling is None or sibling.name != "span":
        return None
    return _tag_text(sibling)
