"""
Parser turning a shindan result page into ordered text/image segments.
"""

from __future__ import annotations

import json
from typing import Iterable, List, Optional, Tuple, Union
from urllib.parse import urljoin

import structlog
from bs4 import BeautifulSoup, NavigableString, Tag

from shindancore.config.config import DomainProfile
from shindancore.domain import ShindanDomain
from shindancore.exceptions import ParseError

from .form_extractor import PARSER, normalize_text, title_from_soup
from .models import ImageSegment, Segment, SegmentKind, Segments, TextSegment

logger = structlog.get_logger(__name__)

BLOCK_TAGS = frozenset(
    {
        "address", "article", "aside", "blockquote", "dd", "details", "div", "dl", "dt",
        "figcaption", "figure", "footer", "h1", "h2", "h3", "h4", "h5", "h6", "header",
        "hr", "li", "main", "nav", "ol", "p", "pre", "section", "summary", "table",
        "tbody", "td", "tfoot", "th", "thead", "tr", "ul",
    }
)
SKIPPED_TAGS = frozenset({"script", "style", "template", "svg", "button", "input"})

IMAGE_SOURCE_KEYS = ("source", "src", "url", "file")


class _SegmentCollector:
    """Accumulates inline text into runs, closing a run at every boundary."""

    def __init__(self, base_url: str) -> None:
        self.base_url = base_url
        self.segments: List[Segment] = []
        self._run: List[str] = []

    def add_text(self, text: str) -> None:
        self._run.append(text)

    def flush(self) -> None:
        text = normalize_text("".join(self._run))
        self._run.clear()
        if text:
            self.segments.append(TextSegment(text))

    def add_image(self, src: str) -> None:
        self.flush()
        self.segments.append(ImageSegment(urljoin(self.base_url, src.strip())))

    def walk(self, node: Tag) -> None:
        for child in node.children:
            if isinstance(child, NavigableString):
                # Comments, CDATA and doctypes are NavigableString subclasses
                if type(child) is NavigableString:
                    self.add_text(str(child))
                continue
            if not isinstance(child, Tag) or child.name in SKIPPED_TAGS:
                continue

            if child.name == "br":
                self.flush()
            elif child.name == "img":
                src = child.get("data-src") or child.get("src")
                if isinstance(src, str) and src.strip():
                    self.add_image(src)
            elif _is_effect_with_fallback(child):
                continue
            elif child.name in BLOCK_TAGS:
                self.flush()
                self.walk(child)
                self.flush()
            else:
                self.walk(child)


def _is_effect_with_fallback(tag: Tag) -> bool:
    """Animated text spans duplicate the text of the ``<noscript>`` that follows them."""
    if tag.name != "span" or "shindanEffects" not in (tag.get("class") or []):
        return False
    sibling = tag.find_next_sibling()
    return sibling is not None and sibling.name == "noscript"


def _segments_from_blocks(raw: str, base_url: str) -> List[Segment]:
    try:
        blocks = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.debug("Ignoring malformed data-blocks attribute", error=str(e))
        return []
    if not isinstance(blocks, list):
        return []

    segments: List[Segment] = []
    for block in blocks:
        if not isinstance(block, dict):
            continue
        block_type = block.get("type")
        if block_type in ("text", "user_input"):
            value = block.get("content" if block_type == "text" else "value")
            if isinstance(value, str):
                for line in value.splitlines():
                    text = normalize_text(line)
                    if text:
                        segments.append(TextSegment(text))
        elif block_type == "image":
            src = next((block[key] for key in IMAGE_SOURCE_KEYS if isinstance(block.get(key), str)), None)
            if src:
                segments.append(ImageSegment(urljoin(base_url, src)))
    return segments


def _find_container(soup: BeautifulSoup, selectors: Iterable[str]) -> Optional[Tag]:
    for selector in selectors:
        container = soup.select_one(selector)
        if container is not None:
            return container
    return None


def parse_result(
    result_html: str,
    domain: ShindanDomain = ShindanDomain.JP,
    profile: Optional[DomainProfile] = None,
) -> Tuple[str, Segments]:
    """Parse a result page into its title and ordered segments.

    Args:
        result_html: HTML of the page returned by the submission
        domain: Domain whose base URL resolves relative image URLs
        profile: Domain markup profile (defaults apply when omitted)

    Returns:
        ``(title, segments)``; the title is empty when the page has none

    Raises:
        ParseError: if no result content container is present
    """
    profile = profile or DomainProfile()
    soup = BeautifulSoup(result_html, PARSER)

    container = _find_container(soup, profile.content_selectors)
    if container is None:
        raise ParseError(f"Result content not found (tried {', '.join(profile.content_selectors)})")

    title = title_from_soup(soup, profile)

    raw_blocks = container.get("data-blocks")
    if isinstance(raw_blocks, str) and raw_blocks.strip():
        segments = _segments_from_blocks(raw_blocks, domain.base_url)
        if segments:
            return title, Segments(segments)

    collector = _SegmentCollector(domain.base_url)
    collector.walk(container)
    collector.flush()

    logger.debug("Parsed result segments", title=title, segments=len(collector.segments))
    return title, Segments(collector.segments)


def parse_segments(
    result_html: str,
    domain: ShindanDomain = ShindanDomain.JP,
    profile: Optional[DomainProfile] = None,
) -> Segments:
    return parse_result(result_html, domain, profile)[1]


def filter_by_type(segments: Iterable[Segment], kind: Union[SegmentKind, str]) -> Segments:
    """Keep the segments of one kind, preserving their order."""
    wanted = SegmentKind.parse(kind)
    return Segments(segment for segment in segments if segment.kind is wanted)

