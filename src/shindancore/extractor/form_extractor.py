"""
Readers for the shindan landing page: form token, title and description.

All functions are pure and operate on the HTML string; each call builds its own
BeautifulSoup tree so nothing is shared between concurrent submissions.
"""

from __future__ import annotations

import re
from typing import List, Optional, Tuple

import structlog
from bs4 import BeautifulSoup, NavigableString, Tag

from shindancore.config.config import DomainProfile
from shindancore.exceptions import TokenNotFound

from .models import FormFields

logger = structlog.get_logger(__name__)

PARSER = "html.parser"

# Hidden fields submitted as-is next to the token.
OPTIONAL_HIDDEN_FIELDS = ("randname", "type")

PARTS_SELECTOR = 'input[name^="parts["]'

_WHITESPACE = re.compile(r"\s+")


def normalize_text(text: str) -> str:
    """Collapse whitespace (including non-breaking spaces) into single spaces."""
    return _WHITESPACE.sub(" ", text.replace("\xa0", " ")).strip()


def _soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, PARSER)


def _input_value(soup: BeautifulSoup, name: str) -> Optional[str]:
    element = soup.find("input", attrs={"name": name})
    if element is None:
        return None
    value = element.get("value")
    return value if isinstance(value, str) else ""


def extract_form_fields(html: str, profile: Optional[DomainProfile] = None) -> FormFields:
    """Collect the name/value pairs needed to submit the shindan form.

    Args:
        html: Landing page HTML
        profile: Domain markup profile (defaults apply when omitted)

    Returns:
        FormFields with the token, optional hidden fields and ``parts[...]`` inputs

    Raises:
        TokenNotFound: if the page has no non-empty ``_token`` input
    """
    profile = profile or DomainProfile()
    soup = _soup(html)

    token = _input_value(soup, FormFields.TOKEN_FIELD)
    if not token:
        raise TokenNotFound("Landing page has no '_token' form field")

    hidden: List[Tuple[str, str]] = [(FormFields.TOKEN_FIELD, token)]
    for name in OPTIONAL_HIDDEN_FIELDS:
        hidden.append((name, _input_value(soup, name) or ""))

    part_names: List[str] = []
    for element in soup.select(PARTS_SELECTOR):
        name = element.get("name")
        if isinstance(name, str) and name not in part_names:
            part_names.append(name)

    logger.debug("Extracted form fields", hidden=[name for name, _ in hidden], parts=len(part_names))
    return FormFields(
        token=token,
        hidden=tuple(hidden),
        part_names=tuple(part_names),
        input_field=profile.input_field,
    )


def extract_title(html: str, profile: Optional[DomainProfile] = None) -> str:
    """Return the shindan title, or an empty string when the page has none."""
    profile = profile or DomainProfile()
    return title_from_soup(_soup(html), profile)


def title_from_soup(soup: BeautifulSoup, profile: DomainProfile) -> str:
    element = soup.select_one(profile.title_selector)
    if element is None:
        return ""
    title = element.get(profile.title_attribute)
    if isinstance(title, str) and title.strip():
        return title.strip()
    return normalize_text(element.get_text(" "))


def extract_description(html: str, profile: Optional[DomainProfile] = None) -> str:
    """Return the shindan description with ``<br>`` rendered as newlines."""
    profile = profile or DomainProfile()
    element = _soup(html).select_one(profile.description_selector)
    if element is None:
        return ""

    parts: List[str] = []
    for child in element.children:
        if isinstance(child, Tag):
            parts.append("\n" if child.name == "br" else child.get_text())
        elif type(child) is NavigableString:
            parts.append(str(child))
    return "".join(parts).strip()
