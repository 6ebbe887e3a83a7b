"""
ShindanMaker domains and locale resolution.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Dict, Union

from .exceptions import UnknownDomain


class ShindanDomain(Enum):
    """A locale-specific deployment of ShindanMaker."""

    JP = "https://shindanmaker.com/"
    EN = "https://en.shindanmaker.com/"
    CN = "https://cn.shindanmaker.com/"
    KR = "https://kr.shindanmaker.com/"
    TH = "https://th.shindanmaker.com/"

    def __str__(self) -> str:
        return self.value

    @property
    def base_url(self) -> str:
        return self.value

    @property
    def language(self) -> str:
        """Primary language tag used in Accept-Language headers."""
        return _LANGUAGES[self]

    def quiz_url(self, quiz_id: str) -> str:
        return f"{self.value}{quiz_id}"

    @classmethod
    def parse(cls, value: Union[str, "ShindanDomain"]) -> "ShindanDomain":
        return resolve_domain(value)


_LANGUAGES: Dict[ShindanDomain, str] = {
    ShindanDomain.JP: "ja",
    ShindanDomain.EN: "en",
    ShindanDomain.CN: "zh",
    ShindanDomain.KR: "ko",
    ShindanDomain.TH: "th",
}

_ALIASES: Dict[str, ShindanDomain] = {
    "jp": ShindanDomain.JP,
    "ja": ShindanDomain.JP,
    "japan": ShindanDomain.JP,
    "japanese": ShindanDomain.JP,
    "en": ShindanDomain.EN,
    "english": ShindanDomain.EN,
    "cn": ShindanDomain.CN,
    "zh": ShindanDomain.CN,
    "china": ShindanDomain.CN,
    "chinese": ShindanDomain.CN,
    "kr": ShindanDomain.KR,
    "ko": ShindanDomain.KR,
    "korea": ShindanDomain.KR,
    "korean": ShindanDomain.KR,
    "th": ShindanDomain.TH,
    "thai": ShindanDomain.TH,
    "thailand": ShindanDomain.TH,
}

# Locale tags such as "en-US", "ja_JP" or "zh-Hans-CN".
_LOCALE_TAG = re.compile(r"^([a-z]{2,3})(?:[-_][a-z0-9]+)+$")


def resolve_domain(value: Union[str, ShindanDomain]) -> ShindanDomain:
    """Resolve a locale tag, alias or base URL to a :class:`ShindanDomain`.

    Matching is case-insensitive and ignores surrounding whitespace.

    Raises:
        UnknownDomain: if nothing in the alias table matches.
    """
    if isinstance(value, ShindanDomain):
        return value
    if not isinstance(value, str):
        raise UnknownDomain(repr(value))

    key = value.strip().casefold()
    if key in _ALIASES:
        return _ALIASES[key]

    for domain in ShindanDomain:
        if key.rstrip("/") == domain.value.rstrip("/"):
            return domain

    match = _LOCALE_TAG.match(key)
    if match and match.group(1) in _ALIASES:
        return _ALIASES[match.group(1)]

    raise UnknownDomain(value)
