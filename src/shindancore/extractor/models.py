"""
Data models for shindan form data and results.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Dict, Iterable, List, Tuple, Union, assert_never


class SegmentKind(Enum):
    """Kinds of result content."""

    TEXT = "text"
    IMAGE = "image"

    @classmethod
    def parse(cls, value: Union[str, "SegmentKind"]) -> "SegmentKind":
        if isinstance(value, SegmentKind):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown segment kind: {value!r}") from None


@dataclass(slots=True, frozen=True)
class TextSegment:
    """A run of result text."""

    kind: ClassVar[SegmentKind] = SegmentKind.TEXT

    text: str

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.kind.value, "text": self.text}


@dataclass(slots=True, frozen=True)
class ImageSegment:
    """An image embedded in the result, as an absolute URL."""

    kind: ClassVar[SegmentKind] = SegmentKind.IMAGE

    url: str

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.kind.value, "url": self.url}


Segment = Union[TextSegment, ImageSegment]


class Segments(Tuple[Segment, ...]):
    """Ordered, immutable sequence of result segments."""

    def __new__(cls, segments: Iterable[Segment] = ()) -> "Segments":
        return super().__new__(cls, tuple(segments))

    @property
    def text(self) -> List[str]:
        return [segment.text for segment in self if isinstance(segment, TextSegment)]

    @property
    def images(self) -> List[str]:
        return [segment.url for segment in self if isinstance(segment, ImageSegment)]

    def to_list(self) -> List[Dict[str, Any]]:
        return [segment.to_dict() for segment in self]

    def __str__(self) -> str:
        lines = []
        for segment in self:
            match segment:
                case TextSegment(text=text):
                    lines.append(text)
                case ImageSegment(url=url):
                    lines.append(url)
                case _:
                    assert_never(segment)
        return "\n".join(lines)

    def __repr__(self) -> str:
        return f"Segments({list(self)!r})"


@dataclass(slots=True, frozen=True)
class FormFields:
    """Hidden form values needed for a single submission.

    ``hidden`` always starts with the anti-forgery token. The values are tied to the
    session cookie issued with the landing page and must not be reused.
    """

    TOKEN_FIELD: ClassVar[str] = "_token"

    token: str
    hidden: Tuple[Tuple[str, str], ...]
    part_names: Tuple[str, ...] = ()
    input_field: str = "user_input_value_1"

    def to_form_data(self, input_value: str) -> List[Tuple[str, str]]:
        form_data = list(self.hidden)
        form_data.append((self.input_field, input_value))
        form_data.extend((name, input_value) for name in self.part_names)
        return form_data


@dataclass(slots=True, frozen=True)
class TextResult:
    """Result of a shindan as title plus ordered content segments."""

    title: str
    content: Segments = field(default_factory=Segments)

    def __str__(self) -> str:
        return str(self.content)


@dataclass(slots=True, frozen=True)
class ImageResult:
    """Result of a shindan rendered to an image."""

    title: str
    image: bytes
    mime_type: str = "image/png"

    @property
    def base64(self) -> str:
        return base64.b64encode(self.image).decode("ascii")
