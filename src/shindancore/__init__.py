"""
shindancore - asynchronous client for the ShindanMaker personality-quiz service.
"""

from __future__ import annotations

__version__ = "0.1.0"

from .client import ShindanClient
from .config import Config
from .domain import ShindanDomain, resolve_domain
from .exceptions import (
    FeatureDisabled,
    HttpStatusError,
    InvalidQuizId,
    ParseError,
    QuizNotFound,
    RenderError,
    RendererNotInitialized,
    ShindanError,
    SubmissionRejected,
    TokenNotFound,
    TransportError,
    UnknownDomain,
)
from .extractor import (
    ImageResult,
    ImageSegment,
    Segment,
    SegmentKind,
    Segments,
    TextResult,
    TextSegment,
    filter_by_type,
)

__all__ = [
    "__version__",
    "Config",
    "FeatureDisabled",
    "HttpStatusError",
    "ImageResult",
    "ImageSegment",
    "InvalidQuizId",
    "ParseError",
    "QuizNotFound",
    "RenderError",
    "RendererNotInitialized",
    "Segment",
    "SegmentKind",
    "Segments",
    "ShindanClient",
    "ShindanDomain",
    "ShindanError",
    "SubmissionRejected",
    "TextResult",
    "TextSegment",
    "TokenNotFound",
    "TransportError",
    "UnknownDomain",
    "filter_by_type",
    "resolve_domain",
]
