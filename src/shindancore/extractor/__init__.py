"""
Extraction of form data, segments and standalone HTML from ShindanMaker pages.
"""

from .form_extractor import extract_description, extract_form_fields, extract_title, normalize_text
from .html_builder import build_result_html
from .models import (
    FormFields,
    ImageResult,
    ImageSegment,
    Segment,
    SegmentKind,
    Segments,
    TextResult,
    TextSegment,
)
from .segment_parser import filter_by_type, parse_result, parse_segments

__all__ = [
    "FormFields",
    "ImageResult",
    "ImageSegment",
    "Segment",
    "SegmentKind",
    "Segments",
    "TextResult",
    "TextSegment",
    "build_result_html",
    "extract_description",
    "extract_form_fields",
    "extract_title",
    "filter_by_type",
    "normalize_text",
    "parse_result",
    "parse_segments",
]
