"""Logging and metrics for shindancore."""

from __future__ import annotations

from .logging import configure_logging
from .metrics import METRICS, count_render, count_submission, observe_request

__all__ = ["configure_logging", "METRICS", "count_render", "count_submission", "observe_request"]
