"""
Prometheus metrics for HTTP traffic, submissions and renders.
"""

from __future__ import annotations

from typing import Any, Dict

from prometheus_client import REGISTRY as _PROM_REGISTRY
from prometheus_client import Counter as _OrigCounter
from prometheus_client import Histogram as _OrigHistogram


def _duplicate_safe_factory(metric_cls):
    """Return a factory that reuses an existing collector if already present."""

    def _factory(name: str, documentation: str, *args, **kwargs):  # type: ignore[override]
        existing = _PROM_REGISTRY._names_to_collectors.get(name)
        if existing is not None:
            return existing  # type: ignore[return-value]

        try:
            return metric_cls(name, documentation, *args, **kwargs)  # type: ignore[call-arg]
        except ValueError:
            # Registration lost the race, fall back to the now-existing collector.
            return _PROM_REGISTRY._names_to_collectors[name]  # type: ignore[return-value]

    return _factory


Counter = _duplicate_safe_factory(_OrigCounter)  # type: ignore[assignment]
Histogram = _duplicate_safe_factory(_OrigHistogram)  # type: ignore[assignment]


METRICS: Dict[str, Any] = {
    "http_requests_total": Counter(
        "shindan_http_requests_total",
        "HTTP requests sent to ShindanMaker",
        ["domain", "method", "status_class"],
    ),
    "http_request_seconds": Histogram(
        "shindan_http_request_seconds",
        "Latency of HTTP requests sent to ShindanMaker",
        ["domain", "method"],
    ),
    "submissions_total": Counter(
        "shindan_submissions_total",
        "Shindan submissions by outcome",
        ["domain", "outcome"],
    ),
    "renders_total": Counter(
        "shindan_renders_total",
        "Result renders by outcome",
        ["outcome"],
    ),
}


def observe_request(domain: str, method: str, status: int, elapsed: float) -> None:
    """Record one completed HTTP request. ``status`` 0 marks a transport failure."""
    status_class = f"{status // 100}xx" if status else "error"
    METRICS["http_requests_total"].labels(domain=domain, method=method, status_class=status_class).inc()
    METRICS["http_request_seconds"].labels(domain=domain, method=method).observe(elapsed)


def count_submission(domain: str, outcome: str) -> None:
    METRICS["submissions_total"].labels(domain=domain, outcome=outcome).inc()


def count_render(outcome: str) -> None:
    METRICS["renders_total"].labels(outcome=outcome).inc()
