"""
Exception hierarchy for shindancore.

Every failure surfaced by the library derives from :class:`ShindanError` so callers
can catch the whole family at once, while the concrete subclasses let them tell a
missing quiz from a network problem from a changed page layout.
"""

from __future__ import annotations

from typing import Optional


class ShindanError(Exception):
    """Base exception for all shindancore errors."""

    pass


class UnknownDomain(ShindanError, ValueError):
    """Raised when a locale string does not match any ShindanMaker domain."""

    def __init__(self, value: str) -> None:
        self.value = value
        super().__init__(f"Unknown ShindanMaker domain: {value!r}")


class InvalidQuizId(ShindanError, ValueError):
    """Raised when a quiz identifier is empty or cannot form a URL path."""

    pass


class FeatureDisabled(ShindanError):
    """Raised when an operation needs a feature switched off in the configuration."""

    def __init__(self, feature: str) -> None:
        self.feature = feature
        super().__init__(f"Feature '{feature}' is disabled in the configuration")


class TransportError(ShindanError):
    """Raised on network, TLS or timeout failures."""

    pass


class HttpStatusError(ShindanError):
    """Raised when the service answers with an unexpected (non-2xx) status."""

    def __init__(self, status: int, url: str) -> None:
        self.status = status
        self.url = url
        super().__init__(f"Unexpected HTTP status {status} for {url}")


class QuizNotFound(ShindanError):
    """Raised when the service reports that the quiz does not exist."""

    def __init__(self, quiz_id: str, status: Optional[int] = None) -> None:
        self.quiz_id = quiz_id
        self.status = status
        super().__init__(f"Shindan {quiz_id!r} not found")


class TokenNotFound(ShindanError):
    """Raised when the landing page carries no anti-forgery form token."""

    pass


class SubmissionRejected(ShindanError):
    """Raised when the service answers a submission without a result page."""

    def __init__(self, quiz_id: str, status: int, reason: Optional[str] = None) -> None:
        self.quiz_id = quiz_id
        self.status = status
        self.reason = reason
        message = f"Submission for shindan {quiz_id!r} was rejected (HTTP {status})"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class ParseError(ShindanError):
    """Raised when a result page is structurally unrecognised."""

    pass


class RendererNotInitialized(ShindanError):
    """Raised when image rendering is requested before ``init_browser()``."""

    pass


class RenderError(ShindanError):
    """Raised when the external renderer fails."""

    pass
