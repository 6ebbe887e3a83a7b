"""
Single-attempt shindan submission: landing page, form token, POST, result page.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import structlog
from selectolax.lexbor import LexborHTMLParser

from shindancore.config.config import DomainProfile
from shindancore.domain import ShindanDomain
from shindancore.exceptions import HttpStatusError, InvalidQuizId, QuizNotFound, SubmissionRejected
from shindancore.extractor.form_extractor import extract_form_fields, extract_title
from shindancore.observability.metrics import count_submission
from shindancore.transport.http_client import SessionTransport, TransportResponse

logger = structlog.get_logger(__name__)

NOT_FOUND_STATUSES = frozenset({404, 410})
_FORBIDDEN_ID_CHARS = frozenset("/?#")


def validate_quiz_id(quiz_id: object) -> str:
    """Return the stripped quiz id, rejecting values that cannot name a shindan page."""
    if isinstance(quiz_id, int) and not isinstance(quiz_id, bool):
        quiz_id = str(quiz_id)
    if not isinstance(quiz_id, str) or not quiz_id.strip():
        raise InvalidQuizId(f"Shindan id must be a non-empty string, got {quiz_id!r}")
    quiz_id = quiz_id.strip()
    if _FORBIDDEN_ID_CHARS.intersection(quiz_id):
        raise InvalidQuizId(f"Shindan id {quiz_id!r} contains URL delimiters")
    return quiz_id


@dataclass(frozen=True)
class Submission:
    """Outcome of a successful submission."""

    quiz_id: str
    title: str
    html: str
    url: str


class Submitter:
    """Runs the GET -> token -> POST sequence against one domain.

    Nothing is cached between calls; every submission fetches a fresh token.
    """

    def __init__(
        self,
        transport: SessionTransport,
        domain: ShindanDomain,
        profile: Optional[DomainProfile] = None,
    ):
        self.transport = transport
        self.domain = domain
        self.profile = profile or DomainProfile()

    async def fetch_landing_page(self, quiz_id: str) -> TransportResponse:
        """GET the shindan page, mapping 404/410 to :class:`QuizNotFound`."""
        quiz_id = validate_quiz_id(quiz_id)
        try:
            return await self.transport.get(quiz_id)
        except HttpStatusError as e:
            if e.status in NOT_FOUND_STATUSES:
                raise QuizNotFound(quiz_id, e.status) from e
            raise

    async def submit(self, quiz_id: str, input_value: str) -> Submission:
        """Submit ``input_value`` to the shindan and return the raw result page.

        Raises:
            InvalidQuizId: if ``quiz_id`` is empty or malformed
            QuizNotFound: if the service has no such shindan
            TokenNotFound: if the landing page carries no form token
            SubmissionRejected: if the answer is not a result page
            TransportError, HttpStatusError: on network or unexpected status failures
        """
        quiz_id = validate_quiz_id(quiz_id)
        if not isinstance(input_value, str) or not input_value.strip():
            raise ValueError("Input value must be a non-empty string")

        log = logger.bind(quiz_id=quiz_id, domain=self.domain.name)
        try:
            landing = await self.fetch_landing_page(quiz_id)
            title = extract_title(landing.body, self.profile)
            fields = extract_form_fields(landing.body, self.profile)
            log.debug("Submitting shindan", title=title, fields=len(fields.hidden) + len(fields.part_names))

            response = await self.transport.post(quiz_id, fields.to_form_data(input_value))
            self.ensure_result_page(quiz_id, response)
        except Exception as e:
            count_submission(self.domain.name, type(e).__name__)
            log.info("Shindan submission failed", error=str(e), error_type=type(e).__name__)
            raise

        count_submission(self.domain.name, "ok")
        log.info("Shindan submitted", title=title, status=response.status)
        return Submission(quiz_id=quiz_id, title=title, html=response.body, url=response.final_url)

    def ensure_result_page(self, quiz_id: str, response: TransportResponse) -> None:
        """Raise :class:`SubmissionRejected` unless the page carries a result marker.

        The service answers refused submissions with HTTP 200 and the input form, so
        the status code alone says nothing.
        """
        tree = LexborHTMLParser(response.body)
        if any(tree.css_first(marker) is not None for marker in self.profile.result_markers):
            return

        reason = None
        for selector in self.profile.error_selectors:
            node = tree.css_first(selector)
            if node is not None and node.text(strip=True):
                reason = node.text(separator=" ", strip=True)
                break
        raise SubmissionRejected(quiz_id, response.status, reason)
