"""
Unit tests for the landing page -> form -> result sequence.
"""

import pytest
from prometheus_client import REGISTRY
from yarl import URL

from shindancore.config import DomainProfile
from shindancore.domain import ShindanDomain
from shindancore.exceptions import (
    HttpStatusError,
    InvalidQuizId,
    QuizNotFound,
    SubmissionRejected,
    TokenNotFound,
    TransportError,
)
from shindancore.submission import Submitter, validate_quiz_id
from shindancore.transport import SessionTransport, TransportResponse
from tests.helpers.fakes import EN_QUIZ_ID, EN_QUIZ_URL, EN_TOKEN


@pytest.fixture
def submitter(transport):
    return Submitter(transport, ShindanDomain.EN, DomainProfile())


def _submissions(outcome: str) -> float:
    return REGISTRY.get_sample_value("shindan_submissions_total", {"domain": "EN", "outcome": outcome}) or 0.0


@pytest.mark.unit
class TestValidateQuizId:
    def test_int_is_accepted(self):
        assert validate_quiz_id(1222992) == "1222992"

    def test_whitespace_is_stripped(self):
        assert validate_quiz_id(" 1222992 ") == "1222992"

    @pytest.mark.parametrize("value", ["", "   ", None, "12/34", "12?x=1", "12#top", True])
    def test_rejected(self, value):
        with pytest.raises(InvalidQuizId):
            validate_quiz_id(value)


@pytest.mark.unit
class TestSubmitter:
    @pytest.mark.asyncio
    async def test_submit_success(self, submitter, mock_http, landing_html, result_html):
        mock_http.get(EN_QUIZ_URL, status=200, body=landing_html)
        mock_http.post(EN_QUIZ_URL, status=200, body=result_html)
        before = _submissions("ok")

        submission = await submitter.submit(EN_QUIZ_ID, "test_user")

        assert submission.quiz_id == EN_QUIZ_ID
        assert submission.title == "Fantasy Stats"
        assert submission.html == result_html
        assert submission.url == EN_QUIZ_URL
        assert _submissions("ok") == before + 1

        form = mock_http.requests[("POST", URL(EN_QUIZ_URL))][0].kwargs["data"]
        assert form == [
            ("_token", EN_TOKEN),
            ("randname", "Anonymous R"),
            ("type", "name"),
            ("user_input_value_1", "test_user"),
        ]

    @pytest.mark.asyncio
    async def test_quiz_not_found(self, submitter, mock_http):
        mock_http.get(EN_QUIZ_URL, status=404)

        with pytest.raises(QuizNotFound) as exc_info:
            await submitter.submit(EN_QUIZ_ID, "test_user")

        assert exc_info.value.quiz_id == EN_QUIZ_ID
        assert exc_info.value.status == 404

    @pytest.mark.asyncio
    async def test_server_error_is_not_not_found(self, submitter, mock_http):
        mock_http.get(EN_QUIZ_URL, status=503)

        with pytest.raises(HttpStatusError):
            await submitter.submit(EN_QUIZ_ID, "test_user")

    @pytest.mark.asyncio
    async def test_missing_token(self, submitter, mock_http):
        mock_http.get(EN_QUIZ_URL, status=200, body="<html><h1 id='shindanTitle'>x</h1></html>")

        with pytest.raises(TokenNotFound):
            await submitter.submit(EN_QUIZ_ID, "test_user")

        assert ("POST", URL(EN_QUIZ_URL)) not in mock_http.requests

    @pytest.mark.asyncio
    async def test_rejected_with_http_200(self, submitter, mock_http, landing_html, rejected_html):
        mock_http.get(EN_QUIZ_URL, status=200, body=landing_html)
        mock_http.post(EN_QUIZ_URL, status=200, body=rejected_html)
        before = _submissions("SubmissionRejected")

        with pytest.raises(SubmissionRejected) as exc_info:
            await submitter.submit(EN_QUIZ_ID, "test_user")

        error = exc_info.value
        assert not isinstance(error, TransportError)
        assert error.status == 200
        assert error.reason == "The name field is required."
        assert "The name field is required." in str(error)
        assert _submissions("SubmissionRejected") == before + 1

    @pytest.mark.asyncio
    async def test_invalid_id_sends_nothing(self, submitter, mock_http):
        with pytest.raises(InvalidQuizId):
            await submitter.submit("../admin/1", "test_user")

        assert mock_http.requests == {}

    @pytest.mark.asyncio
    async def test_empty_input_sends_nothing(self, submitter, mock_http):
        with pytest.raises(ValueError):
            await submitter.submit(EN_QUIZ_ID, "   ")

        assert mock_http.requests == {}

    @pytest.mark.asyncio
    async def test_landing_cookie_is_sent_with_post(self, submitter, mock_http, landing_html, result_html):
        mock_http.get(
            EN_QUIZ_URL,
            status=200,
            body=landing_html,
            headers={"Set-Cookie": "_session=abc; Path=/"},
        )
        mock_http.post(EN_QUIZ_URL, status=200, body=result_html)

        await submitter.submit(EN_QUIZ_ID, "test_user")

        assert mock_http.requests[("GET", URL(EN_QUIZ_URL))][0].kwargs["cookies"] is None
        cookies = mock_http.requests[("POST", URL(EN_QUIZ_URL))][0].kwargs["cookies"]
        assert cookies["_session"].value == "abc"

    def test_result_marker_accepts_page(self, result_html):
        submitter = Submitter(SessionTransport(ShindanDomain.EN), ShindanDomain.EN)
        response = TransportResponse(status=200, url=EN_QUIZ_URL, final_url=EN_QUIZ_URL, body=result_html)
        submitter.ensure_result_page(EN_QUIZ_ID, response)

    def test_rejection_without_reason(self):
        submitter = Submitter(SessionTransport(ShindanDomain.EN), ShindanDomain.EN)
        response = TransportResponse(status=200, url=EN_QUIZ_URL, final_url=EN_QUIZ_URL, body="<form></form>")

        with pytest.raises(SubmissionRejected) as exc_info:
            submitter.ensure_result_page(EN_QUIZ_ID, response)

        assert exc_info.value.reason is None
