"""
High-level asynchronous client for ShindanMaker.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Tuple, Union

import structlog

from shindancore.config.config import Config
from shindancore.domain import ShindanDomain, resolve_domain
from shindancore.exceptions import FeatureDisabled, RendererNotInitialized
from shindancore.extractor.form_extractor import extract_description, extract_title
from shindancore.extractor.html_builder import build_result_html
from shindancore.extractor.models import ImageResult, Segments, TextResult
from shindancore.extractor.segment_parser import parse_result
from shindancore.submission import Submission, Submitter
from shindancore.transport.http_client import SessionTransport

if TYPE_CHECKING:
    from shindancore.renderer.protocols import Renderer

logger = structlog.get_logger(__name__)


class ShindanClient:
    """Client for one ShindanMaker domain.

    A client is meant to be created once and shared; concurrent calls are safe.
    Call :meth:`close` (or use ``async with``) to release the HTTP session and the
    renderer, if one was attached with :meth:`init_browser`.

    Example::

        async with ShindanClient("en") as client:
            result = await client.get_text_result("1222992", "test_user")
            print(result.title)
            print(result.content)
    """

    def __init__(
        self,
        domain: Union[ShindanDomain, str],
        config: Optional[Config] = None,
        *,
        transport: Optional[SessionTransport] = None,
    ):
        self.domain = resolve_domain(domain)
        self.config = config or Config()
        self.profile = self.config.profile_for(self.domain)
        self.transport = transport or SessionTransport(self.domain, self.config.http)
        self.submitter = Submitter(self.transport, self.domain, self.profile)
        self.renderer: Optional[Renderer] = None

    def __repr__(self) -> str:
        return f"ShindanClient(domain={self.domain.name})"

    async def __aenter__(self) -> "ShindanClient":
        await self.transport.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        """Release the renderer (if any) and the HTTP session.

        The session is closed even when closing the renderer fails.
        """
        renderer, self.renderer = self.renderer, None
        try:
            if renderer is not None:
                await renderer.close()
        finally:
            await self.transport.close()

    async def init_browser(self, renderer: Optional[Renderer] = None) -> "ShindanClient":
        """Attach and start a renderer, enabling :meth:`get_image_result`.

        Without an explicit renderer a :class:`PlaywrightRenderer` is created from the
        renderer configuration. The client owns the renderer from here on and closes it
        in :meth:`close`.
        """
        self._require("image_rendering")
        if renderer is None:
            from shindancore.renderer.playwright_renderer import PlaywrightRenderer

            renderer = PlaywrightRenderer(self.config.renderer)

        await renderer.start()
        if self.renderer is not None and self.renderer is not renderer:
            await self.renderer.close()
        self.renderer = renderer
        logger.info("Renderer attached", renderer=type(renderer).__name__)
        return self

    def _require(self, feature: str) -> None:
        if not getattr(self.config.features, feature):
            raise FeatureDisabled(feature)

    # --- landing page ---

    async def get_title(self, quiz_id: str) -> str:
        """Return the title of a shindan."""
        response = await self.submitter.fetch_landing_page(quiz_id)
        return extract_title(response.body, self.profile)

    async def get_description(self, quiz_id: str) -> str:
        """Return the description of a shindan."""
        response = await self.submitter.fetch_landing_page(quiz_id)
        return extract_description(response.body, self.profile)

    async def get_title_with_description(self, quiz_id: str) -> Tuple[str, str]:
        response = await self.submitter.fetch_landing_page(quiz_id)
        return (
            extract_title(response.body, self.profile),
            extract_description(response.body, self.profile),
        )

    # --- results ---

    async def submit(self, quiz_id: str, input_value: str) -> Submission:
        """Submit the shindan and return the raw result page."""
        return await self.submitter.submit(quiz_id, input_value)

    async def get_text_result(self, quiz_id: str, input_value: str) -> TextResult:
        """Submit the shindan and parse the result into title and segments."""
        segments, title = await self.get_segments_with_title(quiz_id, input_value)
        return TextResult(title=title, content=segments)

    async def get_segments(self, quiz_id: str, input_value: str) -> Segments:
        segments, _ = await self.get_segments_with_title(quiz_id, input_value)
        return segments

    async def get_segments_with_title(self, quiz_id: str, input_value: str) -> Tuple[Segments, str]:
        self._require("segments")
        submission = await self.submitter.submit(quiz_id, input_value)
        result_title, segments = parse_result(submission.html, self.domain, self.profile)
        return segments, submission.title or result_title

    async def get_html_str(self, quiz_id: str, input_value: str) -> str:
        html, _ = await self.get_html_str_with_title(quiz_id, input_value)
        return html

    async def get_html_str_with_title(self, quiz_id: str, input_value: str) -> Tuple[str, str]:
        """Submit the shindan and return a standalone result page with the title."""
        self._require("html")
        submission = await self.submitter.submit(quiz_id, input_value)
        html = build_result_html(submission.quiz_id, submission.html, self.domain, submission.title)
        return html, submission.title

    async def get_image_result(self, quiz_id: str, input_value: str) -> ImageResult:
        """Submit the shindan and render the result to an image.

        Raises:
            RendererNotInitialized: if :meth:`init_browser` was not called; no request
                is sent in that case
        """
        self._require("image_rendering")
        self._require("html")
        if self.renderer is None:
            raise RendererNotInitialized("Call init_browser() before requesting image results")

        html, title = await self.get_html_str_with_title(quiz_id, input_value)
        image = await self.renderer.render(html=html)
        return ImageResult(title=title, image=image, mime_type=self.renderer.mime_type)
