"""
Headless Chromium renderer built on the Playwright async API.
"""

from __future__ import annotations

import asyncio
from typing import Optional

import structlog
from playwright.async_api import Browser, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError

from shindancore.config.config import RendererConfig
from shindancore.exceptions import RenderError
from shindancore.observability.metrics import count_render

logger = structlog.get_logger(__name__)


class PlaywrightRenderer:
    """Screenshots result pages with one long-lived browser.

    The browser is held from :meth:`start` until :meth:`close`; each render uses a
    fresh page and renders are serialised on ``_render_lock``.
    """

    def __init__(self, config: Optional[RendererConfig] = None):
        self.config = config or RendererConfig()
        self.mime_type = f"image/{self.config.image_type}"
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._render_lock = asyncio.Lock()

    @property
    def is_started(self) -> bool:
        return self._browser is not None

    async def start(self) -> None:
        if self._browser is not None:
            return
        try:
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(headless=self.config.headless)
        except PlaywrightError as e:
            await self.close()
            raise RenderError(f"Failed to launch browser: {e}") from e
        logger.info("Browser launched", headless=self.config.headless)

    async def close(self) -> None:
        browser, self._browser = self._browser, None
        playwright, self._playwright = self._playwright, None
        try:
            if browser is not None:
                await browser.close()
        except PlaywrightError as e:
            raise RenderError(f"Failed to close browser: {e}") from e
        finally:
            if playwright is not None:
                try:
                    await playwright.stop()
                except PlaywrightError as e:
                    raise RenderError(f"Failed to stop Playwright: {e}") from e
        logger.debug("Browser closed")

    async def __aenter__(self) -> "PlaywrightRenderer":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def render(
        self,
        *,
        html: Optional[str] = None,
        url: Optional[str] = None,
        selector: Optional[str] = None,
    ) -> bytes:
        if (html is None) == (url is None):
            raise ValueError("Exactly one of html or url must be given")
        if self._browser is None:
            raise RenderError("Renderer has not been started")
        selector = selector or self.config.selector

        async with self._render_lock:
            try:
                image = await asyncio.wait_for(self._capture(html, url, selector), timeout=self.config.timeout)
            except asyncio.TimeoutError as e:
                count_render("timeout")
                raise RenderError(f"Render timed out after {self.config.timeout}s") from e
            except RenderError:
                count_render("error")
                raise
            except PlaywrightError as e:
                count_render("error")
                raise RenderError(f"Render failed: {e}") from e

        count_render("ok")
        return image

    async def _capture(self, html: Optional[str], url: Optional[str], selector: Optional[str]) -> bytes:
        assert self._browser is not None
        page = await self._browser.new_page(
            viewport={"width": self.config.viewport_width, "height": self.config.viewport_height},
            device_scale_factor=self.config.device_scale_factor,
        )
        try:
            if html is not None:
                await page.set_content(html, wait_until="networkidle")
            else:
                await page.goto(url, wait_until="networkidle")

            if selector:
                element = await page.query_selector(selector)
                if element is None:
                    raise RenderError(f"Element {selector!r} not found in rendered page")
                return await element.screenshot(type=self.config.image_type)
            return await page.screenshot(type=self.config.image_type, full_page=True)
        finally:
            await page.close()
