"""
Unit tests for PlaywrightRenderer with the browser mocked out.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from playwright.async_api import Error as PlaywrightError

from shindancore.config import RendererConfig
from shindancore.exceptions import RenderError
from shindancore.renderer.playwright_renderer import PlaywrightRenderer


@pytest.fixture
def browser_mocks():
    element = AsyncMock()
    element.screenshot.return_value = b"element-png"

    page = AsyncMock()
    page.query_selector.return_value = element
    page.screenshot.return_value = b"page-png"

    browser = AsyncMock()
    browser.new_page.return_value = page

    playwright = AsyncMock()
    playwright.chromium.launch.return_value = browser

    manager = MagicMock()
    manager.start = AsyncMock(return_value=playwright)

    with patch("shindancore.renderer.playwright_renderer.async_playwright", return_value=manager):
        yield {"playwright": playwright, "browser": browser, "page": page, "element": element}


@pytest.mark.unit
class TestPlaywrightRenderer:
    @pytest.mark.asyncio
    async def test_render_html_element(self, browser_mocks):
        async with PlaywrightRenderer() as renderer:
            image = await renderer.render(html="<div id='title_and_result'>x</div>")

        page = browser_mocks["page"]
        assert image == b"element-png"
        page.set_content.assert_awaited_once_with("<div id='title_and_result'>x</div>", wait_until="networkidle")
        page.query_selector.assert_awaited_once_with("#title_and_result")
        page.close.assert_awaited_once()
        browser_mocks["browser"].close.assert_awaited_once()
        browser_mocks["playwright"].stop.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_render_url_full_page(self, browser_mocks):
        config = RendererConfig(selector=None, image_type="jpeg")
        async with PlaywrightRenderer(config) as renderer:
            assert renderer.mime_type == "image/jpeg"
            image = await renderer.render(url="https://en.shindanmaker.com/1222992")

        assert image == b"page-png"
        browser_mocks["page"].goto.assert_awaited_once_with(
            "https://en.shindanmaker.com/1222992", wait_until="networkidle"
        )
        browser_mocks["page"].screenshot.assert_awaited_once_with(type="jpeg", full_page=True)

    @pytest.mark.asyncio
    async def test_viewport_from_config(self, browser_mocks):
        config = RendererConfig(viewport_width=600, viewport_height=800, device_scale_factor=2.0)
        async with PlaywrightRenderer(config) as renderer:
            await renderer.render(html="<p>x</p>")

        browser_mocks["browser"].new_page.assert_awaited_once_with(
            viewport={"width": 600, "height": 800}, device_scale_factor=2.0
        )

    @pytest.mark.asyncio
    async def test_missing_element(self, browser_mocks):
        browser_mocks["page"].query_selector.return_value = None

        async with PlaywrightRenderer() as renderer:
            with pytest.raises(RenderError, match="not found"):
                await renderer.render(html="<p>x</p>")

        browser_mocks["page"].close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_playwright_error_is_wrapped(self, browser_mocks):
        browser_mocks["page"].set_content.side_effect = PlaywrightError("Target closed")

        async with PlaywrightRenderer() as renderer:
            with pytest.raises(RenderError, match="Target closed"):
                await renderer.render(html="<p>x</p>")

    @pytest.mark.asyncio
    async def test_timeout(self, browser_mocks):
        async def hang(*args, **kwargs):
            await asyncio.sleep(10)

        browser_mocks["page"].set_content.side_effect = hang

        async with PlaywrightRenderer(RendererConfig(timeout=0.05)) as renderer:
            with pytest.raises(RenderError, match="timed out"):
                await renderer.render(html="<p>x</p>")

    @pytest.mark.asyncio
    async def test_not_started(self):
        with pytest.raises(RenderError):
            await PlaywrightRenderer().render(html="<p>x</p>")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("kwargs", [{}, {"html": "<p>x</p>", "url": "https://en.shindanmaker.com/"}])
    async def test_exactly_one_source(self, browser_mocks, kwargs):
        async with PlaywrightRenderer() as renderer:
            with pytest.raises(ValueError):
                await renderer.render(**kwargs)

    @pytest.mark.asyncio
    async def test_launch_failure(self, browser_mocks):
        browser_mocks["playwright"].chromium.launch.side_effect = PlaywrightError("Executable doesn't exist")
        renderer = PlaywrightRenderer()

        with pytest.raises(RenderError, match="Failed to launch"):
            await renderer.start()

        assert not renderer.is_started
        browser_mocks["playwright"].stop.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_close_stops_playwright_when_browser_close_fails(self, browser_mocks):
        browser_mocks["browser"].close.side_effect = PlaywrightError("Target closed")
        renderer = PlaywrightRenderer()
        await renderer.start()

        with pytest.raises(RenderError, match="Target closed"):
            await renderer.close()

        browser_mocks["playwright"].stop.assert_awaited_once()
        assert not renderer.is_started
        assert renderer._playwright is None

    @pytest.mark.asyncio
    async def test_close_wraps_stop_failure(self, browser_mocks):
        browser_mocks["playwright"].stop.side_effect = PlaywrightError("Connection closed")
        renderer = PlaywrightRenderer()
        await renderer.start()

        with pytest.raises(RenderError, match="Connection closed"):
            await renderer.close()

        browser_mocks["browser"].close.assert_awaited_once()
        assert not renderer.is_started
        assert renderer._playwright is None

    @pytest.mark.asyncio
    async def test_close_twice(self, browser_mocks):
        renderer = PlaywrightRenderer()
        await renderer.start()

        await renderer.close()
        await renderer.close()

        browser_mocks["browser"].close.assert_awaited_once()
        browser_mocks["playwright"].stop.assert_awaited_once()
