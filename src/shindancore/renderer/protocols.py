"""
Protocol for pluggable result renderers.
"""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable


@runtime_checkable
class Renderer(Protocol):
    """Turns an HTML document or a URL into image bytes."""

    mime_type: str

    async def start(self) -> None:
        """Acquire the external rendering resource (e.g. launch a browser)."""
        ...

    async def close(self) -> None:
        """Release the external rendering resource."""
        ...

    async def render(
        self,
        *,
        html: Optional[str] = None,
        url: Optional[str] = None,
        selector: Optional[str] = None,
    ) -> bytes:
        """Render ``html`` or ``url`` and return the encoded image.

        Args:
            html: Document to render
            url: Page to load instead of ``html``
            selector: Element to capture; the renderer default when omitted

        Returns:
            Image bytes in ``mime_type`` format
        """
        ...
