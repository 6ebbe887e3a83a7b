"""
Image rendering of shindan results.

The Playwright implementation is imported on demand so the rest of the package
works without a browser installed.
"""

from .protocols import Renderer

__all__ = ["Renderer"]
