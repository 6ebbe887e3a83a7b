"""
Builds a standalone HTML document from a shindan result page.

The document only holds the title/result block with the service stylesheet, so it
can be saved or screenshotted without the rest of the site chrome.
"""

from __future__ import annotations

from html import escape
from typing import List, Optional

import structlog
from bs4 import BeautifulSoup

from shindancore.domain import ShindanDomain
from shindancore.exceptions import ParseError

from .form_extractor import PARSER

logger = structlog.get_logger(__name__)

RESULT_SELECTOR = "#title_and_result"
EFFECT_SELECTORS = (
    "span.shindanEffects[data-mode=ef_typing]",
    "span.shindanEffects[data-mode=ef_shuffle]",
)
CHART_MARKER = "chart.js"

HTML_TEMPLATE = """<!DOCTYPE html>
<html lang="{lang}">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width,initial-scale=1.0,minimum-scale=1.0">
<base href="{base_url}">
<link rel="stylesheet" href="{base_url}css/app.css">
<style>
html {{ max-width: 750px; }}
body {{ margin: 0; padding: 16px; background: #ffffff; color: #212529;
  font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, "Helvetica Neue", Arial, sans-serif;
  font-size: 0.9rem; line-height: 1.6; overflow-wrap: break-word; }}
#title_and_result {{ background: #ffffff; }}
img {{ max-width: 100%; height: auto; }}
</style>
<title>{title}</title>
</head>
<body>
<div id="main-container"><div id="main">{result}</div></div>
{scripts}
</body>
</html>
"""


def _chart_scripts(soup: BeautifulSoup, quiz_id: str, domain: ShindanDomain) -> str:
    inline = next((str(script) for script in soup.find_all("script") if quiz_id in (script.string or "")), None)
    if inline is None:
        raise ParseError(f"Chart result for shindan {quiz_id} has no script referencing it")

    scripts: List[str] = [
        f'<script src="{domain.base_url}js/app.js" defer></script>',
        f'<script src="{domain.base_url}js/chart.js" defer></script>',
        inline,
    ]
    return "\n".join(scripts)


def build_result_html(
    quiz_id: str,
    result_html: str,
    domain: ShindanDomain = ShindanDomain.JP,
    title: Optional[str] = None,
) -> str:
    """Build a self-contained HTML page showing the shindan result.

    Args:
        quiz_id: Shindan identifier, used to find the chart script of chart results
        result_html: HTML of the page returned by the submission
        domain: Domain the page came from, used as ``<base href>``
        title: Document title

    Raises:
        ParseError: if the result block is missing, or a chart result lacks its script
    """
    soup = BeautifulSoup(result_html, PARSER)
    result = soup.select_one(RESULT_SELECTOR)
    if result is None:
        raise ParseError(f"Result block {RESULT_SELECTOR} not found")

    # Animated text only renders with the site JS; keep the static fallback instead.
    for selector in EFFECT_SELECTORS:
        for effect in result.select(selector):
            fallback = effect.find_next_sibling()
            if fallback is not None and fallback.name == "noscript":
                fallback.unwrap()
                effect.decompose()

    scripts = ""
    if CHART_MARKER in result_html:
        scripts = _chart_scripts(soup, quiz_id, domain)

    logger.debug("Built result HTML", quiz_id=quiz_id, charts=bool(scripts))
    return HTML_TEMPLATE.format(
        lang=domain.language,
        base_url=domain.base_url,
        title=escape(title or "ShindanMaker"),
        result=str(result),
        scripts=scripts,
    )
