"""
Cookie-bearing HTTP transport bound to one ShindanMaker domain.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from http.cookies import BaseCookie
from typing import Any, Dict, Optional, Sequence, Tuple
from urllib.parse import urljoin

import aiohttp
import structlog
from yarl import URL

from shindancore.config.config import HttpConfig
from shindancore.domain import ShindanDomain
from shindancore.exceptions import HttpStatusError, TransportError
from shindancore.observability.metrics import observe_request

logger = structlog.get_logger(__name__)

REDIRECT_STATUSES = frozenset({301, 302, 303, 307, 308})
MAX_REDIRECTS = 10

FormData = Sequence[Tuple[str, str]]


@dataclass(frozen=True)
class TransportResponse:
    """A completed 2xx response."""

    status: int
    url: str
    final_url: str
    body: str
    headers: Dict[str, str] = field(default_factory=dict)
    elapsed: float = 0.0


class SessionTransport:
    """HTTP client keeping the service's session cookies between requests.

    The service ties the form token to the session cookie issued with the landing
    page, so cookies must survive from the GET to the POST. aiohttp's own cookie jar
    is disabled; cookies live in a private jar that is only read or written while
    holding ``_cookie_lock``. Requests themselves run concurrently.
    """

    def __init__(self, domain: ShindanDomain, config: Optional[HttpConfig] = None):
        self.domain = domain
        self.config = config or HttpConfig()

        self.session: Optional[aiohttp.ClientSession] = None
        self._cookie_jar: Optional[aiohttp.CookieJar] = None
        self._cookie_lock = asyncio.Lock()
        self._init_lock = asyncio.Lock()

    @property
    def is_initialized(self) -> bool:
        return self.session is not None

    async def initialize(self) -> None:
        """Create the HTTP session. Called implicitly by the first request."""
        async with self._init_lock:
            if self.session is not None:
                return
            self._cookie_jar = aiohttp.CookieJar()
            self.session = aiohttp.ClientSession(
                connector=aiohttp.TCPConnector(
                    limit=self.config.max_connections,
                    ssl=None if self.config.verify_ssl else False,
                ),
                timeout=aiohttp.ClientTimeout(total=self.config.timeout),
                cookie_jar=aiohttp.DummyCookieJar(),
                headers={
                    "User-Agent": self.config.user_agent,
                    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
                    "Accept-Language": f"{self.domain.language},en;q=0.8",
                },
            )
            logger.debug("HTTP session initialized", domain=self.domain.name, timeout=self.config.timeout)

    async def close(self) -> None:
        """Close the HTTP session and forget all cookies."""
        if self.session is not None:
            await self.session.close()
            self.session = None
        self._cookie_jar = None
        logger.debug("HTTP session closed", domain=self.domain.name)

    async def __aenter__(self) -> "SessionTransport":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def url_for(self, path: str) -> str:
        return urljoin(self.domain.base_url, path)

    async def get(self, path: str) -> TransportResponse:
        return await self._request("GET", self.url_for(path))

    async def post(self, path: str, form: FormData) -> TransportResponse:
        return await self._request("POST", self.url_for(path), data=list(form))

    # --- cookie store ---

    async def _cookies_for(self, url: str) -> "BaseCookie[str]":
        async with self._cookie_lock:
            if self._cookie_jar is None:
                raise TransportError("Transport is closed")
            return self._cookie_jar.filter_cookies(URL(url))

    async def _store_cookies(self, cookies: "BaseCookie[str]", url: URL) -> None:
        if not cookies:
            return
        async with self._cookie_lock:
            if self._cookie_jar is None:
                raise TransportError("Transport is closed")
            self._cookie_jar.update_cookies(cookies, url)

    # --- requests ---

    async def _request(self, method: str, url: str, data: Optional[Any] = None) -> TransportResponse:
        if self.session is None:
            await self.initialize()
        session = self.session
        if session is None:
            raise TransportError("Transport is closed")

        start_time = time.monotonic()
        request_method, request_url, request_data = method, url, data
        try:
            async with asyncio.timeout(self.config.timeout):
                for _ in range(MAX_REDIRECTS + 1):
                    cookies = await self._cookies_for(request_url)
                    if session.closed:
                        raise TransportError("Transport is closed")
                    async with session.request(
                        request_method,
                        request_url,
                        data=request_data,
                        cookies=cookies or None,
                        allow_redirects=False,
                    ) as response:
                        await self._store_cookies(response.cookies, response.url)

                        location = response.headers.get("Location")
                        if response.status in REDIRECT_STATUSES and location:
                            request_url = str(response.url.join(URL(location)))
                            if response.status in (301, 302, 303) and request_method == "POST":
                                request_method, request_data = "GET", None
                            continue

                        status = response.status
                        final_url = str(response.url)
                        headers = dict(response.headers)
                        body = await response.text(errors="replace")
                        break
                else:
                    raise TransportError(f"Too many redirects for {url}")
        except asyncio.TimeoutError as e:
            self._observe(method, url, 0, start_time)
            raise TransportError(f"{method} {url} timed out after {self.config.timeout}s") from e
        except aiohttp.ClientError as e:
            self._observe(method, url, 0, start_time)
            raise TransportError(f"{method} {url} failed: {e}") from e

        elapsed = self._observe(method, url, status, start_time)
        if not 200 <= status < 300:
            raise HttpStatusError(status, url)

        return TransportResponse(
            status=status,
            url=url,
            final_url=final_url,
            body=body,
            headers=headers,
            elapsed=elapsed,
        )

    def _observe(self, method: str, url: str, status: int, start_time: float) -> float:
        elapsed = time.monotonic() - start_time
        observe_request(self.domain.name, method, status, elapsed)
        logger.debug("HTTP request finished", method=method, url=url, status=status, elapsed=round(elapsed, 3))
        return elapsed
