"""
Shared fixtures for the shindancore test suite.

Every HTTP exchange is mocked with aioresponses; no test touches the network.
"""

from pathlib import Path
from typing import AsyncGenerator, Callable

import pytest
import pytest_asyncio
from aioresponses import aioresponses

from shindancore.config import Config, HttpConfig
from shindancore.domain import ShindanDomain
from shindancore.transport import SessionTransport
from tests.helpers.fakes import FakeRenderer


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests for individual components")
    config.addinivalue_line("markers", "integration: Tests across modules with mocked HTTP")


@pytest.fixture(scope="session")
def test_data_dir() -> Path:
    """Provide test data directory."""
    return Path(__file__).parent / "data"


@pytest.fixture(scope="session")
def load_html(test_data_dir: Path) -> Callable[[str], str]:
    """Load a saved page from the test data directory."""

    def _load(name: str) -> str:
        return (test_data_dir / name).read_text(encoding="utf-8")

    return _load


@pytest.fixture
def landing_html(load_html) -> str:
    return load_html("landing_en_1222992.html")


@pytest.fixture
def result_html(load_html) -> str:
    return load_html("result_en_1222992.html")


@pytest.fixture
def rejected_html(load_html) -> str:
    return load_html("rejected_en_1222992.html")


@pytest.fixture
def config() -> Config:
    """Default configuration with a short timeout."""
    return Config(http=HttpConfig(timeout=2.0))


@pytest.fixture
def mock_http():
    """Intercept all aiohttp requests."""
    with aioresponses() as m:
        yield m


@pytest_asyncio.fixture
async def transport(config: Config) -> AsyncGenerator[SessionTransport, None]:
    """Initialised transport for the English domain."""
    client = SessionTransport(ShindanDomain.EN, config.http)
    await client.initialize()
    yield client
    await client.close()


@pytest.fixture
def fake_renderer() -> FakeRenderer:
    return FakeRenderer()
