"""
Test Configuration
==================

Pytest configuration with fixtures for all test types.
Provides test settings, Playwright fakes and sample images.
"""

import io
import os
from typing import Callable
from unittest.mock import AsyncMock, MagicMock

import pytest
from PIL import Image

# Settings are cached on first import, so the environment has to be set first
os.environ.setdefault("HTML_RENDER_ENVIRONMENT", "testing")
os.environ.setdefault("HTML_RENDER_LOG_LEVEL", "DEBUG")

from html_renderer.config.settings import Settings, reload_settings  # noqa: E402
from html_renderer.core.rendering.browser_session import BrowserSession  # noqa: E402
from html_renderer.core.rendering.image_renderer import ImageRenderer  # noqa: E402
from html_renderer.core.rendering.uploader import TmpfilesUploader  # noqa: E402

reload_settings()


@pytest.fixture
def test_settings() -> Settings:
    """Test settings fixture."""
    return Settings(environment="testing", log_level="DEBUG", delivery="inline")


@pytest.fixture
def make_png() -> Callable[..., bytes]:
    """Build PNG bytes of a given size and colour."""

    def _make_png(width: int = 100, height: int = 100, color: str = "red") -> bytes:
        image = Image.new("RGB", (width, height), color)
        # Some detail so lossy encoders have something to work with
        for x in range(0, width, 3):
            for y in range(0, height, 5):
                image.putpixel((x, y), ((x * 7) % 256, (y * 13) % 256, (x * y) % 256))
        output = io.BytesIO()
        image.save(output, format="PNG")
        return output.getvalue()

    return _make_png


@pytest.fixture
def mock_page(make_png) -> AsyncMock:
    """Mock Playwright page returning a real PNG screenshot."""
    page = AsyncMock()
    page.screenshot.return_value = make_png()
    return page


@pytest.fixture
def mock_browser(mock_page) -> MagicMock:
    """Mock connected Playwright browser handing out ``mock_page``."""
    browser = MagicMock()
    browser.is_connected.return_value = True
    browser.new_page = AsyncMock(return_value=mock_page)
    browser.close = AsyncMock()
    return browser


@pytest.fixture
def mock_browser_session(mock_browser) -> MagicMock:
    """Mock browser session always returning ``mock_browser``."""
    session = MagicMock(spec=BrowserSession)
    session.acquire_browser = AsyncMock(return_value=mock_browser)
    session.shutdown = AsyncMock()
    return session


@pytest.fixture
def mock_uploader() -> MagicMock:
    """Mock uploader returning a fixed download URL."""
    uploader = MagicMock(spec=TmpfilesUploader)
    uploader.upload = AsyncMock(return_value="https://tmpfiles.org/dl/123/card.webp")
    uploader.close = AsyncMock()
    return uploader


@pytest.fixture
def renderer(mock_browser_session, mock_uploader, test_settings) -> ImageRenderer:
    """Image renderer wired to mocks."""
    return ImageRenderer(
        browser_session=mock_browser_session, uploader=mock_uploader, settings=test_settings
    )


def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers based on file paths."""
    for item in items:
        path = str(item.fspath)
        if "unit" in path:
            item.add_marker(pytest.mark.unit)
        elif "integration" in path:
            item.add_marker(pytest.mark.integration)
        elif "e2e" in path:
            item.add_marker(pytest.mark.e2e)
