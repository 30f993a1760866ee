"""
End-to-End Render Pipeline Tests
================================

Drives a real headless Chromium through the HTTP API. Skipped when no browser
executable is available.
"""

import io
import os
import socket
import time
from typing import Iterator

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from html_renderer.api.main import create_app
from html_renderer.api.routes.render import get_current_settings
from html_renderer.config.settings import Settings
from html_renderer.core.rendering.browser_session import BrowserSession
from html_renderer.core.rendering.image_renderer import ImageRenderer, get_image_renderer

EXECUTABLE_PATH = os.environ.get("PUPPETEER_EXECUTABLE_PATH", "/usr/bin/chromium")

pytestmark = pytest.mark.skipif(
    not os.path.exists(EXECUTABLE_PATH), reason=f"no Chromium at {EXECUTABLE_PATH}"
)

RED_BOX = {
    "html": "<div style='width:100px;height:100px;background:red'></div>",
    "width": 100,
    "height": 100,
    "format": "png",
}

GRADIENT = """
<html><body style="margin:0">
<div style="width:400px;height:300px;
            background:linear-gradient(45deg,#f06,#4a90e2,#50e3c2)">
  <h1 style="font-family:sans-serif;color:white;padding:20px">Quarterly numbers</h1>
  <p style="font-family:serif;padding:0 20px">Lorem ipsum dolor sit amet, consectetur.</p>
</div>
</body></html>
"""


@pytest.fixture
def e2e_settings() -> Settings:
    return Settings(
        environment="testing",
        browser_executable_path=EXECUTABLE_PATH,
        content_timeout_ms=3000,
    )


@pytest.fixture
def client(e2e_settings) -> Iterator[TestClient]:
    """Test client backed by a real browser session."""
    session = BrowserSession(e2e_settings)
    renderer = ImageRenderer(browser_session=session, settings=e2e_settings)

    app = create_app()
    app.dependency_overrides[get_image_renderer] = lambda: renderer
    app.dependency_overrides[get_current_settings] = lambda: e2e_settings
    try:
        with TestClient(app) as test_client:
            yield test_client
            test_client.portal.call(session.shutdown)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def silent_server() -> Iterator[int]:
    """Listening socket that never answers, so requests to it stay pending."""
    server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    server.bind(("127.0.0.1", 0))
    server.listen(16)
    try:
        yield server.getsockname()[1]
    finally:
        server.close()


def decode(data: bytes) -> Image.Image:
    return Image.open(io.BytesIO(data))


def test_red_box_png(client):
    response = client.post("/render", json=RED_BOX)

    assert response.status_code == 200
    assert response.headers["content-type"] == "image/png"
    image = decode(response.content).convert("RGB")
    assert image.size == (100, 100)
    assert image.getpixel((50, 50)) == (255, 0, 0)


def test_output_clipped_to_requested_size(client):
    html = "<div style='width:3000px;height:3000px;background:blue'></div>"

    response = client.post("/render", json={"html": html, "width": 200, "height": 150})

    assert response.status_code == 200
    assert decode(response.content).size == (200, 150)


def test_small_content_still_fills_requested_size(client):
    response = client.post(
        "/render", json={"html": "<span>hi</span>", "width": 640, "height": 480, "format": "png"}
    )

    assert decode(response.content).size == (640, 480)


def test_png_ignores_quality(client):
    base = {"html": GRADIENT, "width": 400, "height": 300, "format": "png"}

    first = client.post("/render", json={**base, "quality": 5})
    second = client.post("/render", json={**base, "quality": 100})

    assert first.content == second.content


def test_webp_quality_changes_output(client):
    base = {"html": GRADIENT, "width": 400, "height": 300, "format": "webp"}

    low = client.post("/render", json={**base, "quality": 5})
    high = client.post("/render", json={**base, "quality": 95})

    assert low.headers["content-type"] == "image/webp"
    assert decode(low.content).size == (400, 300)
    assert low.content != high.content


def test_perpetual_network_activity_times_out(client, silent_server):
    html = f"<img src='http://127.0.0.1:{silent_server}/never.png'>"

    started = time.monotonic()
    response = client.post("/render", json={"html": html, "width": 100, "height": 100})
    elapsed = time.monotonic() - started

    assert response.status_code == 500
    assert "network idle" in response.json()["error"]
    assert elapsed < 15


def test_browser_reused_across_requests(client):
    client.post("/render", json=RED_BOX)
    client.post("/render", json=RED_BOX)

    renderer = client.app.dependency_overrides[get_image_renderer]()
    assert renderer.browser_session.launch_count == 1
