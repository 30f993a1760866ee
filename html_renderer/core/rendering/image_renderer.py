"""
Image Renderer
==============

Playwright-based rendering of caller-supplied HTML into PNG or WebP images.
Each request gets its own page on the shared browser; the page is closed on
every exit path.
"""

from typing import Any, AsyncGenerator, Optional
from contextlib import asynccontextmanager
import io
import time

from playwright.async_api import Browser, Page
from playwright.async_api import Error as PlaywrightError, TimeoutError as PlaywrightTimeoutError
from PIL import Image  # type: ignore

from html_renderer.config.logging import get_logger
from html_renderer.config.settings import get_settings, Settings
from html_renderer.core.exceptions import CaptureError, RenderTimeoutError, ValidationError
from html_renderer.core.rendering.browser_session import BrowserSession, get_browser_session
from html_renderer.core.rendering.uploader import TmpfilesUploader, get_uploader
from html_renderer.models.schemas import RenderRequest, RenderResult, UploadResult

logger = get_logger(__name__)


class ImageRenderer:
    """Renders HTML on the shared browser and captures the requested rectangle."""

    def __init__(
        self,
        browser_session: Optional[BrowserSession] = None,
        uploader: Optional[TmpfilesUploader] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.browser_session = browser_session or get_browser_session()
        self._uploader = uploader
        self.logger: Any = logger.bind(component="image_renderer")  # structlog.BoundLoggerBase

    @property
    def uploader(self) -> TmpfilesUploader:
        if self._uploader is None:
            self._uploader = get_uploader()
        return self._uploader

    def validate(self, request: RenderRequest) -> None:
        """
        Reject requests that cannot be rendered.

        Raises:
            ValidationError: If html is missing or the size exceeds the limits
        """
        if not request.html:
            raise ValidationError("html is required")

        if request.width > self.settings.max_width or request.height > self.settings.max_height:
            raise ValidationError(
                f"width and height must not exceed "
                f"{self.settings.max_width}x{self.settings.max_height}"
            )

    async def render(self, request: RenderRequest) -> RenderResult:
        """
        Render HTML to an image.

        Args:
            request: Render request with HTML and layout parameters

        Returns:
            RenderResult with the encoded image

        Raises:
            ValidationError: If the request has no HTML
            LaunchError: If the browser cannot be started
            RenderTimeoutError: If the page does not reach network idle in time
            CaptureError: If the screenshot cannot be taken or encoded
        """
        self.validate(request)
        start = time.perf_counter()

        self.logger.info(
            "Rendering HTML",
            html_length=len(request.html or ""),
            width=request.width,
            height=request.height,
            format=request.format,
        )

        browser = await self.browser_session.acquire_browser()

        async with self.page(browser, request) as page:
            await self._load_content(page, request.html or "")
            image_data = await self._capture(page, request)

        result = RenderResult(
            image_data=image_data,
            size=len(image_data),
            format=request.format,
            width=request.width,
            height=request.height,
        )

        self.logger.info(
            "Render completed",
            size=result.size,
            format=result.format,
            elapsed_ms=round((time.perf_counter() - start) * 1000, 1),
        )
        return result

    async def render_and_upload(self, request: RenderRequest) -> UploadResult:
        """
        Render HTML and publish the image on the temporary file host.

        Returns:
            UploadResult with the direct download URL

        Raises:
            UploadError: If the upload fails, plus everything ``render`` raises
        """
        result = await self.render(request)
        filename = request.filename
        url = await self.uploader.upload(result.image_data, filename, result.media_type)
        return UploadResult(url=url, filename=filename, size=result.size)

    @asynccontextmanager
    async def page(self, browser: Browser, request: RenderRequest) -> AsyncGenerator[Page, None]:
        """Open an isolated page sized to the request, closing it on exit."""
        page = await browser.new_page(
            viewport={"width": request.width, "height": request.height},
            device_scale_factor=1,
        )
        try:
            yield page
        finally:
            try:
                await page.close()
            except Exception as e:
                self.logger.warning("Page close failed", error=str(e))

    async def _load_content(self, page: Page, html: str) -> None:
        """Set page HTML and wait for network idle."""
        timeout = self.settings.content_timeout_ms
        try:
            await page.set_content(html, wait_until="networkidle", timeout=timeout)
        except PlaywrightTimeoutError as e:
            raise RenderTimeoutError(
                f"Content did not reach network idle within {timeout} ms: {e}"
            ) from e

    async def _capture(self, page: Page, request: RenderRequest) -> bytes:
        """Screenshot the requested rectangle and encode it."""
        try:
            png_bytes = await page.screenshot(
                type="png",
                full_page=False,
                clip={"x": 0, "y": 0, "width": request.width, "height": request.height},
            )
        except PlaywrightError as e:
            raise CaptureError(f"Screenshot failed: {e}") from e

        if request.format == "png":
            return png_bytes

        return self._encode_webp(png_bytes, request.quality)

    def _encode_webp(self, png_bytes: bytes, quality: int) -> bytes:
        """Re-encode a PNG screenshot as WebP at the given quality."""
        try:
            image = Image.open(io.BytesIO(png_bytes))  # type: ignore[attr-defined]
            output = io.BytesIO()
            image.save(output, format="WEBP", quality=quality)  # type: ignore[attr-defined]
        except (OSError, ValueError) as e:
            raise CaptureError(f"WebP encoding failed: {e}") from e
        return output.getvalue()


# Global renderer instance
_renderer: Optional[ImageRenderer] = None


def get_image_renderer() -> ImageRenderer:
    """Get or create the global image renderer."""
    global _renderer
    if _renderer is None:
        _renderer = ImageRenderer()
    return _renderer


def reset_image_renderer() -> None:
    """Drop the global renderer so the next call binds fresh collaborators."""
    global _renderer
    _renderer = None
