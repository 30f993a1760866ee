"""
Temporary File Uploader
=======================

HTTP client for the tmpfiles.org upload API. Used in upload delivery mode to
publish rendered images and hand back a direct download link.
"""

import asyncio
import json
from typing import Any, Optional

import aiohttp

from html_renderer.config.logging import get_logger
from html_renderer.config.settings import get_settings, Settings
from html_renderer.core.exceptions import UploadError

logger = get_logger(__name__)


def to_direct_download_url(page_url: str) -> str:
    """Turn a tmpfiles.org landing page URL into a direct download URL."""
    return page_url.replace("tmpfiles.org/", "tmpfiles.org/dl/", 1)


class TmpfilesUploader:
    """Client for uploading rendered images to tmpfiles.org."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.upload_url = self.settings.upload_url
        self.logger: Any = logger.bind(component="tmpfiles_uploader")  # structlog.BoundLoggerBase
        self._session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self.settings.upload_timeout, connect=10)
            self._session = aiohttp.ClientSession(timeout=timeout)
        return self._session

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None

    async def upload(self, data: bytes, filename: str, content_type: str) -> str:
        """
        Upload image bytes and return a direct download URL.

        Args:
            data: Encoded image bytes
            filename: Name the file is stored under
            content_type: MIME type of the image

        Returns:
            Direct download URL for the uploaded file

        Raises:
            UploadError: If the request fails or the response has no URL
        """
        form = aiohttp.FormData()
        form.add_field("file", data, filename=filename, content_type=content_type)

        try:
            session = await self._get_session()
            async with session.post(self.upload_url, data=form) as response:
                body = await response.text()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            self.logger.error("Upload request failed", filename=filename, error=str(e))
            raise UploadError(f"tmpfiles upload failed: {e}") from e

        try:
            result = json.loads(body)
        except json.JSONDecodeError:
            raise UploadError(f"tmpfiles upload failed: {body[:200]}")

        page_url = None
        if isinstance(result, dict) and isinstance(result.get("data"), dict):
            page_url = result["data"].get("url")

        if not page_url:
            raise UploadError(f"tmpfiles upload failed: {json.dumps(result)}")

        url = to_direct_download_url(page_url)
        self.logger.info("Image uploaded", filename=filename, size=len(data), url=url)
        return url


# Global uploader instance
_uploader: Optional[TmpfilesUploader] = None


def get_uploader() -> TmpfilesUploader:
    """Get or create the global uploader."""
    global _uploader
    if _uploader is None:
        _uploader = TmpfilesUploader()
    return _uploader


async def close_uploader() -> None:
    """Close the global uploader."""
    global _uploader
    if _uploader:
        await _uploader.close()
        _uploader = None
