"""
Render Routes
=============

FastAPI route for rendering HTML to an image. Depending on the configured
delivery mode the image is returned inline or uploaded to a temporary file host.
"""

from typing import Union

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from html_renderer.config.logging import get_logger
from html_renderer.config.settings import get_settings, Settings
from html_renderer.core.exceptions import RenderError
from html_renderer.core.rendering.image_renderer import ImageRenderer, get_image_renderer
from html_renderer.models.schemas import ErrorResponse, RenderRequest, UploadResult

logger = get_logger(__name__)

router = APIRouter(tags=["Rendering"])


def get_current_settings() -> Settings:
    """Dependency to get current settings."""
    return get_settings()


@router.post(
    "/render",
    response_model=None,
    responses={
        200: {"content": {"image/webp": {}, "image/png": {}}, "model": UploadResult},
        400: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def render_html(
    request: RenderRequest,
    renderer: ImageRenderer = Depends(get_image_renderer),
    settings: Settings = Depends(get_current_settings),
) -> Union[Response, UploadResult]:
    """
    Render HTML to an image.

    Args:
        request: HTML plus viewport, format and quality

    Returns:
        Raw image bytes, or the hosted URL in upload delivery mode
    """
    try:
        if settings.delivery == "upload":
            return await renderer.render_and_upload(request)

        result = await renderer.render(request)
        return Response(
            content=result.image_data,
            media_type=result.media_type,
            headers={"X-Image-Size": str(result.size)},
        )
    except RenderError:
        raise
    except Exception as e:
        logger.error("Render error", error=str(e), exc_info=True)
        raise RenderError(str(e)) from e
