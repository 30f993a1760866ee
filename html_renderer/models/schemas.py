"""
Pydantic Models and Schemas
===========================

Request/response models for the render endpoint and internal result structures.
"""

from typing import Optional, Literal

from pydantic import BaseModel, Field, StrictInt


ImageFormat = Literal["webp", "png"]

MEDIA_TYPES = {
    "webp": "image/webp",
    "png": "image/png",
}


class RenderRequest(BaseModel):
    """Incoming render request."""

    html: Optional[str] = Field(None, description="HTML markup to render")
    width: StrictInt = Field(760, gt=0, le=4000, description="Viewport and clip width")
    height: StrictInt = Field(507, gt=0, le=4000, description="Viewport and clip height")
    format: ImageFormat = Field("webp", description="Output image format")
    quality: StrictInt = Field(80, ge=0, le=100, description="WebP quality (0-100)")
    slug: str = Field("card", min_length=1, max_length=200, description="Output file name stem")

    @property
    def extension(self) -> str:
        return "webp" if self.format == "webp" else "png"

    @property
    def media_type(self) -> str:
        return MEDIA_TYPES[self.extension]

    @property
    def filename(self) -> str:
        return f"{self.slug}.{self.extension}"


class RenderResult(BaseModel):
    """Rendered image and its metadata."""

    image_data: bytes = Field(..., description="Encoded image bytes", exclude=True)
    size: int = Field(..., description="Image size in bytes")
    format: ImageFormat = Field(..., description="Image format")
    width: int = Field(..., description="Image width")
    height: int = Field(..., description="Image height")

    @property
    def media_type(self) -> str:
        return MEDIA_TYPES[self.format]


class UploadResult(BaseModel):
    """Hosted image location returned in upload delivery mode."""

    url: str = Field(..., description="Direct download URL")
    filename: str = Field(..., description="Uploaded file name")
    size: int = Field(..., description="Image size in bytes")


class HealthStatus(BaseModel):
    """Liveness response."""

    status: Literal["ok"] = "ok"


class ErrorResponse(BaseModel):
    """Error response body."""

    error: str = Field(..., description="Error message")
