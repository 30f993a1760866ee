"""
Rendering Exceptions
====================

Error taxonomy for the rendering pipeline. Only ``ValidationError`` is the
caller's fault; every other error fails the request with its message.
"""


class RenderError(Exception):
    """Base exception for rendering failures."""

    status_code = 500


class ValidationError(RenderError):
    """Raised when a render request is missing or has invalid input."""

    status_code = 400


class LaunchError(RenderError):
    """Raised when the browser process cannot be started."""

    pass


class RenderTimeoutError(RenderError):
    """Raised when page content does not settle before the deadline."""

    pass


class CaptureError(RenderError):
    """Raised when the screenshot cannot be captured or encoded."""

    pass


class UploadError(RenderError):
    """Raised when the temporary file host upload fails."""

    pass
