"""
HTML to Image Renderer
======================

A small HTTP service that renders caller-supplied HTML into raster images
through a shared headless Chromium.

This package provides:
- FastAPI REST endpoints for HTTP access
- A managed, lazily launched browser session
- Page-scoped rendering to PNG or WebP
- Optional upload of rendered images to a temporary file host
"""

__version__ = "1.0.0"
__author__ = "HTML Renderer Team"
