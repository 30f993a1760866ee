"""
FastAPI REST Endpoints
======================

REST API endpoints for HTTP access to HTML rendering.

Endpoints:
- POST /render: Render HTML to a WebP/PNG image (inline bytes or hosted URL)
- GET /health: Liveness check
"""
