"""
Rendering Module
===============

HTML to image rendering with browser automation.

Components:
- browser_session: Lazily launched, shared Chromium instance
- image_renderer: Page-scoped rendering to PNG or WebP
- uploader: Temporary file host client for hosted results
"""
