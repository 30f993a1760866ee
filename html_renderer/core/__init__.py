"""
Core Business Logic
==================

Browser lifecycle management, HTML rendering and result delivery.

Modules:
- exceptions: Error taxonomy shared by the rendering pipeline
- rendering: Browser session, page rendering and image upload
"""
