"""
Data Models
===========

Pydantic schemas for render requests, results and API responses.
"""
