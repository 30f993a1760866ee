"""Test suite for the HTML to Image Renderer."""
