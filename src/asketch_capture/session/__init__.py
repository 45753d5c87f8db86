"""
Browser session module for asketch-capture.

Provides the browser session, extraction script handling and the
per-viewport capture loop, all driven through Pyppeteer.
"""

from .browser import BrowserSession
from .extractor import (
    DEFAULT_ENTRY,
    extract_document,
    inject_extractor,
)
from .viewports import capture_all, iter_captures

__all__ = [
    'BrowserSession',
    'DEFAULT_ENTRY',
    'extract_document',
    'inject_extractor',
    'capture_all',
    'iter_captures',
]
