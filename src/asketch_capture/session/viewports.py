"""
The per-viewport capture loop.

Output files are keyed by the viewport's spec string (``1024x768@2``), not by
its name, so two names sharing a spec write the same file and the later one
wins.
"""

import asyncio
from typing import AsyncIterator, Mapping, Optional

from pyppeteer.errors import PyppeteerError
from pyppeteer.page import Page

from ..config import ViewportSpec
from ..errors import CaptureError
from .extractor import DEFAULT_ENTRY, extract_document


async def iter_captures(
    page: Page,
    viewports: Mapping[str, ViewportSpec],
    entry: str = DEFAULT_ENTRY,
    timeout: Optional[float] = None,
) -> AsyncIterator[tuple[str, str]]:
    """
    Resize the page to each viewport in turn and extract its document.

    Yields (output key, document text) pairs. Viewports are processed one
    at a time on the shared page: the next resize starts only after the
    previous extraction has returned.

    Raises:
        CaptureError: naming the viewport whose resize or extraction failed
    """
    for name, viewport in viewports.items():
        print(f"[Capture] {name}: {viewport.width}x{viewport.height} @{viewport.scale:g}x", flush=True)

        try:
            await page.setViewport(viewport.to_pyppeteer())
        except PyppeteerError as e:
            raise CaptureError(name, f"could not set viewport {viewport}: {e}") from e

        try:
            document = await extract_document(page, entry, timeout=timeout)
        except asyncio.TimeoutError as e:
            raise CaptureError(name, f"extraction did not finish within {timeout}s") from e
        except (PyppeteerError, ValueError) as e:
            raise CaptureError(name, str(e)) from e

        yield viewport.key, document


async def capture_all(
    page: Page,
    viewports: Mapping[str, ViewportSpec],
    entry: str = DEFAULT_ENTRY,
    timeout: Optional[float] = None,
) -> dict[str, str]:
    """Capture every viewport and collect the documents by output key."""
    documents: dict[str, str] = {}
    async for key, document in iter_captures(page, viewports, entry, timeout):
        documents[key] = document
    return documents
