"""
Loading and invoking the in-page layer extraction script.

The script (``page2layers.bundle.js`` from html-sketchapp) is opaque to us.
It must define a global whose entry point returns a JSON-serializable
description of the page's rendered layers, by default ``page2layers.run()``.
"""

import asyncio
from pathlib import Path
from typing import Optional

from pyppeteer.errors import PyppeteerError
from pyppeteer.page import Page

from ..config import DEFAULT_ENTRY
from ..errors import InjectionError


async def inject_extractor(page: Page, script_path: Path) -> None:
    """
    Add the extraction script to the page as a script tag.

    Called once per browser session, after navigation and before the first
    viewport is captured.

    Raises:
        InjectionError: if the script is missing or fails to load
    """
    script_path = Path(script_path)
    if not script_path.is_file():
        raise InjectionError(f"Extraction script not found: {script_path}")

    print(f"[Capture] Injecting {script_path.name}...", flush=True)

    try:
        await page.addScriptTag({'path': str(script_path)})
    except (PyppeteerError, OSError) as e:
        raise InjectionError(f"Could not inject {script_path}: {e}") from e


async def extract_document(
    page: Page,
    entry: str = DEFAULT_ENTRY,
    timeout: Optional[float] = None,
) -> str:
    """
    Run the extraction entry point and return its result as JSON text.

    Serialization happens in the page, which keeps the document exactly as
    the script produced it.

    Raises:
        ValueError: if the entry point returned nothing serializable
        asyncio.TimeoutError: if ``timeout`` elapsed first
    """
    expression = f"JSON.stringify({entry})"
    evaluation = page.evaluate(expression, force_expr=True)

    if timeout is not None:
        document = await asyncio.wait_for(evaluation, timeout)
    else:
        document = await evaluation

    if not isinstance(document, str):
        raise ValueError(f"{entry} did not return a JSON-serializable value")

    return document
