"""
Public API for asketch-capture.

This is the primary interface for programmatic use. The CLI and other tools
should use these functions rather than wiring the pipeline together
themselves.

Example usage:
    from asketch_capture.api import capture
    from asketch_capture.config import build_run_config

    config = build_run_config(out_dir="sketch", url="https://example.com")
    result = capture(config)
    print(f"Wrote {len(result.files)} files")
"""

import asyncio
from contextlib import AsyncExitStack
from dataclasses import dataclass, field
from pathlib import Path
from typing import Awaitable, Callable

from .session.browser import BrowserSession
from .session.extractor import inject_extractor
from .session.viewports import iter_captures
from .config import RunConfig
from .errors import TeardownError
from .output import OutputWriter
from .server.static import StaticServer


@dataclass
class RunResult:
    """Result of a capture run."""

    url: str
    out_dir: Path
    files: list[Path] = field(default_factory=list)
    viewports: list[str] = field(default_factory=list)


def _release(close: Callable[[], Awaitable[None]], label: str):
    """
    Exit callback that closes a resource without masking an earlier error.

    If the block is already failing, a close error is reported and dropped
    so the original error propagates. If the block succeeded, a close error
    becomes the run's failure.
    """
    async def exit_callback(exc_type, exc, tb) -> bool:
        try:
            await close()
        except Exception as e:
            if exc is not None:
                print(f"[Run] Error closing {label} (ignored, run already failed): {e}", flush=True)
                return False
            raise TeardownError(f"Could not close {label}: {e}") from e
        return False

    return exit_callback


async def run_capture(config: RunConfig) -> RunResult:
    """
    Capture every configured viewport of the target page.

    Resources are acquired in order (static server, browser) and released
    in reverse order however the run ends. The browser stays open in debug
    mode. Documents are written while later viewports are captured; the
    run returns once every write has finished.

    Returns:
        RunResult listing the files written

    Raises:
        AsketchCaptureError: the first failure of the run
    """
    async with AsyncExitStack() as stack:
        origin = None
        if config.serve_dir is not None:
            server = StaticServer(config.serve_dir)
            await server.start()
            stack.push_async_exit(_release(server.stop, 'static server'))
            origin = server.origin

        url = config.target.navigable_url(origin)

        session = await BrowserSession.launch(config.launch, debug=config.debug)
        stack.push_async_exit(_release(session.close, 'browser'))

        page = await session.new_page()
        await session.navigate(url)
        await inject_extractor(page, config.extractor_script)

        writer = OutputWriter(config.out_dir)
        await writer.ensure_dir()

        try:
            async for key, document in iter_captures(
                page,
                config.viewports,
                entry=config.extractor_entry,
                timeout=config.extract_timeout,
            ):
                writer.schedule(key, document)
        except BaseException:
            # Let in-flight writes finish before tearing anything down
            for failure in await writer.settle():
                print(f"[Output] {failure}", flush=True)
            raise

        files = await writer.flush()

    return RunResult(
        url=url,
        out_dir=config.out_dir,
        files=files,
        viewports=list(config.viewports),
    )


def capture(config: RunConfig) -> RunResult:
    """Run a capture to completion on a fresh event loop."""
    return asyncio.run(run_capture(config))
