"""
asketch-capture - Capture web pages as html-sketchapp layer documents.

Usage:
    from asketch_capture import build_run_config, capture

    result = capture(build_run_config(out_dir="sketch", serve="public"))
"""

__version__ = "0.1.0"

# Public API exports
from .api import (
    capture,
    run_capture,
    RunResult,
)

from .config import (
    build_run_config,
    LaunchOptions,
    RunConfig,
    ViewportSpec,
)

from .errors import (
    AsketchCaptureError,
    BrowserLaunchError,
    CaptureError,
    ConfigurationError,
    InjectionError,
    NavigationError,
    OutputDirError,
    OutputWriteError,
    ServerStartError,
    TeardownError,
)

__all__ = [
    # Version
    "__version__",
    # Main functions
    "capture",
    "run_capture",
    "build_run_config",
    # Types
    "RunResult",
    "RunConfig",
    "LaunchOptions",
    "ViewportSpec",
    # Exceptions
    "AsketchCaptureError",
    "BrowserLaunchError",
    "CaptureError",
    "ConfigurationError",
    "InjectionError",
    "NavigationError",
    "OutputDirError",
    "OutputWriteError",
    "ServerStartError",
    "TeardownError",
]
