"""
Error types raised by the capture pipeline.

Every stage of a run maps its failures onto one of these, so callers can
tell a bad configuration from a browser that would not start.
"""


class AsketchCaptureError(Exception):
    """Base class for all capture run failures."""
    pass


class ConfigurationError(AsketchCaptureError):
    """Raised when the run configuration is incomplete or malformed."""
    pass


class ServerStartError(AsketchCaptureError):
    """Raised when the static server cannot be started."""
    pass


class BrowserLaunchError(AsketchCaptureError):
    """Raised when the browser process cannot be launched."""
    pass


class NavigationError(AsketchCaptureError):
    """Raised when the page cannot be loaded."""
    pass


class InjectionError(AsketchCaptureError):
    """Raised when the extraction script cannot be loaded into the page."""
    pass


class CaptureError(AsketchCaptureError):
    """Raised when resizing or extraction fails for one viewport."""

    def __init__(self, viewport_name: str, message: str):
        super().__init__(f"Viewport '{viewport_name}': {message}")
        self.viewport_name = viewport_name


class OutputDirError(AsketchCaptureError):
    """Raised when the output directory cannot be created."""
    pass


class OutputWriteError(AsketchCaptureError):
    """Raised when an output file cannot be written."""
    pass


class TeardownError(AsketchCaptureError):
    """Raised when releasing a resource fails and nothing else went wrong."""
    pass
