"""
Resolution of the page to capture.

A run captures exactly one of: a local file, a path on the ephemeral static
server, or a URL used as given. The choice is made once, up front, so the
rest of the pipeline only ever asks a target for its URL.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from .errors import ConfigurationError


@dataclass(frozen=True)
class FileTarget:
    """A file on disk, relative to the working directory."""
    path: str

    def navigable_url(self, origin: Optional[str] = None) -> str:
        return Path(os.path.join(os.getcwd(), self.path)).as_uri()


@dataclass(frozen=True)
class ServedTarget:
    """A root-relative path on the ephemeral static server."""
    path: str = '/'

    def navigable_url(self, origin: Optional[str] = None) -> str:
        if not origin:
            raise ConfigurationError("A served target needs the static server to be running")
        return join_url(origin, self.path)


@dataclass(frozen=True)
class UrlTarget:
    """A URL navigated to verbatim."""
    url: str

    def navigable_url(self, origin: Optional[str] = None) -> str:
        return self.url


Target = Union[FileTarget, ServedTarget, UrlTarget]


def join_url(*parts: str) -> str:
    """Join URL segments with exactly one slash between each pair."""
    parts = [p for p in parts if p]
    if not parts:
        return ''

    joined = parts[0]
    for part in parts[1:]:
        joined = joined.rstrip('/') + '/' + part.lstrip('/')

    return joined


def resolve_target(
    serve: Optional[str] = None,
    url: Optional[str] = None,
    file: Optional[str] = None,
) -> Target:
    """
    Choose the run's target from the serve/url/file options.

    A file wins over everything else. When serving, ``url`` is a path on
    the static server (default ``/``). Otherwise ``url`` is used as is.

    Raises:
        ConfigurationError: if none of serve, url or file was given
    """
    if file:
        return FileTarget(file)
    if serve:
        return ServedTarget(url or '/')
    if url:
        return UrlTarget(url)

    raise ConfigurationError("Nothing to capture: pass --url, --file or --serve")
