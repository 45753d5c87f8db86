"""Ephemeral static server for local captures."""

from .static import StaticServer, make_app, serve_directory

__all__ = [
    'StaticServer',
    'make_app',
    'serve_directory',
]
