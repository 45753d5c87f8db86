"""
Ephemeral static file server.

Serves a local directory over HTTP on a port picked by the OS, for the
length of one capture run. Directory requests get the directory's
index.html after a redirect that adds the trailing slash. Extensionless
paths fall back to the matching .html file.
"""

from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Optional

from aiohttp import web

from ..errors import ServerStartError

HOST = 'localhost'
BIND_ADDRESS = '127.0.0.1'


def make_app(directory: Path) -> web.Application:
    """Build the aiohttp application serving ``directory``."""
    root = Path(directory).resolve()

    async def file_handler(request: web.Request) -> web.StreamResponse:
        relative = request.match_info.get('path', '').strip('/')
        target = (root / relative).resolve()

        if root != target and root not in target.parents:
            raise web.HTTPNotFound()

        if target.is_dir():
            # Relative links in index.html need the trailing slash
            if not request.path.endswith('/'):
                location = request.rel_url.with_path(request.path + '/').with_query(request.rel_url.query)
                raise web.HTTPFound(location)
            target = target / 'index.html'
        elif not target.is_file() and target.suffix != '.html':
            # Clean URLs: /about serves about.html
            target = target.with_name(target.name + '.html')

        if not target.is_file():
            raise web.HTTPNotFound()

        return web.FileResponse(target)

    app = web.Application()
    app.router.add_get('/', file_handler)
    app.router.add_get('/{path:.*}', file_handler)
    return app


class StaticServer:
    """A static server bound to an OS-assigned port."""

    def __init__(self, directory: Path):
        self.directory = Path(directory)
        self.port: Optional[int] = None
        self._runner: Optional[web.AppRunner] = None

    @property
    def origin(self) -> str:
        if self.port is None:
            raise ServerStartError("Static server is not running")
        return f"http://{HOST}:{self.port}"

    @property
    def running(self) -> bool:
        return self._runner is not None

    async def start(self) -> 'StaticServer':
        """
        Bind the listener and start serving.

        Raises:
            ServerStartError: if the directory is missing or the port cannot be bound
        """
        if not self.directory.is_dir():
            raise ServerStartError(f"Cannot serve {self.directory}: not a directory")

        runner = web.AppRunner(make_app(self.directory), access_log=None)
        await runner.setup()

        site = web.TCPSite(runner, BIND_ADDRESS, 0)
        try:
            await site.start()
        except OSError as e:
            await runner.cleanup()
            raise ServerStartError(f"Could not bind static server: {e}") from e

        self._runner = runner
        self.port = runner.addresses[0][1]
        print(f"[Server] Serving {self.directory} at {self.origin}", flush=True)
        return self

    async def stop(self) -> None:
        """Close the listener. Safe to call more than once."""
        if self._runner is None:
            return

        runner, self._runner = self._runner, None
        await runner.cleanup()
        print(f"[Server] Stopped {HOST}:{self.port}", flush=True)


@asynccontextmanager
async def serve_directory(directory: Path) -> AsyncIterator[StaticServer]:
    """Serve ``directory`` for the duration of the block."""
    server = StaticServer(directory)
    await server.start()
    try:
        yield server
    finally:
        await server.stop()
