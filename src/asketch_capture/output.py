"""
Writing captured documents to disk.

Each viewport's document goes to ``<out_dir>/page-<spec>.asketch.json``.
Writes run in worker threads so the next viewport can be captured while the
previous document is still being written.
"""

import asyncio
from pathlib import Path
from typing import Optional

from .errors import OutputDirError, OutputWriteError

OUTPUT_TEMPLATE = 'page-{key}.asketch.json'


def output_filename(key: str) -> str:
    return OUTPUT_TEMPLATE.format(key=key)


def _write_text(path: Path, content: str) -> None:
    path.write_text(content, encoding='utf-8')


class OutputWriter:
    """Schedules and tracks the output writes of one run."""

    def __init__(self, out_dir: Path):
        self.out_dir = Path(out_dir)
        self.written: list[Path] = []
        self._pending: dict[Path, asyncio.Task] = {}
        self._tasks: list[asyncio.Task] = []
        self._dir_ready = False

    def path_for(self, key: str) -> Path:
        return self.out_dir / output_filename(key)

    async def ensure_dir(self) -> Path:
        """
        Create the output directory tree if it does not exist.

        Raises:
            OutputDirError: if the path exists as a file or cannot be created
        """
        if self._dir_ready:
            return self.out_dir

        try:
            await asyncio.to_thread(self.out_dir.mkdir, parents=True, exist_ok=True)
        except OSError as e:
            raise OutputDirError(f"Could not create output directory {self.out_dir}: {e}") from e

        self._dir_ready = True
        return self.out_dir

    async def write(self, key: str, content: str, after: Optional[asyncio.Task] = None) -> Path:
        """
        Write one document.

        Raises:
            OutputWriteError: if the file cannot be written
        """
        path = self.path_for(key)

        # Same file scheduled twice: the later write must land last
        if after is not None:
            await asyncio.gather(after, return_exceptions=True)

        try:
            await asyncio.to_thread(_write_text, path, content)
        except OSError as e:
            raise OutputWriteError(f"Could not write {path}: {e}") from e

        if path not in self.written:
            self.written.append(path)
        print(f"[Output] Wrote {path}", flush=True)
        return path

    def schedule(self, key: str, content: str) -> asyncio.Task:
        """Start writing a document in the background."""
        if not self._dir_ready:
            raise OutputDirError("Output directory must be created before writing")

        path = self.path_for(key)
        previous = self._pending.get(path)
        task = asyncio.ensure_future(self.write(key, content, after=previous))
        self._pending[path] = task
        self._tasks.append(task)
        return task

    async def settle(self) -> list[BaseException]:
        """Wait for every scheduled write and return the failures."""
        tasks, self._tasks = self._tasks, []
        self._pending.clear()

        results = await asyncio.gather(*tasks, return_exceptions=True)
        return [r for r in results if isinstance(r, BaseException)]

    async def flush(self) -> list[Path]:
        """
        Wait for every scheduled write to settle.

        Raises:
            OutputWriteError: the first write failure, once all writes are done
        """
        failures = await self.settle()
        if failures:
            raise failures[0]

        return list(self.written)
