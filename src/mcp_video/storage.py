# src/mcp_video/storage.py
"""Scratch and persistent output directories for extracted frames."""

import asyncio
import logging
import os
import shutil
import tempfile
import weakref
from contextlib import contextmanager
from pathlib import Path
from typing import Awaitable, Callable, Iterator, TypeVar

logger = logging.getLogger(__name__)

FRAME_EXTENSION = ".jpg"
FRAME_PATTERN = "frame_%04d.jpg"
SCRATCH_PREFIX = "mcp-video-"

T = TypeVar("T")


def list_frame_files(directory: Path) -> list[Path]:
    """List frame images in a directory, sorted by name.

    Names are zero-padded so lexicographic order is sequence order.
    """
    if not directory.is_dir():
        return []
    return sorted(
        path for path in directory.iterdir()
        if path.suffix.lower() == FRAME_EXTENSION and path.is_file()
    )


class OutputLifecycle:
    """Decides where frames are written and when they are removed.

    Without an output directory every call gets its own scratch directory,
    deleted when the call ends. A caller-supplied directory is never
    deleted, and any frames already in it are served instead of running
    extraction again. The cache is keyed on the directory alone: frames
    left by a request with different parameters are returned unchanged.
    """

    def __init__(self, temp_dir: str | None = None):
        self.temp_dir = temp_dir
        # Entries vanish once no caller holds the lock
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = weakref.WeakValueDictionary()

    @contextmanager
    def scratch_directory(self) -> Iterator[Path]:
        """Create a uniquely named scratch directory, removed on exit."""
        if self.temp_dir:
            os.makedirs(self.temp_dir, exist_ok=True)
        scratch = Path(tempfile.mkdtemp(prefix=SCRATCH_PREFIX, dir=self.temp_dir))
        logger.debug(f"Created scratch directory {scratch}")
        try:
            yield scratch
        finally:
            try:
                shutil.rmtree(scratch)
                logger.debug(f"Removed scratch directory {scratch}")
            except OSError as e:
                logger.warning(f"Failed to remove scratch directory {scratch}: {e}")

    def lock_for(self, directory: Path) -> asyncio.Lock:
        # Serializes callers within this process only
        key = str(directory)
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock

    async def produce(
        self,
        output_dir: str | None,
        extract: Callable[[Path], Awaitable[None]],
        collect: Callable[[list[Path]], T],
    ) -> tuple[T, Path | None, bool]:
        """
        Run extraction into the right directory and collect the frames.

        Args:
            output_dir: Persistent directory, or None for a scratch directory
            extract: Writes frames into the directory it is given
            collect: Turns the sorted frame files into the call's result

        Returns:
            (collected result, persistent directory or None, cache hit)
        """
        if output_dir is None:
            with self.scratch_directory() as scratch:
                await extract(scratch)
                return collect(list_frame_files(scratch)), None, False

        directory = Path(os.path.abspath(os.path.expanduser(output_dir)))
        lock = self.lock_for(directory)
        async with lock:
            existing = list_frame_files(directory)
            if existing:
                logger.info(f"Reusing {len(existing)} existing frames in {directory}")
                return collect(existing), directory, True

            directory.mkdir(parents=True, exist_ok=True)
            await extract(directory)
            return collect(list_frame_files(directory)), directory, False
