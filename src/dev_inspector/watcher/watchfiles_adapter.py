from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable, Coroutine
from pathlib import Path
from typing import Any

from watchfiles import awatch

from dev_inspector.core.languages import is_taggable

logger = logging.getLogger(__name__)


def _is_supported_file(path: Path, exclude: Path | None = None) -> bool:
    if exclude is not None and path.resolve().is_relative_to(exclude):
        return False
    return is_taggable(path)


class WatchfilesWatcher:
    """Watch a source tree for taggable file changes and trigger a callback.

    Changes below *exclude* (the tagged output directory) are ignored so
    that writing tagged copies never retriggers the watcher.

    Implements the ``FileWatcherPort`` protocol.
    """

    def __init__(
        self,
        directory: str | Path,
        on_change: Callable[[set[Path]], Coroutine[Any, Any, None]],
        exclude: str | Path | None = None,
    ) -> None:
        self._directory = Path(directory)
        self._exclude = Path(exclude).resolve() if exclude is not None else None
        self._on_change = on_change
        self._task: asyncio.Task[None] | None = None

    async def start(self) -> None:
        if self._task is not None:
            return
        self._task = asyncio.create_task(self._watch())
        logger.info("Watching %s for source changes", self._directory)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        logger.info("Stopped watching %s", self._directory)

    async def wait(self) -> None:
        """Block until the watch loop ends."""
        if self._task is not None:
            await self._task

    async def _watch(self) -> None:
        async for changes in awatch(self._directory):
            paths = {Path(p) for _, p in changes if _is_supported_file(Path(p), self._exclude)}
            if not paths:
                continue
            logger.info("Retagging %d changed file(s)", len(paths))
            try:
                await self._on_change(paths)
            except Exception:
                logger.exception("Error in watcher callback")
