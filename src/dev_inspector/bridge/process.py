"""Child processes used by the bridge: the path helper and the agent."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence

from dev_inspector.errors import AgentFailure, PathTranslationError, SpawnError


async def run_path_helper(argv: Sequence[str]) -> str:
    """Run a path-conversion helper and return its trimmed stdout."""
    try:
        process = await asyncio.create_subprocess_exec(
            *argv,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except (OSError, ValueError) as exc:
        raise PathTranslationError(f"Failed to convert path: {exc}") from exc

    stdout, stderr = await process.communicate()
    if process.returncode != 0:
        detail = stderr.decode("utf-8", errors="replace").strip() or f"exit code {process.returncode}"
        raise PathTranslationError(f"Failed to convert path: {detail}")

    translated = stdout.decode("utf-8", errors="replace").strip()
    if not translated:
        raise PathTranslationError("Failed to convert path: helper produced no output")
    return translated


async def spawn_agent(argv: Sequence[str]) -> asyncio.subprocess.Process:
    """Start the agent with the host's stdin, stdout and stderr."""
    try:
        return await asyncio.create_subprocess_exec(*argv)
    except (OSError, ValueError) as exc:
        raise SpawnError(str(exc)) from exc


async def wait_agent(process: asyncio.subprocess.Process) -> None:
    exit_code = await process.wait()
    if exit_code != 0:
        raise AgentFailure(exit_code)
