"""Host strategies: how paths reach the agent and which shell runs it.

A profile is selected once at startup. ``posix`` runs the agent through
``bash -lc`` with paths as given; ``wsl`` translates Windows paths with
``wslpath`` and runs the agent inside the Linux subsystem. Both helpers
are started with ``wsl --exec`` so no extra shell re-parses the arguments.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass

from dev_inspector.bridge.process import run_path_helper


@dataclass(frozen=True)
class HostProfile:
    name: str
    shell: tuple[str, ...]
    path_helper: tuple[str, ...] = ()

    @property
    def needs_path_translation(self) -> bool:
        return bool(self.path_helper)

    async def resolve_path(self, file: str) -> str:
        if not self.needs_path_translation:
            return file
        return await run_path_helper([*self.path_helper, file.replace("\\", "/")])

    def shell_argv(self, command_line: str) -> list[str]:
        return [*self.shell, command_line]


POSIX_HOST = HostProfile(name="posix", shell=("bash", "-lc"))
WSL_HOST = HostProfile(
    name="wsl",
    shell=("wsl", "--exec", "bash", "-lc"),
    path_helper=("wsl", "--exec", "wslpath", "-u"),
)

_PROFILES = {profile.name: profile for profile in (POSIX_HOST, WSL_HOST)}


def select_host(name: str = "auto", platform: str | None = None) -> HostProfile:
    normalized = name.strip().lower()
    if normalized == "auto":
        return WSL_HOST if (platform or sys.platform) == "win32" else POSIX_HOST
    if normalized not in _PROFILES:
        raise ValueError(f"Unknown host profile '{name}'. Supported: auto, {', '.join(sorted(_PROFILES))}")
    return _PROFILES[normalized]
