import os
import shlex
from dataclasses import dataclass

DEFAULT_ENDPOINT = "/__ai-cli"

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class BridgeSettings:
    agent: str = "agent"
    agent_flags: tuple[str, ...] = ("-p", "--force")
    model: str = "auto"
    endpoint: str = DEFAULT_ENDPOINT
    single_flight: bool = True
    host: str = "auto"

    @classmethod
    def from_env(cls) -> "BridgeSettings":
        flags = os.getenv("DEV_INSPECTOR_AGENT_FLAGS")
        return cls(
            agent=os.getenv("DEV_INSPECTOR_AGENT", cls.agent),
            agent_flags=tuple(shlex.split(flags)) if flags is not None else cls.agent_flags,
            model=os.getenv("DEV_INSPECTOR_MODEL", cls.model),
            endpoint=os.getenv("DEV_INSPECTOR_ENDPOINT", cls.endpoint),
            single_flight=os.getenv("DEV_INSPECTOR_SINGLE_FLIGHT", "1").strip().lower() in _TRUTHY,
            host=os.getenv("DEV_INSPECTOR_HOST", cls.host).strip().lower(),
        )
