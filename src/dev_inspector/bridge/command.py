from __future__ import annotations

import shlex

from dev_inspector.bridge.host import HostProfile
from dev_inspector.bridge.settings import BridgeSettings
from dev_inspector.models import AgentInvocation, EditRequest


def quote_word(text: str) -> str:
    """Wrap *text* in single quotes; each embedded quote becomes ``'\\''``."""
    return "'" + text.replace("'", "'\\''") + "'"


def compose_instruction(request: EditRequest, path: str) -> str:
    return f"{request.prompt} for {request.element_type} @{path} on line {request.line}"


def build_command_line(instruction: str, settings: BridgeSettings) -> str:
    words = [
        shlex.quote(settings.agent),
        *(shlex.quote(flag) for flag in settings.agent_flags),
        quote_word(instruction),
        "--model",
        shlex.quote(settings.model),
    ]
    return " ".join(words)


def build_invocation(
    request: EditRequest,
    path: str,
    host: HostProfile,
    settings: BridgeSettings,
) -> AgentInvocation:
    instruction = compose_instruction(request, path)
    program, *args = host.shell_argv(build_command_line(instruction, settings))
    return AgentInvocation(program=program, args=tuple(args), instruction=instruction, path=path)
