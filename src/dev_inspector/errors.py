from __future__ import annotations


class BridgeError(Exception):
    """Base error for every failure of a bridge request.

    ``stage`` names the step that failed and ``status_code`` is the HTTP
    status the failure is reported with.
    """

    status_code = 500
    stage = "bridge"


class InputError(BridgeError):
    """The request body is not a valid edit request."""

    status_code = 400
    stage = "parse"


class BridgeBusyError(BridgeError):
    """Another agent invocation currently holds the in-flight slot."""

    status_code = 409
    stage = "slot"


class PathTranslationError(BridgeError):
    """The path-conversion helper failed or produced unusable output."""

    stage = "path"


class SpawnError(BridgeError):
    """The agent process could not be launched."""

    stage = "spawn"


class AgentFailure(BridgeError):
    """The agent exited with a non-zero status."""

    stage = "agent"

    def __init__(self, exit_code: int) -> None:
        super().__init__(f"Exit code {exit_code}")
        self.exit_code = exit_code
