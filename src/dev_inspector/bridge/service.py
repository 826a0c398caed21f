"""Turns one edit request into one agent invocation and one reply.

Per request the service parses the body, resolves the file path through
the host profile, builds the shell command, spawns the agent with
inherited stdio and waits for it to exit. Every outcome, including
malformed input, is reported as a :class:`BridgeResult`. Path translation
always completes before the agent is spawned.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from pydantic import ValidationError

from dev_inspector.bridge.command import build_invocation
from dev_inspector.bridge.host import HostProfile
from dev_inspector.bridge.process import spawn_agent, wait_agent
from dev_inspector.bridge.settings import BridgeSettings
from dev_inspector.errors import BridgeBusyError, BridgeError, InputError
from dev_inspector.models import BridgeResult, EditRequest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BridgeReply:
    status_code: int
    result: BridgeResult


class ReplySlot:
    """One-shot holder for the reply to a single request.

    The first settlement wins; later ones are dropped.
    """

    def __init__(self) -> None:
        self._reply: BridgeReply | None = None

    @property
    def settled(self) -> bool:
        return self._reply is not None

    @property
    def reply(self) -> BridgeReply:
        if self._reply is None:
            raise RuntimeError("Reply has not been settled")
        return self._reply

    def settle(self, status_code: int, result: BridgeResult) -> bool:
        if self._reply is not None:
            logger.debug("Dropping %d reply for an already answered request", status_code)
            return False
        self._reply = BridgeReply(status_code=status_code, result=result)
        return True


def _describe(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        loc = ".".join(str(part) for part in error["loc"])
        parts.append(f"{loc}: {error['msg']}" if loc else error["msg"])
    return "; ".join(parts)


def parse_request(body: bytes | str) -> EditRequest:
    try:
        return EditRequest.model_validate_json(body)
    except ValidationError as exc:
        if any(error["type"] == "json_invalid" for error in exc.errors()):
            raise InputError("Invalid JSON body") from exc
        raise InputError(f"Invalid request: {_describe(exc)}") from exc


class BridgeService:
    def __init__(self, host: HostProfile, settings: BridgeSettings | None = None) -> None:
        self.host = host
        self.settings = settings or BridgeSettings()
        self._in_flight = 0

    @property
    def busy(self) -> bool:
        return self._in_flight > 0

    async def handle(self, body: bytes | str) -> BridgeReply:
        slot = ReplySlot()
        try:
            request = parse_request(body)
            await self._run(request, slot)
        except BridgeError as exc:
            logger.error("[%s] %s", exc.stage, exc)
            slot.settle(exc.status_code, BridgeResult.error(str(exc)))
        except Exception as exc:
            logger.exception("[bridge] Unexpected failure")
            slot.settle(500, BridgeResult.error(str(exc) or exc.__class__.__name__))
        return slot.reply

    async def _run(self, request: EditRequest, slot: ReplySlot) -> None:
        if self.settings.single_flight and self.busy:
            raise BridgeBusyError("Another edit request is already running")

        self._in_flight += 1
        try:
            path = await self.host.resolve_path(request.file)
            invocation = build_invocation(request, path, self.host, self.settings)
            logger.info(
                "Dispatching edit for %s @%s:%s via %s host",
                request.element_type,
                path,
                request.line,
                self.host.name,
            )
            logger.debug("Agent argv: %r", invocation.argv)

            process = await spawn_agent(invocation.argv)
            await wait_agent(process)
        finally:
            self._in_flight -= 1

        logger.info("Changes applied to %s", path)
        slot.settle(200, BridgeResult.success())
