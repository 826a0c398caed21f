from __future__ import annotations

import logging

import httpx

from dev_inspector.bridge.settings import DEFAULT_ENDPOINT
from dev_inspector.models import BridgeResult, EditRequest

logger = logging.getLogger(__name__)


class BridgeClient:
    """Posts edit requests to a running bridge.

    No timeout is applied: the bridge holds the connection open until the
    agent exits.

    Implements the ``BridgeTransport`` protocol.
    """

    def __init__(
        self,
        base_url: str = "http://127.0.0.1:5173",
        endpoint: str = DEFAULT_ENDPOINT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url
        self.endpoint = endpoint
        self._transport = transport

    async def send(self, request: EditRequest) -> BridgeResult:
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(None),
                transport=self._transport,
            ) as client:
                response = await client.post(self.endpoint, json=request.to_wire())
        except httpx.HTTPError as exc:
            logger.error("Could not reach bridge at %s: %s", self.base_url, exc)
            return BridgeResult.error("Connection error.")

        try:
            return BridgeResult.model_validate(response.json())
        except ValueError:
            logger.error("Unexpected %d response from bridge: %s", response.status_code, response.text)
            return BridgeResult.error(f"Unexpected response ({response.status_code})")
