from typing import Protocol

from dev_inspector.models import BridgeResult, EditRequest


class BridgeTransport(Protocol):
    async def send(self, request: EditRequest) -> BridgeResult: ...
