"""ASGI middleware answering the bridge endpoint and passing everything else on."""

from __future__ import annotations

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from dev_inspector.bridge.service import BridgeService
from dev_inspector.bridge.settings import DEFAULT_ENDPOINT


class BridgeMiddleware(BaseHTTPMiddleware):
    """Handles ``POST <endpoint>`` with the bridge service; other traffic is untouched."""

    def __init__(self, app: ASGIApp, service: BridgeService, endpoint: str = DEFAULT_ENDPOINT) -> None:
        super().__init__(app)
        self.service = service
        self.endpoint = endpoint

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.method != "POST" or request.url.path != self.endpoint:
            return await call_next(request)

        body = await request.body()
        reply = await self.service.handle(body)
        return JSONResponse(reply.result.to_wire(), status_code=reply.status_code)
