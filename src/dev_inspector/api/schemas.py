from __future__ import annotations

from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str = "ok"


class BridgeStatusResponse(BaseModel):
    status: str = "ok"
    host: str
    endpoint: str
    busy: bool
