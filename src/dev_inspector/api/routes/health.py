from fastapi import APIRouter, HTTPException, Request

from dev_inspector.api.schemas import BridgeStatusResponse, HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse()


@router.get("/healthz/live", response_model=HealthResponse)
async def liveness() -> HealthResponse:
    """Liveness probe: is the process alive?"""
    return HealthResponse()


@router.get("/healthz/bridge", response_model=BridgeStatusResponse)
async def bridge_status(request: Request) -> BridgeStatusResponse:
    """Which host profile the bridge runs with and whether an agent is running."""
    service = getattr(request.app.state, "bridge", None)
    if service is None:
        raise HTTPException(status_code=503, detail="Bridge is not configured.")
    return BridgeStatusResponse(
        host=service.host.name,
        endpoint=service.settings.endpoint,
        busy=service.busy,
    )
