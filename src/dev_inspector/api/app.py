from __future__ import annotations

from pathlib import Path

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from starlette.applications import Starlette

from dev_inspector.api.lifespan import lifespan
from dev_inspector.api.middleware import BridgeMiddleware
from dev_inspector.api.routes.health import router as health_router
from dev_inspector.bridge.host import select_host
from dev_inspector.bridge.service import BridgeService
from dev_inspector.bridge.settings import BridgeSettings


def mount_bridge(app: Starlette, service: BridgeService, endpoint: str | None = None) -> None:
    """Attach the bridge endpoint to an existing Starlette or FastAPI app."""
    app.state.bridge = service
    app.add_middleware(BridgeMiddleware, service=service, endpoint=endpoint or service.settings.endpoint)


def create_app(service: BridgeService | None = None, static_dir: str | Path | None = None) -> FastAPI:
    if service is None:
        settings = BridgeSettings.from_env()
        service = BridgeService(select_host(settings.host), settings)

    app = FastAPI(
        title="Dev Inspector Bridge",
        description="Routes edit requests for rendered elements to a local coding agent.",
        version="0.1.0",
        lifespan=lifespan,
    )

    mount_bridge(app, service)
    app.include_router(health_router, include_in_schema=False)

    # Tagged build output, served after the routes above
    if static_dir is not None:
        app.mount("/", StaticFiles(directory=str(static_dir), html=True), name="static")

    return app
