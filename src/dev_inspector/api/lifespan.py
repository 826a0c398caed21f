from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    service = getattr(app.state, "bridge", None)
    if service is not None:
        logger.info(
            "Bridge listening on POST %s (host profile: %s, agent: %s)",
            service.settings.endpoint,
            service.host.name,
            service.settings.agent,
        )
    yield
    if service is not None and service.busy:
        logger.warning("Shutting down while an agent invocation is still running")
