"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request

from diet_planner.api.calculations import router as calculations_router
from diet_planner.api.clipboard import router as clipboard_router
from diet_planner.api.dependencies import (
    ensure_client_allowed,
    get_container,
    require_api_token,
)
from diet_planner.api.history import router as history_router
from diet_planner.api.history import snapshots_router
from diet_planner.api.schemas import RealtimeEvent
from diet_planner.app_logging import configure_logging
from diet_planner.containers import AppContainer
from diet_planner.domain.optimization import OptimizationRequest, OptimizationResponse


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info("Diet planner API starting (%s)", container.settings.environment)
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(history_router)
    app.include_router(snapshots_router)
    app.include_router(clipboard_router)
    app.include_router(calculations_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/realtime/diet-changes", dependencies=[Depends(require_api_token)])
    async def realtime_diet_changes(
        event: RealtimeEvent, request: Request
    ) -> dict[str, str]:
        """Reload a client's history after an external change."""
        ensure_client_allowed(request, event.client_id)
        registry = get_container(request).history_registry
        session = registry.sessions.get(event.client_id)
        if session is None:
            return {"status": "ignored"}
        if session.realtime_guard.should_ignore(event.table, event.type):
            return {"status": "ignored"}
        logger.info(
            "Realtime %s on %s, reloading client %s",
            event.type,
            event.table,
            event.client_id,
        )
        await session.history.refresh_snapshots()
        return {"status": "refreshed"}

    @app.post("/optimization/macros", dependencies=[Depends(require_api_token)])
    async def optimize_macros(
        payload: OptimizationRequest, request: Request
    ) -> OptimizationResponse:
        """Ask the AI optimizer to hit the meal's macro targets."""
        if payload.context is not None and payload.context.client_id:
            ensure_client_allowed(request, payload.context.client_id)
        return await get_container(request).optimization_service.optimize(payload)

    return app
