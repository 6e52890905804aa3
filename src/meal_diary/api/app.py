"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from meal_diary.api.daily_meals import router as daily_meals_router
from meal_diary.api.foods import router as foods_router
from meal_diary.app_logging import configure_logging
from meal_diary.containers import AppContainer
from meal_diary.domain.errors import (
    InvalidArgumentError,
    NotFoundError,
    StoreUnavailableError,
)


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        try:
            app.state.container.initialize()
        except Exception:
            logger.exception("Failed to initialize the store")
        yield

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(foods_router)
    app.include_router(daily_meals_router)

    @app.exception_handler(NotFoundError)
    async def not_found(_: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)}
        )

    @app.exception_handler(InvalidArgumentError)
    async def invalid_argument(
        _: Request, exc: InvalidArgumentError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)}
        )

    @app.exception_handler(StoreUnavailableError)
    async def store_unavailable(
        _: Request, exc: StoreUnavailableError
    ) -> JSONResponse:
        logger.warning("Store unavailable: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"detail": "Store unavailable"},
        )

    @app.get("/health")
    async def health(request: Request) -> dict[str, object]:
        """Report whether the store was reachable at startup."""
        readiness = request.app.state.container.readiness
        if readiness is None:
            return {"status": "starting", "store_ready": False}
        return {
            "status": "ok" if readiness.ready else "degraded",
            "store_ready": readiness.ready,
            "detail": readiness.detail,
        }

    return app
