"""FastAPI application factory."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from movilidad.api.routes import health_router, submissions_router
from movilidad.config import get_settings
from movilidad.database import LedgerStore
from movilidad.ledger import ErrorKind, LedgerConfig, LedgerError
from movilidad.services import SubmissionLedger

logger = logging.getLogger(__name__)

ERROR_STATUS: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.WORKER_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.WORKER_INACTIVE: status.HTTP_403_FORBIDDEN,
    ErrorKind.EMPTY_SUBMISSION: 422,
    ErrorKind.CAP_EXCEEDED: status.HTTP_409_CONFLICT,
    ErrorKind.PERSISTENCE_FAILURE: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def create_app(
    store: LedgerStore | None = None,
    config: LedgerConfig | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    A store passed in is owned by the caller; otherwise one is built from
    settings and disposed at shutdown.
    """
    owns_store = store is None
    if store is None or config is None:
        settings = get_settings()
        store = store or LedgerStore.from_settings(settings)
        config = config or settings.ledger_config()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Application lifespan handler."""
        yield
        if owns_store:
            await app.state.store.dispose()

    app = FastAPI(
        title="Movilidad Ledger API",
        description="Daily travel-allowance submissions with per-worker caps",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.store = store
    app.state.ledger = SubmissionLedger(store, config)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Exception handlers
    @app.exception_handler(LedgerError)
    async def ledger_exception_handler(
        request: Request, exc: LedgerError
    ) -> JSONResponse:
        """Translate ledger errors into structured responses."""
        return JSONResponse(
            status_code=ERROR_STATUS.get(exc.kind, status.HTTP_400_BAD_REQUEST),
            content={"detail": exc.message, "code": exc.kind.value, **exc.details()},
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "detail": "An unexpected error occurred",
                "code": "INTERNAL_ERROR",
            },
        )

    # Include routers
    app.include_router(health_router)
    app.include_router(submissions_router, prefix="/api/v1")

    return app
