"""
FastAPI application factory
"""
import logging
import traceback

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.middleware.sessions import SessionMiddleware
from starlette.responses import Response

from timetable.config import get_settings
from timetable.domain.errors import (
    DependencyUnavailableError, InvalidIdentifierError, NotFoundError,
    PartialBatchFailureError, ValidationError,
)
from timetable.infrastructure.db.session import check_db_connection
from timetable.api.v1 import auth, events, subjects

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class ErrorLoggingMiddleware(BaseHTTPMiddleware):
    """Catches everything the routes let through, logs the traceback, answers 500"""

    async def dispatch(self, request, call_next):
        try:
            response = await call_next(request)
            return response
        except Exception as exc:
            tb_str = traceback.format_exc()
            logger.error(f"\n{'='*60}\nERROR on {request.method} {request.url.path}\n{tb_str}{'='*60}")
            return Response(content=f"Internal Server Error: {exc}", status_code=500)


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ValidationError)
    async def validation_error(request: Request, exc: ValidationError):
        return JSONResponse(status_code=400, content={"error": str(exc)})

    @app.exception_handler(InvalidIdentifierError)
    async def invalid_identifier(request: Request, exc: InvalidIdentifierError):
        return JSONResponse(status_code=400, content={"error": str(exc)})

    @app.exception_handler(NotFoundError)
    async def not_found(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content={"error": str(exc)})

    @app.exception_handler(PartialBatchFailureError)
    async def partial_batch(request: Request, exc: PartialBatchFailureError):
        logger.error("Recurring save stopped after %d of %d events", exc.created_count, exc.total)
        return JSONResponse(
            status_code=500,
            content={
                "error": str(exc),
                "created_count": exc.created_count,
                "total": exc.total,
                "created_ids": [e.id for e in exc.created],
            },
        )

    @app.exception_handler(DependencyUnavailableError)
    async def dependency_unavailable(request: Request, exc: DependencyUnavailableError):
        logger.error("Dependency unavailable on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=503, content={"error": "Service temporarily unavailable"})


def create_app() -> FastAPI:
    """
    Application factory - builds and configures the FastAPI app

    Returns:
        Configured FastAPI app
    """
    settings = get_settings()

    app = FastAPI(
        title="Timetable",
        debug=settings.DEBUG,
    )

    app.add_middleware(ErrorLoggingMiddleware)
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.SECRET_KEY,
        max_age=settings.SESSION_MAX_AGE,
        same_site="lax",
    )

    _register_error_handlers(app)

    app.include_router(auth.router)
    app.include_router(events.router)
    app.include_router(subjects.router)

    # Health checks
    @app.get("/health", response_class=PlainTextResponse, tags=["system"])
    def health():
        """Health check endpoint"""
        return "ok"

    @app.get("/ready", response_class=PlainTextResponse, tags=["system"])
    def ready():
        """Readiness check endpoint (verifies the database is reachable)"""
        check_db_connection()
        return "ok"

    return app


# Create app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "timetable.main:app",
        host="127.0.0.1",
        port=8000,
        reload=True,
    )
