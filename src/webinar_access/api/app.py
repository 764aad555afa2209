"""FastAPI application factory."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from webinar_access.api.admin import router as admin_router
from webinar_access.api.sessions import router as sessions_router
from webinar_access.app_logging import configure_logging
from webinar_access.containers import AppContainer
from webinar_access.domain.errors import (
    AccessError,
    CapacityExceededError,
    ForbiddenError,
    InvalidArgumentError,
    NotFoundError,
    TransientError,
)
from webinar_access.services.eligibility import NOT_ELIGIBLE

_STATUS_BY_ERROR: list[tuple[type[AccessError], int]] = [
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ForbiddenError, status.HTTP_403_FORBIDDEN),
    (CapacityExceededError, status.HTTP_409_CONFLICT),
    (InvalidArgumentError, status.HTTP_400_BAD_REQUEST),
    (TransientError, status.HTTP_503_SERVICE_UNAVAILABLE),
]


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    app = FastAPI()
    app.state.container = container

    app.include_router(admin_router)
    app.include_router(sessions_router)

    @app.exception_handler(AccessError)
    async def access_error_handler(request: Request, exc: AccessError) -> JSONResponse:
        status_code = _status_for(exc)
        headers = None
        if status_code == status.HTTP_500_INTERNAL_SERVER_ERROR:
            logger.error(
                "Internal error on %s %s: %s",
                request.method,
                request.url.path,
                exc,
                exc_info=exc,
            )
            detail = "An internal error occurred. Please retry later."
        elif isinstance(exc, ForbiddenError):
            detail = NOT_ELIGIBLE
        else:
            detail = str(exc)
        if exc.retryable and status_code != status.HTTP_500_INTERNAL_SERVER_ERROR:
            headers = {"Retry-After": "1"}
        return JSONResponse(
            status_code=status_code,
            content={"detail": detail, "code": exc.code},
            headers=headers,
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    return app


def _status_for(exc: AccessError) -> int:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR
