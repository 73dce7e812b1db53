"""Translation of domain errors into HTTP responses."""

import logging
from typing import NoReturn

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse

from ..core.exceptions import DomainException

logger = logging.getLogger(__name__)


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
    """Last-resort handler for domain errors not caught by a route."""
    http_exc = exc.to_http_exception()
    if http_exc.status_code >= 500:
        logger.error("Unhandled service error on %s: %s", request.url.path, exc.message)
    return JSONResponse(status_code=http_exc.status_code, content={"detail": http_exc.detail})


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainException, domain_exception_handler)
