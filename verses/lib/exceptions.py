"""JSON error rendering for the API."""

import logging

from litestar import Request, Response
from litestar.exceptions import HTTPException
from litestar.status_codes import HTTP_500_INTERNAL_SERVER_ERROR

from verses.lib import observability

logger = logging.getLogger(__name__)


def http_exception_handler(request: Request, exc: HTTPException) -> Response:
    """Render an HTTP exception as ``{"status_code", "detail"}``.

    Validation errors additionally carry the offending fields under ``extra``.
    """
    status_code = exc.status_code
    detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)

    content: dict = {"status_code": status_code, "detail": detail}
    if exc.extra:
        content["extra"] = exc.extra

    return Response(
        content=content,
        status_code=status_code,
        headers=exc.headers,
        media_type="application/json",
    )


def internal_server_error_handler(request: Request, exc: Exception) -> Response:
    """Log an unexpected exception and hide its details from the client."""
    if not observability.exception(
        "Unhandled exception on {method} {path}",
        method=request.method,
        path=request.url.path,
    ):
        logger.exception(
            "Unhandled exception on %s %s", request.method, request.url.path, exc_info=exc
        )

    return Response(
        content={"status_code": HTTP_500_INTERNAL_SERVER_ERROR, "detail": "Internal Server Error"},
        status_code=HTTP_500_INTERNAL_SERVER_ERROR,
        media_type="application/json",
    )
