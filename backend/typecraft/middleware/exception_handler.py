"""Exception handler middleware for structured error responses.

API clients get JSON ``{error, message, details}``. Browsers that hit an
authorization failure (they accept HTML but not JSON) are redirected to a
page that can explain it instead.
"""

import logging
from typing import Optional

from fastapi import Request
from fastapi.responses import JSONResponse, Response

from ..core.responses import redirect
from ..exceptions import (
    AuthenticationError,
    ForbiddenError,
    TextNotFoundError,
    TypecraftException,
)

logger = logging.getLogger(__name__)

# (path, message) a browser is sent to for each authorization failure.
_BROWSER_REDIRECTS = {
    AuthenticationError: ("/login", "Please log in"),
    TextNotFoundError: ("/profile", "Text not found"),
    ForbiddenError: ("/profile", "You do not have permission to access this text"),
}


def wants_html(request: Request) -> bool:
    """True when the client asks for HTML and does not accept JSON."""
    accept = request.headers.get("accept", "").lower()
    return "text/html" in accept and "application/json" not in accept


def _browser_redirect(exc: TypecraftException) -> Optional[tuple]:
    for exc_type, target in _BROWSER_REDIRECTS.items():
        if isinstance(exc, exc_type):
            return target
    return None


async def typecraft_exception_handler(request: Request, exc: TypecraftException) -> Response:
    """
    Handle custom exceptions and return structured responses.

    Args:
        request: FastAPI request object
        exc: TypecraftException instance

    Returns:
        JSONResponse with error details, or a 303 redirect for browsers
    """
    log = logger.warning if exc.status_code < 500 else logger.error
    log(
        f"TypecraftException: {exc.error_code.value}",
        extra={
            "error_code": exc.error_code.value,
            "path": request.url.path,
            "method": request.method,
            "details": exc.details,
            "status_code": exc.status_code
        }
    )

    target = _browser_redirect(exc)
    if target is not None and wants_html(request):
        path, message = target
        return redirect(path, message=message)

    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last resort: log the traceback, answer with a generic 500."""
    logger.exception(
        "Unhandled exception",
        extra={"path": request.url.path, "method": request.method},
    )
    return JSONResponse(
        status_code=500,
        content={"error": "INTERNAL_ERROR", "message": "An internal error occurred.", "details": {}},
    )
