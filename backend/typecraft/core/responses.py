"""Response builders shared by the routers and the exception handler.

Three shapes leave this service: JSON bodies, form re-render payloads
(the data a client needs to show a form again with an error), and 303
redirects carrying a flash ``message`` in the query string.
"""

from typing import Any, Mapping, Optional
from urllib.parse import urlencode

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse, RedirectResponse


def build_redirect_url(path: str, params: Optional[Mapping[str, Any]] = None) -> str:
    """Append *params* to *path*, skipping values that are None or empty."""
    query = {k: v for k, v in (params or {}).items() if v is not None and v != ""}
    if not query:
        return path
    return f"{path}?{urlencode(query)}"


def redirect(path: str, **params: Any) -> RedirectResponse:
    """303 See Other, so the browser follows up with a GET."""
    return RedirectResponse(build_redirect_url(path, params), status_code=303)


def json_response(content: Any, status_code: int = 200) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=jsonable_encoder(content))


def json_message(message: str, status_code: int = 200, success: Optional[bool] = None,
                 **extra: Any) -> JSONResponse:
    body: dict = {}
    if success is not None:
        body["success"] = success
    body["message"] = message
    body.update(extra)
    return json_response(body, status_code=status_code)


def render_form(form: str, error: Optional[str], status_code: int = 400, **context: Any) -> JSONResponse:
    """Payload for showing *form* again, e.g. ``render_form("add_text", msg, title=..., categories=[...])``."""
    return json_response({"form": form, "error": error, **context}, status_code=status_code)
