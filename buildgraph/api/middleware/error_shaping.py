"""
Error responses for the HTTP surface.

BuildGraphError is a configuration problem in the submitted descriptors and
answers 422 with the error's own to_dict() as `detail`. Anything else is a
bug and answers a bare 500; the traceback only goes to the server log.
Both carry the request id so a report can be matched to the log line.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional

from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse, Response

from buildgraph.core.errors import BuildGraphError
from buildgraph.core.observability.metrics import inc_named

log = logging.getLogger("buildgraph.errors")


def _request_id(request: Request) -> Optional[str]:
    return getattr(request.state, "request_id", None) or request.headers.get("x-request-id")


def _payload(detail: Any, rid: Optional[str]) -> Dict[str, Any]:
    payload: Dict[str, Any] = {"detail": detail}
    if rid:
        payload["request_id"] = rid
    return payload


async def build_graph_error_handler(request: Request, exc: BuildGraphError) -> JSONResponse:
    rid = _request_id(request)
    inc_named(f"api_rejected_{exc.code.lower()}")
    log.info("rejected code=%s rid=%s path=%s: %s", exc.code, rid, request.url.path, exc)
    return JSONResponse(status_code=422, content=_payload(exc.to_dict(), rid))


class SafeErrorMiddleware(BaseHTTPMiddleware):
    """Last line of defence: unhandled exceptions become a 500 with no stack trace."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except Exception:
            rid = _request_id(request)
            log.exception("unhandled error rid=%s method=%s path=%s", rid, request.method, request.url.path)
            return JSONResponse(status_code=500, content=_payload("Internal Server Error", rid))


def install_error_handling(app: FastAPI) -> None:
    app.add_exception_handler(BuildGraphError, build_graph_error_handler)
    app.add_middleware(SafeErrorMiddleware)
