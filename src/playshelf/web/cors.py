"""
CORS headers middleware for the public API.

The catalog UI is served from arbitrary origins, so every response carries
permissive CORS headers and preflight requests are answered directly with an
empty 200.
"""

from __future__ import annotations

from typing import Callable, Optional, Sequence

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

DEFAULT_ALLOW_METHODS = ("GET", "OPTIONS", "PATCH", "DELETE", "POST", "PUT")
DEFAULT_ALLOW_HEADERS = (
    "X-CSRF-Token",
    "X-Requested-With",
    "Accept",
    "Accept-Version",
    "Content-Length",
    "Content-MD5",
    "Content-Type",
    "Date",
    "X-Api-Version",
)


class CorsHeadersMiddleware(BaseHTTPMiddleware):
    """Adds CORS headers to all responses and short-circuits ``OPTIONS``."""

    def __init__(
        self,
        app,
        allow_origin: str = "*",
        allow_methods: Optional[Sequence[str]] = None,
        allow_headers: Optional[Sequence[str]] = None,
        allow_credentials: bool = True,
    ):
        super().__init__(app)
        self.headers = {
            "Access-Control-Allow-Origin": allow_origin,
            "Access-Control-Allow-Methods": ",".join(allow_methods or DEFAULT_ALLOW_METHODS),
            "Access-Control-Allow-Headers": ", ".join(allow_headers or DEFAULT_ALLOW_HEADERS),
        }
        if allow_credentials:
            self.headers["Access-Control-Allow-Credentials"] = "true"

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.method == "OPTIONS":
            response = Response(status_code=200)
        else:
            response = await call_next(request)

        for name, value in self.headers.items():
            response.headers[name] = value
        return response
