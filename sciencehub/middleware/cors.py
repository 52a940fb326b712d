"""
CORS middleware answering every preflight with 204.
"""

from typing import Iterable

from fastapi import Request, Response, status
from starlette.middleware.base import BaseHTTPMiddleware


class CORSHeadersMiddleware(BaseHTTPMiddleware):
    """Adds CORS headers to every response and short-circuits ``OPTIONS``."""

    def __init__(
        self,
        app,
        allow_origin: str = "*",
        allow_headers: Iterable[str] = ("authorization", "x-client-info", "apikey", "content-type"),
        allow_methods: Iterable[str] = ("POST", "OPTIONS"),
    ):
        super().__init__(app)
        self.cors_headers = {
            "Access-Control-Allow-Origin": allow_origin,
            "Access-Control-Allow-Headers": ", ".join(allow_headers),
            "Access-Control-Allow-Methods": ", ".join(allow_methods),
        }

    async def dispatch(self, request: Request, call_next):
        if request.method == "OPTIONS":
            return Response(status_code=status.HTTP_204_NO_CONTENT, headers=self.cors_headers)

        response = await call_next(request)
        response.headers.update(self.cors_headers)
        return response
