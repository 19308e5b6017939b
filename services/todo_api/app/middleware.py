"""
HTTP middleware for the todo API.

- OriginGuardMiddleware: drops requests whose Origin is not on the allowlist
  before they reach CORS handling or any route.
- PreflightCORSMiddleware: Starlette's CORSMiddleware, answering allowed
  preflights with an empty 204.
- BearerTokenMiddleware: optional shared-secret gate.
- EmptyOptionsMiddleware / UnhandledErrorMiddleware: plain OPTIONS answers
  and the generic 500, both inside the CORS layer.
"""
import hmac
import logging
from typing import Iterable, Optional

from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.datastructures import Headers
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger(__name__)

AUTH_EXEMPT_PATHS = frozenset({"/", "/health"})


class OriginGuardMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, allowed_origins: Iterable[str]):
        super().__init__(app)
        self.allowed_origins = frozenset(allowed_origins)

    async def dispatch(self, request: Request, call_next):
        origin = request.headers.get("origin")
        # no Origin header: curl, server-to-server, same-host tooling
        if origin is not None and origin not in self.allowed_origins:
            logger.warning("blocked origin %s on %s %s", origin, request.method, request.url.path)
            return PlainTextResponse("Not allowed by CORS", status_code=403)
        return await call_next(request)


class PreflightCORSMiddleware(CORSMiddleware):
    def preflight_response(self, request_headers: Headers) -> Response:
        resp = super().preflight_response(request_headers)
        if resp.status_code != 200:
            return resp
        headers = {
            k: v for k, v in resp.headers.items()
            if k.lower() not in ("content-length", "content-type")
        }
        return Response(status_code=204, headers=headers)


class EmptyOptionsMiddleware(BaseHTTPMiddleware):
    """OPTIONS that is not a CORS preflight still gets an empty 204 on any path."""

    async def dispatch(self, request: Request, call_next):
        if request.method == "OPTIONS":
            return Response(status_code=204)
        return await call_next(request)


class UnhandledErrorMiddleware(BaseHTTPMiddleware):
    """
    Last-resort 500 for exceptions no handler claimed. Sits inside the CORS
    layer so allowed origins still get their CORS headers on the error.
    """

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except Exception:
            logger.exception("unhandled error on %s %s", request.method, request.url.path)
            return JSONResponse({"message": "internal server error"}, status_code=500)


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Token from an `Authorization: Bearer <token>` header, else None."""
    if not authorization or not authorization.startswith("Bearer "):
        return None
    return authorization[len("Bearer "):]


class BearerTokenMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, token: Optional[str]):
        super().__init__(app)
        self.token = token or None

    async def dispatch(self, request: Request, call_next):
        if (
            self.token is None
            or request.method == "OPTIONS"
            or request.url.path in AUTH_EXEMPT_PATHS
        ):
            return await call_next(request)

        supplied = bearer_token(request.headers.get("authorization"))
        if supplied is None or not hmac.compare_digest(supplied.encode(), self.token.encode()):
            return JSONResponse({"message": "Unauthorized"}, status_code=401)
        return await call_next(request)
