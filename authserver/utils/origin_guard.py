from typing import Iterable, Optional, Tuple

from starlette.datastructures import Headers
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.types import ASGIApp, Receive, Scope, Send

from authserver.utils.errors import handle_unhandled
from authserver.utils.logging import logger

# Local Vite dev servers
DEV_ORIGINS: Tuple[str, ...] = (
    "http://localhost:5173",
    "http://localhost:5174",
    "http://127.0.0.1:5173",
    "http://127.0.0.1:5174",
)

# Leading dot is required: "fakevercel.app" must not match
VERCEL_SUFFIX = ".vercel.app"

ALLOW_METHODS = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
ALLOW_HEADERS = ["Content-Type", "Authorization"]


class OriginNotAllowed(Exception):
    def __init__(self, origin: str):
        super().__init__("Not allowed by CORS")
        self.origin = origin


def build_allow_list(frontend_url: Optional[str] = None) -> Tuple[str, ...]:
    """Exact-match origins: the dev servers plus the configured frontend, if any."""
    if frontend_url:
        return DEV_ORIGINS + (frontend_url,)
    return DEV_ORIGINS


def is_origin_allowed(origin: Optional[str], allow_list: Iterable[str]) -> bool:
    """
    Decide whether a cross-origin request may proceed.
    - no origin (curl, mobile apps, same-origin): allowed
    - exact match against the allow list: allowed
    - any *.vercel.app deployment (case-sensitive suffix): allowed
    - anything else: denied
    """
    if not origin:
        return True
    if origin in allow_list:
        return True
    return origin.endswith(VERCEL_SUFFIX)


class OriginGatekeeperMiddleware(CORSMiddleware):
    """
    Starlette's CORS handling with the admission decision swapped for
    is_origin_allowed. Denied origins get the global 500 handler's response
    (OriginNotAllowed, no CORS headers) instead of a silent header drop.
    """

    def __init__(self, app: ASGIApp, allow_list: Tuple[str, ...] = DEV_ORIGINS):
        super().__init__(
            app,
            allow_origins=list(allow_list),
            allow_credentials=True,
            allow_methods=ALLOW_METHODS,
            allow_headers=ALLOW_HEADERS,
        )
        self.allow_list = allow_list

    def is_allowed_origin(self, origin: str) -> bool:
        return is_origin_allowed(origin, self.allow_list)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        origin = Headers(scope=scope).get("origin")
        if not origin:
            # nothing to echo back; Starlette would answer an empty Origin with ACAO: ""
            await self.app(scope, receive, send)
            return

        if not self.is_allowed_origin(origin):
            logger.warning(f"CORS rejected origin {origin!r}")
            try:
                raise OriginNotAllowed(origin)
            except OriginNotAllowed as exc:
                # answer here: a raise past ServerErrorMiddleware is re-raised into the server log
                response = await handle_unhandled(Request(scope, receive), exc)
            await response(scope, receive, send)
            return

        await super().__call__(scope, receive, send)
