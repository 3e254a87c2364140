from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from authserver.config import Settings, settings as default_settings
from authserver.db.mongo import connect_to_mongo, close_mongo_connection
from authserver.db.indexes import ensure_indexes

# Rate limiting
from slowapi.middleware import SlowAPIMiddleware
from slowapi.errors import RateLimitExceeded
from authserver.utils.rate_limit import limiter

# CORS gatekeeper + logging / errors
from authserver.utils.origin_guard import OriginGatekeeperMiddleware, build_allow_list
from authserver.utils.logging import logger, bind_request_id, request_id_ctx
from authserver.utils.response import iso_timestamp
from authserver.utils.errors import (
    handle_http_exception,
    handle_validation_error,
    handle_rate_limit,
    handle_unhandled,
)

from authserver.auth.routes import router as auth_router

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or default_settings
    allow_list = build_allow_list(settings.FRONTEND_URL)

    app = FastAPI(title=settings.APP_NAME, version="1.0.0")
    app.state.settings = settings
    app.state.allow_list = allow_list
    app.state.limiter = limiter

    # ----- Middleware (last added runs first) -----
    app.add_middleware(SlowAPIMiddleware)
    # Before any route handler and before the body is parsed
    app.add_middleware(OriginGatekeeperMiddleware, allow_list=allow_list)

    @app.middleware("http")
    async def add_request_id(request: Request, call_next):
        token = bind_request_id()
        try:
            response = await call_next(request)
            response.headers["X-Request-Id"] = request_id_ctx.get() or "-"
            return response
        finally:
            request_id_ctx.reset(token)

    # ----- Exception Handlers -----
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(RateLimitExceeded, handle_rate_limit)
    app.add_exception_handler(Exception, handle_unhandled)

    # ----- Lifecycle -----
    @app.on_event("startup")
    async def _startup():
        await connect_to_mongo(app, settings)
        await ensure_indexes(app.state.db)
        logger.info(f"Server running on port {settings.PORT}")
        logger.info(f"CORS enabled for: {list(allow_list)}")

    @app.on_event("shutdown")
    async def _shutdown():
        await close_mongo_connection(app)
        logger.info("Shutdown complete")

    # ----- Health -----
    @app.get("/", tags=["system"])
    async def root():
        return {
            "message": "Server is running!",
            "status": "OK",
            "timestamp": iso_timestamp(),
        }

    # ----- Routers -----
    app.include_router(auth_router, prefix="/auth", tags=["auth"])

    return app

# Exported for serverless / external ASGI servers
app = create_app()

def run(settings: Optional[Settings] = None) -> None:
    """Serve `app`, or an app built from `settings` when given; no listener in production."""
    target = create_app(settings) if settings is not None else app
    settings = settings or default_settings
    if settings.is_production:
        logger.info("NODE_ENV=production: app is exported, not binding a listener")
        return
    uvicorn.run(target, host="0.0.0.0", port=settings.PORT)
