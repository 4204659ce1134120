# wl_app/main.py
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from wl_app.core.config import Settings, get_settings
from wl_app.core.errors import ApiError, api_error_handler, error_response
from wl_app.core.logging import setup_logging
from wl_app.db.base import Database, init_db
from wl_app.api.deps import new_buckets

import wl_app.api.admin as admin_api
import wl_app.api.health as health_api
import wl_app.api.waitlist as waitlist_api

log = logging.getLogger(__name__)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Resource-Policy": "same-origin",
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    # DatabaseConfigError and bootstrap failures abort startup
    db = Database(settings)
    try:
        await init_db(db.engine)
    except Exception:
        await db.dispose()
        raise
    app.state.db = db
    log.info("waitlist backend ready on port %s", settings.port)
    if settings.allowed_origins:
        log.info("allowed origins: %s", ", ".join(settings.allowed_origins))
    try:
        yield
    finally:
        await db.dispose()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings.log_level)

    app = FastAPI(title="Waitlist", lifespan=lifespan)
    app.state.settings = settings
    app.state.rate_buckets = new_buckets()

    app.include_router(health_api.router)
    app.include_router(waitlist_api.router)
    app.include_router(admin_api.router)

    app.add_exception_handler(ApiError, api_error_handler)

    @app.middleware("http")
    async def request_guard(request: Request, call_next):
        length = request.headers.get("content-length")
        if length and length.isdigit() and int(length) > settings.max_body_bytes:
            response = error_response(413, "payload_too_large")
        else:
            try:
                response = await asyncio.wait_for(
                    call_next(request), timeout=settings.request_timeout_sec
                )
            except asyncio.TimeoutError:
                log.warning("%s %s timed out", request.method, request.url.path)
                response = error_response(504, "timeout")
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response

    # empty allow list = any origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_origin_regex=None if settings.allowed_origins else ".*",
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    return app


app = create_app()
