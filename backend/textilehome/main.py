import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from apscheduler.schedulers.background import BackgroundScheduler
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from textilehome.api.health import router as health_router
from textilehome.api.routes_admin import router as admin_router
from textilehome.api.routes_buddy import router as buddy_router
from textilehome.api.routes_cart import router as cart_router
from textilehome.api.routes_catalogue import router as catalogue_router
from textilehome.api.routes_security import router as security_router
from textilehome.config import Settings, settings
from textilehome.db import SessionLocal, init_db
from textilehome.logging_config import setup_logging
from textilehome.security import SecurityConfig, SecurityGuard, SecurityMiddleware
from textilehome.services.admin_service import AdminService

log = logging.getLogger("textilehome")
http_log = logging.getLogger("textilehome.http")

LOG_LINE_MAX = 80


def request_log_line(method: str, path: str, status: int, ms: int, body: bytes = b"") -> str:
    line = f"{method} {path} {status} in {ms}ms"
    if body:
        line += " :: " + body.decode("utf-8", errors="replace")
    if len(line) > LOG_LINE_MAX:
        line = line[: LOG_LINE_MAX - 1] + "…"
    return line


def create_app(app_settings: Settings = settings, guard: Optional[SecurityGuard] = None) -> FastAPI:
    setup_logging(app_settings.LOG_LEVEL)
    guard = guard or SecurityGuard(SecurityConfig.from_settings(app_settings))

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        init_db(seed=app_settings.SEED_ON_STARTUP)

        scheduler = BackgroundScheduler()

        def sweep_job():
            guard.sweep()

        def purge_sessions_job():
            db = SessionLocal()
            try:
                removed = AdminService(db).purge_expired_sessions()
                if removed:
                    log.info("Purged %d expired admin sessions", removed)
            finally:
                db.close()

        scheduler.add_job(
            sweep_job, "interval",
            minutes=app_settings.SUSPICIOUS_SWEEP_MINUTES, id="sweep_suspicious",
        )
        scheduler.add_job(
            purge_sessions_job, "interval",
            minutes=app_settings.SESSION_PURGE_MINUTES, id="purge_admin_sessions",
        )
        scheduler.start()
        app.state.scheduler = scheduler

        try:
            yield
        finally:
            scheduler.shutdown(wait=False)

    app = FastAPI(title="TextileHome - Backend", version="1.0.0", lifespan=lifespan)
    app.state.security = guard
    app.state.settings = app_settings

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={"detail": "Invalid request data", "errors": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception):
        log.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        path = request.url.path
        if not path.startswith("/api"):
            return response

        body = b""
        if "application/json" in response.headers.get("content-type", ""):
            async for chunk in response.body_iterator:
                body += chunk
            response = Response(
                content=body,
                status_code=response.status_code,
                headers=dict(response.headers),
                media_type=response.media_type,
            )
        ms = int((time.perf_counter() - start) * 1000)
        http_log.info(request_log_line(request.method, path, response.status_code, ms, body))
        return response

    app.add_middleware(SecurityMiddleware, guard=guard)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.FRONTEND_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["x-session-id"],
    )

    app.include_router(health_router, prefix="/api", tags=["health"])

    app.include_router(catalogue_router, prefix="/api/products", tags=["catalogue"])

    app.include_router(cart_router, tags=["cart"])

    app.include_router(admin_router, tags=["admin"])

    app.include_router(security_router, tags=["security"])

    app.include_router(buddy_router, tags=["buddy"])

    return app


app = create_app()


def run():
    import uvicorn

    uvicorn.run(app, host=settings.APP_HOST, port=settings.APP_PORT)
