"""
BT2 Horizon API.

Run with: uvicorn horizon.main:create_app --factory
"""
import logging
import time
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import models
from .config import Settings
from .database import build_engine, build_session_factory
from .email_service import Mailer
from .realtime import ChatBroadcaster
from .realtime import router as realtime_router
from .routers import (
    admin,
    auth,
    bank_details,
    calendar_deals,
    chat,
    crazy_deals,
    destinations,
    form_drafts,
    leads,
    packages,
    posts,
    requests,
    testimonials,
    travel_trips,
    uploads,
    users,
)
from .storage_service import BlobStorage
from .telegram_service import TelegramNotifier

logger = logging.getLogger(__name__)

API_ROUTERS = (
    posts.router,
    packages.router,
    crazy_deals.router,
    destinations.router,
    auth.router,
    users.router,
    uploads.router,
    leads.router,
    requests.router,
    calendar_deals.router,
    form_drafts.router,
    chat.router,
    travel_trips.router,
    testimonials.router,
    bank_details.router,
    admin.router,
)


def validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path"))
    return f"{field}: {first['msg']}" if field else first["msg"]


def wants_json(request: Request) -> bool:
    """API clients get JSON errors, browsers get sent to the frontend"""
    accept = request.headers.get("accept", "")
    if request.url.path == "/":
        return "application/json" in accept and "text/html" not in accept
    return (
        request.url.path.startswith("/api")
        or "application/json" in accept
        or "application/json" in request.headers.get("content-type", "")
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings()

    logging.basicConfig(level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))

    engine = build_engine(settings.DATABASE_URL)
    models.Base.metadata.create_all(bind=engine)

    app = FastAPI(title=settings.PROJECT_NAME, version="1.0.0")

    app.state.settings = settings
    app.state.engine = engine
    app.state.SessionLocal = build_session_factory(engine)
    app.state.mailer = Mailer(settings)
    app.state.notifier = TelegramNotifier(settings)
    app.state.storage = BlobStorage(settings)
    app.state.broadcaster = ChatBroadcaster()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start_time = time.time()
        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "%s %s failed after %.4fs", request.method, request.url.path, time.time() - start_time
            )
            return JSONResponse(status_code=500, content={"error": "Internal server error"})

        logger.info(
            "%s %s - %s - %.4fs",
            request.method,
            request.url.path,
            response.status_code,
            time.time() - start_time,
        )
        return response

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": validation_message(exc)})

    for router in API_ROUTERS:
        app.include_router(router)
    app.include_router(realtime_router)

    # Registered last so every real route matches first
    @app.api_route(
        "/{full_path:path}",
        methods=["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD"],
        include_in_schema=False,
    )
    async def fallback(request: Request, full_path: str):
        if wants_json(request):
            return JSONResponse(status_code=404, content={"error": "Route not found", "path": request.url.path})
        return RedirectResponse(settings.FRONTEND_URL, status_code=302)

    logger.info("%s started (%s)", settings.PROJECT_NAME, settings.ENVIRONMENT)
    return app
