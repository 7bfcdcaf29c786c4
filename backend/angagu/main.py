"""
ANGAGU Backend — FastAPI Application Factory
=============================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() assembles middleware, exception handlers and routers;
       the lifespan configures logging and checks settings on startup and
       disposes the engine on shutdown.
Who:   uvicorn (`uvicorn angagu.main:app`) and the test suite.

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware: Rate Limit → Request ID → Access Log        │
    │              → GZip → CORS                               │
    │                                                          │
    │  Routers:   /customer/*   /company/*   /admin/*  /health │
    │                                                          │
    │  Exception Handlers (all render the error envelope):     │
    │    ApiError                → carried status + errCode    │
    │    RequestValidationError  → 422 / 504                   │
    │    Exception               → 500 / 0                     │
    └──────────────────────────────────────────────────────────┘
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from angagu import __version__
from angagu.config import settings
from angagu.database import dispose_engine
from angagu.error_codes import ErrCode
from angagu.exceptions import ApiError
from angagu.middleware.logging import RequestLoggingMiddleware
from angagu.middleware.rate_limit import RateLimitMiddleware
from angagu.middleware.request_id import RequestIDMiddleware, request_id_var
from angagu.routes import admin, company, customer, health
from angagu.schemas.common import error_body

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure the root logger once, before anything else logs.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Level comes from settings.log_level; chatty third-party loggers are
    capped at WARNING.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("ANGAGU Backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Keep serving: health checks and login still work without SMS
        logger.error("Configuration error: %s", str(e))

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("ANGAGU Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Render every failure as the error envelope.

        ApiError                → exc.status_code, exc.err_code (+ exc.extra)
        RequestValidationError  → 422, errCode 504 (body/path did not parse)
        Exception               → 500, errCode 0 (traceback logged only)
    """

    @app.exception_handler(ApiError)
    async def handle_api_error(request: Request, exc: ApiError):
        rid = request_id_var.get("")
        if exc.status_code >= 500:
            logger.error("[%s] %r %s", rid, exc, exc.context)
        else:
            logger.debug("[%s] %r", rid, exc)
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc.err_code, exc.extra),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        rid = request_id_var.get("")
        logger.warning("[%s] Request validation failed: %d error(s)", rid, len(exc.errors()))
        return JSONResponse(
            status_code=422,
            content=error_body(ErrCode.INVALID_CONTENT),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content=error_body(ErrCode.UNKNOWN),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """
    Assemble the application.

    Middleware executes in reverse order of addition, so the effective
    order is RateLimit → RequestID → Logging → GZip → CORS.
    """
    app = FastAPI(
        title="ANGAGU API",
        description=(
            "E-commerce backend for customers, sellers and admins: catalogue, "
            "orders, reviews, product Q&A, SMS-verified signup and address book."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(RateLimitMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(customer.router)
    app.include_router(company.router)
    app.include_router(admin.router)
    app.include_router(health.router)

    return app


# ── Application Instance ─────────────────────────────────────────────────
app = create_app()
