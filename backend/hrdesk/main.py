"""
HR Desk Backend - FastAPI Application Factory
==============================================

What:  Builds the two HR Desk backends from one factory.
How:   create_app(kind) assembles middleware, exception handlers and the
       routers of one application; the module exposes both instances.
Who:   uvicorn:
           uvicorn hrdesk.main:attendance_app  --port 3001
           uvicorn hrdesk.main:recruitment_app --port 3101

Application Architecture:
    ┌──────────────────────────────┐   ┌──────────────────────────────┐
    │ attendance_app               │   │ recruitment_app              │
    │  /api/ping                   │   │  /api/ping                   │
    │  /api/attendance/*           │   │  /api/recruitment/*          │
    │  /health                     │   │  /api/recruitment/admin/*    │
    │        │                     │   │  /health                     │
    │        ▼                     │   │        │                     │
    │  AsyncSession → database     │   │  app.state.store (in memory) │
    └──────────────────────────────┘   └──────────────────────────────┘
      shared: settings, logging, middleware chain, exception handlers

Lifecycle:
    attendance   startup: logging, optional create_tables; shutdown: dispose engine
    recruitment  startup: logging, seed the in-memory store; shutdown: drop it
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from hrdesk import __version__
from hrdesk.config import settings
from hrdesk.database import create_tables, dispose_engine
from hrdesk.exceptions import HrDeskError, RateLimitExceededError
from hrdesk.middleware.logging import RequestLoggingMiddleware
from hrdesk.middleware.rate_limit import RateLimitMiddleware
from hrdesk.middleware.request_id import RequestIDMiddleware, request_id_var
from hrdesk.routes import admin, attendance, health, recruitment
from hrdesk.services.recruitment_store import RecruitmentStore

logger = logging.getLogger(__name__)

ATTENDANCE = "attendance"
RECRUITMENT = "recruitment"


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure the root logger once per process.

    Format: 2025-01-15T12:00:00 [INFO] hrdesk.access: GET /api/attendance 200 3.2ms [1f0c2a9e] from 127.0.0.1
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    for noisy in ("uvicorn.access", "sqlalchemy.engine", "httpcore", "httpx"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Lifespans
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def attendance_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    logger.info("Attendance backend starting (version %s)", __version__)

    if settings.auto_create_tables:
        await create_tables()

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.attendance_port)

    yield

    logger.info("Attendance backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


@asynccontextmanager
async def recruitment_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Seeds the mock dataset; all recruitment state lives in app.state.store."""
    setup_logging()
    logger.info("Recruitment backend starting (version %s)", __version__)

    app.state.store = RecruitmentStore.seeded(
        candidate_count=settings.recruitment_seed_candidates,
        initial_password=settings.recruitment_initial_password,
        fiscal_year_start_month=settings.recruitment_fiscal_year_start_month,
    )

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.recruitment_port)

    yield

    logger.info("Recruitment backend shutting down...")
    app.state.store = None
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Render every error as {"error", "message", "details"?, "request_id"}.

    HrDeskError subclasses carry their own status_code and error_code:
        ValidationError 400, AuthenticationError 401, PermissionDeniedError 403,
        NotFoundError 404, ConflictError 409, RateLimitExceededError 429,
        DatabaseError 500

    5xx responses never echo internal details; they are logged server-side.
    """

    @app.exception_handler(HrDeskError)
    async def handle_hrdesk_error(request: Request, exc: HrDeskError):
        rid = request_id_var.get("")
        headers = {}

        if exc.status_code >= 500:
            logger.error("[%s] %s: %s | Context: %s", rid, type(exc).__name__, exc.message, exc.context)
            content = {
                "error": exc.error_code,
                "message": "An internal error occurred. Please try again later.",
                "request_id": rid,
            }
        else:
            if exc.status_code == 400:
                logger.warning("[%s] Validation error: %s", rid, exc.message)
            content = {
                "error": exc.error_code,
                "message": exc.message,
                "details": exc.context or None,
                "request_id": rid,
            }

        if isinstance(exc, RateLimitExceededError):
            headers["Retry-After"] = str(exc.retry_after)

        return JSONResponse(status_code=exc.status_code, content=content, headers=headers)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": "An unexpected error occurred. Please try again or contact support.",
                "request_id": rid,
            },
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

_APPS: Dict[str, Dict[str, Any]] = {
    ATTENDANCE: {
        "title": "HR Desk Attendance API",
        "description": "Clock-in/out recording with daily and monthly summaries.",
        "lifespan": attendance_lifespan,
        "routers": [attendance.router, health.router],
    },
    RECRUITMENT: {
        "title": "HR Desk Recruitment API",
        "description": (
            "Applicant tracking over an in-memory mock dataset: candidates, "
            "interviews, accounts and period-based recruiting metrics."
        ),
        "lifespan": recruitment_lifespan,
        "routers": [recruitment.ping_router, recruitment.router, admin.router, health.router],
    },
}


def create_app(kind: str) -> FastAPI:
    """
    Create the attendance or the recruitment application.

    Args:
        kind: "attendance" or "recruitment"

    Raises:
        ValueError: Unknown kind
    """
    if kind not in _APPS:
        raise ValueError(f"unknown application kind: {kind!r}")
    profile = _APPS[kind]

    app = FastAPI(
        title=profile["title"],
        description=profile["description"],
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=profile["lifespan"],
    )
    app.state.kind = kind

    # Last added runs first: RequestID → RateLimit → Logging → GZip → CORS.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Total-Count", "Retry-After"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    if settings.rate_limit_enabled:
        app.add_middleware(RateLimitMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    for router in profile["routers"]:
        app.include_router(router)

    return app


attendance_app = create_app(ATTENDANCE)
recruitment_app = create_app(RECRUITMENT)
