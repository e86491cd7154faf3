# app/main.py
"""
FastAPI application entry point.
Includes CORS, request timing, error translation, and all routers.
"""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from app.routers import analytics, auth, health, notifications, teams, timeline, users, vehicles, webhooks
from app.database import create_tables
from app.config import settings
from app.errors import ReconError
from app.utils.logger import get_logger
import time

logger = get_logger(__name__)

app = FastAPI(
    title="Recon Tracker API",
    description="Vehicle reconditioning board, timeline, analytics and notifications.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# ── CORS (the web dashboard calls the API from its own origin) ──────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.BASE_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Request Timing Middleware ────────────────────────────────────────────────
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    response = await call_next(request)
    duration = round((time.time() - start) * 1000, 2)
    logger.debug(f"{request.method} {request.url.path} → {response.status_code} ({duration}ms)")
    return response


# ── Error Translation ────────────────────────────────────────────────────────
@app.exception_handler(ReconError)
async def recon_error_handler(request: Request, exc: ReconError):
    if exc.status_code >= 500:
        logger.error(f"{exc.code} on {request.url.path}: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content={"detail": "Internal server error"})
    logger.info(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message, "code": exc.code})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"field": ".".join(str(p) for p in err.get("loc", ()) if p != "body"), "message": err.get("msg")}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Invalid request", "code": "VALIDATION_ERROR", "errors": errors},
    )


# ── Global Exception Handler ─────────────────────────────────────────────────
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


# ── Routers ──────────────────────────────────────────────────────────────────
app.include_router(vehicles.router,      prefix="/api/v1", tags=["🚗 Vehicles"])
app.include_router(timeline.router,      prefix="/api/v1", tags=["🕒 Timeline"])
app.include_router(teams.router,         prefix="/api/v1", tags=["👥 Teams"])
app.include_router(analytics.router,     prefix="/api/v1", tags=["📊 Analytics"])
app.include_router(health.router,        prefix="/api/v1", tags=["💚 Health"])
app.include_router(auth.router,          prefix="/api",    tags=["🔑 Auth"])
app.include_router(users.router,         prefix="/api",    tags=["🧑 Users"])
app.include_router(notifications.router, prefix="/api",   tags=["🔔 Notifications"])
app.include_router(webhooks.router,      prefix="/api",    tags=["📡 Webhooks"])


# ── Startup ───────────────────────────────────────────────────────────────────
@app.on_event("startup")
async def startup():
    logger.info("🚀 Recon Tracker starting up...")
    create_tables()
    logger.info("✅ Database tables ready")
    logger.info(f"✉️  Mail: {'SMTP ' + settings.SMTP_HOST if settings.mail_enabled else 'mock (logged only)'}")
    if settings.NOTIFICATION_WEBHOOK_URL:
        logger.info(f"📡 Status-change webhook → {settings.NOTIFICATION_WEBHOOK_URL}")
    logger.info(f"🌐 Listening on http://{settings.BACKEND_HOST}:{settings.BACKEND_PORT}")
    logger.info("📖 API docs at /docs")


@app.on_event("shutdown")
async def shutdown():
    logger.info("🛑 Recon Tracker shutting down...")
