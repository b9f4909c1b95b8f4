"""Finance Tracker API — Main entry point."""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from app import __version__
from app.config import settings
from app.core.database import async_session_factory, engine
from app.core.logging import configure_logging
from app.core.middleware import RequestLoggingMiddleware

configure_logging()
logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown events."""
    logger.info("Starting Finance Tracker API", env=settings.app_env, version=__version__)
    yield
    logger.info("Shutting down Finance Tracker API")
    await engine.dispose()


app = FastAPI(
    title="Finance Tracker API",
    description="Personal finance tracking: transactions, categories and dashboard aggregates",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    # Trailing slash redirects drop the Authorization header behind the frontend proxy
    redirect_slashes=False,
)

# ── Middleware ─────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)


# ── Health Check ──────────────────────────────────
@app.get("/health", tags=["system"])
async def health_check():
    """Liveness probe — always returns healthy if the process is running."""
    return {"status": "healthy", "version": __version__}


@app.get("/ready", tags=["system"])
async def readiness_check():
    """Readiness probe — checks DB connectivity."""
    checks = {"database": "unknown", "api": "ok"}
    try:
        async with async_session_factory() as session:
            await session.execute(text("SELECT 1"))
            checks["database"] = "ok"
    except Exception as e:
        logger.warning("readiness_check_failed", error=str(e))
        checks["database"] = f"error: {e}"
        return {"status": "degraded", "checks": checks}

    return {"status": "ready", "checks": checks}


# ── API Routes ────────────────────────────────────
from app.api.v1 import analytics, auth, categories, transactions, users  # noqa: E402

app.include_router(auth.router, prefix="/api/v1/auth", tags=["auth"])
app.include_router(users.router, prefix="/api/v1/users", tags=["users"])
app.include_router(categories.router, prefix="/api/v1/categories", tags=["categories"])
app.include_router(transactions.router, prefix="/api/v1/transactions", tags=["transactions"])
app.include_router(analytics.router, prefix="/api/v1/analytics", tags=["analytics"])
