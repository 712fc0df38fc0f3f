"""FastAPI main application."""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from clipdash import __version__
from clipdash.config import settings
from clipdash.database import init_db
from clipdash.platforms.errors import ProviderError
from clipdash.services.error_tracking import error_tracker
from clipdash.services.logging_service import app_logger, app_metrics, configure_logging

# Import routers
from clipdash.routers import accounts, admin, campaigns, export, health, metrics, payments, videos, wallet

# Import middlewares
from clipdash.middleware import CacheMiddleware, AuditLogMiddleware

configure_logging(settings.LOG_LEVEL)

# Create FastAPI application
app = FastAPI(
    title="Clipdash API",
    description="Creator account tracking, campaign earnings and payouts for Instagram, YouTube and TikTok",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(AuditLogMiddleware)

# Dashboard metrics are cached per caller; a finished sync clears them
app.add_middleware(
    CacheMiddleware,
    default_ttl=settings.CACHE_TTL_SECONDS,
    cache_prefixes=["/api/metrics"]
)


@app.exception_handler(ProviderError)
async def provider_error_handler(request: Request, exc: ProviderError):
    """Answer scraping provider failures with their mapped status and message."""
    app_metrics.increment_provider_error(exc.status_code)
    app_logger.warning(
        "provider error",
        provider=exc.provider,
        status_code=exc.status_code,
        error=exc.message,
        path=request.url.path
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.message}
    )


@app.on_event("startup")
async def startup_event():
    """Initialize application on startup."""
    # Initialize database (create tables if they don't exist)
    init_db()

    # Start APScheduler for the periodic account sync
    from clipdash.services.scheduler_service import start_scheduler
    start_scheduler()

    app_logger.info(
        "application started",
        environment=settings.ENVIRONMENT,
        version=__version__,
        scheduler_enabled=settings.SCHEDULER_ENABLED,
        sentry_enabled=error_tracker.sentry_enabled
    )


@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on application shutdown."""
    from clipdash.services.scheduler_service import shutdown_scheduler
    shutdown_scheduler()

    app_logger.info("application shutting down")


@app.get("/")
async def root():
    """Root endpoint - API health check."""
    return {
        "message": "Clipdash API",
        "version": __version__,
        "status": "operational",
        "environment": settings.ENVIRONMENT,
        "documentation": "/docs"
    }


# Include routers
app.include_router(health.router, tags=["Health & Monitoring"])
app.include_router(accounts.instagram_router, prefix="/api/accounts/instagram", tags=["Instagram"])
app.include_router(accounts.tiktok_router, prefix="/api/accounts/tiktok", tags=["TikTok"])
app.include_router(accounts.youtube_router, prefix="/api/accounts/youtube", tags=["YouTube"])
app.include_router(admin.router, prefix="/api/admin", tags=["Admin"])
app.include_router(wallet.admin_router, prefix="/api/admin/payouts", tags=["Payouts"])
app.include_router(campaigns.router, prefix="/api/campaigns", tags=["Campaigns"])
app.include_router(payments.router, prefix="/api/payments", tags=["Payments"])
app.include_router(wallet.router, prefix="/api/wallet", tags=["Wallet"])
app.include_router(metrics.router, prefix="/api/metrics", tags=["Metrics"])
app.include_router(videos.router, prefix="/api/videos", tags=["Videos"])
app.include_router(export.router, prefix="/api/export", tags=["Export"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "clipdash.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG
    )
