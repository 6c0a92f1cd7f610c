import logging

from fastapi import Depends, FastAPI
from sqlalchemy.orm import Session

from artmarket.api.errors import register_exception_handlers
from artmarket.api.search import router as search_router
from artmarket.api.triggers import router as triggers_router
from artmarket.core.config import settings
from artmarket.core.context import build_context
from artmarket.db.deps import get_db
from artmarket.middleware.correlation_id import CorrelationIdLogFilter, CorrelationIdMiddleware

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(correlation_id)s] %(message)s"

app = FastAPI(title="Artmarket Backend")

app.add_middleware(CorrelationIdMiddleware)
register_exception_handlers(app)


def configure_logging(level: str) -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    for handler in logging.getLogger().handlers:
        handler.addFilter(CorrelationIdLogFilter())


def validate_production_settings() -> list[str]:
    """Configuration problems that must stop a production start."""
    production_errors = []
    if not settings.push_dry_run and not settings.fcm_server_key:
        production_errors.append(
            "FCM_SERVER_KEY is required in production when PUSH_DRY_RUN is false. "
            "Set FCM_SERVER_KEY environment variable with your FCM server key."
        )
    if not settings.search_api_key and not (settings.search_username and settings.search_password):
        production_errors.append(
            "Search credentials are required in production. "
            "Set SEARCH_API_KEY, or SEARCH_USERNAME and SEARCH_PASSWORD."
        )
    if settings.search_dry_run:
        production_errors.append(
            "SEARCH_DRY_RUN must be False in production. "
            "Set SEARCH_DRY_RUN=false or remove SEARCH_DRY_RUN from environment variables."
        )
    return production_errors


@app.on_event("startup")
async def startup_event():
    """Configure logging, validate settings and build the service context."""
    configure_logging(settings.log_level)

    if settings.app_env == "production":
        production_errors = validate_production_settings()
        if production_errors:
            error_message = (
                "Production environment validation failed:\n\n"
                + "\n".join(f"  - {error}" for error in production_errors)
                + "\n\n"
                "The application cannot start in production with these missing or invalid settings. "
                "Please fix the configuration and restart."
            )
            logger.error(error_message)
            raise RuntimeError(error_message)

    app.state.context = build_context(settings)

    # Log enabled integrations summary (no secrets)
    logger.info(
        "Startup: Configuration loaded - "
        f"Environment: {settings.app_env}, "
        f"Search index: {settings.search_artworks_index}, "
        f"Search dry-run: {settings.search_dry_run}, "
        f"Push dry-run: {settings.push_dry_run}"
    )


@app.on_event("shutdown")
async def shutdown_event():
    context = getattr(app.state, "context", None)
    if context is not None:
        await context.aclose()


@app.get("/health")
def health():
    """
    Health check endpoint with feature flag visibility.

    Returns 200 immediately - used for basic health checks.
    """
    return {
        "ok": True,
        "environment": settings.app_env,
        "features": {
            "notifications_enabled": settings.feature_notifications_enabled,
            "search_sync_enabled": settings.feature_search_sync_enabled,
        },
        "integrations": {
            "search_index": settings.search_artworks_index,
            "search_dry_run": settings.search_dry_run,
            "push_dry_run": settings.push_dry_run,
        },
    }


@app.get("/ready")
def ready(db: Session = Depends(get_db)):
    """
    Readiness check endpoint - verifies database connectivity.

    Returns 200 if database is accessible, 503 if not.
    """
    from sqlalchemy import text

    try:
        db.execute(text("SELECT 1"))
        return {"ok": True, "database": "connected"}
    except Exception as e:
        logger.error(f"Readiness check failed: {e}")
        from fastapi import status
        from fastapi.responses import JSONResponse

        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"ok": False, "database": "disconnected", "error": str(e)},
        )


app.include_router(triggers_router, prefix="/triggers", tags=["triggers"])
app.include_router(search_router, prefix="/search", tags=["search"])
