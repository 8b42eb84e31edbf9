import logging

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from sharehub.config import settings
from sharehub.database import Base, engine
from sharehub.exception_handlers import register_exception_handlers
from sharehub.middleware.logging import StructuredLoggingMiddleware, setup_structured_logging
from sharehub.middleware.rate_limit import configure_rate_limiting
from sharehub.routes import auth, dashboard, events, photos, public, sessions, slides, speeches, tenant, tokens
from sharehub.scheduler import scheduler
from sharehub.services.activity_service import install_retention_policy
from sharehub.services.usage_recorder import usage_recorder

setup_structured_logging(log_level=settings.log_level, json_format=settings.log_json)
logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Create the FastAPI application."""
    app = FastAPI(
        title=settings.app_name,
        description="Multi-tenant event platform: events, sessions, speeches, slides and access tokens",
        debug=settings.debug,
        version=settings.app_version,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    configure_rate_limiting(app)
    app.add_middleware(StructuredLoggingMiddleware)
    register_exception_handlers(app)

    app.include_router(auth.router)
    app.include_router(events.router)
    app.include_router(sessions.router)
    app.include_router(speeches.router)
    app.include_router(slides.router)
    app.include_router(tokens.router)
    app.include_router(photos.router)
    app.include_router(public.router)
    app.include_router(dashboard.router)
    app.include_router(tenant.router)

    @app.on_event("startup")
    async def startup_event():
        """Tasks to run at application startup."""
        logger.info("Starting up %s (%s)", settings.app_name, settings.environment)
        if settings.debug:
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            logger.info("Database tables created (if not existing).")

        usage_recorder.start()
        if settings.activity_log_prune_enabled:
            install_retention_policy(scheduler)
            scheduler.start()

    @app.on_event("shutdown")
    async def shutdown_event():
        logger.info("Shutting down the application...")
        await usage_recorder.stop()
        if scheduler.running:
            scheduler.shutdown(wait=False)

    @app.get("/health", tags=["Health"])
    async def health():
        return {"status": "ok", "version": settings.app_version}

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=settings.port, reload=settings.debug)
