from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api_routers.v1 import api_router
from app.features.health.routes.health import router as health_router
from app.features.scan.services.storage.report_store import ReportStore
from app.middlewares.security_headers import SecurityHeadersMiddleware
from app.platform.config import settings
from app.platform.exceptions import add_exception_handlers

APP_VERSION = "1.0.0"


def create_app() -> FastAPI:
    app = FastAPI(
        title=f"{settings.APP_NAME} API",
        description="Accessibility scanning of web pages against WCAG 2 A/AA",
        version=APP_VERSION,
    )

    # Reports live for the lifetime of this application instance
    app.state.report_store = ReportStore()

    # Root endpoint for basic info
    @app.get("/", tags=["Info"])
    def root():
        return {
            "app_name": f"{settings.APP_NAME} API",
            "description": "Scan a web page for accessibility issues and get a plain-language report.",
            "version": APP_VERSION,
            "docs_url": "/docs",
            "api_base": settings.API_PREFIX,
        }

    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.CORS_ALLOWED_ORIGIN],
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    add_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(api_router, prefix=settings.API_PREFIX)

    return app


app = create_app()
