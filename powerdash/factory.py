from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from starlette.middleware.trustedhost import TrustedHostMiddleware

from powerdash.api.router import api_router
from powerdash.clients.powermeter_api import PowerMeterApiClient
from powerdash.core.config import Settings, load_settings
from powerdash.core.logging import configure_logging
from powerdash.services.reports import ChannelLookup, ReportSequencer, ReportView

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or load_settings()
    configure_logging(settings.log_level, json_output=settings.log_json)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.settings = settings
        app.state.backend = PowerMeterApiClient(
            base_url=str(settings.backend_base_url),
            timeout_seconds=settings.backend_timeout_seconds,
            user_agent=settings.backend_user_agent,
        )
        logger.info(
            "powerdash starting: env=%s backend=%s timeout=%ss",
            settings.env,
            settings.backend_base_url,
            settings.backend_timeout_seconds,
        )
        yield
        app.state.backend.close()

    docs_enabled = settings.docs_enabled and not settings.is_production
    app = FastAPI(
        title="Power Meter Dashboard API",
        version="0.1.0",
        debug=settings.debug,
        docs_url="/docs" if docs_enabled else None,
        redoc_url=None,
        openapi_url="/openapi.json" if docs_enabled else None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.channel_lookup = ChannelLookup()
    app.state.report_sequencer = ReportSequencer()
    app.state.report_view = ReportView()
    app.state.raw_report_view = ReportView()

    app.add_middleware(GZipMiddleware, minimum_size=1024)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["Content-Type"],
    )
    if settings.trusted_hosts:
        app.add_middleware(TrustedHostMiddleware, allowed_hosts=settings.trusted_hosts)

    @app.middleware("http")
    async def security_headers(request, call_next):
        response = await call_next(request)
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("Referrer-Policy", "no-referrer")
        response.headers.setdefault("Cross-Origin-Resource-Policy", "same-site")
        if settings.is_production:
            response.headers.setdefault(
                "Strict-Transport-Security", "max-age=31536000; includeSubDomains"
            )
        return response

    @app.get("/", tags=["meta"])
    def root():
        return {"name": "powerdash", "status": "ok"}

    app.include_router(api_router)
    return app
