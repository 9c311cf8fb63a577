from __future__ import annotations

import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from starlette.middleware.trustedhost import TrustedHostMiddleware

from weather_app.api.router import api_router
from weather_app.clients.base import WeatherClient
from weather_app.clients.openweather import OpenWeatherClient
from weather_app.core.config import Settings, load_settings
from weather_app.core.logging import configure_logging
from weather_app.repositories.location import LocationStore
from weather_app.repositories.location_file import JsonFileLocationStore
from weather_app.services.weather import WeatherFetchController

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    *,
    weather_client: WeatherClient | None = None,
    location_store: LocationStore | None = None,
) -> FastAPI:
    settings = settings or load_settings()
    configure_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        startup_fetch: asyncio.Task[None] | None = None
        owned_client: OpenWeatherClient | None = None

        client = weather_client
        if client is None:
            if not settings.openweather_api_key:
                logger.warning("WEATHER_OPENWEATHER_API_KEY is not set; fetches will fail")
            owned_client = OpenWeatherClient(
                api_key=settings.openweather_api_key,
                timeout_seconds=settings.request_timeout_seconds,
                base_url=settings.openweather_base_url,
                country_suffix=settings.city_country_suffix,
            )
            client = owned_client
        store = location_store or JsonFileLocationStore(settings.location_store_path)

        controller = WeatherFetchController(
            client=client,
            store=store,
            # Slightly above the transport timeout so httpx reports its own errors first.
            timeout_seconds=settings.request_timeout_seconds + 1.0,
        )
        app.state.weather_controller = controller

        if settings.fetch_on_startup:
            startup_fetch = asyncio.create_task(controller.fetch_by_last_location())

        yield
        if startup_fetch is not None and not startup_fetch.done():
            startup_fetch.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await startup_fetch
        await controller.aclose()
        if owned_client is not None:
            await owned_client.aclose()

    docs_enabled = settings.docs_enabled and not settings.is_production
    app = FastAPI(
        title="Weather Fetch API",
        version="0.1.0",
        debug=settings.debug,
        docs_url="/docs" if docs_enabled else None,
        redoc_url=None,
        openapi_url="/openapi.json" if docs_enabled else None,
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(GZipMiddleware, minimum_size=1024)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "OPTIONS"],
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
        if settings.is_production:
            response.headers.setdefault(
                "Strict-Transport-Security", "max-age=31536000; includeSubDomains"
            )
        return response

    @app.get("/", tags=["meta"])
    def root():
        return {"name": "weather-app", "status": "ok"}

    app.include_router(api_router)
    return app
