"""FastAPI application entry point."""

from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.routes import health, requests, users
from .config import settings
from .data.requests_repository import InMemoryRequestRepository, SupabaseRequestRepository
from .data.users_repository import InMemoryUserRepository, SupabaseUserRepository
from .db.supabase import get_supabase_client
from .services.geocoding import GeocodingClient


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def _attach_storage(app: FastAPI) -> None:
    client = get_supabase_client()
    if client is None:
        logging.getLogger(__name__).warning(
            "Supabase not configured - requests and users are kept in memory and lost on restart"
        )
        app.state.request_repository = InMemoryRequestRepository()
        app.state.user_repository = InMemoryUserRepository()
    else:
        app.state.request_repository = SupabaseRequestRepository(client, settings.requests_table)
        app.state.user_repository = SupabaseUserRepository(client, settings.users_table)
    app.state.geocoder = GeocodingClient()


STATE_HANDLES = ("request_repository", "user_repository", "geocoder")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Attach storage and the geocoder for the lifetime of the server, release them on shutdown."""
    _attach_storage(app)
    try:
        yield
    finally:
        for name in STATE_HANDLES:
            setattr(app.state, name, None)
        logging.getLogger(__name__).info("Storage handles released")


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(title=settings.app_name, root_path="", lifespan=lifespan)
    if settings.frontend_allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(settings.frontend_allowed_origins),
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    # Root endpoint for diagnostics
    @app.get("/")
    def root():
        return {
            "service": settings.app_name,
            "status": "running",
            "api_prefix": settings.api_prefix,
            "health": f"{settings.api_prefix}/health",
            "docs": "/docs",
        }

    app.include_router(health.router, prefix=settings.api_prefix)
    app.include_router(requests.router, prefix=settings.api_prefix)
    app.include_router(users.router, prefix=settings.api_prefix)
    return app


app = create_app()
