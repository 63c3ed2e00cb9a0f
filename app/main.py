from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Sequence

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.errors import register_exception_handlers
from app.routers.functionalities import router as functionalities_router
from app.routers.problems import router as problems_router
from app.routers.projects import router as projects_router
from app.routers.settings import router as settings_router
from app.routers.sources import router as sources_router
from core.settings import get_settings
from db.session import engine


settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # Ensure DB connections are cleanly closed on shutdown
    await engine.dispose()


def create_app(allowed_origins: Sequence[str] | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        allowed_origins: Optional list of CORS origins to allow. If not provided,
            permissive defaults will be used for local development.

    Returns:
        Configured FastAPI application.
    """
    app = FastAPI(title=settings.app_name, debug=settings.debug, lifespan=lifespan)

    cors_origins = list(
        allowed_origins
        or [
            "http://localhost",
            "http://localhost:8080",
            "http://127.0.0.1:8080",
        ]
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    # Routers
    app.include_router(projects_router, prefix="/projects", tags=["projects"])
    app.include_router(sources_router, prefix="/sources", tags=["sources"])
    app.include_router(
        functionalities_router, prefix="/functionalities", tags=["functionalities"]
    )
    app.include_router(settings_router, prefix="/settings", tags=["settings"])
    app.include_router(problems_router, prefix="/problems", tags=["problems"])

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    return app


app = create_app()
