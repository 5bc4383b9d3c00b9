import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from content_study.core.config import Settings, configure_settings, get_settings
from content_study.core.log import configure_logging
from content_study.routes import chat, process, sessions, status
from content_study.workers.pipeline import get_pipeline_worker

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    missing = [
        name
        for name, value in (
            ("ANTHROPIC_API_KEY", settings.anthropic_api_key),
            ("ASSEMBLYAI_API_KEY", settings.assemblyai_api_key),
            ("NOTION_API_KEY", settings.notion_api_key),
            ("NOTION_DATABASE_ID", settings.notion_database_id),
        )
        if not value
    ]
    if missing:
        logger.warning("Missing environment variables: %s", ", ".join(missing))
    yield
    await get_pipeline_worker().shutdown()


def create_app(settings: Settings | None = None) -> FastAPI:
    if settings is not None:
        configure_settings(settings)
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title="Content Study API", version="0.1.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(process.router, prefix="/api")
    app.include_router(status.router, prefix="/api")
    app.include_router(sessions.router, prefix="/api")
    app.include_router(chat.router, prefix="/api")

    @app.get("/", include_in_schema=False)
    async def root() -> JSONResponse:
        """Provide a lightweight landing page for container checks."""
        return JSONResponse(
            {
                "message": "Content Study API",
                "docs": "/docs",
                "health": "/api/sessions",
            }
        )

    return app


app = create_app()
