"""PromptShare FastAPI application entrypoint."""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pythonjsonlogger.json import JsonFormatter

from promptshare.config import get_settings
from promptshare.routers import auth, comments, likes, profiles, prompts

_TEXT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
_JSON_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def _configure_logging() -> None:
    """Configure root logger from settings (dev=DEBUG, prod=INFO; text or JSON)."""
    settings = get_settings()
    level = logging.DEBUG if settings.env != "prod" else logging.INFO

    formatter: logging.Formatter
    if settings.log_format == "json":
        formatter = JsonFormatter(_JSON_FORMAT)
    else:
        formatter = logging.Formatter(_TEXT_FORMAT, datefmt="%H:%M:%S")

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)
    logging.basicConfig(level=level, handlers=[handler], force=True)

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


_configure_logging()

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()
    app = FastAPI(
        title="PromptShare",
        description="Share, like and discuss AI prompt templates",
        version="0.1.0",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(auth.router)
    app.include_router(profiles.router)
    app.include_router(prompts.router)
    app.include_router(likes.router)
    app.include_router(comments.router)

    logger.info("PromptShare app created (env=%s)", settings.env)
    return app


app = create_app()


@app.get("/api/health")
async def health_check() -> dict[str, str]:
    """Return application health status."""
    return {"status": "ok"}
