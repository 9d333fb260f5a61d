"""
HTTP entry point for the New Business Tracker.

Run with ``uvicorn new_business.main:app`` or ``python -m new_business.main``.
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from new_business import __version__
from new_business.config import Settings, get_settings
from new_business.core.mongodb_client import close_mongodb_client
from new_business.core.storage import get_policy_repository
from new_business.errors import PersistenceError
from new_business.api.routes import router


logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

DESCRIPTION = """
Tracks newly written insurance policies until every underwriting requirement
is approved or waived, at which point the policy archives itself.

Active policies are ranked so that effective dates within the next week come
first. Each policy keeps a communication log, and client follow-up emails can
be drafted with Gemini. The whole collection can be exported to and restored
from a JSON backup.
"""


def _report_storage() -> None:
    repository = get_policy_repository()
    try:
        count = len(repository.load_all())
    except PersistenceError as e:
        logger.warning(f"Policy store {repository.describe()} is unavailable: {e}")
        return
    logger.info(f"Policy store {repository.describe()} holds {count} policies")


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    logger.info(f"{settings.app_name} {__version__} starting")
    _report_storage()
    if not settings.vertex_configured:
        logger.warning("VERTEX_PROJECT_ID is not set; email drafting is disabled")

    yield

    close_mongodb_client()
    logger.info(f"{settings.app_name} stopped")


def create_app(settings: Settings = None) -> FastAPI:
    settings = settings or get_settings()
    application = FastAPI(
        title=f"{settings.app_name} API",
        description=DESCRIPTION,
        version=__version__,
        lifespan=lifespan,
    )
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    application.include_router(router)

    @application.get("/", tags=["Root"])
    async def root():
        return {
            "name": settings.app_name,
            "version": __version__,
            "docs": application.docs_url,
            "health": "/health",
        }

    return application


app = create_app()


if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
