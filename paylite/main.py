"""Application entrypoint for the PayLite+Loans FastAPI backend."""

from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

from paylite.api import build_router
from paylite.core import AppSettings, get_env, get_logger, load_settings, setup_logging
from paylite.models.repositories import RecordStore
from paylite.repositories import build_record_store


setup_logging(get_env("app.log_level", default="INFO"))
logger = get_logger(__name__)


def create_app(settings: Optional[AppSettings] = None, store: Optional[RecordStore] = None) -> FastAPI:
    """Create and configure a FastAPI application instance."""
    settings = settings or load_settings()
    store = store or build_record_store(settings)
    app = FastAPI(title=settings.app_name, debug=settings.debug)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(build_router(settings, store))
    app.state.record_store = store

    logger.info("Application initialized: %s backend=%s", settings.app_name, settings.storage_backend)
    return app


app = create_app()


def run() -> None:
    """Start the ASGI server for local development."""
    settings = load_settings()
    try:
        uvicorn.run("paylite.main:app", host=settings.host, port=settings.port, reload=settings.debug)
    except Exception:
        logger.exception("Failed to start uvicorn server.")
        raise


if __name__ == "__main__":
    run()
