from __future__ import annotations

import logging
import time
from datetime import UTC, datetime
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.staticfiles import StaticFiles

from gradtrack.api.errors import register_error_handlers
from gradtrack.api.middleware import install_middleware
from gradtrack.api.routes import router as api_router
from gradtrack.api.schemas import HealthResponse
from gradtrack.config import get_settings
from gradtrack.core.sessions import ChatSessionStore
from gradtrack.db.init import init_database
from gradtrack.logging_config import configure_logging
from gradtrack.web.routes import router as web_router

logger = logging.getLogger(__name__)

_PROCESS_STARTED = time.monotonic()


def create_app() -> FastAPI:
    configure_logging()
    settings = get_settings()
    static_dir = Path(__file__).resolve().parents[1] / "web" / "static"

    app = FastAPI(title=settings.app_name)
    app.state.chat_sessions = ChatSessionStore.from_settings(settings)

    install_middleware(app, settings)
    app.add_middleware(GZipMiddleware, minimum_size=1024)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_error_handlers(app, settings)

    @app.on_event("startup")
    def _startup() -> None:
        init_database()
        logger.info("%s started env=%s", settings.app_name, settings.app_env)

    @app.get("/health", response_model=HealthResponse)
    def health() -> HealthResponse:
        return HealthResponse(
            status="ok",
            timestamp=datetime.now(UTC),
            uptime=round(time.monotonic() - _PROCESS_STARTED, 3),
            environment=settings.app_env,
        )

    app.include_router(api_router)
    if settings.web_ui_enabled:
        app.include_router(web_router)

    app.mount("/static", StaticFiles(directory=str(static_dir)), name="static")
    return app
