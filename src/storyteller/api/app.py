from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI

from ..config import Settings, get_settings, validate_settings
from .routes import build_router


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    validate_settings(settings)
    logging.basicConfig(level=settings.log_level)

    app = FastAPI(title="Storyteller Snapshot Collector", version="0.1.0")
    app.state.settings = settings
    app.include_router(build_router(settings))
    return app


app = create_app()
