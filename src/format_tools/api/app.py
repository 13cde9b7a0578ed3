from __future__ import annotations

from fastapi import FastAPI

from ..config import AppConfig, apply_settings, load_config
from ..core import FormatToolsService
from ..settings import get_settings
from .routers import conversion, engine, health, inputs, sessions, templates


def create_app(config: AppConfig | None = None, *, require_enabled: bool = True) -> FastAPI:
    if config is None:
        settings = get_settings()
        config = apply_settings(load_config(settings.config_path), settings)
    if require_enabled and not config.runtime.enable_local_api:
        raise RuntimeError("Local API is disabled. Enable it via config.runtime.enable_local_api")

    app = FastAPI(title="Format Tools", version="0.1.0")
    app.state.config = config
    app.state.service = FormatToolsService(config)

    app.include_router(health.router)
    app.include_router(inputs.router)
    app.include_router(templates.router)
    app.include_router(conversion.router)
    app.include_router(sessions.router)
    app.include_router(engine.router)
    return app


__all__ = ["create_app"]
