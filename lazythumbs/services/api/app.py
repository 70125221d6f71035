from __future__ import annotations

from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import sessionmaker

from lazythumbs.common.settings import Settings, get_settings
from lazythumbs.services.api.deps import make_derivative_handler
from lazythumbs.services.api.routers import assets, health, settings
from lazythumbs.services.api.static import DerivativeHandler, DerivativeStaticFiles


def create_app(
    cfg: Optional[Settings] = None,
    *,
    session_factory: Optional[sessionmaker] = None,
    derivative_handler: Optional[DerivativeHandler] = None,
) -> FastAPI:
    cfg = cfg or get_settings()
    dev = cfg.app_env.lower() == "development"

    app = FastAPI(
        title="lazythumbs API",
        version="0.1.0",
        docs_url=f"{cfg.api.prefix}/docs",
        openapi_url=f"{cfg.api.prefix}/openapi.json",
    )
    app.state.settings = cfg
    app.state.session_factory = session_factory

    allow_origins = ["*"] if dev else cfg.api.cors_allow_origins
    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_methods=cfg.api.cors_allow_methods,
        allow_headers=cfg.api.cors_allow_headers,
        allow_credentials=cfg.api.cors_allow_credentials,
    )

    # Routers
    app.include_router(health.router)
    app.include_router(assets.router, prefix=cfg.api.prefix)
    app.include_router(settings.router, prefix=cfg.api.prefix)

    # Uploads; misses fall through to on-demand derivative generation
    app.mount(
        cfg.upload_url_path,
        DerivativeStaticFiles(
            directory=str(cfg.upload_root),
            check_dir=False,
            derivative_handler=derivative_handler or make_derivative_handler(cfg, session_factory),
        ),
        name="uploads",
    )
    return app
