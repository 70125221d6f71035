# lazythumbs/services/api/deps.py
from __future__ import annotations
from typing import Generator, Optional
from fastapi import Depends, Request
from sqlalchemy.orm import Session, sessionmaker

from lazythumbs.common.settings import Settings, get_settings
from lazythumbs.database.core.main import get_sessionmaker, session_scope
from lazythumbs.database.repos.asset_repo import SqlAlchemyAssetRepo
from lazythumbs.database.repos.settings_store import SqlAlchemySettingsStore
from lazythumbs.domain.dataclasses.results import ResolvedDerivative
from lazythumbs.domain.ports.probe import ImageProbePort
from lazythumbs.domain.ports.settings_store import SettingsStorePort
from lazythumbs.services.derivatives.context import EngineContext
from lazythumbs.services.derivatives.orchestrator import DerivativeOrchestrator
from lazythumbs.services.derivatives.suppressor import EagerDerivativeSuppressor
from lazythumbs.services.events.bus import EventBus
from lazythumbs.services.ingest.service import AssetIngestService
from lazythumbs.services.probe.image_probe import PillowImageProbe


def get_app_settings(request: Request) -> Settings:
    return getattr(request.app.state, "settings", None) or get_settings()


def get_image_probe() -> ImageProbePort:
    return PillowImageProbe()


def get_db(request: Request) -> Generator[Session, None, None]:
    factory: Optional[sessionmaker] = getattr(request.app.state, "session_factory", None)
    db = (factory or get_sessionmaker())()
    try:
        yield db
    finally:
        db.close()


def transactional_session(db: Session = Depends(get_db)) -> Generator[Session, None, None]:
    """
    Request-scoped transaction. COMMIT on normal exit, ROLLBACK if an exception bubbles out.
    """
    with db.begin():
        yield db


def build_asset_repo(session: Session, cfg: Settings) -> SqlAlchemyAssetRepo:
    return SqlAlchemyAssetRepo(session, upload_root=cfg.upload_root, upload_base_url=cfg.upload_base_url)


def build_settings_store(session: Session, cfg: Settings) -> SettingsStorePort:
    return SqlAlchemySettingsStore(session, multi_deployment=cfg.multi_deployment)


def autogen_enabled(session: Session, cfg: Settings) -> bool:
    return build_settings_store(session, cfg).is_enabled(cfg.features.autogen_enabled)


def build_event_bus(session: Session, cfg: Settings) -> EventBus:
    """A bus with the eager-derivative suppressor subscribed, gated by the autogen flag."""
    bus = EventBus()
    EagerDerivativeSuppressor(enabled=lambda: autogen_enabled(session, cfg)).subscribe(bus)
    return bus


def get_ingest_service(
    session: Session = Depends(transactional_session),
    cfg: Settings = Depends(get_app_settings),
    probe: ImageProbePort = Depends(get_image_probe),
) -> AssetIngestService:
    return AssetIngestService(
        build_asset_repo(session, cfg),
        probe,
        build_event_bus(session, cfg),
        upload_root=cfg.upload_root,
    )


def make_derivative_handler(cfg: Settings, session_factory: Optional[sessionmaker] = None):
    """
    The callable the upload mount runs on a miss. Each call is its own unit of work:
    one session, one transaction, one EngineContext.
    """
    def handle(raw_path: str) -> Optional[ResolvedDerivative]:
        with session_scope(session_factory) as session:
            if not autogen_enabled(session, cfg):
                return None
            ctx = EngineContext.from_settings(cfg, repository=build_asset_repo(session, cfg))
            return DerivativeOrchestrator(ctx).handle(raw_path)

    return handle
