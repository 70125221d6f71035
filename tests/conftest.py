# tests/conftest.py
from __future__ import annotations
import os
from pathlib import Path
from typing import Callable, Tuple

import pytest
from PIL import Image
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool
from testcontainers.postgres import PostgresContainer

from lazythumbs.common.settings import Settings
from lazythumbs.database.models import Base  # <-- imports the models/metadata
from lazythumbs.database.repos.asset_repo import SqlAlchemyAssetRepo
from lazythumbs.domain.entities.asset import Asset
from lazythumbs.services.derivatives.context import EngineContext

SQLITE_URL = "sqlite+pysqlite:///:memory:"

_MIME = {"jpg": "image/jpeg", "jpeg": "image/jpeg", "png": "image/png", "gif": "image/gif", "webp": "image/webp"}


@pytest.fixture(scope="session")
def database_url():
    """
    SQLite in memory by default. LAZYTHUMBS_TEST_DB=postgres runs the same suite
    against a throwaway Postgres container.
    """
    if os.getenv("LAZYTHUMBS_TEST_DB", "").lower() != "postgres":
        yield SQLITE_URL
        return
    with PostgresContainer(os.getenv("TEST_DB_IMAGE", "postgres:15-alpine")) as pg:
        # Force psycopg (v3) driver in the URL returned by testcontainers (it defaults to psycopg2)
        yield pg.get_connection_url().replace("psycopg2", "psycopg")


@pytest.fixture()
def db_engine(database_url) -> Engine:
    if database_url.startswith("sqlite"):
        # one shared connection so the threadpool used by the upload mount sees the same data
        engine = create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            future=True,
        )
    else:
        engine = create_engine(database_url, future=True)

    # No migrations here; just create tables from models
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def session_factory(db_engine) -> sessionmaker:
    return sessionmaker(bind=db_engine, expire_on_commit=False, autoflush=False, future=True)


@pytest.fixture()
def db(session_factory) -> Session:
    session = session_factory()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


# ----------------------------------------------------------------------------
# Upload tree & settings
# ----------------------------------------------------------------------------

@pytest.fixture()
def upload_root(tmp_path) -> Path:
    root = (tmp_path / "uploads").resolve()
    root.mkdir(parents=True)
    return root


@pytest.fixture()
def cfg(upload_root, tmp_path) -> Settings:
    return Settings(
        app_env="test",
        data_root=tmp_path,
        upload_root_override=upload_root,
        upload_url_path="/uploads",
        public_base_url="http://testserver",
    )


@pytest.fixture()
def make_image() -> Callable[..., Path]:
    """Write a solid-colour image of the given size; the format follows the extension."""
    def _make(path: Path, size: Tuple[int, int], color=(200, 30, 30)) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        fmt = path.suffix.lower().lstrip(".")
        mode = "RGBA" if fmt == "png" else "RGB"
        Image.new(mode, size, color).save(path, format="JPEG" if fmt in ("jpg", "jpeg") else fmt.upper())
        return path

    return _make


@pytest.fixture()
def repo(db, cfg) -> SqlAlchemyAssetRepo:
    return SqlAlchemyAssetRepo(db, upload_root=cfg.upload_root, upload_base_url=cfg.upload_base_url)


@pytest.fixture()
def add_asset(repo, upload_root, make_image) -> Callable[..., Asset]:
    """Create the source file under the upload root and register it."""
    def _add(rel_path: str, size: Tuple[int, int] = (1000, 1000), *, on_disk: bool = True) -> Asset:
        path = upload_root / rel_path
        if on_disk:
            make_image(path, size)
        ext = rel_path.rsplit(".", 1)[-1].lower()
        return repo.create(
            rel_path=rel_path,
            original_filename=path.name,
            mime_type=_MIME.get(ext),
            width=size[0],
            height=size[1],
            size_bytes=path.stat().st_size if on_disk else None,
        )

    return _add


@pytest.fixture()
def engine_ctx(cfg, repo) -> EngineContext:
    return EngineContext.from_settings(cfg, repository=repo)
