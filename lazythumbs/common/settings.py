# lazythumbs/common/settings.py
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Annotated, List, Optional
from pydantic import BaseModel, Field, AliasChoices, field_validator, computed_field
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict
from lazythumbs.common.strings.splitters import csv_to_list
from lazythumbs.domain.enums.self_heal_policy import SelfHealPolicy


def _to_bool(v: str | bool | int | None, default: bool = False) -> bool:
    if isinstance(v, bool):
        return v
    if v is None:
        return default
    s = str(v).strip().lower()
    return s in {"1", "true", "yes", "y", "on"}


class APIConfig(BaseModel):
    host: str = "0.0.0.0"
    port: int = 8000
    prefix: str = "/api"

    cors_allow_origins: List[str] = Field(default_factory=lambda: ["http://localhost:5173"])
    cors_allow_methods: List[str] = Field(default_factory=lambda: ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"])
    cors_allow_headers: List[str] = Field(default_factory=lambda: ["*"])
    cors_allow_credentials: bool = False


class DBConfig(BaseModel):
    driver: str = "postgresql+psycopg"
    host: str = "localhost"
    port: int = 5432
    name: str = "lazythumbs"
    user: str = "lazyuser"
    password: str = "lazypass"
    echo: bool = False
    pool_size: int = 10
    max_overflow: int = 20
    pool_pre_ping: bool = True
    pool_recycle: int = 1800

    # Optional single URL (if set, it takes precedence)
    url: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("DATABASE_URL", "database_url"),
    )

    @computed_field  # type: ignore[misc]
    @property
    def effective_url(self) -> str:
        if self.url:
            return self.url
        return f"{self.driver}://{self.user}:{self.password}@{self.host}:{self.port}/{self.name}"


class FeatureFlags(BaseModel):
    # Used until the flag has been written to the settings store.
    autogen_enabled: bool = False

    @field_validator("*", mode="before")
    @classmethod
    def _boolify(cls, v):
        return _to_bool(v)


class ProfileConfig(BaseModel):
    name: str
    width: int = Field(0, ge=0)
    height: int = Field(0, ge=0)
    crop: bool = False


def _default_profiles() -> List[ProfileConfig]:
    return [
        ProfileConfig(name="thumbnail", width=150, height=150, crop=True),
        ProfileConfig(name="medium", width=300, height=300),
        ProfileConfig(name="medium_large", width=768, height=0),
        ProfileConfig(name="large", width=1024, height=1024),
        ProfileConfig(name="1536x1536", width=1536, height=1536),
        ProfileConfig(name="2048x2048", width=2048, height=2048),
    ]


class Settings(BaseSettings):
    # -------- App / Env --------
    app_name: str = "lazythumbs"
    app_env: str = "development"  # development|test|staging|production
    log_level: str = "INFO"

    # -------- Paths & layout --------
    data_root: Path = Path("./var")
    upload_subdir: str = "uploads"

    # Optional absolute override (leave empty to use DATA_ROOT + subdir)
    upload_root_override: Optional[Path] = Field(default=None, alias="UPLOAD_ROOT")

    # URL side of the upload tree, as seen in request paths
    upload_url_path: str = "/uploads"
    public_base_url: str = "http://localhost:8000"

    # -------- Allowed extensions --------
    image_exts: Annotated[List[str], NoDecode] = Field(
        default_factory=lambda: ["jpg", "jpeg", "png", "gif", "webp"]
    )

    # -------- Derivatives --------
    self_heal_policy: SelfHealPolicy = SelfHealPolicy.copy
    multi_deployment: bool = False
    jpeg_quality: int = Field(82, ge=1, le=100)
    webp_quality: int = Field(80, ge=1, le=100)
    profiles: List[ProfileConfig] = Field(default_factory=_default_profiles)

    # Optional single DB URL at top level (wins over db.*)
    database_url_override: Optional[str] = Field(default=None, alias="DATABASE_URL")

    # -------- Sub-configs --------
    api: APIConfig = APIConfig()
    db: DBConfig = DBConfig()
    features: FeatureFlags = FeatureFlags()

    # -------- Testcontainers / CI toggles --------
    test_db_image: str = "postgres:15-alpine"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
        env_nested_delimiter="__",
    )

    @field_validator("image_exts", mode="before")
    @classmethod
    def _split_exts(cls, v):
        return [e.lower().lstrip(".") for e in csv_to_list(v)]

    @field_validator("upload_url_path")
    @classmethod
    def _normalize_url_path(cls, v: str) -> str:
        return "/" + v.strip().strip("/")

    # ===== Derived paths =====
    @computed_field  # type: ignore[misc]
    @property
    def upload_root(self) -> Path:
        if self.upload_root_override:
            return Path(self.upload_root_override)
        return self.data_root / self.upload_subdir

    @computed_field  # type: ignore[misc]
    @property
    def upload_base_url(self) -> str:
        return self.public_base_url.rstrip("/") + self.upload_url_path

    # ===== Convenience: DB URL =====
    @computed_field  # type: ignore[misc]
    @property
    def database_url(self) -> str:
        return self.database_url_override or self.db.effective_url


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Global settings accessor (cached). Use this everywhere you need config:
        from lazythumbs.common.settings import get_settings
        cfg = get_settings()
    """
    s = Settings()  # pydantic_settings will read from .env automatically
    # Ensure derived directories exist in dev/test (optional):
    if s.app_env in ("development", "test"):
        for p in (s.data_root, s.upload_root):
            p.mkdir(parents=True, exist_ok=True)
    return s
