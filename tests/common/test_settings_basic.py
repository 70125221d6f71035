from pathlib import Path

from lazythumbs.common.settings import Settings, get_settings
from lazythumbs.domain.enums.self_heal_policy import SelfHealPolicy


def test_settings_dirs_created(tmp_path, monkeypatch):
    # ensure a clean cache per test
    from lazythumbs.common import settings as s
    s.get_settings.cache_clear()

    monkeypatch.setenv("APP_ENV", "development")
    monkeypatch.setenv("DATA_ROOT", str(tmp_path))
    monkeypatch.delenv("UPLOAD_ROOT", raising=False)

    try:
        cfg = get_settings()
        assert cfg.data_root == tmp_path
        assert cfg.upload_root == tmp_path / "uploads"
        assert cfg.upload_root.exists()
    finally:
        s.get_settings.cache_clear()


def test_defaults_look_like_a_stock_install(tmp_path):
    cfg = Settings(data_root=tmp_path)
    names = [p.name for p in cfg.profiles]
    assert names == ["thumbnail", "medium", "medium_large", "large", "1536x1536", "2048x2048"]
    thumb = cfg.profiles[0]
    assert (thumb.width, thumb.height, thumb.crop) == (150, 150, True)
    assert cfg.self_heal_policy == SelfHealPolicy.copy
    assert cfg.features.autogen_enabled is False
    assert cfg.database_url.startswith("postgresql+psycopg://")


def test_image_exts_accept_csv_from_env(monkeypatch):
    monkeypatch.setenv("IMAGE_EXTS", ".JPG, png,webp")
    cfg = Settings()
    assert cfg.image_exts == ["jpg", "png", "webp"]


def test_upload_url_and_root_override(tmp_path, monkeypatch):
    monkeypatch.setenv("UPLOAD_ROOT", str(tmp_path / "elsewhere"))
    monkeypatch.setenv("UPLOAD_URL_PATH", "media/uploads/")
    monkeypatch.setenv("PUBLIC_BASE_URL", "https://example.org/")
    cfg = Settings()
    assert cfg.upload_root == Path(tmp_path / "elsewhere")
    assert cfg.upload_url_path == "/media/uploads"
    assert cfg.upload_base_url == "https://example.org/media/uploads"


def test_database_url_override_wins(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "sqlite+pysqlite:///:memory:")
    assert Settings().database_url == "sqlite+pysqlite:///:memory:"


def test_self_heal_policy_and_flags_from_env(monkeypatch):
    monkeypatch.setenv("SELF_HEAL_POLICY", "symlink")
    monkeypatch.setenv("FEATURES__AUTOGEN_ENABLED", "yes")
    monkeypatch.setenv("MULTI_DEPLOYMENT", "true")
    cfg = Settings()
    assert cfg.self_heal_policy == SelfHealPolicy.symlink
    assert cfg.features.autogen_enabled is True
    assert cfg.multi_deployment is True
