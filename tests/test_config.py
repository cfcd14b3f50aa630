import pytest

from app.cad.config import DEFAULT_LOGO_MAX_BYTES, Settings, load_config


def test_defaults(monkeypatch):
    for k in ("ENV", "LOGO_MAX_BYTES", "STORAGE_BACKEND", "LOG_LEVEL"):
        monkeypatch.delenv(k, raising=False)
    cfg = load_config()
    assert cfg["ENV"] == "development"
    assert cfg["LOGO_MAX_BYTES"] == DEFAULT_LOGO_MAX_BYTES
    assert cfg["STORAGE_BACKEND"] == "local"
    assert cfg["SESSION_COOKIE_SECURE"] is False


def test_production_cookies_are_secure(monkeypatch):
    monkeypatch.setenv("ENV", "Production")
    settings = Settings.from_env()
    assert settings.is_production
    assert settings.as_flask_config()["SESSION_COOKIE_SECURE"] is True


def test_bad_integer_fails_loudly(monkeypatch):
    monkeypatch.setenv("LOGO_MAX_BYTES", "two megs")
    with pytest.raises(RuntimeError, match="LOGO_MAX_BYTES"):
        load_config()
