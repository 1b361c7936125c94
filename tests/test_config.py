# tests/test_config.py
import pytest

from backend import config
from backend.errors import ConfigurationError


@pytest.fixture
def clean_env(monkeypatch):
    for key in ("SUPABASE_URL", "SUPABASE_ANON_KEY", "AUTH_EMAIL_DOMAIN", "TUSSLE_IMAGE_BUCKET", "RECEIPT_BUCKET", "LOG_LEVEL"):
        monkeypatch.delenv(key, raising=False)
    # no secrets.toml in tests
    monkeypatch.setattr(config.st, "secrets", {}, raising=False)
    return monkeypatch


def test_missing_settings_raise(clean_env):
    assert config.missing_required() == ["SUPABASE_URL", "SUPABASE_ANON_KEY"]
    with pytest.raises(ConfigurationError) as exc:
        config.require_settings()
    assert exc.value.missing == ["SUPABASE_URL", "SUPABASE_ANON_KEY"]
    assert exc.value.code == "CONFIGURATION_ERROR"


def test_defaults_and_overrides(clean_env):
    clean_env.setenv("SUPABASE_URL", "https://proj.supabase.co")
    clean_env.setenv("SUPABASE_ANON_KEY", "anon")
    s = config.require_settings()
    assert s.email_domain == "bashir.inc"
    assert s.image_bucket == "tussle-images"
    assert s.receipt_bucket == "receipts"
    assert s.log_level == "INFO"

    clean_env.setenv("AUTH_EMAIL_DOMAIN", "@shop.test")
    clean_env.setenv("LOG_LEVEL", "debug")
    s = config.load_settings()
    assert s.email_domain == "shop.test"
    assert s.log_level == "DEBUG"


def test_secrets_used_when_env_missing(clean_env):
    clean_env.setattr(config.st, "secrets", {"SUPABASE_URL": "https://s.supabase.co", "SUPABASE_ANON_KEY": "k"})
    assert config.missing_required() == []
    assert config.load_settings().supabase_url == "https://s.supabase.co"
