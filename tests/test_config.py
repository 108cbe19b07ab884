# =============================================================================
# tests/test_config.py - Settings Tests
# =============================================================================

import pytest
from pydantic import ValidationError

from app.config import Settings


@pytest.fixture
def bare_env(monkeypatch):
    for name in ("SUPABASE_URL", "SUPABASE_SERVICE_KEY", "PROJECT_URL", "SERVICE_ROLE_KEY",
                 "FAL_KEY", "POLL_INTERVAL_SECONDS"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("FAL_KEY", "k")
    return monkeypatch


def test_defaults(bare_env):
    bare_env.setenv("SUPABASE_URL", "https://p.supabase.co")
    bare_env.setenv("SUPABASE_SERVICE_KEY", "service")

    settings = Settings(_env_file=None)

    assert settings.UPLOADS_BUCKET == "user-uploads"
    assert settings.ANIMATIONS_BUCKET == "animations"
    assert settings.SIGNED_URL_TTL_SECONDS == 3600
    assert settings.POLL_INTERVAL_SECONDS == 4.0
    assert settings.POLL_MAX_ATTEMPTS == 100
    assert settings.PENDING_MAX_AGE_SECONDS == 3600
    assert settings.ANIMATION_DURATION == "5"
    assert settings.fal_submit_url == "https://fal.run/fal-ai/kling-video/v1.6/pro/image-to-video"
    assert settings.fal_status_url.endswith("/image-to-video/status")


def test_edge_function_names_accepted(bare_env):
    bare_env.setenv("PROJECT_URL", "https://edge.supabase.co")
    bare_env.setenv("SERVICE_ROLE_KEY", "role-key")

    settings = Settings(_env_file=None)

    assert settings.SUPABASE_URL == "https://edge.supabase.co"
    assert settings.SUPABASE_SERVICE_KEY == "role-key"


def test_missing_credentials(bare_env):
    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_rejects_unknown_duration(bare_env):
    bare_env.setenv("SUPABASE_URL", "https://p.supabase.co")
    bare_env.setenv("SUPABASE_SERVICE_KEY", "service")
    bare_env.setenv("ANIMATION_DURATION", "7")

    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_cors_list(bare_env):
    bare_env.setenv("SUPABASE_URL", "https://p.supabase.co")
    bare_env.setenv("SUPABASE_SERVICE_KEY", "service")
    bare_env.setenv("CORS_ORIGINS", "http://localhost:3000, https://app.example.com")

    settings = Settings(_env_file=None)

    assert settings.cors_origins_list == ["http://localhost:3000", "https://app.example.com"]
