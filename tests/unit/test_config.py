"""Tests for settings validation (src/teamledger/core/config.py)."""

import pytest
from pydantic import ValidationError

from src.teamledger.core.config import Settings

pytestmark = pytest.mark.unit

ACCESS = "config-access-secret-0123456789abcdefghijklmnop"
REFRESH = "config-refresh-secret-0123456789abcdefghijklmnop"


def _settings(**overrides) -> Settings:
    values = {
        "database_url": "sqlite+aiosqlite:///:memory:",
        "jwt_access_secret": ACCESS,
        "jwt_refresh_secret": REFRESH,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


class TestJwtSecrets:
    def test_valid(self):
        settings = _settings()
        assert settings.jwt_access_expiry == "15m"
        assert settings.jwt_refresh_expiry == "7d"

    def test_default_placeholder_rejected(self):
        with pytest.raises(ValidationError, match="default value"):
            _settings(jwt_access_secret="change-this-to-a-secure-random-string")

    def test_short_secret_rejected(self):
        with pytest.raises(ValidationError, match="at least 32"):
            _settings(jwt_refresh_secret="short")

    def test_shared_secret_rejected(self):
        with pytest.raises(ValidationError, match="must differ"):
            _settings(jwt_refresh_secret=ACCESS)


class TestCors:
    def test_wildcard_rejected(self):
        with pytest.raises(ValidationError, match="wildcard"):
            _settings(cors_origins=["*"])

    def test_explicit_origins(self):
        settings = _settings(cors_origins=["https://app.example.com"])
        assert settings.cors_origins == ["https://app.example.com"]
