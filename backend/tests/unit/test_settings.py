"""
Unit tests for Pydantic Settings configuration.

Tests settings defaults and validation.
"""

import pytest
from pydantic import ValidationError


from app.config.settings import Settings, get_settings


class TestSettings:
    """Tests for Settings configuration."""

    def test_settings_has_defaults(self):
        """Settings should have sensible defaults."""
        settings = Settings(_env_file=None)

        assert settings.elevenlabs_base_url == "https://api.elevenlabs.io"
        assert settings.analysis_provider in ("mock", "openai")
        assert settings.analysis_delay_seconds >= 0
        assert settings.minute_rate >= 0
        assert settings.stats_timezone

    def test_is_production_property(self):
        """is_production should follow ENVIRONMENT."""
        assert Settings(_env_file=None, environment="production").is_production is True
        dev = Settings(_env_file=None, environment="development")
        assert dev.is_production is False
        assert dev.is_development is True

    def test_allowed_origins_includes_localhost(self):
        settings = Settings(_env_file=None)
        assert "http://localhost:3000" in settings.allowed_origins

    def test_elevenlabs_values_are_trimmed(self):
        settings = Settings(
            _env_file=None,
            elevenlabs_api_key="  sk_live \n",
            elevenlabs_agent_id=" agent_1 ",
        )
        assert settings.elevenlabs_api_key == "sk_live"
        assert settings.elevenlabs_agent_id == "agent_1"
        assert settings.elevenlabs_configured is True

    def test_placeholders_are_not_configured(self):
        settings = Settings(
            _env_file=None,
            elevenlabs_api_key="your_elevenlabs_api_key_here",
            elevenlabs_agent_id="your_elevenlabs_agent_id_here",
        )
        assert settings.elevenlabs_configured is False

    def test_supabase_issuer(self):
        settings = Settings(_env_file=None, supabase_url="https://abc.supabase.co/")
        assert settings.supabase_issuer == "https://abc.supabase.co/auth/v1"
        assert Settings(_env_file=None, supabase_url=None).supabase_issuer is None

    def test_openai_provider_requires_key(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, analysis_provider="openai", openai_api_key=None)

    def test_negative_minute_rate_rejected(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, minute_rate=-0.1)

    def test_get_settings_is_cached(self):
        get_settings.cache_clear()
        try:
            assert get_settings() is get_settings()
        finally:
            get_settings.cache_clear()
