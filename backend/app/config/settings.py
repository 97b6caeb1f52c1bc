"""
Application Settings for SalesAI Trainer

Centralized configuration using Pydantic Settings with .env support.
Settings are built once in app.main.create_app and stored on app.state;
handlers receive them through dependencies instead of reading os.environ.
"""

from functools import lru_cache
from typing import Literal, Optional
from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Values shipped in .env.example; treated the same as "not set"
ELEVENLABS_API_KEY_PLACEHOLDER = "your_elevenlabs_api_key_here"
ELEVENLABS_AGENT_ID_PLACEHOLDER = "your_elevenlabs_agent_id_here"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    ANALYSIS_PROVIDER controls how session transcripts are analyzed:
    - mock: canned demo report (default, no API costs)
    - openai: OpenAI chat completions with the sales-coach prompt
    """

    # Supabase Configuration
    supabase_url: Optional[str] = None
    supabase_anon_key: Optional[str] = None
    supabase_service_role_key: Optional[str] = None
    supabase_jwt_secret: Optional[str] = None

    # ElevenLabs Conversational AI
    elevenlabs_api_key: Optional[str] = None
    elevenlabs_agent_id: Optional[str] = None
    elevenlabs_base_url: str = "https://api.elevenlabs.io"
    elevenlabs_timeout_seconds: float = 15.0

    # Session analysis
    analysis_provider: Literal["mock", "openai"] = "mock"
    analysis_delay_seconds: float = 1.5
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4o"
    openai_base_url: str = "https://api.openai.com/v1"

    # Usage accounting
    minute_rate: float = 0.1  # Currency units per started minute
    stats_timezone: str = "UTC"

    # Application Settings
    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"

    # CORS Configuration
    frontend_url: str = "http://localhost:3000"
    allowed_origins: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # Database Configuration (SQLModel/SQLAlchemy)
    supabase_password: Optional[str] = None
    database_url: Optional[str] = None
    database_pool_size: int = 5
    database_max_overflow: int = 10
    database_pool_timeout: int = 30
    database_echo: bool = False

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @model_validator(mode="after")
    def validate_api_keys(self) -> "Settings":
        """Normalize vendor keys and validate the analysis provider."""
        if self.elevenlabs_api_key is not None:
            self.elevenlabs_api_key = self.elevenlabs_api_key.strip()
        if self.elevenlabs_agent_id is not None:
            self.elevenlabs_agent_id = self.elevenlabs_agent_id.strip()

        if self.analysis_provider == "openai" and not self.openai_api_key:
            raise ValueError(
                "OPENAI_API_KEY required when ANALYSIS_PROVIDER=openai"
            )

        if self.minute_rate < 0:
            raise ValueError("MINUTE_RATE must not be negative")

        return self

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment.lower() == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development."""
        return self.environment.lower() == "development"

    @property
    def supabase_issuer(self) -> Optional[str]:
        """Issuer claim expected on Supabase access tokens."""
        if not self.supabase_url:
            return None
        return f"{self.supabase_url.rstrip('/')}/auth/v1"

    @property
    def elevenlabs_configured(self) -> bool:
        """True when both ElevenLabs secrets hold real values."""
        return bool(
            self.elevenlabs_api_key
            and self.elevenlabs_api_key != ELEVENLABS_API_KEY_PLACEHOLDER
            and self.elevenlabs_agent_id
            and self.elevenlabs_agent_id != ELEVENLABS_AGENT_ID_PLACEHOLDER
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance (process-wide default)."""
    return Settings()
