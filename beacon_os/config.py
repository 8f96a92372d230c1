"""
Application settings.
Read from environment variables (or a .env file); the LLM client speaks the
OpenAI-compatible API.
"""
import logging
import os
from typing import Optional
from pydantic import ConfigDict
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """BeaconOS settings"""

    # Application
    APP_NAME: str = "BeaconOS"
    VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"  # development | staging | production
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Background queue (optional, stub mode without it)
    REDIS_URL: Optional[str] = None

    # LLM (OpenAI-compatible API)
    OPENAI_API_KEY: Optional[str] = os.environ.get("OPENAI_API_KEY")
    OPENAI_BASE_URL: str = os.environ.get("OPENAI_BASE_URL", "https://api.openai.com/v1")
    LLM_MODEL: str = os.environ.get("LLM_MODEL", "gpt-4o")
    LLM_TEMPERATURE: float = 0.8
    LLM_MAX_TOKENS: int = 500
    ENABLE_LLM: bool = True

    # Feature flags
    FEATURE_DYNAMIC_PRICING: bool = True
    FEATURE_AI_CONCIERGE: bool = True
    FEATURE_AUTOMATED_MESSAGING: bool = True

    # Pricing
    TAX_RATE: float = 0.12  # NC state + local
    DEFAULT_BASE_RATE: float = 300.0
    QUOTE_VALIDITY_HOURS: int = 24
    REPRICING_WINDOW_DAYS: int = 7
    CURRENCY: str = "USD"

    # Event bus / jobs
    EVENT_HISTORY_SIZE: int = 100
    EVENT_WAIT_TIMEOUT_SECONDS: float = 30.0
    REVIEW_REQUEST_DELAY_HOURS: int = 48
    CONVERSATION_TTL_SECONDS: int = 3600

    model_config = ConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    @property
    def llm_enabled(self) -> bool:
        """LLM calls need both the switch and a key"""
        return self.ENABLE_LLM and bool(self.OPENAI_API_KEY)


def configure_logging(config: Optional["Settings"] = None) -> None:
    """Apply LOG_LEVEL to the root logger"""
    config = config or settings
    level = logging.DEBUG if config.DEBUG else getattr(logging, config.LOG_LEVEL.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


# Global settings instance
settings = Settings()
