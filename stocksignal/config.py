from functools import lru_cache
from typing import Optional

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from stocksignal.core.constants import (
    ALPHA_VANTAGE_BASE_URL,
    DEFAULT_HISTORY_BUFFER,
    DEFAULT_INITIAL_CAPITAL,
    DEFAULT_TRANSACTION_FEE,
)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    app_name: str = "stocksignal"
    app_env: str = "development"
    debug: bool = False
    log_level: str = "INFO"
    log_json: bool = False

    # Alpha Vantage
    alpha_vantage_api_key: Optional[str] = None
    alpha_vantage_base_url: str = ALPHA_VANTAGE_BASE_URL
    request_timeout: float = 30.0

    # Notification
    discord_webhook_url: Optional[str] = None

    # Backtest
    initial_capital: float = DEFAULT_INITIAL_CAPITAL
    transaction_fee: float = DEFAULT_TRANSACTION_FEE
    history_buffer: int = DEFAULT_HISTORY_BUFFER
    verbose: bool = False

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @model_validator(mode="after")
    def _validate_values(self) -> "Settings":
        """Reject values the backtest engine cannot run with."""
        if self.initial_capital <= 0:
            raise ValueError("INITIAL_CAPITAL must be greater than zero.")
        if self.transaction_fee < 0:
            raise ValueError("TRANSACTION_FEE must not be negative.")
        if self.history_buffer < 0:
            raise ValueError("HISTORY_BUFFER must not be negative.")
        if not self.is_production:
            return self
        if not self.alpha_vantage_api_key:
            raise ValueError("ALPHA_VANTAGE_API_KEY must be set in production.")
        if self.debug:
            raise ValueError("DEBUG must be False in production.")
        return self


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
