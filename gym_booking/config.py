"""
Type-safe configuration using Pydantic Settings
Validates environment variables and provides sensible defaults
"""

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Literal, Optional

PLACEHOLDER_API_URL = (
    "https://script.google.com/macros/s/"
    "AKfycbwGmHOLpwTwhU3uG3iKy2ghLPl2MT_BhatSN0LX84KgHy2az6C8AjYr3cWcHfb6F7-Kcw/exec"
)


class BookingConfig(BaseSettings):
    """
    Booking client configuration with validation
    Automatically loads from environment variables and .env file
    """

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    # Telegram front end (only required when running the bot)
    telegram_bot_token: Optional[str] = Field(
        None, description="Telegram Bot API token from @BotFather"
    )

    # Database settings
    db_file: str = Field("gym_booking.db", description="SQLite database file path")

    # Remote store settings
    default_api_url: str = Field(
        PLACEHOLDER_API_URL,
        description="Apps Script /exec URL used until one is saved with /seturl",
    )
    request_timeout: float = Field(
        15.0,
        ge=1,
        le=120,
        description="Overall deadline in seconds for a single HTTP request",
    )

    # Booking window
    slot_start_hour: int = Field(6, ge=0, le=23, description="First bookable hour")
    slot_end_hour: int = Field(22, ge=1, le=24, description="Hour the last slot ends")
    booking_days_ahead: int = Field(
        7, ge=1, le=60, description="Number of selectable days, today included"
    )

    # Presentation
    bot_language: Literal["th", "en"] = Field("th", description="Message language")
    buddhist_era: bool = Field(
        False, description="Show years in the Thai Buddhist Era (e.g. 2568)"
    )
    local_timezone: Optional[str] = Field(
        None, description="IANA timezone for wall-clock time, e.g. Asia/Bangkok"
    )

    log_level: str = Field("INFO", description="Root logging level")

    @field_validator("telegram_bot_token")
    @classmethod
    def validate_telegram_token(cls, v: Optional[str]) -> Optional[str]:
        """Validate Telegram bot token format when one is given"""
        if v is None or v == "":
            return None
        if v == "your_bot_token_here":
            raise ValueError(
                "TELEGRAM_BOT_TOKEN must be set to a valid token from @BotFather"
            )
        if ":" not in v:
            raise ValueError(
                "TELEGRAM_BOT_TOKEN appears to be invalid (should contain ':')"
            )
        return v

    @model_validator(mode="after")
    def validate_slot_window(self) -> "BookingConfig":
        """Slot window must contain at least one hour"""
        if self.slot_end_hour <= self.slot_start_hour:
            raise ValueError("SLOT_END_HOUR must be greater than SLOT_START_HOUR")
        return self


# Singleton instance
_config: Optional[BookingConfig] = None


def get_config() -> BookingConfig:
    """
    Get or create the global configuration instance

    Returns:
        BookingConfig: Validated configuration

    Raises:
        ValidationError: If configuration is invalid
    """
    global _config
    if _config is None:
        _config = BookingConfig()
    return _config


def reset_config() -> None:
    """Drop the cached configuration so the next get_config() re-reads the environment"""
    global _config
    _config = None
