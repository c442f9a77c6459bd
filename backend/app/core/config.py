from zoneinfo import ZoneInfo

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = Field(default="development", validation_alias="APP_ENV")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    telegram_bot_token: str | None = Field(default=None, validation_alias="TELEGRAM_BOT_TOKEN")
    telegram_chat_id: str | None = Field(default=None, validation_alias="TELEGRAM_CHAT_ID")
    telegram_api_base_url: str = Field(default="https://api.telegram.org", validation_alias="TELEGRAM_API_BASE_URL")
    telegram_timeout_seconds: float = Field(default=10.0, validation_alias="TELEGRAM_TIMEOUT_SECONDS")
    telegram_chunk_delay_seconds: float = Field(default=1.0, validation_alias="TELEGRAM_CHUNK_DELAY_SECONDS")
    # Telegram rejects messages above 4096 characters.
    telegram_max_message_length: int = Field(default=4000, validation_alias="TELEGRAM_MAX_MESSAGE_LENGTH")

    report_title: str = Field(default="NEW TEST SUBMISSION", validation_alias="REPORT_TITLE")
    report_timezone: str = Field(default="UTC", validation_alias="REPORT_TIMEZONE")

    cors_allow_origin: str = Field(default="*", validation_alias="CORS_ALLOW_ORIGIN")
    cors_allow_methods: str = Field(default="POST, OPTIONS", validation_alias="CORS_ALLOW_METHODS")
    cors_allow_headers: str = Field(default="Content-Type", validation_alias="CORS_ALLOW_HEADERS")

    @field_validator("report_timezone")
    @classmethod
    def _known_timezone(cls, v: str) -> str:
        name = (v or "").strip() or "UTC"
        if name.upper() != "UTC":
            ZoneInfo(name)
        return name

    @property
    def telegram_enabled(self) -> bool:
        return bool((self.telegram_bot_token or "").strip() and (self.telegram_chat_id or "").strip())


settings = Settings()


def _is_prod() -> bool:
    return (settings.app_env or "").strip().lower() in {"prod", "production"}


if _is_prod():
    if not 0 < settings.telegram_max_message_length <= 4096:
        raise RuntimeError("TELEGRAM_MAX_MESSAGE_LENGTH must be between 1 and 4096")
    if settings.telegram_chunk_delay_seconds < 0:
        raise RuntimeError("TELEGRAM_CHUNK_DELAY_SECONDS must not be negative")
