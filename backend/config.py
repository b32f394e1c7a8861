"""Application configuration using pydantic-settings."""

from typing import Any

from pydantic import field_validator
from pydantic.fields import FieldInfo
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from services.credential_manager import CREDENTIAL_KEYS, get_credential


class KeychainSettingsSource(PydanticBaseSettingsSource):
    """Supplies the Checkr secrets from the system keychain.

    Only the names in :data:`~services.credential_manager.CREDENTIAL_KEYS`
    (OAuth client id and secret, token encryption key) are looked up; every
    other field is left to the environment and ``.env`` sources.
    """

    def get_field_value(
        self, field: FieldInfo, field_name: str
    ) -> tuple[Any, str, bool]:
        key = field_name.upper()
        value = get_credential(key) if key in CREDENTIAL_KEYS else None
        return value, field_name, False

    def __call__(self) -> dict[str, Any]:
        found: dict[str, Any] = {}
        for field_name, field_info in self.settings_cls.model_fields.items():
            value, key, _ = self.get_field_value(field_info, field_name)
            if value is not None:
                found[key] = value
        return found


class Settings(BaseSettings):
    """Checkr Connect settings.

    Precedence: constructor arguments, then the keychain (secrets only),
    then environment variables, then ``.env``.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            KeychainSettingsSource(settings_cls),
            env_settings,
            dotenv_settings,
            file_secret_settings,
        )

    # Database
    DATABASE_URL: str = "sqlite:///./checkr_connect.db"

    # Checkr OAuth application (staging: https://api.checkr-staging.com,
    # production: https://api.checkr.com)
    CHECKR_API_URL: str = "https://api.checkr-staging.com"
    CHECKR_OAUTH_CLIENT_ID: str = ""
    CHECKR_OAUTH_CLIENT_SECRET: str = ""
    CHECKR_HTTP_TIMEOUT: float = 30.0

    # Fernet key protecting stored Checkr access tokens
    TOKEN_ENCRYPTION_KEY: str = ""

    # Where the user lands after the Checkr connect flow completes
    APP_REDIRECT_URL: str = "http://localhost:3000/"

    # App settings
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    @field_validator("CHECKR_API_URL", mode="before")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Drop a trailing ``/`` so endpoint paths can be appended verbatim."""
        if isinstance(v, str):
            return v.rstrip("/")
        return v

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Accept any case of a stdlib level name, store it uppercase."""
        level = str(v).upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"LOG_LEVEL must be a logging level name, got {v!r}")
        return level

    @property
    def checkr_oauth_configured(self) -> bool:
        """Both halves of the OAuth client credential are set."""
        return bool(self.CHECKR_OAUTH_CLIENT_ID and self.CHECKR_OAUTH_CLIENT_SECRET)


settings = Settings()
