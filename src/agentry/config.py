"""Application configuration contract."""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = Field(alias="APP_ENV", default="dev")
    app_db: str = Field(alias="APP_DB", default="/tmp/agentry.db")
    log_level: str = Field(alias="LOG_LEVEL", default="INFO")
    agents_root: str = Field(alias="AGENTS_ROOT", default="agents")
    api_key_prefix: str = Field(alias="API_KEY_PREFIX", default="ck_")
    web_cors_origins: str = Field(alias="WEB_CORS_ORIGINS", default="http://localhost:5173")

    # Security: bind host defaults to loopback
    bind_host: str = Field(alias="BIND_HOST", default="127.0.0.1")
    bind_port: int = Field(alias="BIND_PORT", default=8000)


def validate_settings_for_env(settings: Settings) -> None:
    import logging as _logging
    import warnings

    _logger = _logging.getLogger(__name__)

    if settings.app_env == "prod" and settings.bind_host == "0.0.0.0":
        msg = (
            "SECURITY WARNING: BIND_HOST=0.0.0.0 in production. "
            "This exposes the API to all network interfaces. "
            "Set BIND_HOST=127.0.0.1 and use a reverse proxy."
        )
        _logger.warning(msg)
        warnings.warn(msg, stacklevel=2)

    if settings.app_env != "prod":
        return

    missing: list[str] = []
    if not settings.app_db.startswith("/"):
        missing.append("APP_DB(absolute path required)")
    if not Path(settings.agents_root).is_dir():
        missing.append("AGENTS_ROOT(existing directory required)")
    if not settings.api_key_prefix.strip():
        missing.append("API_KEY_PREFIX")

    if missing:
        keys = ", ".join(sorted(set(missing)))
        raise ValueError(f"invalid production configuration: {keys}")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
