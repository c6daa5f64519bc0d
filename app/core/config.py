from functools import lru_cache
from typing import Literal

from pydantic import EmailStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_env: str = "local"
    api_prefix: str = "/api"
    log_level: str = "INFO"

    # Security / session cookie
    secret_key: str = "changeme"  # override in .env
    session_cookie_name: str = "ticketing_session"
    session_timeout_minutes: int = 60 * 24
    session_cookie_secure: bool = False

    # Database
    database_url: str

    # Redis
    redis_url: str | None = None
    dashboard_cache_ttl: int = 60

    # Public endpoints
    ping_message: str = "ping"

    # Authorization policy switches
    role_scope: Literal["global", "account"] = "global"
    matrix_atomic_batch: bool = False
    enforce_bin_scope: bool = False

    # Accounts
    default_account_id: int = 1
    default_account_name: str = "default"

    # Admin activity view
    activity_log_window_days: int = 7
    activity_log_limit: int = 500

    # Platform seed (scripts/setup_platform.py)
    super_admin_email: EmailStr | None = None
    super_admin_password: str | None = None
    super_admin_first_name: str = "Super"
    super_admin_last_name: str = "Admin"

    # Pydantic v2 style config
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Cached settings instance so the .env is parsed once.
    """
    return Settings()
