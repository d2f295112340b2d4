from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    # App
    app_name: str = "Gatekeeper"
    debug: bool = False

    # Logging
    log_level: str = "INFO"
    log_dir: str = "./logs"
    log_to_file: bool = False

    # Database
    database_url: str = "sqlite+aiosqlite:///./gatekeeper.db"
    seed_default_roles: bool = True

    # Redis (audit fan-out)
    redis_url: str = "redis://localhost:6379/0"
    audit_redis_enabled: bool = False
    audit_redis_channel: str = "gatekeeper:activity"

    # Security
    secret_key: str = "dev-secret-key-change-in-production"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 30

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore"  # Allow extra env vars without raising validation errors
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
