from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    stripe_webhook_secret: str | None = None
    stripe_webhook_tolerance: int = 300  # seconds of allowed clock skew
    webhook_path: str = "/api/webhooks/billing/stripe"
    max_body_size: int = 1_048_576  # 1 MiB
    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    return Settings()
