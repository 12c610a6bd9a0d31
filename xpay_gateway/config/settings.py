import os
from functools import lru_cache

from pydantic import BaseModel, Field, ValidationError


class Settings(BaseModel):
    COINGECKO_BASE_URL: str = "https://api.coingecko.com/api/v3"
    PRICE_PRELOAD_PAGES: int = Field(default=2, ge=1)
    PRICE_PER_PAGE: int = Field(default=250, ge=1, le=250)
    PRICE_REFRESH_INTERVAL_SEC: float = Field(default=15.0, gt=0)
    HTTP_TIMEOUT_SEC: float = Field(default=10.0, gt=0)
    SIDESHIFT_BASE_URL: str = "https://api.sideshift.ai/v2"
    SIDESHIFT_API_KEY: str | None = None
    AI_NAME: str = "X PAY Assistant"

    @classmethod
    def from_env(cls) -> "Settings":
        raw = {
            "COINGECKO_BASE_URL": os.getenv("COINGECKO_BASE_URL"),
            "PRICE_PRELOAD_PAGES": os.getenv("PRICE_PRELOAD_PAGES"),
            "PRICE_PER_PAGE": os.getenv("PRICE_PER_PAGE"),
            "PRICE_REFRESH_INTERVAL_SEC": os.getenv("PRICE_REFRESH_INTERVAL_SEC"),
            "HTTP_TIMEOUT_SEC": os.getenv("HTTP_TIMEOUT_SEC"),
            "SIDESHIFT_BASE_URL": os.getenv("SIDESHIFT_BASE_URL"),
            "SIDESHIFT_API_KEY": os.getenv("SIDESHIFT_API_KEY") or None,
            "AI_NAME": os.getenv("AI_NAME"),
        }
        # unset env keeps the field default
        return cls.model_validate({k: v for k, v in raw.items() if v is not None})


@lru_cache
def get_settings() -> Settings:
    return Settings.from_env()


def load_settings(loader=get_settings) -> Settings:
    """Settings from ``loader``; an invalid env falls back to the defaults."""
    try:
        return loader()
    except ValidationError as exc:
        print(f"[CONFIG][settings_invalid] error_count={exc.error_count()}", flush=True)
        return Settings()
