from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_BASE_URL = "https://api.idolondemand.com/1"


class Settings(BaseSettings):
    """Client configuration read from ``IOD_*`` environment variables or ``.env``."""

    model_config = SettingsConfigDict(env_prefix="IOD_", env_file=".env", extra="ignore")

    BASE_URL: str = Field(default=DEFAULT_BASE_URL)
    # Ambient credential used by status/result polls when no key is passed per call
    API_KEY: Optional[SecretStr] = Field(default=None)
    TIMEOUT_SECONDS: float = Field(default=30.0, gt=0)
    VERIFY_SSL: bool = Field(default=True)
    LOG_LEVEL: str = Field(default="INFO")
    LOG_JSON: bool = Field(default=False)

    @property
    def api_key(self) -> Optional[str]:
        return self.API_KEY.get_secret_value() if self.API_KEY else None


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()  # type: ignore[call-arg]
