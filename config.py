import os
from typing import Any, Literal, Mapping, Optional

from pydantic import BaseModel, Field, field_validator


ENV_PREFIX = "DISCS_"


class Settings(BaseModel):
    """Runtime settings, overridable through DISCS_* environment variables"""
    base_url: str = "https://www.dizzylab.net"
    page_size: int = Field(default=100, gt=0)
    http_timeout: float = Field(default=10.0, gt=0)
    cache_dir: str = "cache"
    cache_ttl_seconds: int = Field(default=60 * 60 * 24, gt=0)  # 1 day
    log_level: Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"] = "INFO"

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().upper()
        return value


_ENV_FIELDS = {
    "BASE_URL": "base_url",
    "PAGE_SIZE": "page_size",
    "HTTP_TIMEOUT": "http_timeout",
    "CACHE_DIR": "cache_dir",
    "CACHE_TTL": "cache_ttl_seconds",
    "LOG_LEVEL": "log_level",
}


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build Settings from the environment; unset variables keep their defaults"""
    if environ is None:
        environ = os.environ

    values = {}
    for suffix, field_name in _ENV_FIELDS.items():
        raw = environ.get(ENV_PREFIX + suffix)
        if raw is not None and raw.strip():
            values[field_name] = raw.strip()

    return Settings(**values)
