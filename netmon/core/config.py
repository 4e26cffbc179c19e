from __future__ import annotations

import socket
from typing import Any, Literal

from pydantic import AnyHttpUrl, Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from netmon.core.errors import ConfigError


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="MONITOR_",
        case_sensitive=False,
        frozen=True,
    )

    interval_seconds: float = Field(default=5.0, gt=0)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="INFO")

    influx_url: AnyHttpUrl = Field(default="http://influxdb:8086")
    influx_db: str = Field(default="internet_metrics", min_length=1, max_length=64)
    influx_username: str | None = Field(default=None)
    influx_password: str | None = Field(default=None)
    influx_timeout_seconds: float = Field(default=5.0, gt=0, le=120.0)

    latency_host: str = Field(default="google.com", min_length=1, max_length=253)
    latency_count: int = Field(default=4, ge=1, le=20)
    latency_timeout_seconds: float = Field(default=10.0, gt=0, le=120.0)

    download_url: AnyHttpUrl = Field(default="https://speed.cloudflare.com/__down?bytes=10000000")
    download_timeout_seconds: float = Field(default=30.0, gt=0, le=600.0)

    upload_url: AnyHttpUrl = Field(default="https://speed.cloudflare.com/__up")
    upload_size_bytes: int = Field(default=1024 * 1024, ge=1, le=256 * 1024 * 1024)
    upload_timeout_seconds: float = Field(default=30.0, gt=0, le=600.0)

    host_tag: str = Field(default_factory=socket.gethostname, min_length=1)

    submit_max_attempts: int = Field(default=3, ge=1, le=10)
    submit_base_delay_seconds: float = Field(default=0.5, ge=0)
    submit_backoff_multiplier: float = Field(default=2.0, ge=1.0)
    submit_max_delay_seconds: float = Field(default=5.0, ge=0)

    shutdown_grace_seconds: float = Field(default=5.0, ge=0, le=300.0)

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value

    @model_validator(mode="after")
    def _credentials_come_in_pairs(self) -> "Settings":
        if (self.influx_username is None) != (self.influx_password is None):
            raise ValueError("influx_username and influx_password must be set together")
        return self

    @property
    def influx_credentials(self) -> tuple[str, str] | None:
        if self.influx_username is None or self.influx_password is None:
            return None
        return self.influx_username, self.influx_password


def load_settings(**overrides: Any) -> Settings:
    """Build the settings from the environment, `.env` and explicit overrides.

    Overrides that are ``None`` are ignored so that unset CLI flags fall back
    to the environment. Any validation problem is reported as ``ConfigError``.
    """
    values = {key: value for key, value in overrides.items() if value is not None}
    try:
        return Settings(**values)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc']) or 'settings'}: {err['msg']}"
            for err in e.errors()
        )
        raise ConfigError(f"invalid configuration: {problems}") from e
