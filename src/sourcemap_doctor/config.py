"""Environment-based configuration."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from pydantic import field_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Reads from .env file and environment variables."""

    # Platform API
    auth_token: str = ""
    organization: str = ""
    project: str = ""
    api_base_url: str = "https://sentry.io/api/0/"
    http_timeout_seconds: float = 30.0
    http_max_attempts: int = 3

    # Diagnosis
    event_id: str = ""
    check_already_mapped: bool = False
    step_delay_seconds: float = 0.0  # cosmetic pacing between steps

    # Logging
    log_level: str = "WARNING"
    log_dir: Path | None = None

    @field_validator("api_base_url", mode="before")
    @classmethod
    def _ensure_trailing_slash(cls, v: Any) -> Any:
        """httpx joins relative paths onto base_url only below a '/'."""
        if isinstance(v, str) and v and not v.endswith("/"):
            return v + "/"
        return v

    @field_validator("http_max_attempts")
    @classmethod
    def _validate_attempts(cls, v: int) -> int:
        if v < 1:
            raise ValueError("http_max_attempts must be at least 1")
        return v

    @field_validator("step_delay_seconds")
    @classmethod
    def _validate_delay(cls, v: float) -> float:
        if v < 0:
            raise ValueError("step_delay_seconds must not be negative")
        if v > 5:
            logger.warning(
                "Large STEP_DELAY_SECONDS=%.1f slows every diagnosis step", v
            )
        return v

    def missing_remote_settings(self) -> list[str]:
        """Names of settings required to reach the platform API."""
        required = {
            "AUTH_TOKEN": self.auth_token,
            "ORGANIZATION": self.organization,
            "PROJECT": self.project,
        }
        return [name for name, value in required.items() if not value]

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_prefix": "",
        "extra": "ignore",
    }
