from __future__ import annotations

import os
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

# Upper bound imposed by the moment store's batch-get contract
MAX_MOMENT_BATCH_SIZE = 90


class AppConfig(BaseModel):
    """Process configuration read from the environment (see ``.env``)"""
    moment_store: str = "memory"
    moments_file: Optional[str] = None
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0
    redis_socket_timeout: Optional[float] = None
    moment_batch_size: int = Field(default=MAX_MOMENT_BATCH_SIZE, ge=1)
    log_level: str = "INFO"

    @field_validator("moment_batch_size", mode="before")
    @classmethod
    def cap_batch_size(cls, v: Any) -> Any:
        # larger values are clamped, not rejected
        try:
            return min(int(v), MAX_MOMENT_BATCH_SIZE)
        except (TypeError, ValueError):
            return v


def get_app_config() -> AppConfig:
    """Build the configuration from the current environment.

    Entry points call ``load_dotenv()`` first so a local ``.env`` file is
    honoured; this function only reads ``os.environ``.
    """
    return AppConfig(
        moment_store=os.getenv("FLOWCHAIN_MOMENT_STORE", "memory").strip().lower(),
        moments_file=os.getenv("FLOWCHAIN_MOMENTS_FILE") or None,
        redis_host=os.getenv("REDIS_HOST", "localhost"),
        redis_port=int(os.getenv("REDIS_PORT", "6379")),
        redis_db=int(os.getenv("REDIS_DB", "0")),
        redis_socket_timeout=os.getenv("REDIS_SOCKET_TIMEOUT") or None,
        moment_batch_size=os.getenv("FLOWCHAIN_MOMENT_BATCH_SIZE", str(MAX_MOMENT_BATCH_SIZE)),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
