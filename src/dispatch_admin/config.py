from __future__ import annotations

import os

from pydantic import BaseModel, Field

from .backoff import RetryPolicy
from .errors import ConfigurationError
from .messages import MessageCatalog, catalog_for


class AdminOpsConfig(BaseModel):
    # Remote procedure endpoint
    rpc_base_url: str | None = Field(default_factory=lambda: os.getenv("ADMIN_RPC_BASE_URL"))
    rpc_api_key: str | None = Field(default_factory=lambda: os.getenv("ADMIN_RPC_API_KEY"))
    rpc_access_token: str | None = Field(default_factory=lambda: os.getenv("ADMIN_RPC_ACCESS_TOKEN"))
    rpc_timeout_seconds: float = Field(
        default_factory=lambda: float(os.getenv("ADMIN_RPC_TIMEOUT_SECONDS", "30"))
    )

    # Retry schedule
    retry_max_attempts: int = Field(default_factory=lambda: int(os.getenv("ADMIN_RETRY_MAX_ATTEMPTS", "3")))
    retry_base_delay_ms: int = Field(
        default_factory=lambda: int(os.getenv("ADMIN_RETRY_BASE_DELAY_MS", "1000"))
    )
    retry_backoff_multiplier: float = Field(
        default_factory=lambda: float(os.getenv("ADMIN_RETRY_BACKOFF_MULTIPLIER", "2"))
    )
    retry_max_delay_ms: int = Field(default_factory=lambda: int(os.getenv("ADMIN_RETRY_MAX_DELAY_MS", "8000")))

    # User-facing messages
    locale: str = Field(default_factory=lambda: os.getenv("ADMIN_LOCALE", "th"))

    # Observability
    log_level: str = Field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    log_format: str = Field(default_factory=lambda: os.getenv("LOG_FORMAT", "json"))
    enable_metrics: bool = Field(
        default_factory=lambda: os.getenv("ENABLE_METRICS", "false").lower() == "true"
    )
    metrics_bind: str = Field(default_factory=lambda: os.getenv("METRICS_BIND", "127.0.0.1"))
    metrics_port: int = Field(default_factory=lambda: int(os.getenv("METRICS_PORT", "9110")))

    def retry_policy(self) -> RetryPolicy:
        try:
            return RetryPolicy(
                max_attempts=self.retry_max_attempts,
                base_delay_ms=self.retry_base_delay_ms,
                backoff_multiplier=self.retry_backoff_multiplier,
                max_delay_ms=self.retry_max_delay_ms,
            )
        except ValueError as e:
            raise ConfigurationError(f"Invalid retry settings: {e}") from e

    def message_catalog(self) -> MessageCatalog:
        return catalog_for(self.locale)

    def require_base_url(self) -> str:
        if not self.rpc_base_url:
            raise ConfigurationError("ADMIN_RPC_BASE_URL is required to call the admin backend.")
        return self.rpc_base_url

    def secrets(self) -> list[str]:
        return [s for s in (self.rpc_api_key, self.rpc_access_token) if s]
