from __future__ import annotations

from typing import List

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from core.settings.base import ReconciliationBaseSettings


DEFAULT_DUPLICATE_PATTERNS = [
    "đã tồn tại",
    "da ton tai",
    "pk_d81",
    "duplicate",
    "already exists",
]


class PipelineSettings(ReconciliationBaseSettings):
    """
    Posting pipeline and batch settings.
    Loaded from PIPELINE_* environment variables or .env.
    """

    model_config = SettingsConfigDict(
        env_prefix="PIPELINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Orders posted concurrently in one batch
    concurrency: int = Field(default=5, ge=1)

    # Best-effort lookups (catalog, branch, warehouse mapping)
    lookup_concurrency: int = Field(default=5, ge=1)
    lookup_timeout_seconds: float = Field(default=5.0, gt=0)

    # Retry policy for transient ledger failures
    max_attempts: int = Field(default=3, ge=1)
    backoff_seconds: float = Field(default=2.0, ge=0)

    max_error_entries: int = Field(default=50, ge=0)
    duplicate_patterns: List[str] = Field(default_factory=lambda: list(DEFAULT_DUPLICATE_PATTERNS))
