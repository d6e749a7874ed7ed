from __future__ import annotations

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from core.settings.base import ReconciliationBaseSettings


class LedgerSettings(ReconciliationBaseSettings):
    """
    Settings for the external ledger HTTP API.
    Loaded from LEDGER_* environment variables or .env.
    """

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    base_url: str = "http://localhost:8080/api"
    username: str = ""
    password: str = ""
    login_endpoint: str = "Login"
    # Posting calls must be observed, so the timeout is generous.
    timeout_seconds: float = Field(default=60.0, gt=0)
