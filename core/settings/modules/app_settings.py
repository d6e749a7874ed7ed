from __future__ import annotations

from functools import lru_cache

from pydantic import BaseModel, ConfigDict

from core.infrastructure.database.config import DatabaseSettings
from core.settings.modules.ledger_settings import LedgerSettings
from core.settings.modules.pipeline_settings import PipelineSettings


class AppSettings(BaseModel):
    """Application settings aggregator."""

    model_config = ConfigDict(arbitrary_types_allowed=True, extra="ignore")

    ledger: LedgerSettings
    pipeline: PipelineSettings
    database: DatabaseSettings


@lru_cache()
def get_app_settings() -> AppSettings:
    return AppSettings(
        ledger=LedgerSettings(),
        pipeline=PipelineSettings(),
        database=DatabaseSettings(),
    )
