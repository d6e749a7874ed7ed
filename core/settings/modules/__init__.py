# Settings modules
from .app_settings import AppSettings, get_app_settings
from .ledger_settings import LedgerSettings
from .pipeline_settings import DEFAULT_DUPLICATE_PATTERNS, PipelineSettings

__all__ = [
    "AppSettings",
    "DEFAULT_DUPLICATE_PATTERNS",
    "LedgerSettings",
    "PipelineSettings",
    "get_app_settings",
]
