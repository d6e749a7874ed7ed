# Settings package
from core.settings.modules import (
    AppSettings,
    LedgerSettings,
    PipelineSettings,
    get_app_settings,
)

__all__ = ["AppSettings", "LedgerSettings", "PipelineSettings", "get_app_settings"]
