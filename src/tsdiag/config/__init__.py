"""Config module exports."""

from tsdiag.config.loader import load_config
from tsdiag.config.models import (
    DiagnosticsConfig,
    LoggingConfig,
    LogOutputConfig,
    ReloadConfig,
    TsDiagConfig,
)

__all__ = [
    "load_config",
    "DiagnosticsConfig",
    "LoggingConfig",
    "LogOutputConfig",
    "ReloadConfig",
    "TsDiagConfig",
]
