"""Core module exports."""

from tsdiag.core.errors import (
    ConfigError,
    ErrorCode,
    InternalError,
    RoutingError,
    TsDiagError,
)
from tsdiag.core.logging import configure_logging, get_log_file_path, get_logger

__all__ = [
    # Errors
    "ConfigError",
    "ErrorCode",
    "InternalError",
    "RoutingError",
    "TsDiagError",
    # Logging
    "configure_logging",
    "get_log_file_path",
    "get_logger",
]
