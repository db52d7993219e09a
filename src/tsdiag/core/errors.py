"""tsdiag error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Routing
- 9xxx: Internal
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002

    # Routing (3xxx)
    ROUTING_LOOKUP_FAILED = 3001
    ROUTING_DELIVERY_FAILED = 3002

    # Internal (9xxx)
    INTERNAL_ERROR = 9001


@dataclass(frozen=True, slots=True)
class TsDiagError(Exception):
    """Base error with structured context for log records."""

    code: ErrorCode
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'CONFIG_PARSE_ERROR')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for structured logging."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(TsDiagError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )


class RoutingError(TsDiagError):
    """Failures while routing a diagnostic batch to a language handler."""

    @classmethod
    def lookup_failed(cls, uri: str, reason: str) -> "RoutingError":
        return cls(
            code=ErrorCode.ROUTING_LOOKUP_FAILED,
            message=f"Handler lookup failed for {uri}: {reason}",
            details={"uri": uri, "reason": reason},
        )

    @classmethod
    def delivery_failed(cls, handler_id: str, uri: str, reason: str) -> "RoutingError":
        return cls(
            code=ErrorCode.ROUTING_DELIVERY_FAILED,
            message=f"Handler '{handler_id}' failed to accept diagnostics for {uri}: {reason}",
            details={"handler": handler_id, "uri": uri, "reason": reason},
        )


class InternalError(TsDiagError):
    """Internal/unexpected errors."""

    @classmethod
    def unexpected(cls, reason: str, **details: Any) -> "InternalError":
        return cls(
            code=ErrorCode.INTERNAL_ERROR,
            message=f"Internal error: {reason}",
            details=details,
        )
