"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (TSDIAG__SECTION__KEY)
3. Workspace YAML (.tsdiag/config.yaml)
4. Global YAML (~/.config/tsdiag/config.yaml)
5. Built-in defaults (this file)

Examples:
    TSDIAG__LOGGING__LEVEL=DEBUG
    TSDIAG__DIAGNOSTICS__REPORT_STYLE_CHECKS_AS_WARNINGS=false
    TSDIAG__RELOAD__DEBOUNCE_SEC=3
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from tsdiag.config.constants import DEFAULT_MANIFEST_NAMES, RELOAD_DEBOUNCE_SEC

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
CodeBlockHighlightType = Literal["prettytserr", "typescript"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration."""

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        TSDIAG__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="INFO",
        description="Root log level. DEBUG logs every routed batch.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class DiagnosticsConfig(BaseModel):
    """Diagnostic classification and display.

    Env vars:
        TSDIAG__DIAGNOSTICS__REPORT_STYLE_CHECKS_AS_WARNINGS
        TSDIAG__DIAGNOSTICS__SHOW_LINK
        TSDIAG__DIAGNOSTICS__CODE_BLOCK_HIGHLIGHT_TYPE
    """

    report_style_checks_as_warnings: bool = Field(
        default=True,
        description="Report style checks (unused variables, unreachable code, ...) "
        "as warnings instead of errors.",
    )
    show_link: bool = Field(
        default=False,
        description="Keep hyperlink markup (error reference, search, file links) "
        "in rendered messages.",
    )
    code_block_highlight_type: CodeBlockHighlightType = Field(
        default="prettytserr",
        description="Fence tag used for type blocks. 'typescript' also prefixes "
        "each block with a 'type Type =' line.",
    )


class ReloadConfig(BaseModel):
    """Project reload on manifest changes.

    Env vars:
        TSDIAG__RELOAD__DEBOUNCE_SEC: Quiet window before re-diagnosing
    """

    debounce_sec: float = Field(
        default=RELOAD_DEBOUNCE_SEC,
        description="Quiet window after the last manifest content change before "
        "all files are re-diagnosed.",
    )
    manifest_names: tuple[str, ...] = Field(
        default=DEFAULT_MANIFEST_NAMES,
        description="File names whose creation, deletion or change affects project structure.",
    )

    @field_validator("debounce_sec")
    @classmethod
    def validate_debounce(cls, v: float) -> float:
        if v < 0:
            raise ValueError(f"debounce_sec must be non-negative, got {v}")
        return v


class TsDiagConfig(BaseModel):
    """Root configuration for tsdiag."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    diagnostics: DiagnosticsConfig = Field(default_factory=DiagnosticsConfig)
    reload: ReloadConfig = Field(default_factory=ReloadConfig)
