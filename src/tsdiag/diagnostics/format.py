"""Display formatting of diagnostic messages.

Pipeline, in order:

1. ``renderer(diagnostic)`` produces markdown (see markdown.py).
2. ``escape_outside_code_blocks``: outside fenced blocks, ``<``/``>`` are
   escaped and ``code`` spans highlighted; fenced blocks are left as is.
3. The title line loses its heading marker and takes the severity color.
4. Every line then passes through the line rules from ``build_line_rules``.

Each line rule is a pure ``str -> str`` substitution; a rule whose
pattern does not match returns the line unchanged.
"""

from __future__ import annotations

import dataclasses
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog
from rich.color import ColorSystem
from rich.style import Style

from tsdiag.diagnostics.markdown import HEADING_MARKER, render_markdown
from tsdiag.diagnostics.models import NormalizedDiagnostic, Severity

if TYPE_CHECKING:
    from tsdiag.config.models import DiagnosticsConfig

logger = structlog.get_logger(__name__)

MarkdownRenderer = Callable[[NormalizedDiagnostic], str]

MARKDOWN_FILETYPE = "markdown"
TRAILER = "\n\n"

HIGHLIGHT_STYLE = Style(color="blue", bold=True)
SEVERITY_STYLES: dict[Severity, Style] = {
    Severity.ERROR: Style(color="red", bold=True),
    Severity.WARNING: Style(color="green", bold=True),
    Severity.INFO: Style(color="cyan", bold=True),
    Severity.HINT: Style(color="cyan", bold=True),
}


@dataclass(frozen=True)
class FormatOptions:
    show_link: bool = False
    code_block_highlight_type: str = "prettytserr"  # or "typescript"

    @classmethod
    def from_config(cls, config: DiagnosticsConfig) -> FormatOptions:
        return cls(
            show_link=config.show_link,
            code_block_highlight_type=config.code_block_highlight_type,
        )


def paint(text: str, style: Style) -> str:
    """Wrap text in the ANSI SGR codes of a style."""
    return style.render(text, color_system=ColorSystem.STANDARD)


# =============================================================================
# Escaping
# =============================================================================

_CODE_BLOCK_RE = re.compile(r"```[\s\S]*?```")
_INLINE_CODE_RE = re.compile(r"`([^`]+)`")
_PLACEHOLDER = "\0"


def escape_outside_code_blocks(text: str) -> str:
    """Escape angle brackets and highlight inline code outside fenced blocks."""
    blocks: list[str] = []

    def hold(match: re.Match[str]) -> str:
        blocks.append(match.group(0))
        return _PLACEHOLDER

    held = _CODE_BLOCK_RE.sub(hold, text)
    escaped = held.replace("<", "\\<").replace(">", "\\>")
    escaped = _INLINE_CODE_RE.sub(lambda m: paint(m.group(1), HIGHLIGHT_STYLE), escaped)

    restore = iter(blocks)
    head, *tail = escaped.split(_PLACEHOLDER)
    return head + "".join(next(restore, "") + part for part in tail)


# =============================================================================
# Line rules
# =============================================================================


@dataclass(frozen=True)
class LineRule:
    name: str
    apply: Callable[[str], str]


# ['name.ts' 📄](uri) -> [name.ts 📄](uri)
_FILE_LINK_RE = re.compile(r"(\['?)([^' ]+)('?.+?📄\])")
# [🔗](url) and [🌐](url), through the last ')' on the line
_ICON_LINK_RE = re.compile(r"\[(🔗|🌐)\]\(.*\)")
_FENCE_TAG_RE = re.compile(r"^(\s*)(```)typescript")


def title_line(line: str, severity: Severity | None) -> str:
    """Drop the heading marker and color the title by severity."""
    style = SEVERITY_STYLES[severity or Severity.ERROR]
    return paint(line[len(HEADING_MARKER) :], style)


def collapse_file_links(line: str) -> str:
    return _FILE_LINK_RE.sub(lambda m: f"[{m.group(2)} 📄]", line)


def strip_icon_links(line: str) -> str:
    return _ICON_LINK_RE.sub("", line)


def retag_fence(line: str) -> str:
    """Request the dedicated type-block highlighter for typescript fences."""
    return _FENCE_TAG_RE.sub(lambda m: f"{m.group(1)}{m.group(2)}prettytserr", line, count=1)


def inject_type_alias(line: str) -> str:
    """Open typescript fences with a ``type Type =`` line at the fence's indent."""
    match = _FENCE_TAG_RE.match(line)
    if match is None:
        return line
    indent = " " * len(match.group(1))
    return f"{line[: match.end()]}\n{indent}type Type ={line[match.end() :]}"


def build_line_rules(options: FormatOptions) -> tuple[LineRule, ...]:
    rules: list[LineRule] = []
    if not options.show_link:
        rules.append(LineRule("collapse_file_links", collapse_file_links))
        rules.append(LineRule("strip_icon_links", strip_icon_links))
    if options.code_block_highlight_type == "prettytserr":
        rules.append(LineRule("retag_fence", retag_fence))
    else:
        rules.append(LineRule("inject_type_alias", inject_type_alias))
    return tuple(rules)


# =============================================================================
# Pipeline
# =============================================================================


def render(markdown: str, severity: Severity | None, options: FormatOptions) -> str:
    """Turn rendered markdown into the display string of a diagnostic."""
    rules = build_line_rules(options)
    lines = escape_outside_code_blocks(markdown).split("\n")
    out: list[str] = []
    for index, line in enumerate(lines):
        if index == 0:
            line = title_line(line, severity)
        for rule in rules:
            line = rule.apply(line)
        out.append(line)
    return "\n".join(out) + TRAILER


def format_diagnostic(
    diagnostic: NormalizedDiagnostic,
    options: FormatOptions | None = None,
    renderer: MarkdownRenderer = render_markdown,
) -> NormalizedDiagnostic:
    """Return a copy of the diagnostic with a formatted markdown message."""
    options = options or FormatOptions()
    try:
        markdown = renderer(diagnostic)
    except Exception as e:
        logger.warning("markdown_render_failed", error=str(e), code=diagnostic.code)
        markdown = HEADING_MARKER + diagnostic.message
    return dataclasses.replace(
        diagnostic,
        message=render(markdown, diagnostic.severity, options),
        filetype=MARKDOWN_FILETYPE,
    )


def format_diagnostics(
    diagnostics: Iterable[NormalizedDiagnostic],
    options: FormatOptions | None = None,
    renderer: MarkdownRenderer = render_markdown,
) -> list[NormalizedDiagnostic]:
    return [format_diagnostic(d, options, renderer) for d in diagnostics]
