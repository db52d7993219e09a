"""tsdiag render command - format a backend diagnostic event."""

import json
from pathlib import Path
from typing import IO, Any

import click
import structlog

from tsdiag.config.loader import load_config
from tsdiag.core.errors import ConfigError
from tsdiag.core.logging import configure_logging, get_log_file_path
from tsdiag.diagnostics.format import FormatOptions, format_diagnostics
from tsdiag.diagnostics.models import NormalizedDiagnostic
from tsdiag.diagnostics.normalize import normalize_all
from tsdiag.diagnostics.protocol import parse_event
from tsdiag.diagnostics.severity import ClassifierConfig

logger = structlog.get_logger(__name__)


def _to_uri(path: str) -> str:
    p = Path(path)
    return p.as_uri() if p.is_absolute() else path


def _with_log_pointer(message: str) -> str:
    log_file = get_log_file_path()
    return f"{message}. See {log_file} for details." if log_file else message


def _header(uri: str, diagnostic: NormalizedDiagnostic) -> str:
    start = diagnostic.range
    severity = diagnostic.severity.value if diagnostic.severity else "error"
    code = f" TS{diagnostic.code}" if diagnostic.code is not None else ""
    return f"{uri}:{start.start_line + 1}:{start.start_col + 1} {severity}{code}"


@click.command()
@click.argument("event_file", type=click.File("r"), default="-")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option(
    "--style-warnings/--no-style-warnings",
    default=None,
    help="Report style checks as warnings (default: from config)",
)
@click.option("--show-link/--hide-link", default=None, help="Keep hyperlinks in messages")
@click.option(
    "--highlight",
    type=click.Choice(["prettytserr", "typescript"]),
    default=None,
    help="Fence tag for type blocks",
)
@click.option(
    "--workspace",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=".",
    help="Workspace whose .tsdiag/config.yaml applies",
)
@click.option(
    "--color/--no-color",
    default=None,
    help="Keep ANSI styling (default: only when writing to a terminal)",
)
@click.pass_context
def render_command(
    ctx: click.Context,
    event_file: IO[str],
    as_json: bool,
    style_warnings: bool | None,
    show_link: bool | None,
    highlight: str | None,
    workspace: Path,
    color: bool | None,
) -> None:
    """Normalize and format the diagnostics of a backend event.

    EVENT_FILE is a JSON event ({"file": ..., "diagnostics": [...]}, or a
    full event message with a "body"); '-' reads stdin.
    """
    overrides: dict[str, Any] = {}
    if style_warnings is not None:
        overrides["report_style_checks_as_warnings"] = style_warnings
    if show_link is not None:
        overrides["show_link"] = show_link
    if highlight is not None:
        overrides["code_block_highlight_type"] = highlight

    kwargs: dict[str, Any] = {"diagnostics": overrides} if overrides else {}
    try:
        config = load_config(workspace.resolve(), **kwargs)
    except ConfigError as e:
        raise click.ClickException(str(e)) from e

    logging_config = config.logging
    if ctx.obj and ctx.obj.get("verbose"):
        logging_config = logging_config.model_copy(update={"level": "DEBUG"})
    configure_logging(config=logging_config)

    result = parse_event(event_file.read())
    if not result.success:
        error = result.parse_error or "Invalid diagnostic event"
        logger.warning("event_parse_failed", error=error)
        raise click.ClickException(_with_log_pointer(error))

    normalized = normalize_all(
        result.diagnostics, _to_uri, ClassifierConfig.from_config(config.diagnostics)
    )
    formatted = format_diagnostics(normalized, FormatOptions.from_config(config.diagnostics))
    uri = _to_uri(result.file)

    if as_json:
        click.echo(
            json.dumps({"uri": uri, "diagnostics": [d.to_dict() for d in formatted]}, indent=2)
        )
        return

    if not formatted:
        click.echo(f"{uri}: no diagnostics")
        return
    for diagnostic in formatted:
        click.echo(_header(uri, diagnostic), color=color)
        click.echo(diagnostic.message, nl=False, color=color)
