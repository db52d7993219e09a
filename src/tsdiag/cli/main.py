"""tsdiag CLI - tsdiag command."""

import click

from tsdiag.cli.render import render_command
from tsdiag.core.logging import configure_logging


@click.group()
@click.version_option(version="0.1.0", prog_name="tsdiag")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """tsdiag - TypeScript diagnostics translation and formatting."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    configure_logging(level="DEBUG" if verbose else "WARNING")


cli.add_command(render_command, name="render")


if __name__ == "__main__":
    cli()
