"""ISOGas command-line interface.

Entry point for the ``isogas`` CLI tool.
"""

from __future__ import annotations

import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from isogas import __app_name__, __version__
from isogas.core.config import load_settings

console = Console()


@click.group()
@click.version_option(version=__version__, prog_name=__app_name__)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Settings file (JSON).",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config_path: str | None) -> None:
    """ISOGas — gas mixture unit conversion following ISO 14912.

    Converts component fractions between molar, volume and mass
    concentration units at given operating conditions.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )
    ctx.ensure_object(dict)
    ctx.obj["console"] = console
    try:
        ctx.obj["settings"] = load_settings(config_path)
    except ValueError as exc:
        raise click.UsageError(f"Invalid settings: {exc}") from exc


# Import and register sub-command groups
from isogas.cli.convert_cmd import convert, validate  # noqa: E402
from isogas.cli.health_cmd import health  # noqa: E402
from isogas.cli.info_cmd import info  # noqa: E402

cli.add_command(convert)
cli.add_command(validate)
cli.add_command(health)
cli.add_command(info)


def main() -> None:
    """Convenience wrapper for entry-point scripts."""
    cli()
