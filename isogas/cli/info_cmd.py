"""CLI command for listing units and known gases."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from isogas.core.molecules import list_gases
from isogas.core.units import input_units, list_units


@click.group("info")
@click.pass_context
def info(ctx: click.Context) -> None:
    """List supported units and known gases."""
    pass


@info.command("units")
@click.pass_context
def info_units(ctx: click.Context) -> None:
    """List supported units."""
    console: Console = ctx.obj.get("console", Console())
    inputs = set(input_units())
    table = Table(title="Supported Units")
    table.add_column("Unit", style="cyan")
    table.add_column("Name", style="green")
    table.add_column("Quantity Type", style="yellow")
    table.add_column("Scale", justify="right")
    table.add_column("Input", justify="center")

    for unit in list_units():
        table.add_row(
            unit.id,
            unit.label,
            unit.quantity_type.value,
            f"{unit.scale:g}",
            "✓" if unit.id in inputs else "—",
        )
    console.print(table)


@info.command("gases")
@click.pass_context
def info_gases(ctx: click.Context) -> None:
    """List gases in the molar mass table."""
    console: Console = ctx.obj.get("console", Console())
    table = Table(title="Known Gases")
    table.add_column("Formula", style="cyan")
    table.add_column("Name", style="green")
    table.add_column("CAS", style="yellow")
    table.add_column("Molar Mass [g/mol]", justify="right")

    for gas in list_gases():
        table.add_row(gas.formula, gas.name, gas.cas_number, f"{gas.molar_mass:.2f}")
    console.print(table)
