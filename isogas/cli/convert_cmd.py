"""CLI commands for mixture conversion and validation."""

from __future__ import annotations

import asyncio
from dataclasses import replace
from typing import Any, Callable

import click
from rich.console import Console
from rich.table import Table

from isogas.core.config import Settings, load_mixture_json, result_to_json
from isogas.core.models import Component, ConversionResult, Mixture
from isogas.core.orchestrator import create_converter
from isogas.core.validation import validate_mixture
from isogas.errors import IsogasError, ValidationFailed


def parse_component(index: int, text: str) -> Component:
    """Parse ``NAME:VALUE[:UNCERTAINTY[:CAS]]``."""
    parts = [p.strip() for p in text.split(":")]
    if len(parts) < 2 or len(parts) > 4:
        raise click.BadParameter(
            f"'{text}' is not NAME:VALUE[:UNCERTAINTY[:CAS]]", param_hint="--component"
        )
    try:
        value = float(parts[1])
        uncertainty = float(parts[2]) if len(parts) > 2 and parts[2] else 0.0
    except ValueError as exc:
        raise click.BadParameter(f"'{text}': {exc}", param_hint="--component") from exc
    cas = parts[3] if len(parts) > 3 else ""
    return Component(id=str(index), name=parts[0], cas_number=cas, value=value, uncertainty=uncertainty)


def mixture_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Options shared by commands that take a mixture."""
    options = [
        click.option(
            "--mixture",
            "mixture_path",
            type=click.Path(exists=True, dir_okay=False),
            default=None,
            help="Mixture description (JSON).",
        ),
        click.option(
            "--component",
            "-c",
            "components",
            multiple=True,
            help="Component as NAME:VALUE[:UNCERTAINTY[:CAS]] (repeatable).",
        ),
        click.option("--input-unit", "-i", default=None, help="Unit of the input values [mol/mol]."),
        click.option("--output-unit", "-u", default=None, help="Requested output unit [mol/mol]."),
        click.option("--temperature", "-T", type=float, default=None, help="Operating temperature [°C]."),
        click.option("--pressure", "-P", type=float, default=None, help="Operating pressure [bar abs]."),
        click.option("--balance-gas", default=None, help="Balance gas id [N2]."),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def build_mixture(
    settings: Settings,
    mixture_path: str | None,
    components: tuple[str, ...],
    input_unit: str | None,
    output_unit: str | None,
    temperature: float | None,
    pressure: float | None,
    balance_gas: str | None,
) -> Mixture:
    """Assemble a mixture from a file and/or command-line options."""
    mixture = load_mixture_json(mixture_path) if mixture_path else Mixture()
    if not mixture_path:
        mixture.conditions.balance_gas_id = settings.balance_gas
    if components:
        mixture.components = [parse_component(i, c) for i, c in enumerate(components, start=1)]

    cond = mixture.conditions
    if input_unit is not None:
        cond.input_unit = input_unit
    if output_unit is not None:
        cond.output_unit = output_unit
    if temperature is not None:
        cond.temperature_celsius = temperature
    if pressure is not None:
        cond.pressure_bar_absolute = pressure
    if balance_gas is not None:
        cond.balance_gas_id = balance_gas
    return mixture


async def _run_conversion(settings: Settings, mixture: Mixture, lookup: bool) -> ConversionResult:
    converter, client = create_converter(settings)
    try:
        if client is not None:
            await converter.state.start()
        if lookup:
            for comp in mixture.components:
                await converter.lookup_component(comp)
        return await converter.convert(mixture)
    finally:
        await converter.state.stop()
        if client is not None:
            await client.aclose()


def _print_messages(console: Console, title: str, messages: list[str], style: str) -> None:
    for msg in messages:
        console.print(f"[{style}]{title}:[/{style}] {msg}")


def _print_result(console: Console, result: ConversionResult) -> None:
    ref = result.reference_conditions
    console.print(
        f"\n[bold]ISOGas — Conversion ({result.method.value})[/bold]\n"
        f"[dim]Reference: {ref.temperature_celsius:g} °C, {ref.pressure_bar_absolute:g} bar[/dim]\n"
    )
    table = Table(title="Converted Components")
    table.add_column("Component", style="cyan")
    table.add_column("CAS", style="dim")
    table.add_column("Value", style="green", justify="right")
    table.add_column("Uncertainty", justify="right")
    table.add_column("Unit", style="dim")
    for comp in result.components:
        table.add_row(
            comp.name, comp.cas_number or "—", f"{comp.value:.6g}", f"{comp.uncertainty:.3g}", result.output_unit
        )
    console.print(table)
    _print_messages(console, "Warning", result.warnings, "yellow")
    _print_messages(console, "Note", result.advisories, "magenta")


@click.command("convert")
@mixture_options
@click.option("--local", "force_local", is_flag=True, help="Use the local engine only.")
@click.option("--lookup", is_flag=True, help="Confirm components against the molecule database first.")
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON.")
@click.pass_context
def convert(
    ctx: click.Context,
    mixture_path: str | None,
    components: tuple[str, ...],
    input_unit: str | None,
    output_unit: str | None,
    temperature: float | None,
    pressure: float | None,
    balance_gas: str | None,
    force_local: bool,
    lookup: bool,
    as_json: bool,
) -> None:
    """Convert mixture components to another unit.

    Output units: mol/mol, mmol/mol, µmol/mol, ppm, ppb, ppt, m3/m3, mg/m3.
    """
    console: Console = ctx.obj.get("console", Console())
    settings: Settings = ctx.obj.get("settings", Settings())
    if force_local:
        settings = replace(settings, remote_enabled=False)

    mixture = build_mixture(
        settings, mixture_path, components, input_unit, output_unit, temperature, pressure, balance_gas
    )

    try:
        result = asyncio.run(_run_conversion(settings, mixture, lookup))
    except ValidationFailed as exc:
        _print_messages(console, "Error", exc.errors, "red")
        _print_messages(console, "Warning", exc.warnings, "yellow")
        raise SystemExit(1)
    except IsogasError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise SystemExit(1)

    if as_json:
        click.echo(result_to_json(result))
    else:
        _print_result(console, result)


@click.command("validate")
@mixture_options
@click.pass_context
def validate(
    ctx: click.Context,
    mixture_path: str | None,
    components: tuple[str, ...],
    input_unit: str | None,
    output_unit: str | None,
    temperature: float | None,
    pressure: float | None,
    balance_gas: str | None,
) -> None:
    """Check a mixture without converting it."""
    console: Console = ctx.obj.get("console", Console())
    settings: Settings = ctx.obj.get("settings", Settings())
    mixture = build_mixture(
        settings, mixture_path, components, input_unit, output_unit, temperature, pressure, balance_gas
    )

    result = validate_mixture(mixture)
    _print_messages(console, "Error", result.errors, "red")
    _print_messages(console, "Warning", result.warnings, "yellow")
    if not result.is_valid:
        raise SystemExit(1)
    console.print("[green]Mixture is valid[/green]")
