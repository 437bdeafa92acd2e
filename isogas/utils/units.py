"""Boundary unit helpers for ISOGas.

The remote engine speaks Kelvin and Pascal; the rest of the package works
in °C and bar absolute. Conversions go through a shared pint registry.
"""

from __future__ import annotations

import pint

# Module-level unit registry (singleton)
_ureg = pint.UnitRegistry()
Q_ = _ureg.Quantity


def celsius_to_kelvin(value: float) -> float:
    """Convert a temperature in °C to K."""
    return Q_(value, "degC").to("K").magnitude


def kelvin_to_celsius(value_k: float) -> float:
    """Convert a temperature in K to °C."""
    return Q_(value_k, "K").to("degC").magnitude


def bar_to_pascal(value: float) -> float:
    """Convert a pressure in bar to Pa."""
    return Q_(value, "bar").to("Pa").magnitude


def pascal_to_bar(value_pa: float) -> float:
    """Convert a pressure in Pa to bar."""
    return Q_(value_pa, "Pa").to("bar").magnitude
