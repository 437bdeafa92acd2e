"""Utility modules for ISOGas."""

from isogas.utils.constants import P_REFERENCE_BAR, STANDARD_MOLAR_VOLUME, T_CELSIUS_OFFSET
from isogas.utils.units import bar_to_pascal, celsius_to_kelvin, kelvin_to_celsius, pascal_to_bar

__all__ = [
    "P_REFERENCE_BAR",
    "STANDARD_MOLAR_VOLUME",
    "T_CELSIUS_OFFSET",
    "bar_to_pascal",
    "celsius_to_kelvin",
    "kelvin_to_celsius",
    "pascal_to_bar",
]
