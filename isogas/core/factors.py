"""Conversion factor resolution between concentration units.

A factor is either a constant multiplier or a callable that computes the
multiplier from the component (e.g. when the molar mass is involved).
Unit pairs without a registered path raise ``UnsupportedConversion``.
"""

from __future__ import annotations

from typing import Callable, Union

from isogas.core.models import Component
from isogas.core.molecules import lookup_molar_mass
from isogas.core.units import QuantityType, canonical_unit, get_unit
from isogas.errors import UnsupportedConversion
from isogas.utils.constants import G_TO_MG, STANDARD_MOLAR_VOLUME, VOLUME_TO_MOLE_RATIO

Factor = Union[float, Callable[[Component], float]]

_ScaledFactor = Callable[[float, float], Factor]


def _molar_to_molar(scale_in: float, scale_out: float) -> Factor:
    return scale_in / scale_out


def _molar_to_volume(scale_in: float, scale_out: float) -> Factor:
    return VOLUME_TO_MOLE_RATIO * scale_in / scale_out


def _volume_to_molar(scale_in: float, scale_out: float) -> Factor:
    return scale_in / (VOLUME_TO_MOLE_RATIO * scale_out)


def _volume_to_volume(scale_in: float, scale_out: float) -> Factor:
    return scale_in / scale_out


def _molar_to_mass(scale_in: float, scale_out: float) -> Factor:
    def factor(component: Component) -> float:
        molar_mass = lookup_molar_mass(component).molar_mass
        return scale_in * molar_mass * G_TO_MG / STANDARD_MOLAR_VOLUME / scale_out

    return factor


_FACTOR_TABLE: dict[tuple[QuantityType, QuantityType], _ScaledFactor] = {
    (QuantityType.MOLAR_RATIO, QuantityType.MOLAR_RATIO): _molar_to_molar,
    (QuantityType.MOLAR_RATIO, QuantityType.VOLUME_RATIO): _molar_to_volume,
    (QuantityType.VOLUME_RATIO, QuantityType.MOLAR_RATIO): _volume_to_molar,
    (QuantityType.VOLUME_RATIO, QuantityType.VOLUME_RATIO): _volume_to_volume,
    (QuantityType.MOLAR_RATIO, QuantityType.MASS_CONCENTRATION): _molar_to_mass,
}


def is_mass_dependent(input_unit: str, output_unit: str) -> bool:
    """True if converting between the units requires a molar mass."""
    return (
        get_unit(input_unit).quantity_type != QuantityType.MASS_CONCENTRATION
        and get_unit(output_unit).quantity_type == QuantityType.MASS_CONCENTRATION
    )


def resolve_factor(input_unit: str, output_unit: str, component: Component | None = None) -> Factor:
    """Resolve the conversion factor from *input_unit* to *output_unit*.

    Args:
        input_unit: Registered unit of the input values.
        output_unit: Registered unit requested for the output.
        component: Component being converted; unused by constant factors.

    Returns:
        A float multiplier, or a callable taking the component and
        returning the multiplier.

    Raises:
        UnsupportedUnit: If either unit is not registered.
        UnsupportedConversion: If no path is registered for the pair.
    """
    if canonical_unit(input_unit) == canonical_unit(output_unit):
        return 1.0

    src = get_unit(input_unit)
    dst = get_unit(output_unit)
    builder = _FACTOR_TABLE.get((src.quantity_type, dst.quantity_type))
    if builder is None:
        raise UnsupportedConversion(src.id, dst.id)
    return builder(src.scale, dst.scale)


def factor_value(factor: Factor, component: Component) -> float:
    """Evaluate *factor* for *component*."""
    return factor(component) if callable(factor) else float(factor)


def apply_factor(factor: Factor, component: Component) -> tuple[float, float, float]:
    """Scale value and uncertainty of *component* by *factor*.

    Returns:
        (value, uncertainty, multiplier).
    """
    k = factor_value(factor, component)
    return component.value * k, component.uncertainty * k, k
