"""Reference-condition correction.

Rescales a value/uncertainty pair from the operating temperature and
pressure to the reference state. The unit factor is applied first, then
temperature, then pressure.
"""

from __future__ import annotations

import math

from isogas.core.models import OperatingConditions, ReferenceConditions
from isogas.errors import InvalidOperatingCondition
from isogas.utils.constants import T_ABSOLUTE_ZERO_C, T_CELSIUS_OFFSET


def check_operating(operating: OperatingConditions) -> None:
    """Raise InvalidOperatingCondition for a physically impossible state."""
    if not (T_ABSOLUTE_ZERO_C < operating.temperature_celsius < math.inf):
        raise InvalidOperatingCondition(
            f"Temperature {operating.temperature_celsius} °C is not a finite value above absolute zero",
            context={"temperature_celsius": operating.temperature_celsius},
        )
    if not (0 < operating.pressure_bar_absolute < math.inf):
        raise InvalidOperatingCondition(
            f"Pressure {operating.pressure_bar_absolute} bar must be positive and finite",
            context={"pressure_bar_absolute": operating.pressure_bar_absolute},
        )


def temperature_factor(operating: OperatingConditions, reference: ReferenceConditions) -> float:
    """(273.15 + T_ref) / (273.15 + T_op); exactly 1 when the temperatures match."""
    if operating.temperature_celsius == reference.temperature_celsius:
        return 1.0
    return (T_CELSIUS_OFFSET + reference.temperature_celsius) / (
        T_CELSIUS_OFFSET + operating.temperature_celsius
    )


def pressure_factor(operating: OperatingConditions, reference: ReferenceConditions) -> float:
    """P_op / P_ref; exactly 1 when the pressures match."""
    if operating.pressure_bar_absolute == reference.pressure_bar_absolute:
        return 1.0
    return operating.pressure_bar_absolute / reference.pressure_bar_absolute


def correct(
    value: float,
    uncertainty: float,
    operating: OperatingConditions,
    reference: ReferenceConditions,
) -> tuple[float, float]:
    """Correct a value/uncertainty pair to reference conditions.

    Args:
        value: Value already converted to the output unit; a numpy array
            corrects all components at once.
        uncertainty: Uncertainty in the same unit and shape.
        operating: Operating temperature and pressure.
        reference: Reference state.

    Returns:
        (corrected value, corrected uncertainty).

    Raises:
        InvalidOperatingCondition: If T <= -273.15 °C, P <= 0, or either is not finite.
    """
    check_operating(operating)
    kt = temperature_factor(operating, reference)
    value, uncertainty = value * kt, uncertainty * kt
    kp = pressure_factor(operating, reference)
    return value * kp, uncertainty * kp
