"""Mixture validation rules for ISOGas.

Errors block a conversion; warnings are surfaced to the user but allow it.
The validator never raises.
"""

from __future__ import annotations

import math
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from isogas.core.models import Mixture
from isogas.core.molecules import is_valid_cas
from isogas.core.units import FRACTION_TYPES, get_unit, is_supported
from isogas.utils.constants import P_MAX_BAR, T_ABSOLUTE_ZERO_C, T_MAX_C

# Allowed deviation of the component total from 1
SUM_TOLERANCE = 0.001


class Severity(Enum):
    """Severity level for validation messages."""

    WARNING = "warning"
    ERROR = "error"


@dataclass
class ValidationMessage:
    """A single validation finding."""

    severity: Severity
    parameter: str
    message: str
    value: Any = None
    limit: Any = None


@dataclass
class ValidationResult:
    """Aggregated validation result."""

    messages: list[ValidationMessage] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not any(m.severity == Severity.ERROR for m in self.messages)

    @property
    def has_warnings(self) -> bool:
        return any(m.severity == Severity.WARNING for m in self.messages)

    @property
    def errors(self) -> list[str]:
        return [m.message for m in self.messages if m.severity == Severity.ERROR]

    @property
    def warnings(self) -> list[str]:
        return [m.message for m in self.messages if m.severity == Severity.WARNING]

    def add(self, severity: Severity, parameter: str, message: str, **kwargs: Any) -> None:
        self.messages.append(
            ValidationMessage(severity=severity, parameter=parameter, message=message, **kwargs)
        )

    def error(self, parameter: str, message: str, **kwargs: Any) -> None:
        self.add(Severity.ERROR, parameter, message, **kwargs)

    def warning(self, parameter: str, message: str, **kwargs: Any) -> None:
        self.add(Severity.WARNING, parameter, message, **kwargs)

    def merge(self, other: ValidationResult) -> None:
        self.messages.extend(other.messages)

    def as_dict(self) -> dict[str, list[str]]:
        return {"errors": self.errors, "warnings": self.warnings}


# --- Common validators ---


def validate_range(
    name: str,
    value: float,
    low: float,
    high: float,
    result: ValidationResult,
    severity: Severity = Severity.ERROR,
    low_inclusive: bool = True,
) -> None:
    """Validate that a value falls within [low, high] (or (low, high]).

    NaN is never within range.
    """
    above_low = low <= value if low_inclusive else low < value
    if not (above_low and value <= high):
        bracket = "[" if low_inclusive else "("
        result.add(
            severity,
            name,
            f"{name} = {value} is outside {bracket}{low}, {high}]",
            value=value,
            limit=(low, high),
        )


def validate_conditions(mixture: Mixture) -> ValidationResult:
    """Check operating temperature, pressure and the unit pair."""
    result = ValidationResult()
    cond = mixture.conditions

    validate_range("temperature [°C]", cond.temperature_celsius, T_ABSOLUTE_ZERO_C, T_MAX_C, result)
    validate_range(
        "pressure [bar]", cond.pressure_bar_absolute, 0.0, P_MAX_BAR, result, low_inclusive=False
    )

    if not is_supported(cond.input_unit):
        result.error("input_unit", f"Input unit '{cond.input_unit}' is not supported")
    elif get_unit(cond.input_unit).quantity_type not in FRACTION_TYPES:
        result.error(
            "input_unit",
            f"Input unit '{cond.input_unit}' is not a fraction unit and cannot be used for input",
        )
    if not is_supported(cond.output_unit):
        result.error("output_unit", f"Output unit '{cond.output_unit}' is not supported")

    return result


def validate_components(mixture: Mixture) -> ValidationResult:
    """Check component values, names, identities and the total."""
    result = ValidationResult()
    components = mixture.components

    if not components:
        result.error("components", "At least one component is required")
        return result

    # Range and sum rules apply to fractions, so scaled input units are rescaled first
    input_unit = mixture.conditions.input_unit
    scale = get_unit(input_unit).scale if is_supported(input_unit) else 1.0

    for index, comp in enumerate(components, start=1):
        label = comp.name.strip() or f"#{index}"
        if not comp.name.strip():
            result.error("name", f"Component {index} is missing a name")
        fraction = comp.value * scale
        if not math.isfinite(comp.value):
            result.error("value", f"Component {label} value {comp.value} is not a finite number")
        elif fraction < 0:
            result.error("value", f"Component {label} has a negative value", value=comp.value)
        elif fraction > 1:
            result.error(
                "value", f"Component {label} value {comp.value} exceeds 1.0", value=comp.value, limit=1.0
            )
        if not math.isfinite(comp.uncertainty):
            result.error(
                "uncertainty", f"Component {label} uncertainty {comp.uncertainty} is not a finite number"
            )
        elif comp.uncertainty < 0:
            result.error("uncertainty", f"Component {label} has a negative uncertainty")
        if comp.cas_number and not is_valid_cas(comp.cas_number):
            result.warning("cas_number", f"Component {label} has a malformed CAS number '{comp.cas_number}'")

    ids = Counter(c.id for c in components)
    for dup_id, count in ids.items():
        if count > 1:
            result.error("id", f"Component id '{dup_id}' is used {count} times")

    total = sum(c.value for c in components) * scale
    if total > 1.0 + SUM_TOLERANCE:
        result.error("total", f"Sum of component values {total:.6g} exceeds 1.0", value=total)
    elif 0 < total < 1.0 - SUM_TOLERANCE:
        result.warning("total", f"Sum of component values {total:.6g} is less than 1.0", value=total)

    names = [c.name.strip() for c in components if c.name.strip()]
    if len(names) != len(set(names)):
        result.warning("name", "There are duplicate component names")

    unvalidated = [c.name.strip() or c.id for c in components if not c.validated]
    if unvalidated:
        result.warning(
            "validated",
            "Components not confirmed against a reference lookup: " + ", ".join(unvalidated),
        )

    return result


def validate_mixture(mixture: Mixture) -> ValidationResult:
    """Run all validation rules on *mixture*."""
    result = validate_components(mixture)
    result.merge(validate_conditions(mixture))
    return result
