"""Data model for gas mixtures and conversion results."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from isogas.utils.constants import ISO_STANDARD, P_REFERENCE_BAR, T_REFERENCE_C


class ConversionMethod(str, Enum):
    """Engine that produced a conversion result."""

    REMOTE = "remote"
    LOCAL = "local"


class HealthStatus(str, Enum):
    """Connectivity state of the remote engine."""

    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    CHECKING = "checking"


@dataclass
class Component:
    """One gas component of a mixture.

    ``id`` is the identity; ``name`` and ``cas_number`` are lookup keys.
    """

    id: str
    name: str
    cas_number: str = ""
    value: float = 0.0
    uncertainty: float = 0.0
    molar_mass_hint: float | None = None  # g/mol
    validated: bool = False
    molecule_id: str | None = None


@dataclass
class OperatingConditions:
    """Operating state and requested unit pair."""

    temperature_celsius: float = 20.0  # °C
    pressure_bar_absolute: float = P_REFERENCE_BAR  # bar
    input_unit: str = "mol/mol"
    output_unit: str = "mol/mol"
    balance_gas_id: str = "N2"


@dataclass(frozen=True)
class ReferenceConditions:
    """State to which conversions are normalized (0 °C, 1 atm by default)."""

    temperature_celsius: float = T_REFERENCE_C
    pressure_bar_absolute: float = P_REFERENCE_BAR


@dataclass
class Mixture:
    """Ordered collection of components at given operating conditions."""

    components: list[Component] = field(default_factory=list)
    conditions: OperatingConditions = field(default_factory=OperatingConditions)

    @property
    def total(self) -> float:
        return sum(c.value for c in self.components)

    def snapshot(self) -> Mixture:
        """Deep copy used for the duration of one conversion call."""
        return copy.deepcopy(self)


@dataclass
class ConvertedComponent:
    """A component expressed in the output unit at reference conditions."""

    id: str
    name: str
    cas_number: str
    value: float
    uncertainty: float
    original_value: float | None = None
    conversion_factor: float | None = None


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class ConversionResult:
    """Outcome of converting one mixture."""

    reference_conditions: ReferenceConditions
    output_unit: str
    components: list[ConvertedComponent]
    method: ConversionMethod
    timestamp: str = field(default_factory=_utc_now)
    warnings: list[str] = field(default_factory=list)
    advisories: list[str] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=lambda: {"standard": ISO_STANDARD})

    def component(self, component_id: str) -> ConvertedComponent:
        """Return the converted component with the given id.

        Raises:
            KeyError: If no component has that id.
        """
        for comp in self.components:
            if comp.id == component_id:
                return comp
        raise KeyError(f"Component '{component_id}' not in result")


@dataclass(frozen=True)
class EngineHealth:
    """Snapshot of the remote engine health.

    Frozen so that an update is always one assignment of a complete record.
    """

    status: HealthStatus = HealthStatus.CHECKING
    last_error: str | None = None
    last_checked_at: str | None = None

    @property
    def is_connected(self) -> bool:
        return self.status == HealthStatus.CONNECTED
