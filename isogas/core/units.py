"""Registry of concentration/fraction units and their quantity types.

Each unit identifier maps to an abstract ``QuantityType`` and a scale
relative to that quantity type's base unit (mol/mol, m3/m3, mg/m3).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from isogas.errors import UnsupportedUnit


class QuantityType(str, Enum):
    """Physical dimension of a concentration unit (ISO 14912 quantity types)."""

    MOLAR_RATIO = "molar_ratio"
    MASS_RATIO = "mass_ratio"
    VOLUME_RATIO = "volume_ratio"
    MOLAR_CONCENTRATION = "molar_concentration"
    MASS_CONCENTRATION = "mass_concentration"
    VOLUME_CONCENTRATION = "volume_concentration"


@dataclass(frozen=True)
class UnitInfo:
    """Static description of a registered unit."""

    id: str
    label: str
    quantity_type: QuantityType
    scale: float  # multiplier to the quantity type's base unit

    @property
    def display(self) -> str:
        return f"{self.id} : {self.label}"


_UNITS: dict[str, UnitInfo] = {
    u.id: u
    for u in (
        UnitInfo("mol/mol", "mole fraction", QuantityType.MOLAR_RATIO, 1.0),
        UnitInfo("mmol/mol", "milli mole fraction", QuantityType.MOLAR_RATIO, 1e-3),
        UnitInfo("µmol/mol", "micro mole fraction", QuantityType.MOLAR_RATIO, 1e-6),
        UnitInfo("ppm", "parts per million", QuantityType.MOLAR_RATIO, 1e-6),
        UnitInfo("ppb", "parts per billion", QuantityType.MOLAR_RATIO, 1e-9),
        UnitInfo("ppt", "parts per trillion", QuantityType.MOLAR_RATIO, 1e-12),
        UnitInfo("m3/m3", "volume fraction", QuantityType.VOLUME_RATIO, 1.0),
        UnitInfo("mg/m3", "mass concentration", QuantityType.MASS_CONCENTRATION, 1.0),
    )
}

_ALIASES = {
    "umol/mol": "µmol/mol",
    "μmol/mol": "µmol/mol",  # Greek mu
    "m³/m³": "m3/m3",
    "mg/m³": "mg/m3",
}

# Quantity types whose values are fractions of the whole mixture
FRACTION_TYPES = frozenset({QuantityType.MOLAR_RATIO, QuantityType.VOLUME_RATIO})


def canonical_unit(unit: str) -> str:
    """Normalize a unit string to its registered identifier.

    Accepts display labels such as ``"mol/mol : mole fraction"``.

    Raises:
        UnsupportedUnit: If the unit is not registered.
    """
    key = unit.split(":", 1)[0].strip()
    key = _ALIASES.get(key, key)
    if key not in _UNITS:
        raise UnsupportedUnit(unit)
    return key


def get_unit(unit: str) -> UnitInfo:
    """Return the registry entry for *unit*."""
    return _UNITS[canonical_unit(unit)]


def quantity_type_of(unit: str) -> QuantityType:
    """Return the quantity type of *unit*.

    Raises:
        UnsupportedUnit: If the unit is not registered.
    """
    return get_unit(unit).quantity_type


def is_supported(unit: str) -> bool:
    try:
        canonical_unit(unit)
    except UnsupportedUnit:
        return False
    return True


def list_units() -> list[UnitInfo]:
    """Return all registered units in registry order."""
    return list(_UNITS.values())


def input_units() -> list[str]:
    """Unit identifiers accepted for input values (fractions of the mixture)."""
    return [u.id for u in _UNITS.values() if u.quantity_type in FRACTION_TYPES]


def output_units() -> list[str]:
    """Unit identifiers available for output."""
    return list(_UNITS)
