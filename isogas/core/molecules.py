"""Molar mass database for common gas components.

Loads the bundled gas table (keyed by CAS number) and resolves the molar
mass of a component. CAS lookup is exact; lookup by display name is a
secondary, fuzzy path and is reported with lower confidence.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any

from isogas.core.models import Component
from isogas.utils.constants import AIR_MOLAR_MASS

logger = logging.getLogger(__name__)

_DATA_DIR = Path(__file__).resolve().parent.parent / "data"
_GAS_DB_PATH = _DATA_DIR / "gases.json"

_CAS_PATTERN = re.compile(r"^(\d{2,7})-(\d{2})-(\d)$")

# Lookup sources, most to least trustworthy
SOURCE_HINT = "hint"
SOURCE_CAS = "cas"
SOURCE_NAME = "name"
SOURCE_DEFAULT = "default"


@dataclass(frozen=True)
class GasRecord:
    """One entry of the gas table."""

    cas_number: str
    name: str
    formula: str
    molar_mass: float  # g/mol
    synonyms: tuple[str, ...] = field(default_factory=tuple)

    @property
    def display_name(self) -> str:
        return f"{self.formula} {self.name}"


@dataclass(frozen=True)
class MolarMassLookup:
    """Result of resolving the molar mass of a component."""

    molar_mass: float  # g/mol
    source: str
    confidence: float
    record: GasRecord | None = None

    @property
    def is_default(self) -> bool:
        return self.source == SOURCE_DEFAULT


@lru_cache(maxsize=1)
def _load_gas_db() -> dict[str, GasRecord]:
    if not _GAS_DB_PATH.exists():
        logger.warning("Gas database not found at %s", _GAS_DB_PATH)
        return {}
    with open(_GAS_DB_PATH, encoding="utf-8") as f:
        raw: dict[str, Any] = json.load(f)
    return {
        cas: GasRecord(
            cas_number=cas,
            name=info["name"],
            formula=info["formula"],
            molar_mass=float(info["molar_mass"]),
            synonyms=tuple(info.get("synonyms", ())),
        )
        for cas, info in raw.items()
    }


def _normalize(text: str) -> str:
    return " ".join(text.lower().split())


@lru_cache(maxsize=1)
def _name_index() -> tuple[dict[str, GasRecord], dict[str, GasRecord]]:
    """Build (exact, token) name indexes over the gas table."""
    exact: dict[str, GasRecord] = {}
    tokens: dict[str, GasRecord] = {}
    for rec in _load_gas_db().values():
        for key in (rec.display_name, rec.name, rec.formula, *rec.synonyms):
            exact.setdefault(_normalize(key), rec)
        tokens.setdefault(rec.formula.lower(), rec)
        tokens.setdefault(rec.name.lower(), rec)
    return exact, tokens


def is_valid_cas(cas_number: str) -> bool:
    """Check the format and check digit of a CAS registry number."""
    m = _CAS_PATTERN.match(cas_number.strip())
    if not m:
        return False
    digits = (m.group(1) + m.group(2))[::-1]
    checksum = sum((i + 1) * int(d) for i, d in enumerate(digits)) % 10
    return checksum == int(m.group(3))


def list_gases() -> list[GasRecord]:
    """Return all gases in the table."""
    return list(_load_gas_db().values())


def find_by_cas(cas_number: str) -> GasRecord | None:
    """Exact lookup by CAS number."""
    return _load_gas_db().get(cas_number.strip())


def find_by_name(name: str) -> tuple[GasRecord, float] | None:
    """Fuzzy lookup by display name.

    Returns:
        (record, confidence) or None. An exact match on a known name,
        formula, or synonym scores 0.9; a single matching word scores 0.7.
    """
    key = _normalize(name)
    if not key:
        return None
    exact, tokens = _name_index()
    if key in exact:
        return exact[key], 0.9
    for word in key.split():
        if word in tokens:
            return tokens[word], 0.7
    return None


def lookup_molar_mass(component: Component) -> MolarMassLookup:
    """Resolve the molar mass [g/mol] of *component*.

    Priority: explicit hint, CAS number, display name, then the molar mass
    of air as a last resort.
    """
    if component.molar_mass_hint is not None and component.molar_mass_hint > 0:
        return MolarMassLookup(component.molar_mass_hint, SOURCE_HINT, 1.0)

    if component.cas_number:
        rec = find_by_cas(component.cas_number)
        if rec is not None:
            return MolarMassLookup(rec.molar_mass, SOURCE_CAS, 1.0, rec)

    match = find_by_name(component.name)
    if match is not None:
        rec, confidence = match
        return MolarMassLookup(rec.molar_mass, SOURCE_NAME, confidence, rec)

    logger.warning("No molar mass for '%s'; using air (%.2f g/mol)", component.name, AIR_MOLAR_MASS)
    return MolarMassLookup(AIR_MOLAR_MASS, SOURCE_DEFAULT, 0.0)


def describe_lookup(component: Component, lookup: MolarMassLookup) -> str | None:
    """Return a user-facing warning for a low-confidence lookup, or None."""
    if lookup.source == SOURCE_DEFAULT:
        return (
            f"Component '{component.name}' is not in the molar mass table; "
            f"assumed air ({lookup.molar_mass:.2f} g/mol)"
        )
    if lookup.source == SOURCE_NAME and lookup.record is not None:
        return (
            f"Molar mass of '{component.name}' matched by name to "
            f"{lookup.record.display_name} ({lookup.molar_mass:.2f} g/mol, "
            f"confidence {lookup.confidence:.1f}); provide a CAS number to confirm"
        )
    return None
