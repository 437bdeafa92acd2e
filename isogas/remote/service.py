"""Service layer for the remote ISO 14912 engine and molecule database.

Request and response shapes follow the remote API. Temperatures cross
the boundary in Kelvin and pressures in Pascal; values are sent in the
base unit of their quantity type and rescaled to the requested unit on
the way back.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any
from urllib.parse import quote

from isogas.core.models import (
    Component,
    ConversionMethod,
    ConversionResult,
    ConvertedComponent,
    Mixture,
    ReferenceConditions,
)
from isogas.core.units import QuantityType, canonical_unit, get_unit
from isogas.errors import TransientRemoteFailure
from isogas.remote.client import RemoteClient
from isogas.utils.constants import ISO_STANDARD
from isogas.utils.units import bar_to_pascal, celsius_to_kelvin, kelvin_to_celsius, pascal_to_bar

logger = logging.getLogger(__name__)

# Errors raised while reading a response that does not have the expected shape
_MALFORMED_RESPONSE = (AttributeError, KeyError, TypeError, ValueError)


@dataclass
class RemoteValidation:
    """Result of the remote mixture validation endpoint."""

    is_valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)


def _messages(items: list[Any]) -> list[str]:
    # Entries are either plain strings or {code, message, ...} records
    return [item.get("message", str(item)) if isinstance(item, dict) else str(item) for item in items]


def molecule_id_of(component: Component) -> str:
    return component.molecule_id or component.cas_number or component.id


def build_mixture_payload(mixture: Mixture, quantity_type: QuantityType | None = None) -> dict[str, Any]:
    """Encode *mixture* for the remote API (values in base units, K, Pa)."""
    cond = mixture.conditions
    src = get_unit(cond.input_unit)
    return {
        "components": [
            {
                "molecule_id": molecule_id_of(c),
                "value": c.value * src.scale,
                "uncertainty": c.uncertainty * src.scale,
            }
            for c in mixture.components
        ],
        "balance_gas": cond.balance_gas_id,
        "quantity_type": (quantity_type or src.quantity_type).value,
        "temperature": celsius_to_kelvin(cond.temperature_celsius),
        "pressure": bar_to_pascal(cond.pressure_bar_absolute),
    }


def _apply_remote_values(mixture: Mixture, remote_components: list[dict[str, Any]]) -> Mixture:
    """Copy of *mixture* with values taken from a remote mixture (input-unit scale)."""
    scale = get_unit(mixture.conditions.input_unit).scale
    if len(remote_components) < len(mixture.components):
        raise KeyError("remote mixture is missing components")
    result = mixture.snapshot()
    for comp, raw in zip(result.components, remote_components):
        comp.value = float(raw["value"]) / scale
        comp.uncertainty = float(raw.get("uncertainty", comp.uncertainty * scale)) / scale
    for raw in remote_components[len(result.components):]:
        result.components.append(
            Component(
                id=str(raw["molecule_id"]),
                name=str(raw.get("name", raw["molecule_id"])),
                molecule_id=str(raw["molecule_id"]),
                value=float(raw["value"]) / scale,
                uncertainty=float(raw.get("uncertainty", 0.0)) / scale,
            )
        )
    return result


def _reference_from(raw: dict[str, Any] | None, default: ReferenceConditions) -> ReferenceConditions:
    if not raw:
        return default
    temp_k = raw.get("temperature_K", raw.get("temperature"))
    press_pa = raw.get("pressure_Pa", raw.get("pressure"))
    return ReferenceConditions(
        temperature_celsius=(
            kelvin_to_celsius(float(temp_k)) if temp_k is not None else default.temperature_celsius
        ),
        pressure_bar_absolute=(
            pascal_to_bar(float(press_pa)) if press_pa is not None else default.pressure_bar_absolute
        ),
    )


class Iso14912Service:
    """Remote authoritative conversion engine.

    Args:
        client: Resilient JSON client bound to the API root.
        reference: Reference state reported when the server omits one.
    """

    method = ConversionMethod.REMOTE

    def __init__(self, client: RemoteClient, reference: ReferenceConditions | None = None):
        self.client = client
        self.reference = reference or ReferenceConditions()

    # --- Health ---

    async def health(self) -> dict[str, Any]:
        """GET /health -> {status, timestamp}."""
        return await self.client.get_json("/health")

    # --- Molecules ---

    async def search_molecules(self, q: str, limit: int = 10) -> list[dict[str, Any]]:
        """Search molecules by CAS number, name or formula."""
        data = await self.client.get_json("/molecules/search", params={"q": q, "limit": limit})
        if isinstance(data, dict):
            data = data.get("molecules", [])
        return [m for m in data if isinstance(m, dict)]

    async def get_molecule(self, molecule_id: str) -> dict[str, Any]:
        return await self.client.get_json(f"/molecules/{quote(molecule_id, safe='')}")

    async def find_by_cas_number(self, cas_number: str) -> dict[str, Any] | None:
        """Exact CAS match from a search, or None."""
        for molecule in await self.search_molecules(cas_number, limit=1):
            if molecule.get("cas_number") == cas_number:
                return molecule
        return None

    async def find_molecule(self, component: Component) -> dict[str, Any] | None:
        """Look up a component by CAS number, falling back to its name."""
        if component.cas_number:
            molecule = await self.find_by_cas_number(component.cas_number)
            if molecule is not None:
                return molecule
        if component.name.strip():
            matches = await self.search_molecules(component.name.strip(), limit=1)
            if matches:
                return matches[0]
        return None

    # --- ISO 14912 ---

    async def validate(
        self, mixture: Mixture, target_quantity_type: QuantityType | None = None
    ) -> RemoteValidation:
        payload: dict[str, Any] = {"mixture": build_mixture_payload(mixture)}
        if target_quantity_type is not None:
            payload["target_quantity_type"] = target_quantity_type.value
        data = await self.client.post_json("/iso14912/validate", payload)
        try:
            return RemoteValidation(
                is_valid=bool(data.get("is_valid", False)),
                errors=_messages(data.get("errors", [])),
                warnings=_messages(data.get("warnings", [])),
                suggestions=[str(s) for s in data.get("suggestions", [])],
            )
        except _MALFORMED_RESPONSE as exc:
            raise TransientRemoteFailure(f"Malformed validation response: {exc}") from exc

    async def convert(self, mixture: Mixture) -> ConversionResult:
        """POST /iso14912/convert and map the response to a ConversionResult.

        Raises:
            RemoteFailure: On transport or HTTP errors.
            TransientRemoteFailure: If the response cannot be interpreted.
        """
        cond = mixture.conditions
        dst = get_unit(cond.output_unit)
        payload = {
            "mixture": build_mixture_payload(mixture),
            "target_quantity_type": dst.quantity_type.value,
        }
        data = await self.client.post_json("/iso14912/convert", payload)
        try:
            return self._parse_conversion(mixture, data)
        except _MALFORMED_RESPONSE as exc:
            raise TransientRemoteFailure(f"Malformed conversion response: {exc}") from exc

    def _parse_conversion(self, mixture: Mixture, data: dict[str, Any]) -> ConversionResult:
        dst = get_unit(mixture.conditions.output_unit)
        remote_components = data["converted_mixture"]["components"]
        overall_factor = data.get("conversion_factor")
        if len(remote_components) != len(mixture.components):
            raise ValueError(
                f"expected {len(mixture.components)} components, got {len(remote_components)}"
            )

        converted = []
        for comp, raw in zip(mixture.components, remote_components):
            factor = raw.get("conversion_factor", overall_factor)
            converted.append(
                ConvertedComponent(
                    id=comp.id,
                    name=comp.name,
                    cas_number=comp.cas_number,
                    value=float(raw["value"]) / dst.scale,
                    uncertainty=float(raw.get("uncertainty", 0.0)) / dst.scale,
                    original_value=comp.value,
                    conversion_factor=float(factor) if factor is not None else None,
                )
            )

        metadata = dict(data.get("metadata") or {})
        metadata.setdefault("standard", ISO_STANDARD)
        timestamp = metadata.get("timestamp") or datetime.now(timezone.utc).isoformat()
        return ConversionResult(
            reference_conditions=_reference_from(data.get("reference_conditions"), self.reference),
            output_unit=canonical_unit(mixture.conditions.output_unit),
            components=converted,
            method=self.method,
            timestamp=timestamp,
            metadata=metadata,
        )

    async def normalize(self, mixture: Mixture) -> Mixture:
        """POST /iso14912/normalize; returns the normalized mixture."""
        data = await self.client.post_json(
            "/iso14912/normalize", {"mixture": build_mixture_payload(mixture)}
        )
        try:
            return _apply_remote_values(mixture, data["normalized_mixture"]["components"])
        except _MALFORMED_RESPONSE as exc:
            raise TransientRemoteFailure(f"Malformed normalization response: {exc}") from exc

    async def balance(self, mixture: Mixture, balance_gas_id: str | None = None) -> Mixture:
        """POST /iso14912/balance; returns the balanced mixture."""
        gas_id = balance_gas_id or mixture.conditions.balance_gas_id
        data = await self.client.post_json(
            "/iso14912/balance",
            {"mixture": build_mixture_payload(mixture), "balance_gas_id": gas_id},
        )
        try:
            return _apply_remote_values(mixture, data["balanced_mixture"]["components"])
        except _MALFORMED_RESPONSE as exc:
            raise TransientRemoteFailure(f"Malformed balance response: {exc}") from exc
