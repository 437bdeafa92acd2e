"""Hybrid conversion orchestrator.

Chooses between the remote authoritative engine and the local
approximate engine, and falls back to the local engine when the remote
path fails transiently.

Usage::

    state = OrchestratorState(probe=service.health)
    converter = HybridConverter(state, LocalEngine(), service)
    await state.start()
    result = await converter.convert(mixture)
    await state.stop()

"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Callable, Protocol

from isogas.core.config import Settings
from isogas.core.conversion import LocalEngine
from isogas.core.models import Component, ConversionMethod, ConversionResult, Mixture
from isogas.core.molecules import find_by_cas, find_by_name
from isogas.core.state import OrchestratorState
from isogas.core.validation import ValidationResult, validate_mixture
from isogas.errors import ConversionFailed, IsogasError, RemoteFailure, TransientRemoteFailure, ValidationFailed
from isogas.remote.client import RemoteClient, RetryPolicy
from isogas.remote.service import Iso14912Service

logger = logging.getLogger(__name__)


class RemoteEngine(Protocol):
    """What the orchestrator needs from a remote engine."""

    async def convert(self, mixture: Mixture) -> ConversionResult: ...

    async def find_molecule(self, component: Component) -> dict[str, Any] | None: ...


class HybridConverter:
    """Validate, then convert via the remote or the local engine.

    Args:
        state: Health state and remote preference.
        local_engine: Local approximate engine.
        remote_engine: Remote authoritative engine, or None for local only.
        validator: Mixture validator.
    """

    def __init__(
        self,
        state: OrchestratorState,
        local_engine: LocalEngine | None = None,
        remote_engine: RemoteEngine | None = None,
        validator: Callable[[Mixture], ValidationResult] = validate_mixture,
    ):
        self.state = state
        self.local_engine = local_engine or LocalEngine()
        self.remote_engine = remote_engine
        self.validator = validator
        self._lock = asyncio.Lock()

    @property
    def will_use_remote(self) -> bool:
        return self.remote_engine is not None and self.state.use_remote

    def validate(self, mixture: Mixture) -> ValidationResult:
        return self.validator(mixture)

    async def convert(self, mixture: Mixture) -> ConversionResult:
        """Convert *mixture*; calls on one converter are serialized.

        Raises:
            ValidationFailed: The mixture has validation errors.
            PermanentRemoteFailure: The remote engine rejected the request.
            UnsupportedConversion: No local conversion path for the units.
            ConversionFailed: Local computation failed unexpectedly.
        """
        async with self._lock:
            return await self._convert(mixture.snapshot())

    async def _convert(self, mixture: Mixture) -> ConversionResult:
        validation = self.validator(mixture)
        if not validation.is_valid:
            logger.info("Conversion blocked by %d validation error(s)", len(validation.errors))
            raise ValidationFailed(validation.errors, validation.warnings)

        advisories: list[str] = []
        if self.will_use_remote:
            start = time.monotonic()
            try:
                result = await self.remote_engine.convert(mixture)
            except TransientRemoteFailure as exc:
                duration = time.monotonic() - start
                logger.warning(
                    "Remote conversion failed after %.2f s (%s); falling back to local engine",
                    duration,
                    exc,
                )
                advisories.append(
                    f"Remote conversion failed ({type(exc).__name__}: {exc}); "
                    "result computed by the local approximation"
                )
            else:
                logger.info("Converted %d components via remote engine", len(result.components))
                result.warnings = validation.warnings + result.warnings
                return result

        result = self._convert_local(mixture)
        result.warnings = validation.warnings + result.warnings
        result.advisories.extend(advisories)
        logger.info("Converted %d components via local engine", len(result.components))
        return result

    def _convert_local(self, mixture: Mixture) -> ConversionResult:
        start = time.monotonic()
        try:
            return self.local_engine.convert(mixture)
        except IsogasError:
            raise
        except (ArithmeticError, ValueError, TypeError) as exc:
            raise ConversionFailed(
                f"Local conversion failed: {exc}",
                method=ConversionMethod.LOCAL.value,
                error_class=type(exc).__name__,
                duration=time.monotonic() - start,
            ) from exc

    async def lookup_component(self, component: Component) -> bool:
        """Confirm *component* against a reference lookup.

        Uses the remote molecule database when available, else the
        bundled gas table. On success the component is marked validated
        and its CAS number, molecule id and molar mass are filled in.

        Returns:
            True if the component was confirmed.
        """
        if self.will_use_remote:
            try:
                molecule = await self.remote_engine.find_molecule(component)
            except RemoteFailure as exc:
                logger.warning("Remote molecule lookup failed (%s); using local table", exc)
            else:
                if molecule is None:
                    return False
                component.molecule_id = str(molecule.get("id", component.molecule_id or ""))
                component.cas_number = component.cas_number or molecule.get("cas_number", "")
                if molecule.get("molar_mass"):
                    component.molar_mass_hint = float(molecule["molar_mass"])
                component.validated = True
                return True

        rec = find_by_cas(component.cas_number) if component.cas_number else None
        if rec is None:
            match = find_by_name(component.name)
            # Only an exact name match counts as confirmation
            rec = match[0] if match and match[1] >= 0.9 else None
        if rec is None:
            return False
        component.cas_number = component.cas_number or rec.cas_number
        component.molar_mass_hint = rec.molar_mass
        component.validated = True
        return True


def create_converter(settings: Settings, transport: Any = None) -> tuple[HybridConverter, RemoteClient | None]:
    """Wire a converter from *settings*.

    Returns:
        (converter, client). The client is None when remote is disabled;
        otherwise the caller owns it and must ``aclose()`` it.
    """
    local = LocalEngine(settings.reference)
    if not settings.remote_enabled:
        return HybridConverter(OrchestratorState(None), local), None

    client = RemoteClient(
        settings.api_url,
        timeout=settings.timeout,
        policy=RetryPolicy(max_attempts=settings.max_attempts, base_delay=settings.backoff_base),
        transport=transport,
    )
    service = Iso14912Service(client, settings.reference)
    state = OrchestratorState(service.health, interval=settings.health_interval)
    return HybridConverter(state, local, service), client
