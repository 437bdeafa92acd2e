"""Mixture-level helpers: normalization and balance gas filling."""

from __future__ import annotations

import logging

from isogas.core.models import Component, Mixture
from isogas.core.molecules import find_by_cas, find_by_name
from isogas.core.validation import SUM_TOLERANCE
from isogas.errors import ValidationFailed

logger = logging.getLogger(__name__)


def needs_normalization(mixture: Mixture, tolerance: float = SUM_TOLERANCE) -> bool:
    """True if the component total deviates from 1 by more than *tolerance*."""
    return abs(mixture.total - 1.0) > tolerance


def normalize_mixture(mixture: Mixture) -> Mixture:
    """Return a copy of *mixture* scaled so the component values sum to 1.

    Uncertainties are scaled by the same factor.

    Raises:
        ValidationFailed: If the total is not positive.
    """
    total = mixture.total
    if total <= 0:
        raise ValidationFailed(["Cannot normalize a mixture whose total is not positive"])
    result = mixture.snapshot()
    for comp in result.components:
        comp.value /= total
        comp.uncertainty /= total
    logger.info("Normalized mixture (total %.6g -> 1)", total)
    return result


def _matches(component: Component, gas_id: str) -> bool:
    key = gas_id.strip().lower()
    if key in (component.id.lower(), component.name.strip().lower(), component.cas_number.lower()):
        return True
    match = find_by_name(component.name)
    return match is not None and match[0].formula.lower() == key


def balance_mixture(mixture: Mixture, balance_gas_id: str | None = None) -> Mixture:
    """Return a copy of *mixture* with the balance gas filling the remainder to 1.

    The balance gas is matched against component id, name, CAS number or
    formula. If it is not part of the mixture it is appended.

    Raises:
        ValidationFailed: If the other components already exceed 1.
    """
    gas_id = balance_gas_id or mixture.conditions.balance_gas_id
    result = mixture.snapshot()
    balance = next((c for c in result.components if _matches(c, gas_id)), None)
    others = sum(c.value for c in result.components if c is not balance)
    remainder = 1.0 - others
    if remainder < 0:
        raise ValidationFailed(
            [f"Components other than balance gas '{gas_id}' already sum to {others:.6g}"]
        )

    if balance is None:
        rec = find_by_cas(gas_id)
        if rec is None:
            match = find_by_name(gas_id)
            rec = match[0] if match else None
        balance = Component(
            id=gas_id,
            name=rec.display_name if rec else gas_id,
            cas_number=rec.cas_number if rec else "",
            molar_mass_hint=rec.molar_mass if rec else None,
        )
        result.components.append(balance)

    balance.value = remainder
    logger.info("Balance gas %s set to %.6g", gas_id, remainder)
    return result
