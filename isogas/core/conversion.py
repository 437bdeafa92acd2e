"""Local (approximate) conversion engine.

Applies the unit conversion factor and the reference-condition correction
to every component of a mixture. This is a simplified model and not a
certified ISO 14912 calculation: no compressibility or per-gas equation of
state is considered.
"""

from __future__ import annotations

import logging

import numpy as np

from isogas.core.correction import check_operating, correct
from isogas.core.factors import apply_factor, is_mass_dependent, resolve_factor
from isogas.core.models import (
    ConversionMethod,
    ConversionResult,
    ConvertedComponent,
    Mixture,
    ReferenceConditions,
)
from isogas.core.molecules import describe_lookup, lookup_molar_mass
from isogas.core.units import canonical_unit
from isogas.utils.constants import ISO_STANDARD

logger = logging.getLogger(__name__)

ENGINE_NAME = "local-approximation"


class LocalEngine:
    """Pure-arithmetic conversion engine.

    Args:
        reference: Reference state to normalize to.
    """

    method = ConversionMethod.LOCAL

    def __init__(self, reference: ReferenceConditions | None = None):
        self.reference = reference or ReferenceConditions()

    def convert(self, mixture: Mixture) -> ConversionResult:
        """Convert all components of *mixture* to the output unit.

        Raises:
            UnsupportedUnit: If a unit is not registered.
            UnsupportedConversion: If the unit pair has no registered path.
            InvalidOperatingCondition: For impossible temperature/pressure.
        """
        cond = mixture.conditions
        output_unit = canonical_unit(cond.output_unit)
        warnings: list[str] = []

        scaled = np.empty((len(mixture.components), 2))
        for i, comp in enumerate(mixture.components):
            factor = resolve_factor(cond.input_unit, output_unit, comp)
            value, uncertainty, _ = apply_factor(factor, comp)
            scaled[i] = value, uncertainty

        if is_mass_dependent(cond.input_unit, output_unit):
            for comp in mixture.components:
                note = describe_lookup(comp, lookup_molar_mass(comp))
                if note:
                    warnings.append(note)

        values, uncertainties = scaled[:, 0], scaled[:, 1]
        if canonical_unit(cond.input_unit) == output_unit:
            # Identity: values pass through untouched
            check_operating(cond)
        else:
            values, uncertainties = correct(values, uncertainties, cond, self.reference)

        converted = [
            ConvertedComponent(
                id=comp.id,
                name=comp.name,
                cas_number=comp.cas_number,
                value=float(v),
                uncertainty=float(u),
            )
            for comp, v, u in zip(mixture.components, values, uncertainties)
        ]
        logger.debug(
            "Local conversion %s -> %s of %d components",
            cond.input_unit,
            output_unit,
            len(converted),
        )
        return ConversionResult(
            reference_conditions=self.reference,
            output_unit=output_unit,
            components=converted,
            method=self.method,
            warnings=warnings,
            metadata={"standard": ISO_STANDARD, "engine": ENGINE_NAME},
        )
