"""Tests for conversion factor resolution."""

import pytest

from isogas.core.factors import apply_factor, factor_value, is_mass_dependent, resolve_factor
from isogas.core.models import Component
from isogas.core.units import list_units
from isogas.errors import UnsupportedConversion, UnsupportedUnit


@pytest.fixture
def methane():
    return Component(id="1", name="CH4 Methane", cas_number="74-82-8", value=1e-6, uncertainty=4e-7)


class TestIdentity:
    @pytest.mark.parametrize("unit", [u.id for u in list_units()])
    def test_same_unit_is_one(self, unit, methane):
        assert resolve_factor(unit, unit, methane) == 1.0

    def test_label_and_id_are_same_unit(self, methane):
        assert resolve_factor("mol/mol : mole fraction", "mol/mol", methane) == 1.0


class TestScalarFactors:
    def test_mol_to_ppm(self):
        assert resolve_factor("mol/mol", "ppm") == pytest.approx(1e6)

    def test_ppm_to_ppb(self):
        assert resolve_factor("ppm", "ppb") == pytest.approx(1e3)

    def test_ppm_equals_umol(self):
        assert resolve_factor("ppm", "µmol/mol") == pytest.approx(1.0)

    def test_mol_to_volume(self):
        assert resolve_factor("mol/mol", "m3/m3") == pytest.approx(0.9994)

    def test_ppm_to_volume(self):
        assert resolve_factor("ppm", "m3/m3") == pytest.approx(0.9994e-6)

    def test_volume_to_mol_is_inverse(self):
        f = resolve_factor("mol/mol", "m3/m3")
        g = resolve_factor("m3/m3", "mol/mol")
        assert f * g == pytest.approx(1.0, rel=1e-12)


class TestMassConcentration:
    def test_is_callable(self, methane):
        factor = resolve_factor("mol/mol", "mg/m3", methane)
        assert callable(factor)

    def test_methane_value(self, methane):
        factor = resolve_factor("mol/mol", "mg/m3", methane)
        assert factor_value(factor, methane) == pytest.approx(16.04 * 1000 / 22.414)

    def test_ppm_scaled(self, methane):
        factor = resolve_factor("ppm", "mg/m3", methane)
        assert factor_value(factor, methane) == pytest.approx(16.04 * 1000 / 22.414 * 1e-6)

    def test_unknown_component_uses_air(self):
        comp = Component(id="x", name="Mystery gas", value=0.5)
        factor = resolve_factor("mol/mol", "mg/m3", comp)
        assert factor_value(factor, comp) == pytest.approx(28.96 * 1000 / 22.414)

    def test_mass_dependent(self):
        assert is_mass_dependent("ppm", "mg/m3")
        assert not is_mass_dependent("ppm", "ppb")


class TestUnsupported:
    def test_volume_to_mass_not_registered(self, methane):
        # No silent 0.95 fallback: an unregistered pair is an error
        with pytest.raises(UnsupportedConversion):
            resolve_factor("m3/m3", "mg/m3", methane)

    def test_mass_to_molar_not_registered(self, methane):
        with pytest.raises(UnsupportedConversion) as excinfo:
            resolve_factor("mg/m3", "mol/mol", methane)
        assert excinfo.value.input_unit == "mg/m3"

    def test_unknown_unit(self, methane):
        with pytest.raises(UnsupportedUnit):
            resolve_factor("bogus", "ppm", methane)


class TestApplyFactor:
    def test_scalar(self, methane):
        value, unc, k = apply_factor(1e6, methane)
        assert value == pytest.approx(1.0)
        assert unc == pytest.approx(0.4)
        assert k == pytest.approx(1e6)

    def test_zero_value_keeps_uncertainty_scaling(self):
        comp = Component(id="1", name="CH4 Methane", cas_number="74-82-8", value=0.0, uncertainty=1e-6)
        value, unc, _ = apply_factor(resolve_factor("mol/mol", "mg/m3", comp), comp)
        assert value == 0.0
        assert unc == pytest.approx(1e-6 * 16.04 * 1000 / 22.414)
