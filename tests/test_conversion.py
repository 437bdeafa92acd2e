"""Tests for the local conversion engine."""

import pytest

from isogas.core.conversion import LocalEngine
from isogas.core.correction import correct
from isogas.core.models import (
    Component,
    ConversionMethod,
    Mixture,
    OperatingConditions,
    ReferenceConditions,
)
from isogas.core.units import list_units
from isogas.errors import InvalidOperatingCondition, UnsupportedConversion


def methane_mixture(input_unit="mol/mol", output_unit="mol/mol", t=15.0, p=1.0, value=1e-6, unc=4e-7):
    return Mixture(
        components=[
            Component(id="ch4", name="CH4 Methane", cas_number="74-82-8", value=value, uncertainty=unc)
        ],
        conditions=OperatingConditions(
            temperature_celsius=t,
            pressure_bar_absolute=p,
            input_unit=input_unit,
            output_unit=output_unit,
        ),
    )


@pytest.fixture
def engine():
    return LocalEngine()


class TestIdentity:
    def test_methane_identity_scenario(self, engine):
        result = engine.convert(methane_mixture())
        comp = result.component("ch4")
        assert comp.value == pytest.approx(1e-6, rel=1e-12)
        assert comp.uncertainty == pytest.approx(4e-7, rel=1e-12)
        assert result.method == ConversionMethod.LOCAL

    @pytest.mark.parametrize("unit", [u.id for u in list_units()])
    def test_identity_for_all_units(self, engine, unit):
        result = engine.convert(methane_mixture(unit, unit, t=37.0, p=3.0, value=0.25, unc=0.01))
        assert result.components[0].value == 0.25
        assert result.components[0].uncertainty == 0.01

    def test_local_path_has_no_traceability(self, engine):
        comp = engine.convert(methane_mixture()).components[0]
        assert comp.original_value is None
        assert comp.conversion_factor is None


class TestRoundTrip:
    @pytest.mark.parametrize("pair", [("mol/mol", "ppm"), ("mol/mol", "m3/m3"), ("ppb", "mmol/mol")])
    def test_round_trip_at_reference(self, engine, pair):
        a, b = pair
        original = 0.0123456789
        forward = engine.convert(methane_mixture(a, b, t=0.0, p=1.01325, value=original, unc=1e-4))
        back_mixture = methane_mixture(
            b, a, t=0.0, p=1.01325, value=forward.components[0].value, unc=forward.components[0].uncertainty
        )
        back = engine.convert(back_mixture)
        assert back.components[0].value == pytest.approx(original, rel=1e-9)
        assert back.components[0].uncertainty == pytest.approx(1e-4, rel=1e-9)


class TestCorrections:
    def test_unit_then_reference_correction(self, engine):
        result = engine.convert(methane_mixture("mol/mol", "ppm", t=15.0, p=2.0, value=1e-3, unc=1e-5))
        expected = 1e-3 * 1e6 * (273.15 / 288.15) * (2.0 / 1.01325)
        assert result.components[0].value == pytest.approx(expected)
        assert result.components[0].uncertainty == pytest.approx(expected * 1e-2)

    def test_monotonic_in_pressure(self, engine):
        values = [
            engine.convert(methane_mixture("mol/mol", "ppm", p=p, value=1e-3)).components[0].value
            for p in (0.5, 1.0, 5.0, 50.0)
        ]
        assert all(a < b for a, b in zip(values, values[1:]))

    def test_custom_reference(self):
        engine = LocalEngine(ReferenceConditions(temperature_celsius=15.0, pressure_bar_absolute=1.0))
        result = engine.convert(methane_mixture("mol/mol", "ppm", t=15.0, p=1.0, value=1e-3))
        assert result.components[0].value == pytest.approx(1000.0)
        assert result.reference_conditions.temperature_celsius == 15.0

    def test_invalid_operating_condition(self, engine):
        with pytest.raises(InvalidOperatingCondition):
            engine.convert(methane_mixture("mol/mol", "ppm", p=0.0))


class TestMassConcentration:
    def test_methane_at_reference(self, engine):
        result = engine.convert(methane_mixture("ppm", "mg/m3", t=0.0, p=1.01325, value=100.0, unc=1.0))
        assert result.components[0].value == pytest.approx(100.0 * 1e-6 * 16.04 * 1000 / 22.414)
        assert result.warnings == []

    def test_default_molar_mass_is_warned(self, engine):
        mixture = methane_mixture("mol/mol", "mg/m3")
        mixture.components[0].name = "Mystery gas"
        mixture.components[0].cas_number = ""
        result = engine.convert(mixture)
        assert any("assumed air" in w for w in result.warnings)

    def test_name_only_lookup_is_warned(self, engine):
        mixture = methane_mixture("mol/mol", "mg/m3")
        mixture.components[0].cas_number = ""
        result = engine.convert(mixture)
        assert any("matched by name" in w for w in result.warnings)


class TestUnsupportedPair:
    def test_volume_to_mass_raises(self, engine):
        with pytest.raises(UnsupportedConversion):
            engine.convert(methane_mixture("m3/m3", "mg/m3"))


class TestResultRecord:
    def test_output_unit_canonical(self, engine):
        result = engine.convert(methane_mixture("mol/mol", "ppm : parts per million"))
        assert result.output_unit == "ppm"

    def test_timestamp_and_metadata(self, engine):
        result = engine.convert(methane_mixture())
        assert result.timestamp
        assert result.metadata["standard"].startswith("ISO 14912")

    def test_component_lookup_missing(self, engine):
        with pytest.raises(KeyError):
            engine.convert(methane_mixture()).component("nope")


class TestNonFiniteConditions:
    def test_nan_temperature_raises(self, engine):
        with pytest.raises(InvalidOperatingCondition):
            engine.convert(methane_mixture("mol/mol", "ppm", t=float("nan")))

    def test_nan_pressure_raises_on_identity(self, engine):
        with pytest.raises(InvalidOperatingCondition):
            engine.convert(methane_mixture(p=float("nan")))

    def test_matches_corrector(self, engine):
        mixture = methane_mixture("mol/mol", "ppm", t=25.0, p=3.0, value=2e-3, unc=1e-5)
        expected = correct(2e-3 * 1e6, 1e-5 * 1e6, mixture.conditions, engine.reference)
        comp = engine.convert(mixture).components[0]
        assert (comp.value, comp.uncertainty) == pytest.approx(expected)
