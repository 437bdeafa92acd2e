"""Tests for the remote engine service layer."""

import json

import httpx
import pytest

from isogas.core.models import Component, ConversionMethod, Mixture, OperatingConditions
from isogas.core.units import QuantityType
from isogas.errors import PermanentRemoteFailure, TransientRemoteFailure
from isogas.remote.client import RemoteClient, RetryPolicy
from isogas.remote.service import Iso14912Service, build_mixture_payload


async def no_sleep(delay):
    return None


def make_service(handler):
    client = RemoteClient(
        "http://engine.test/api/v1",
        policy=RetryPolicy(max_attempts=2),
        transport=httpx.MockTransport(handler),
        sleep=no_sleep,
    )
    return Iso14912Service(client)


def methane(output_unit="ppm", input_unit="mol/mol"):
    return Mixture(
        components=[
            Component(id="1", name="CH4 Methane", cas_number="74-82-8", value=0.05, uncertainty=0.001),
            Component(id="2", name="N2 Nitrogen", cas_number="7727-37-9", value=0.95, uncertainty=0.001),
        ],
        conditions=OperatingConditions(
            temperature_celsius=20.0, pressure_bar_absolute=2.0, input_unit=input_unit, output_unit=output_unit
        ),
    )


class TestPayload:
    def test_kelvin_and_pascal(self):
        payload = build_mixture_payload(methane())
        assert payload["temperature"] == pytest.approx(293.15)
        assert payload["pressure"] == pytest.approx(200000.0)
        assert payload["quantity_type"] == "molar_ratio"
        assert payload["balance_gas"] == "N2"

    def test_values_in_base_unit(self):
        mixture = methane(input_unit="ppm")
        mixture.components[0].value = 500.0
        payload = build_mixture_payload(mixture)
        assert payload["components"][0]["value"] == pytest.approx(5e-4)
        assert payload["components"][0]["molecule_id"] == "74-82-8"

    def test_molecule_id_preferred(self):
        mixture = methane()
        mixture.components[0].molecule_id = "mol-42"
        assert build_mixture_payload(mixture)["components"][0]["molecule_id"] == "mol-42"


class TestConvert:
    @pytest.mark.asyncio
    async def test_response_mapped_to_result(self):
        seen = {}

        def handler(request):
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            return httpx.Response(
                200,
                json={
                    "converted_mixture": {
                        "components": [
                            {"molecule_id": "74-82-8", "value": 0.049, "uncertainty": 0.00098},
                            {"molecule_id": "7727-37-9", "value": 0.951, "uncertainty": 0.00098},
                        ]
                    },
                    "conversion_factor": 0.98,
                    "reference_conditions": {"temperature_K": 273.15, "pressure_Pa": 101325.0},
                    "metadata": {"standard": "ISO 14912:2023"},
                },
            )

        service = make_service(handler)
        result = await service.convert(methane())
        await service.client.aclose()

        assert seen["path"] == "/api/v1/iso14912/convert"
        assert seen["body"]["target_quantity_type"] == "molar_ratio"
        assert result.method == ConversionMethod.REMOTE
        assert result.output_unit == "ppm"
        comp = result.component("1")
        assert comp.value == pytest.approx(49000.0)
        assert comp.original_value == 0.05
        assert comp.conversion_factor == 0.98
        assert result.reference_conditions.temperature_celsius == pytest.approx(0.0)
        assert result.reference_conditions.pressure_bar_absolute == pytest.approx(1.01325)

    @pytest.mark.asyncio
    async def test_malformed_response_is_transient(self):
        service = make_service(lambda request: httpx.Response(200, json={"unexpected": True}))
        with pytest.raises(TransientRemoteFailure, match="Malformed conversion response"):
            await service.convert(methane())
        await service.client.aclose()

    @pytest.mark.asyncio
    async def test_rejection_is_permanent(self):
        service = make_service(lambda request: httpx.Response(400, json={"message": "bad mixture"}))
        with pytest.raises(PermanentRemoteFailure):
            await service.convert(methane())
        await service.client.aclose()


class TestMolecules:
    @pytest.mark.asyncio
    async def test_find_by_cas_number(self):
        def handler(request):
            assert request.url.params["q"] == "74-82-8"
            return httpx.Response(
                200, json={"molecules": [{"id": "m1", "cas_number": "74-82-8", "molar_mass": 16.04}]}
            )

        service = make_service(handler)
        molecule = await service.find_by_cas_number("74-82-8")
        await service.client.aclose()
        assert molecule["id"] == "m1"

    @pytest.mark.asyncio
    async def test_find_by_cas_requires_exact_match(self):
        service = make_service(
            lambda request: httpx.Response(200, json=[{"id": "m2", "cas_number": "74-84-0"}])
        )
        assert await service.find_by_cas_number("74-82-8") is None
        await service.client.aclose()

    @pytest.mark.asyncio
    async def test_find_molecule_falls_back_to_name(self):
        queries = []

        def handler(request):
            queries.append(request.url.params["q"])
            if request.url.params["q"] == "CH4 Methane":
                return httpx.Response(200, json=[{"id": "m1", "name": "Methane"}])
            return httpx.Response(200, json=[])

        service = make_service(handler)
        molecule = await service.find_molecule(Component(id="1", name="CH4 Methane", cas_number="74-82-8"))
        await service.client.aclose()
        assert molecule["id"] == "m1"
        assert queries == ["74-82-8", "CH4 Methane"]

    @pytest.mark.asyncio
    async def test_get_molecule_quotes_id(self):
        def handler(request):
            assert request.url.raw_path == b"/api/v1/molecules/a%2Fb"
            return httpx.Response(200, json={"id": "a/b"})

        service = make_service(handler)
        assert (await service.get_molecule("a/b"))["id"] == "a/b"
        await service.client.aclose()


class TestMixtureEndpoints:
    @pytest.mark.asyncio
    async def test_validate(self):
        service = make_service(
            lambda request: httpx.Response(
                200,
                json={
                    "is_valid": False,
                    "errors": [{"code": "SUM", "message": "Sum exceeds 1"}],
                    "warnings": ["Low confidence"],
                    "suggestions": ["Normalize"],
                },
            )
        )
        result = await service.validate(methane(), QuantityType.MOLAR_RATIO)
        await service.client.aclose()
        assert not result.is_valid
        assert result.errors == ["Sum exceeds 1"]
        assert result.warnings == ["Low confidence"]
        assert result.suggestions == ["Normalize"]

    @pytest.mark.asyncio
    async def test_normalize(self):
        service = make_service(
            lambda request: httpx.Response(
                200,
                json={"normalized_mixture": {"components": [{"value": 0.25}, {"value": 0.75}]}},
            )
        )
        result = await service.normalize(methane())
        await service.client.aclose()
        assert [c.value for c in result.components] == [0.25, 0.75]

    @pytest.mark.asyncio
    async def test_balance_sends_gas_id(self):
        def handler(request):
            assert json.loads(request.content)["balance_gas_id"] == "Ar"
            return httpx.Response(
                200,
                json={"balanced_mixture": {"components": [{"value": 0.05}, {"value": 0.95}]}},
            )

        service = make_service(handler)
        result = await service.balance(methane(), "Ar")
        await service.client.aclose()
        assert result.components[1].value == pytest.approx(0.95)


class TestMalformedResponses:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [
            {"converted_mixture": {"components": ["a", "b"]}},
            {"converted_mixture": ["a", "b"]},
            ["not", "an", "object"],
        ],
    )
    async def test_convert_shape_errors_are_transient(self, body):
        service = make_service(lambda request: httpx.Response(200, json=body))
        with pytest.raises(TransientRemoteFailure, match="Malformed conversion response"):
            await service.convert(methane())
        await service.client.aclose()

    @pytest.mark.asyncio
    async def test_validate_non_object_is_transient(self):
        service = make_service(lambda request: httpx.Response(200, json=["x"]))
        with pytest.raises(TransientRemoteFailure, match="Malformed validation response"):
            await service.validate(methane())
        await service.client.aclose()

    @pytest.mark.asyncio
    async def test_normalize_non_dict_components_are_transient(self):
        service = make_service(
            lambda request: httpx.Response(200, json={"normalized_mixture": {"components": [1, 2]}})
        )
        with pytest.raises(TransientRemoteFailure, match="Malformed normalization response"):
            await service.normalize(methane())
        await service.client.aclose()

    @pytest.mark.asyncio
    async def test_balance_non_dict_is_transient(self):
        service = make_service(lambda request: httpx.Response(200, json={"balanced_mixture": "none"}))
        with pytest.raises(TransientRemoteFailure, match="Malformed balance response"):
            await service.balance(methane())
        await service.client.aclose()

    @pytest.mark.asyncio
    async def test_search_skips_non_object_entries(self):
        service = make_service(
            lambda request: httpx.Response(200, json=["junk", {"id": "m1", "cas_number": "74-82-8"}])
        )
        assert await service.find_by_cas_number("74-82-8") == {"id": "m1", "cas_number": "74-82-8"}
        await service.client.aclose()
