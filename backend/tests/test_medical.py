"""Tests for medical record routes and effective patient resolution."""

import pytest
from httpx import AsyncClient

from tests.conftest import bearer


async def _medication_names(client: AsyncClient, token: str, **params) -> list[str]:
    response = await client.get("/api/medications", params=params, headers=bearer(token))
    assert response.status_code == 200
    return [m["name"] for m in response.json()]


class TestEffectivePatient:
    """Whose records a medical request returns."""

    @pytest.mark.asyncio
    async def test_caregiver_without_selection_sees_own_records(self, client: AsyncClient, medical_records):
        names = await _medication_names(client, medical_records.tokens["caregiver"])
        assert names == ["Vitamina D"]

    @pytest.mark.asyncio
    async def test_session_selection_applies(self, client: AsyncClient, medical_records):
        token = medical_records.tokens["caregiver"]
        await client.post(
            "/api/caregiver/switch-patient",
            json={"patientId": medical_records.joao_id},
            headers=bearer(token),
        )
        assert await _medication_names(client, token) == ["Metformina"]

        await client.delete("/api/caregiver/clear-patient-context", headers=bearer(token))
        assert await _medication_names(client, token) == ["Vitamina D"]

    @pytest.mark.asyncio
    async def test_explicit_patient_id_wins_over_session(self, client: AsyncClient, medical_records):
        token = medical_records.tokens["caregiver"]
        await client.post(
            "/api/caregiver/switch-patient",
            json={"patientId": medical_records.joao_id},
            headers=bearer(token),
        )
        names = await _medication_names(client, token, patientId=medical_records.ana_id)
        assert names == ["Losartana"]

    @pytest.mark.asyncio
    async def test_explicit_inaccessible_patient_forbidden(self, client: AsyncClient, medical_records):
        response = await client.get(
            "/api/medications",
            params={"patientId": medical_records.stranger_id},
            headers=bearer(medical_records.tokens["caregiver"]),
        )
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_patient_always_sees_own_records(self, client: AsyncClient, medical_records):
        assert await _medication_names(client, medical_records.tokens["ana"]) == ["Losartana"]

        response = await client.get(
            "/api/medications",
            params={"patientId": medical_records.joao_id},
            headers=bearer(medical_records.tokens["ana"]),
        )
        assert response.status_code == 403


class TestVitalSigns:
    """Tests for GET /api/vital-signs/{kind}."""

    @pytest.mark.asyncio
    async def test_lists_readings_for_patient(self, client: AsyncClient, medical_records):
        response = await client.get(
            "/api/vital-signs/glucose",
            params={"patientId": medical_records.joao_id},
            headers=bearer(medical_records.tokens["caregiver"]),
        )
        assert response.status_code == 200
        readings = response.json()
        assert len(readings) == 1
        assert readings[0]["value"] == 142.0
        assert readings[0]["patientId"] == medical_records.joao_id
        assert readings[0]["unit"] == "mg/dL"

    @pytest.mark.asyncio
    async def test_other_kind_is_empty(self, client: AsyncClient, medical_records):
        response = await client.get(
            "/api/vital-signs/heart-rate",
            headers=bearer(medical_records.tokens["ana"]),
        )
        assert response.status_code == 200
        assert response.json() == []

    @pytest.mark.asyncio
    async def test_unknown_kind_rejected(self, client: AsyncClient, medical_records):
        response = await client.get(
            "/api/vital-signs/cholesterol",
            headers=bearer(medical_records.tokens["ana"]),
        )
        assert response.status_code == 422
