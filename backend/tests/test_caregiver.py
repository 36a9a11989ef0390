"""Tests for caregiver context, patient search and patient basic data routes."""

import pytest
from httpx import AsyncClient

from tests.conftest import bearer


# =============================================================================
# Accessible Patients
# =============================================================================


class TestAccessiblePatients:
    """Tests for GET /api/caregiver/patients and /patients/basic."""

    @pytest.mark.asyncio
    async def test_lists_active_relationships_only(self, client: AsyncClient, care_world):
        response = await client.get(
            "/api/caregiver/patients", headers=bearer(care_world.tokens["caregiver"])
        )
        assert response.status_code == 200
        names = [p["name"] for p in response.json()["patients"]]
        assert names == ["Ana Souza", "João Pereira"]

    @pytest.mark.asyncio
    async def test_basic_listing_fields(self, client: AsyncClient, care_world):
        response = await client.get(
            "/api/caregiver/patients/basic", headers=bearer(care_world.tokens["caregiver"])
        )
        assert response.status_code == 200
        first = response.json()["patients"][0]
        assert first["id"] == care_world.ana_id
        assert first["email"] == "ana.souza@example.com"
        assert first["age"] == 78
        assert first["profileType"] == "patient"

    @pytest.mark.asyncio
    async def test_doctor_without_relationships_gets_empty_list(self, client: AsyncClient, care_world):
        response = await client.get(
            "/api/caregiver/patients", headers=bearer(care_world.tokens["doctor"])
        )
        assert response.status_code == 200
        assert response.json() == {"patients": []}

    @pytest.mark.asyncio
    async def test_patient_forbidden(self, client: AsyncClient, care_world):
        response = await client.get(
            "/api/caregiver/patients", headers=bearer(care_world.tokens["ana"])
        )
        assert response.status_code == 403


# =============================================================================
# Switch / Clear Context
# =============================================================================


class TestSwitchPatient:
    """Tests for POST /api/caregiver/switch-patient."""

    @pytest.mark.asyncio
    async def test_switch_returns_patient_and_session(self, client: AsyncClient, care_world):
        response = await client.post(
            "/api/caregiver/switch-patient",
            json={"patientId": care_world.joao_id},
            headers=bearer(care_world.tokens["caregiver"]),
        )
        assert response.status_code == 200
        data = response.json()
        assert data["patient"]["id"] == care_world.joao_id
        assert data["patient"]["name"] == "João Pereira"
        assert data["session"] == {
            "selectedPatientId": care_world.joao_id,
            "caregiverId": care_world.caregiver_id,
        }

    @pytest.mark.asyncio
    async def test_switch_is_idempotent(self, client: AsyncClient, care_world):
        headers = bearer(care_world.tokens["caregiver"])
        for _ in range(2):
            response = await client.post(
                "/api/caregiver/switch-patient",
                json={"patientId": care_world.ana_id},
                headers=headers,
            )
            assert response.status_code == 200
        me = await client.get("/api/auth/me", headers=headers)
        assert me.json()["selectedPatientId"] == care_world.ana_id

    @pytest.mark.asyncio
    async def test_switch_without_relationship_forbidden(self, client: AsyncClient, care_world):
        response = await client.post(
            "/api/caregiver/switch-patient",
            json={"patientId": care_world.stranger_id},
            headers=bearer(care_world.tokens["caregiver"]),
        )
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_switch_with_inactive_relationship_forbidden(self, client: AsyncClient, care_world):
        response = await client.post(
            "/api/caregiver/switch-patient",
            json={"patientId": care_world.former_id},
            headers=bearer(care_world.tokens["caregiver"]),
        )
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_unknown_or_non_patient_id_not_found(self, client: AsyncClient, care_world):
        headers = bearer(care_world.tokens["caregiver"])
        for patient_id in (999_999, care_world.doctor_id):
            response = await client.post(
                "/api/caregiver/switch-patient",
                json={"patientId": patient_id},
                headers=headers,
            )
            assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_patient_cannot_switch(self, client: AsyncClient, care_world):
        response = await client.post(
            "/api/caregiver/switch-patient",
            json={"patientId": care_world.joao_id},
            headers=bearer(care_world.tokens["ana"]),
        )
        assert response.status_code == 403
        assert response.json()["detail"] == "Patients cannot switch context"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [{"patientId": 0}, {"patientId": -3}, {}])
    async def test_invalid_patient_id_rejected(self, client: AsyncClient, care_world, payload):
        response = await client.post(
            "/api/caregiver/switch-patient",
            json=payload,
            headers=bearer(care_world.tokens["caregiver"]),
        )
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_switch_requires_auth(self, client: AsyncClient, care_world):
        response = await client.post(
            "/api/caregiver/switch-patient", json={"patientId": care_world.ana_id}
        )
        assert response.status_code == 401


class TestClearPatientContext:
    """Tests for DELETE /api/caregiver/clear-patient-context."""

    @pytest.mark.asyncio
    async def test_clear_resets_session(self, client: AsyncClient, care_world):
        headers = bearer(care_world.tokens["caregiver"])
        await client.post(
            "/api/caregiver/switch-patient",
            json={"patientId": care_world.ana_id},
            headers=headers,
        )

        response = await client.delete("/api/caregiver/clear-patient-context", headers=headers)
        assert response.status_code == 200
        assert response.json()["caregiver"]["id"] == care_world.caregiver_id

        me = await client.get("/api/auth/me", headers=headers)
        assert me.json()["selectedPatientId"] is None

    @pytest.mark.asyncio
    async def test_clear_without_selection_succeeds(self, client: AsyncClient, care_world):
        response = await client.delete(
            "/api/caregiver/clear-patient-context",
            headers=bearer(care_world.tokens["doctor"]),
        )
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_patient_cannot_clear(self, client: AsyncClient, care_world):
        response = await client.delete(
            "/api/caregiver/clear-patient-context",
            headers=bearer(care_world.tokens["ana"]),
        )
        assert response.status_code == 403


# =============================================================================
# Search
# =============================================================================


class TestSearchPatients:
    """Tests for GET /api/users/search-patients."""

    @pytest.mark.asyncio
    async def test_search_by_name_case_insensitive(self, client: AsyncClient, care_world):
        response = await client.get(
            "/api/users/search-patients",
            params={"q": "ANA"},
            headers=bearer(care_world.tokens["caregiver"]),
        )
        assert response.status_code == 200
        assert [p["id"] for p in response.json()["patients"]] == [care_world.ana_id]

    @pytest.mark.asyncio
    async def test_search_by_email(self, client: AsyncClient, care_world):
        response = await client.get(
            "/api/users/search-patients",
            params={"q": "pereira@"},
            headers=bearer(care_world.tokens["caregiver"]),
        )
        assert [p["id"] for p in response.json()["patients"]] == [care_world.joao_id]

    @pytest.mark.asyncio
    async def test_search_excludes_inaccessible_patients(self, client: AsyncClient, care_world):
        response = await client.get(
            "/api/users/search-patients",
            params={"q": "Carla"},
            headers=bearer(care_world.tokens["caregiver"]),
        )
        assert response.json()["patients"] == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("query", ["%%", "__", "A_a", "%@%"])
    async def test_wildcards_match_literally(self, client: AsyncClient, care_world, query):
        response = await client.get(
            "/api/users/search-patients",
            params={"q": query},
            headers=bearer(care_world.tokens["caregiver"]),
        )
        assert response.status_code == 200
        assert response.json()["patients"] == []

    @pytest.mark.asyncio
    async def test_short_query_rejected(self, client: AsyncClient, care_world):
        response = await client.get(
            "/api/users/search-patients",
            params={"q": " a "},
            headers=bearer(care_world.tokens["caregiver"]),
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_patient_cannot_search(self, client: AsyncClient, care_world):
        response = await client.get(
            "/api/users/search-patients",
            params={"q": "Souza"},
            headers=bearer(care_world.tokens["ana"]),
        )
        assert response.status_code == 403


# =============================================================================
# Patient Basic Data
# =============================================================================


class TestPatientBasic:
    """Tests for GET /api/patients/{id}/basic."""

    @pytest.mark.asyncio
    async def test_caregiver_reads_linked_patient(self, client: AsyncClient, care_world):
        response = await client.get(
            f"/api/patients/{care_world.ana_id}/basic",
            headers=bearer(care_world.tokens["caregiver"]),
        )
        assert response.status_code == 200
        assert response.json()["name"] == "Ana Souza"

    @pytest.mark.asyncio
    async def test_patient_reads_self(self, client: AsyncClient, care_world):
        response = await client.get(
            f"/api/patients/{care_world.ana_id}/basic",
            headers=bearer(care_world.tokens["ana"]),
        )
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_patient_cannot_read_other_patient(self, client: AsyncClient, care_world):
        response = await client.get(
            f"/api/patients/{care_world.joao_id}/basic",
            headers=bearer(care_world.tokens["ana"]),
        )
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_unlinked_patient_forbidden(self, client: AsyncClient, care_world):
        response = await client.get(
            f"/api/patients/{care_world.stranger_id}/basic",
            headers=bearer(care_world.tokens["caregiver"]),
        )
        assert response.status_code == 403
