"""Tests for the notifications API routes."""

from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from httpx import AsyncClient

from cuidador.models import Notification, NotificationPriority
from tests.conftest import bearer


# =============================================================================
# Fixtures
# =============================================================================


@pytest_asyncio.fixture
async def notifications_in_db(session_maker, care_world) -> dict[str, int]:
    """Three notifications for Maria (one read) and one for the doctor."""
    base = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
    rows = {
        "old_read": Notification(
            user_id=care_world.caregiver_id,
            type="medication_taken",
            title="Dose registrada",
            message="Ana tomou Losartana.",
            is_read=True,
            created_at=base,
        ),
        "missed": Notification(
            user_id=care_world.caregiver_id,
            type="medication_missed",
            title="Dose atrasada",
            message="Ana não tomou Losartana.",
            priority=NotificationPriority.HIGH,
            patient_name="Ana Souza",
            created_at=base + timedelta(hours=1),
        ),
        "appointment": Notification(
            user_id=care_world.caregiver_id,
            type="appointment_reminder",
            title="Consulta amanhã",
            message="João tem consulta amanhã.",
            created_at=base + timedelta(hours=2),
        ),
        "doctor": Notification(
            user_id=care_world.doctor_id,
            type="test_completed",
            title="Exame pronto",
            message="Resultado disponível.",
            created_at=base,
        ),
    }
    async with session_maker() as session:
        session.add_all(rows.values())
        await session.commit()
    return {name: row.id for name, row in rows.items()}


# =============================================================================
# Listing
# =============================================================================


class TestListNotifications:
    """Tests for GET /api/notifications."""

    @pytest.mark.asyncio
    async def test_list_newest_first_with_summary(self, client: AsyncClient, care_world, notifications_in_db):
        response = await client.get(
            "/api/notifications", headers=bearer(care_world.tokens["caregiver"])
        )
        assert response.status_code == 200
        data = response.json()
        assert [n["id"] for n in data["notifications"]] == [
            notifications_in_db["appointment"],
            notifications_in_db["missed"],
            notifications_in_db["old_read"],
        ]
        assert data["summary"] == {"total": 3, "unread": 2}
        assert data["pagination"] == {"limit": 50, "offset": 0, "hasMore": False}

    @pytest.mark.asyncio
    async def test_camel_case_fields(self, client: AsyncClient, care_world, notifications_in_db):
        response = await client.get(
            "/api/notifications", headers=bearer(care_world.tokens["caregiver"])
        )
        missed = next(
            n for n in response.json()["notifications"] if n["id"] == notifications_in_db["missed"]
        )
        assert missed["isRead"] is False
        assert missed["priority"] == "high"
        assert missed["patientName"] == "Ana Souza"
        assert "createdAt" in missed

    @pytest.mark.asyncio
    async def test_pagination(self, client: AsyncClient, care_world, notifications_in_db):
        response = await client.get(
            "/api/notifications",
            params={"limit": 2, "offset": 1},
            headers=bearer(care_world.tokens["caregiver"]),
        )
        data = response.json()
        assert [n["id"] for n in data["notifications"]] == [
            notifications_in_db["missed"],
            notifications_in_db["old_read"],
        ]
        assert data["pagination"]["hasMore"] is True

    @pytest.mark.asyncio
    async def test_only_own_notifications(self, client: AsyncClient, care_world, notifications_in_db):
        response = await client.get(
            "/api/notifications", headers=bearer(care_world.tokens["doctor"])
        )
        assert [n["id"] for n in response.json()["notifications"]] == [notifications_in_db["doctor"]]

    @pytest.mark.asyncio
    async def test_requires_auth(self, client: AsyncClient):
        response = await client.get("/api/notifications")
        assert response.status_code == 401


# =============================================================================
# Mutations
# =============================================================================


class TestMarkRead:
    """Tests for PUT /api/notifications/{id}/read and /mark-all-read."""

    @pytest.mark.asyncio
    async def test_mark_one_read(self, client: AsyncClient, care_world, notifications_in_db):
        headers = bearer(care_world.tokens["caregiver"])
        response = await client.put(
            f"/api/notifications/{notifications_in_db['missed']}/read", headers=headers
        )
        assert response.status_code == 200
        assert response.json()["success"] is True

        listing = await client.get("/api/notifications", headers=headers)
        assert listing.json()["summary"]["unread"] == 1

    @pytest.mark.asyncio
    async def test_mark_read_twice_is_harmless(self, client: AsyncClient, care_world, notifications_in_db):
        headers = bearer(care_world.tokens["caregiver"])
        url = f"/api/notifications/{notifications_in_db['old_read']}/read"
        assert (await client.put(url, headers=headers)).status_code == 200

    @pytest.mark.asyncio
    async def test_cannot_mark_someone_elses(self, client: AsyncClient, care_world, notifications_in_db):
        response = await client.put(
            f"/api/notifications/{notifications_in_db['doctor']}/read",
            headers=bearer(care_world.tokens["caregiver"]),
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_mark_all_read(self, client: AsyncClient, care_world, notifications_in_db):
        headers = bearer(care_world.tokens["caregiver"])
        response = await client.put("/api/notifications/mark-all-read", headers=headers)
        assert response.status_code == 200
        assert response.json()["markedCount"] == 2

        listing = await client.get("/api/notifications", headers=headers)
        assert listing.json()["summary"] == {"total": 3, "unread": 0}

        doctor = await client.get("/api/notifications", headers=bearer(care_world.tokens["doctor"]))
        assert doctor.json()["summary"]["unread"] == 1


class TestDelete:
    """Tests for DELETE /api/notifications/{id} and /clear-read."""

    @pytest.mark.asyncio
    async def test_delete_one(self, client: AsyncClient, care_world, notifications_in_db):
        headers = bearer(care_world.tokens["caregiver"])
        response = await client.delete(
            f"/api/notifications/{notifications_in_db['appointment']}", headers=headers
        )
        assert response.status_code == 204

        listing = await client.get("/api/notifications", headers=headers)
        assert listing.json()["summary"]["total"] == 2

    @pytest.mark.asyncio
    async def test_delete_missing_returns_404(self, client: AsyncClient, care_world, notifications_in_db):
        response = await client.delete(
            "/api/notifications/999999", headers=bearer(care_world.tokens["caregiver"])
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_clear_read(self, client: AsyncClient, care_world, notifications_in_db):
        headers = bearer(care_world.tokens["caregiver"])
        response = await client.delete("/api/notifications/clear-read", headers=headers)
        assert response.status_code == 200
        assert response.json()["deletedCount"] == 1

        listing = await client.get("/api/notifications", headers=headers)
        assert listing.json()["summary"] == {"total": 2, "unread": 2}
