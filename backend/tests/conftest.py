"""Pytest configuration and shared fixtures.

This module provides centralized test fixtures for:
- Test database engine and sessions
- HTTP client for API testing against the real bearer-token auth
- A seeded care network (caregiver, doctor, patients, sessions)
- ApiClient wired to the app in-process for client tests
"""

import os
import secrets
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from cuidador.client.api import ApiClient
from cuidador.database import Base, get_db
from cuidador.main import app
from cuidador.models import (
    AuthSession,
    CareRelationship,
    Medication,
    ProfileType,
    RelationshipStatus,
    User,
    VitalSignKind,
    VitalSignReading,
)


def bearer(token: str) -> dict[str, str]:
    """Authorization header for a session token."""
    return {"Authorization": f"Bearer {token}"}


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest_asyncio.fixture
async def test_engine(tmp_path):
    """Create test database engine with automatic schema management.

    Creates all tables before tests, drops them after.
    Uses DATABASE_TEST_URL env var if set, otherwise a throwaway SQLite file.
    """
    db_url = os.environ.get("DATABASE_TEST_URL")
    if not db_url:
        db_url = f"sqlite+aiosqlite:///{tmp_path / 'cuidador_test.db'}"

    engine = create_async_engine(db_url, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def session_maker(test_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_maker) -> AsyncSession:
    """Test database session that rolls back on completion."""
    async with session_maker() as session:
        yield session
        await session.rollback()


# =============================================================================
# HTTP Client Fixtures
# =============================================================================


@pytest_asyncio.fixture
async def client(session_maker):
    """Async test client for FastAPI app with test database.

    Overrides the app's get_db dependency to use the test database. Auth is
    not stubbed: requests authenticate with tokens from ``care_world``.
    """

    async def override_get_db():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.pop(get_db, None)


@pytest_asyncio.fixture
async def api_factory(client):
    """Build ``ApiClient`` instances that talk to the app in-process."""
    created: list[ApiClient] = []

    def make(token: str | None) -> ApiClient:
        api = ApiClient(
            "http://test",
            token,
            transport=ASGITransport(app=app),
        )
        created.append(api)
        return api

    yield make

    for api in created:
        await api.aclose()


# =============================================================================
# Care Network Fixtures
# =============================================================================


@dataclass
class CareWorld:
    """Ids and tokens of the seeded users."""

    caregiver_id: int
    doctor_id: int
    ana_id: int
    joao_id: int
    stranger_id: int
    former_id: int
    tokens: dict[str, str] = field(default_factory=dict)


async def _add_session(session: AsyncSession, user_id: int, *, expired: bool = False) -> str:
    token = secrets.token_urlsafe(16)
    offset = timedelta(hours=-1) if expired else timedelta(hours=1)
    session.add(
        AuthSession(
            token=token,
            user_id=user_id,
            expires_at=datetime.now(timezone.utc) + offset,
        )
    )
    return token


@pytest_asyncio.fixture
async def care_world(session_maker) -> CareWorld:
    """Caregiver Maria cares for Ana and João; a doctor has no patients.

    ``former`` had an inactive relationship with Maria and ``stranger`` has
    none. Every user gets a valid session token; ``expired`` is an expired
    token for Maria.
    """
    async with session_maker() as session:
        caregiver = User(email="maria@example.com", name="Maria Cuidadora", profile_type=ProfileType.CAREGIVER)
        doctor = User(email="dr.silva@example.com", name="Dr. Silva", profile_type=ProfileType.DOCTOR)
        ana = User(email="ana.souza@example.com", name="Ana Souza", age=78, profile_type=ProfileType.PATIENT)
        joao = User(email="joao.pereira@example.com", name="João Pereira", age=83, profile_type=ProfileType.PATIENT)
        stranger = User(email="carla@example.com", name="Carla Lima", profile_type=ProfileType.PATIENT)
        former = User(email="bruno@example.com", name="Bruno Alves", profile_type=ProfileType.PATIENT)
        session.add_all([caregiver, doctor, ana, joao, stranger, former])
        await session.flush()

        session.add_all(
            [
                CareRelationship(patient_id=ana.id, caregiver_id=caregiver.id),
                CareRelationship(patient_id=joao.id, caregiver_id=caregiver.id),
                CareRelationship(
                    patient_id=former.id,
                    caregiver_id=caregiver.id,
                    status=RelationshipStatus.INACTIVE,
                ),
            ]
        )

        world = CareWorld(
            caregiver_id=caregiver.id,
            doctor_id=doctor.id,
            ana_id=ana.id,
            joao_id=joao.id,
            stranger_id=stranger.id,
            former_id=former.id,
        )
        world.tokens = {
            "caregiver": await _add_session(session, caregiver.id),
            "doctor": await _add_session(session, doctor.id),
            "ana": await _add_session(session, ana.id),
            "expired": await _add_session(session, caregiver.id, expired=True),
        }
        await session.commit()

    return world


@pytest_asyncio.fixture
async def medical_records(session_maker, care_world) -> CareWorld:
    """One medication and one glucose reading each for Ana, João and Maria."""
    now = datetime.now(timezone.utc)
    async with session_maker() as session:
        for patient_id, drug, glucose in [
            (care_world.ana_id, "Losartana", 98.0),
            (care_world.joao_id, "Metformina", 142.0),
            (care_world.caregiver_id, "Vitamina D", 90.0),
        ]:
            session.add(
                Medication(
                    patient_id=patient_id,
                    name=drug,
                    dosage="1 comprimido",
                    frequency="daily",
                    start_date=now - timedelta(days=10),
                )
            )
            session.add(
                VitalSignReading(
                    patient_id=patient_id,
                    kind=VitalSignKind.GLUCOSE,
                    value=glucose,
                    unit="mg/dL",
                    measured_at=now,
                )
            )
        await session.commit()
    return care_world
