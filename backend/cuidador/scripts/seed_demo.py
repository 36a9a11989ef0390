"""Seed a demo caregiver with two patients.

Creates a caregiver, two patients linked through active care relationships,
a few medications, vital sign readings and notifications, plus a session so
the caregiver's bearer token works immediately.

Usage:
    python -m cuidador.scripts.seed_demo

Idempotent: skips if the demo caregiver already exists.
"""

import asyncio
import secrets
from datetime import datetime, timedelta, timezone

from sqlalchemy import select, text

from cuidador.config import settings
from cuidador.database import async_session_maker, engine
from cuidador.models import (
    AuthSession,
    CareRelationship,
    Medication,
    Notification,
    NotificationPriority,
    ProfileType,
    User,
    VitalSignKind,
    VitalSignReading,
)

CAREGIVER_EMAIL = "cuidadora@example.com"

PATIENTS = [
    {"name": "Ana Souza", "email": "ana.souza@example.com", "age": 78, "weight": 61.5},
    {"name": "João Pereira", "email": "joao.pereira@example.com", "age": 83, "weight": 72.0},
]


async def seed_demo() -> None:
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    print("  PostgreSQL: connected")

    async with async_session_maker() as session:
        result = await session.execute(select(User).where(User.email == CAREGIVER_EMAIL))
        existing = result.scalar_one_or_none()
        if existing:
            print(f"  Demo caregiver already exists: {CAREGIVER_EMAIL} (id={existing.id})")
            return

        now = datetime.now(timezone.utc)

        caregiver = User(
            email=CAREGIVER_EMAIL,
            name="Maria Cuidadora",
            profile_type=ProfileType.CAREGIVER,
            whatsapp="+5511999990000",
        )
        session.add(caregiver)

        patients = [User(profile_type=ProfileType.PATIENT, **data) for data in PATIENTS]
        session.add_all(patients)
        await session.flush()

        for patient in patients:
            session.add(CareRelationship(patient_id=patient.id, caregiver_id=caregiver.id))
            session.add(
                Medication(
                    patient_id=patient.id,
                    name="Losartana",
                    dosage="50 mg",
                    frequency="daily",
                    start_date=now - timedelta(days=30),
                    instructions="Tomar pela manhã",
                )
            )
            for days_ago, (systolic, diastolic) in enumerate([(128, 82), (134, 86), (122, 79)]):
                session.add(
                    VitalSignReading(
                        patient_id=patient.id,
                        kind=VitalSignKind.BLOOD_PRESSURE,
                        value=systolic,
                        secondary_value=diastolic,
                        unit="mmHg",
                        measured_at=now - timedelta(days=days_ago),
                    )
                )

        first = patients[0]
        session.add_all(
            [
                Notification(
                    user_id=caregiver.id,
                    type="medication_missed",
                    title="Dose atrasada",
                    message=f"{first.name} não registrou a dose de Losartana.",
                    priority=NotificationPriority.HIGH,
                    patient_name=first.name,
                ),
                Notification(
                    user_id=caregiver.id,
                    type="appointment_reminder",
                    title="Consulta amanhã",
                    message=f"{first.name} tem consulta com o cardiologista amanhã.",
                    patient_name=first.name,
                    scheduled_for=now + timedelta(days=1),
                ),
            ]
        )

        token = secrets.token_urlsafe(32)
        session.add(
            AuthSession(
                token=token,
                user_id=caregiver.id,
                expires_at=now + timedelta(hours=settings.session_ttl_hours),
            )
        )

        await session.commit()
        print(f"  Demo caregiver created: {CAREGIVER_EMAIL} (id={caregiver.id})")
        print(f"  Patients: {', '.join(f'{p.name} (id={p.id})' for p in patients)}")
        print(f"  Bearer token: {token}")


if __name__ == "__main__":
    asyncio.run(seed_demo())
