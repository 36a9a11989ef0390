"""Pydantic schemas for medical records."""

from datetime import datetime
from enum import Enum

from cuidador.schemas.base import CamelModel


class VitalSignKind(str, Enum):
    """Vital sign categories (match SQLAlchemy enum)."""

    BLOOD_PRESSURE = "blood-pressure"
    GLUCOSE = "glucose"
    HEART_RATE = "heart-rate"
    TEMPERATURE = "temperature"
    WEIGHT = "weight"


class MedicationResponse(CamelModel):
    """Medication in API responses."""

    id: int
    patient_id: int
    name: str
    dosage: str
    frequency: str
    start_date: datetime
    end_date: datetime | None = None
    instructions: str | None = None
    is_active: bool


class VitalSignReadingResponse(CamelModel):
    """Vital sign reading in API responses."""

    id: int
    patient_id: int
    kind: VitalSignKind
    value: float
    secondary_value: float | None = None
    unit: str
    measured_at: datetime
    notes: str | None = None
