"""Per-patient medical records served under the viewing context."""

import enum
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Enum, Float, ForeignKey, Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from cuidador.database import Base


class VitalSignKind(str, enum.Enum):
    """Vital sign categories; values double as URL segments."""

    BLOOD_PRESSURE = "blood-pressure"
    GLUCOSE = "glucose"
    HEART_RATE = "heart-rate"
    TEMPERATURE = "temperature"
    WEIGHT = "weight"


class Medication(Base):
    """Medication prescribed to a patient."""

    __tablename__ = "medications"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    patient_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    dosage: Mapped[str] = mapped_column(Text, nullable=False)
    frequency: Mapped[str] = mapped_column(String(50), nullable=False, comment="daily, twice_daily, every_8h, ...")
    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    instructions: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )


class VitalSignReading(Base):
    """Single vital sign measurement.

    Blood pressure stores systolic in ``value`` and diastolic in
    ``secondary_value``; other kinds leave ``secondary_value`` empty.
    """

    __tablename__ = "vital_sign_readings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    patient_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    kind: Mapped[VitalSignKind] = mapped_column(
        Enum(
            VitalSignKind,
            name="vital_sign_kind",
            create_constraint=True,
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
    )
    value: Mapped[float] = mapped_column(Float, nullable=False)
    secondary_value: Mapped[float | None] = mapped_column(Float, nullable=True)
    unit: Mapped[str] = mapped_column(String(20), nullable=False)
    measured_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index("idx_vital_patient_kind_measured", "patient_id", "kind", "measured_at"),
    )
