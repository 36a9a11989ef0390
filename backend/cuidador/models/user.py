"""User and care relationship models.

Patients, caregivers, doctors, family members and nurses are all rows in
``users``; ``profile_type`` tells them apart. A non-patient viewer reaches a
patient's records only through an active ``CareRelationship``.
"""

from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import DateTime, Enum, Float, ForeignKey, Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cuidador.database import Base


class ProfileType(str, enum.Enum):
    """Kinds of user profiles."""

    PATIENT = "patient"
    CAREGIVER = "caregiver"
    DOCTOR = "doctor"
    FAMILY = "family"
    NURSE = "nurse"


class RelationshipStatus(str, enum.Enum):
    """Care relationship lifecycle states."""

    ACTIVE = "active"
    INACTIVE = "inactive"


def _enum_values(enum_cls: type[enum.Enum]) -> list[str]:
    return [member.value for member in enum_cls]


class User(Base):
    """Application user, patient or care provider."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    age: Mapped[int | None] = mapped_column(Integer, nullable=True)
    weight: Mapped[float | None] = mapped_column(Float, nullable=True, comment="Weight in kg")
    whatsapp: Mapped[str | None] = mapped_column(String(20), nullable=True)
    photo: Mapped[str | None] = mapped_column(Text, nullable=True, comment="Base64 data or URL")
    profile_type: Mapped[ProfileType] = mapped_column(
        Enum(
            ProfileType,
            name="profile_type",
            create_constraint=True,
            values_callable=_enum_values,
        ),
        nullable=False,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, profile_type={self.profile_type})>"


class CareRelationship(Base):
    """Grants a caregiver (or doctor, family member, nurse) access to a patient."""

    __tablename__ = "care_relationships"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    patient_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    caregiver_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    status: Mapped[RelationshipStatus] = mapped_column(
        Enum(
            RelationshipStatus,
            name="relationship_status",
            create_constraint=True,
            values_callable=_enum_values,
        ),
        nullable=False,
        default=RelationshipStatus.ACTIVE,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )

    patient: Mapped[User] = relationship(foreign_keys=[patient_id])
    caregiver: Mapped[User] = relationship(foreign_keys=[caregiver_id])

    __table_args__ = (
        Index("idx_care_caregiver_status", "caregiver_id", "status"),
        Index("idx_care_patient_caregiver", "patient_id", "caregiver_id"),
    )
