"""Pydantic schemas for patients and the caregiver viewing context.

``PatientSummary`` is the read-only projection returned by listing and
search endpoints and held by the client context store.
"""

from enum import Enum

from pydantic import ConfigDict, Field

from cuidador.schemas.base import CamelModel


class ProfileType(str, Enum):
    """Kinds of user profiles (match SQLAlchemy enum)."""

    PATIENT = "patient"
    CAREGIVER = "caregiver"
    DOCTOR = "doctor"
    FAMILY = "family"
    NURSE = "nurse"


class PatientSummary(CamelModel):
    """Patient as seen by a viewer selecting whose records to open."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    email: str
    age: int | None = None
    photo: str | None = Field(default=None, description="Base64 data or URL")
    profile_type: ProfileType = ProfileType.PATIENT
    weight: float | None = None
    whatsapp: str | None = None


class PatientListResponse(CamelModel):
    """Patients accessible to the current viewer."""

    patients: list[PatientSummary]


class SwitchPatientRequest(CamelModel):
    """Body of POST /api/caregiver/switch-patient."""

    patient_id: int = Field(gt=0)


class ViewingContext(CamelModel):
    """Server-side viewing context stored on the auth session."""

    selected_patient_id: int | None
    caregiver_id: int


class SwitchPatientResponse(CamelModel):
    """Result of a context switch."""

    message: str
    patient: PatientSummary
    session: ViewingContext


class ViewerInfo(CamelModel):
    """Minimal identity of the authenticated viewer."""

    id: int
    name: str
    email: str


class ClearContextResponse(CamelModel):
    """Result of clearing the viewing context."""

    message: str
    caregiver: ViewerInfo


class ViewerResponse(CamelModel):
    """GET /api/auth/me payload."""

    id: int
    name: str
    email: str
    profile_type: ProfileType
    selected_patient_id: int | None = None
