"""Pydantic schemas."""

from cuidador.schemas.medical import MedicationResponse, VitalSignKind, VitalSignReadingResponse
from cuidador.schemas.notification import (
    ClearReadResponse,
    MarkAllReadResponse,
    MarkReadResponse,
    NotificationListResponse,
    NotificationPriority,
    NotificationResponse,
    NotificationSummary,
    Pagination,
)
from cuidador.schemas.patient import (
    ClearContextResponse,
    PatientListResponse,
    PatientSummary,
    ProfileType,
    SwitchPatientRequest,
    SwitchPatientResponse,
    ViewerInfo,
    ViewerResponse,
    ViewingContext,
)

__all__ = [
    "MedicationResponse",
    "VitalSignKind",
    "VitalSignReadingResponse",
    # Notification schemas
    "ClearReadResponse",
    "MarkAllReadResponse",
    "MarkReadResponse",
    "NotificationListResponse",
    "NotificationPriority",
    "NotificationResponse",
    "NotificationSummary",
    "Pagination",
    # Patient context schemas
    "ClearContextResponse",
    "PatientListResponse",
    "PatientSummary",
    "ProfileType",
    "SwitchPatientRequest",
    "SwitchPatientResponse",
    "ViewerInfo",
    "ViewerResponse",
    "ViewingContext",
]
