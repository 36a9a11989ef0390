"""Data access repositories."""

from cuidador.repositories.care import CareRepository, PatientNotFoundError
from cuidador.repositories.medical import MedicalRepository
from cuidador.repositories.notification import NotificationNotFoundError, NotificationRepository

__all__ = [
    "CareRepository",
    "MedicalRepository",
    "NotificationNotFoundError",
    "NotificationRepository",
    "PatientNotFoundError",
]
