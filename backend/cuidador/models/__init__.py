"""SQLAlchemy models."""

from cuidador.models.auth import AuthSession
from cuidador.models.medical import Medication, VitalSignKind, VitalSignReading
from cuidador.models.notification import Notification, NotificationPriority
from cuidador.models.user import CareRelationship, ProfileType, RelationshipStatus, User

__all__ = [
    "AuthSession",
    "CareRelationship",
    "Medication",
    "Notification",
    "NotificationPriority",
    "ProfileType",
    "RelationshipStatus",
    "User",
    "VitalSignKind",
    "VitalSignReading",
]
