"""Client core for the Care API.

Holds the patient viewing context, a patient-qualified query cache, the
patient selector and the notification panel for one logged-in viewer.
"""

from cuidador.client.api import ApiClient, ApiError, AuthenticationError
from cuidador.client.cache import QueryCache, QueryCacheInvalidator
from cuidador.client.context import ContextNotAvailableError, PatientContextStore, Viewer
from cuidador.client.feedback import Toast, ToastQueue, ToastVariant
from cuidador.client.notifications import NotificationPanel
from cuidador.client.selector import PatientSelector
from cuidador.client.session import CareSession
from cuidador.client.sync import RemoteContextSync

__all__ = [
    "ApiClient",
    "ApiError",
    "AuthenticationError",
    "CareSession",
    "ContextNotAvailableError",
    "NotificationPanel",
    "PatientContextStore",
    "PatientSelector",
    "QueryCache",
    "QueryCacheInvalidator",
    "RemoteContextSync",
    "Toast",
    "ToastQueue",
    "ToastVariant",
    "Viewer",
]
