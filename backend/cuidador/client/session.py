"""One logged-in viewer's client state.

Wires the context store, query cache, selector and notification panel
around a single ``ApiClient``. Medical records are fetched with an explicit
``patientId`` captured when the cache key is built, so a fetch can only ever
fill the slot of the patient it was issued for.
"""

import logging
from collections.abc import Callable
from typing import Any

from cuidador.client.api import ApiClient
from cuidador.client.cache import QueryCache, QueryCacheInvalidator
from cuidador.client.context import PatientContextStore, Viewer
from cuidador.client.feedback import ToastQueue
from cuidador.client.notifications import NotificationPanel
from cuidador.client.selector import PatientSelector
from cuidador.client.sync import RemoteContextSync
from cuidador.constants import MEDICAL_DATA_CATEGORIES
from cuidador.schemas.patient import PatientSummary, ViewerResponse

logger = logging.getLogger(__name__)

ME_PATH = "/api/auth/me"


class CareSession:
    """Client state for one authenticated viewer."""

    def __init__(
        self,
        api: ApiClient,
        viewer: Viewer,
        *,
        cache: QueryCache | None = None,
        toasts: ToastQueue | None = None,
        navigate: Callable[[str], None] | None = None,
    ):
        self.api = api
        self.viewer = viewer
        self.cache = cache or QueryCache()
        self.toasts = toasts or ToastQueue()
        self.invalidator = QueryCacheInvalidator(self.cache)
        self.context = PatientContextStore(viewer, RemoteContextSync(api), self.invalidator)
        self.notifications = NotificationPanel(
            api,
            self.cache,
            self.toasts,
            scope=self.context.get_effective_patient_id,
        )
        self.selector = (
            PatientSelector(api, self.context, self.cache, self.toasts, navigate=navigate)
            if viewer.can_select_patients
            else None
        )

    @classmethod
    async def start(cls, api: ApiClient, **kwargs) -> "CareSession":
        """Build a session for the token's user and adopt any server-held selection.

        Raises:
            AuthenticationError: If the token is not accepted.
        """
        me = ViewerResponse.model_validate(await api.get(ME_PATH))
        viewer = Viewer(id=me.id, name=me.name, profile_type=me.profile_type, email=me.email)
        session = cls(api, viewer, **kwargs)

        if me.selected_patient_id is not None and viewer.can_select_patients:
            payload = await api.get(f"/api/patients/{me.selected_patient_id}/basic")
            session.context.restore(PatientSummary.model_validate(payload))
            logger.info("Restored server context: patient %s", me.selected_patient_id)

        return session

    async def fetch_records(self, category: str, **params: Any) -> Any:
        """Fetch one medical category for the effective patient through the cache.

        Raises:
            ValueError: If the category is not a per-patient medical category.
            ApiError: If the request fails.
        """
        if category not in MEDICAL_DATA_CATEGORIES:
            raise ValueError(f"Not a medical data category: {category}")

        patient_id = self.context.get_effective_patient_id()
        key = self.context.query_key(category, *sorted(params.items()))
        query = {**params, "patientId": patient_id}

        async def fetcher():
            return await self.api.get(category, params=query)

        return await self.cache.fetch(key, fetcher)

    async def logout(self) -> None:
        """Forget the selection and every cached entry."""
        self.notifications.stop_polling()
        if self.selector is not None:
            self.selector.close()
        await self.cache.wait_idle()
        self.context.reset()
        self.cache.clear()
