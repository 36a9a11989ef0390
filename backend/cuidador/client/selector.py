"""Patient search and selection.

Lets a caregiver, doctor, family member or nurse find an accessible patient
and switch to their records. Search is debounced and remote. The full
accessible-patient list is only loaded on first use, never at login.
"""

import asyncio
import logging
from collections.abc import Callable

from cuidador.client.api import ApiClient, ApiError
from cuidador.client.cache import QueryCache
from cuidador.client.context import ContextNotAvailableError, PatientContextStore
from cuidador.client.feedback import ToastQueue
from cuidador.config import settings
from cuidador.constants import HOME_ROUTE, MIN_SEARCH_LENGTH, OVERVIEW_ROUTE
from cuidador.schemas.patient import PatientListResponse, PatientSummary

logger = logging.getLogger(__name__)

SEARCH_PATH = "/api/users/search-patients"
ACCESSIBLE_PATIENTS_PATH = "/api/caregiver/patients"


class PatientSelector:
    """Search state and selection actions for one viewer.

    ``loading_patient_name`` is set while a switch or clear runs; it stands
    for a blocking loading modal and no other selection starts meanwhile.

    Raises:
        ContextNotAvailableError: If the viewer is a patient.
    """

    def __init__(
        self,
        api: ApiClient,
        context: PatientContextStore,
        cache: QueryCache,
        toasts: ToastQueue,
        *,
        debounce: float | None = None,
        navigate: Callable[[str], None] | None = None,
    ):
        if not context.viewer.can_select_patients:
            raise ContextNotAvailableError("Patients cannot select other patients")

        self.api = api
        self.context = context
        self.cache = cache
        self.toasts = toasts
        self.debounce = settings.search_debounce_seconds if debounce is None else debounce
        self._navigate = navigate

        self.query = ""
        self.results: list[PatientSummary] = []
        self.is_searching = False
        self.loading_patient_name: str | None = None
        self.route: str | None = None
        self._accessible: list[PatientSummary] | None = None
        self._search_task: asyncio.Task | None = None

    # === Search ===

    def set_query(self, text: str) -> None:
        """Update the search box; the remote search runs after the debounce delay.

        Each keystroke cancels the previous pending search. Queries shorter
        than the minimum clear the results without a request.
        """
        self.query = text
        self._cancel_pending_search()

        if len(text.strip()) < MIN_SEARCH_LENGTH:
            self.results = []
            return

        self._search_task = asyncio.ensure_future(self._debounced_search(text))

    async def _debounced_search(self, text: str) -> None:
        await asyncio.sleep(self.debounce)
        await self.search(text)

    def _cancel_pending_search(self) -> None:
        if self._search_task is not None and not self._search_task.done():
            self._search_task.cancel()
        self._search_task = None

    async def wait_for_search(self) -> None:
        """Wait for the pending debounced search, if any."""
        task = self._search_task
        if task is None:
            return
        try:
            await task
        except asyncio.CancelledError:
            if not task.cancelled():
                raise

    async def search(self, text: str) -> list[PatientSummary]:
        """Search accessible patients now, bypassing the debounce.

        A failure shows a toast and leaves the results empty. Responses for
        a query the user has since replaced are dropped.
        """
        term = text.strip()
        if len(term) < MIN_SEARCH_LENGTH:
            self.results = []
            return []

        self.is_searching = True
        try:
            payload = await self.api.get(SEARCH_PATH, params={"q": term})
            patients = PatientListResponse.model_validate(payload).patients
        except ApiError as exc:
            logger.warning("Patient search for %r failed: %s", term, exc)
            self.toasts.error("Erro na busca", "Não foi possível buscar pacientes.")
            patients = []
        finally:
            self.is_searching = False

        if text == self.query:
            self.results = patients
        return patients

    async def load_accessible_patients(self) -> list[PatientSummary]:
        """Load the viewer's accessible patients on first use only.

        Cached under a non-medical key, so context switches keep it.
        """
        if self._accessible is not None:
            return self._accessible

        async def fetcher():
            return await self.api.get(ACCESSIBLE_PATIENTS_PATH)

        try:
            payload = await self.cache.fetch(
                (ACCESSIBLE_PATIENTS_PATH, self.context.viewer.id), fetcher
            )
        except ApiError as exc:
            logger.warning("Could not load accessible patients: %s", exc)
            self.toasts.error("Erro", "Não foi possível carregar seus pacientes.")
            return []

        self._accessible = PatientListResponse.model_validate(payload).patients
        return self._accessible

    @property
    def accessible_patients(self) -> list[PatientSummary] | None:
        return self._accessible

    @property
    def filtered_accessible_patients(self) -> list[PatientSummary]:
        """Accessible patients narrowed locally by the current query."""
        patients = self._accessible or []
        term = self.query.strip().lower()
        if len(term) < MIN_SEARCH_LENGTH:
            return list(patients)
        return [p for p in patients if term in p.name.lower() or term in p.email.lower()]

    # === Selection ===

    @property
    def is_loading(self) -> bool:
        return self.loading_patient_name is not None

    async def select(self, patient: PatientSummary) -> bool:
        """Switch to the patient and go to the overview.

        Returns:
            True on success. False if a switch was already running or the
            switch failed; on failure a toast is shown and the previous
            context stays in place.
        """
        if self.is_loading:
            logger.debug("Ignoring selection of %s while another is loading", patient.id)
            return False

        self.loading_patient_name = patient.name
        try:
            await self.context.switch_patient(patient.id)
        except ApiError as exc:
            logger.warning("Switch to patient %s failed: %s", patient.id, exc)
            self.toasts.error("Erro", "Não foi possível trocar para este paciente.")
            return False
        finally:
            self.loading_patient_name = None

        self._cancel_pending_search()
        self.query = ""
        self.results = []
        self.toasts.show("Paciente selecionado", f"Agora visualizando dados de {patient.name}")
        self._go(OVERVIEW_ROUTE)
        return True

    async def return_to_own_data(self) -> None:
        """Clear the selection and go back to the viewer's home."""
        if self.is_loading:
            return

        self.loading_patient_name = self.context.viewer.name
        try:
            await self.context.clear_patient_context()
        finally:
            self.loading_patient_name = None

        self.toasts.show("Contexto alterado", "Agora visualizando seus próprios dados")
        self._go(HOME_ROUTE)

    def _go(self, route: str) -> None:
        self.route = route
        if self._navigate is not None:
            self._navigate(route)

    def close(self) -> None:
        """Drop any pending search, e.g. when the search panel closes."""
        self._cancel_pending_search()
        self.query = ""
        self.results = []
