"""Patient context store.

Single source of truth for whose records the client is showing. A viewer
(caregiver, doctor, family member, nurse) either looks at their own records
or at one selected patient's. The selected patient is private to the store;
``switch_patient``, ``clear_patient_context``, ``restore`` and ``reset`` are
the only ways to change it.

Every switch or clear bumps a generation counter. A switch commits only if
no newer switch or clear started while its remote call was in flight, so a
slow, superseded switch never overwrites a newer choice. Repeating a switch
to the same patient while it is still the latest change joins it instead of
issuing a second request; once something newer has started, the repeat
starts a fresh switch.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Hashable, Iterable
from dataclasses import dataclass

from cuidador.client.api import ApiError
from cuidador.client.cache import QueryCacheInvalidator
from cuidador.client.sync import RemoteContextSync
from cuidador.constants import MEDICAL_DATA_CATEGORIES
from cuidador.schemas.patient import PatientSummary, ProfileType

logger = logging.getLogger(__name__)


class ContextNotAvailableError(Exception):
    """Raised when a patient profile tries to select another patient."""

    pass


@dataclass(frozen=True)
class Viewer:
    """The authenticated user looking at the records."""

    id: int
    name: str
    profile_type: ProfileType
    email: str = ""

    @property
    def can_select_patients(self) -> bool:
        return self.profile_type != ProfileType.PATIENT


class PatientContextStore:
    """Holds the selected patient and keeps the query cache consistent with it.

    Args:
        viewer: The logged-in user; the fallback "self" identity.
        sync: Persists the choice server-side.
        invalidator: Marks per-patient cache categories stale on every change.
        categories: Categories invalidated on every change.
    """

    def __init__(
        self,
        viewer: Viewer,
        sync: RemoteContextSync,
        invalidator: QueryCacheInvalidator,
        categories: Iterable[str] = MEDICAL_DATA_CATEGORIES,
    ):
        self._viewer = viewer
        self._sync = sync
        self._invalidator = invalidator
        self._categories = frozenset(categories)
        self._selected: PatientSummary | None = None
        self._generation = 0
        # patient id -> (generation the task was started under, task)
        self._pending: dict[int, tuple[int, asyncio.Task]] = {}

    @property
    def viewer(self) -> Viewer:
        return self._viewer

    @property
    def selected_patient(self) -> PatientSummary | None:
        return self._selected

    @property
    def is_patient_selected(self) -> bool:
        return self._selected is not None

    @property
    def is_switching(self) -> bool:
        return bool(self._pending)

    @property
    def medical_queries_enabled(self) -> bool:
        """Whether medical data should be fetched at all.

        Patients and caregivers always have records to show (a caregiver may
        also be a patient). Doctors, family members and nurses only have
        records to show once a patient is selected.
        """
        if self._viewer.profile_type in (ProfileType.PATIENT, ProfileType.CAREGIVER):
            return True
        return self._selected is not None

    def get_effective_patient_id(self) -> int:
        """The selected patient's id, or the viewer's own id."""
        if self._selected is not None:
            return self._selected.id
        return self._viewer.id

    def query_key(self, category: str, *parts: Hashable) -> tuple[Hashable, ...]:
        """Cache key for a category, qualified by the effective patient id."""
        return (category, self.get_effective_patient_id(), *parts)

    async def switch_patient(self, patient_id: int) -> PatientSummary:
        """Switch to a patient's records.

        The remote sync completes before local state changes and before the
        cache is invalidated. Resolves once both are done; refetches are
        scheduled, not awaited.

        Raises:
            ValueError: If patient_id is not a positive integer.
            ContextNotAvailableError: If the viewer is a patient.
            ApiError: If the remote sync fails; local state is unchanged.
        """
        if isinstance(patient_id, bool) or not isinstance(patient_id, int) or patient_id <= 0:
            raise ValueError(f"patient_id must be a positive integer, got {patient_id!r}")
        if not self._viewer.can_select_patients:
            raise ContextNotAvailableError("Patients cannot select other patients")

        pending = self._pending.get(patient_id)
        if pending is not None and pending[0] == self._generation:
            logger.debug("Joining in-flight switch to patient %s", patient_id)
            task = pending[1]
        else:
            self._generation += 1
            task = asyncio.ensure_future(self._switch(patient_id, self._generation))
            self._pending[patient_id] = (self._generation, task)
            task.add_done_callback(lambda done: self._forget(patient_id, done))

        return await asyncio.shield(task)

    async def _switch(self, patient_id: int, generation: int) -> PatientSummary:
        logger.info("Switching context to patient %s", patient_id)
        patient = await self._sync.switch(patient_id)

        if generation != self._generation:
            logger.info("Switch to patient %s superseded before it completed", patient_id)
            return patient

        self._selected = patient
        self._invalidator.invalidate(self._categories, refetch_scope=patient.id)
        logger.info("Now viewing patient %s", patient.id)
        return patient

    def _forget(self, patient_id: int, task: asyncio.Task) -> None:
        pending = self._pending.get(patient_id)
        if pending is not None and pending[1] is task:
            del self._pending[patient_id]
        if not task.cancelled() and task.exception() is not None:
            logger.warning("Switch to patient %s failed: %s", patient_id, task.exception())

    async def clear_patient_context(self) -> None:
        """Return to the viewer's own records.

        Local state clears before anything is awaited. The remote clear is
        best effort: a failure is logged and the client still switches back,
        since the client decides which patient id it requests.
        """
        self._generation += 1
        previous = self._selected
        self._selected = None

        try:
            if self._viewer.can_select_patients:
                await self._sync.clear()
        except ApiError as exc:
            logger.warning("Could not clear server context, continuing: %s", exc)
        finally:
            self._invalidator.invalidate(self._categories, refetch_scope=self._viewer.id)
        logger.info(
            "Context cleared (was patient %s)",
            previous.id if previous is not None else None,
        )

    def restore(self, patient: PatientSummary) -> None:
        """Adopt a selection the server already holds, e.g. after a reload.

        No remote call and no invalidation: nothing was cached for this
        session yet.
        """
        if not self._viewer.can_select_patients:
            raise ContextNotAvailableError("Patients cannot select other patients")
        self._generation += 1
        self._selected = patient

    def reset(self) -> None:
        """Forget the selection locally, e.g. on logout."""
        self._generation += 1
        self._selected = None
