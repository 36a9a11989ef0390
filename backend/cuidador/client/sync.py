"""Remote context sync.

Persists "who am I viewing" on the server session so requests that carry
no patient id still return the right records. No retries: switching is
user-initiated and idempotent, so the user simply tries again.
"""

from pydantic import ValidationError

from cuidador.client.api import ApiClient, ApiError
from cuidador.schemas.patient import PatientSummary, SwitchPatientResponse

SWITCH_PATIENT_PATH = "/api/caregiver/switch-patient"
CLEAR_CONTEXT_PATH = "/api/caregiver/clear-patient-context"


class RemoteContextSync:
    """POST to set the server-side context, DELETE to clear it."""

    def __init__(self, api: ApiClient):
        self.api = api

    async def switch(self, patient_id: int) -> PatientSummary:
        """Persist the selection and return the patient the server confirmed.

        Raises:
            ApiError: On any non-2xx response, or a body that is not a
                switch confirmation.
        """
        payload = await self.api.post(SWITCH_PATIENT_PATH, json={"patientId": patient_id})
        try:
            return SwitchPatientResponse.model_validate(payload).patient
        except ValidationError as exc:
            raise ApiError(0, f"Malformed response from {SWITCH_PATIENT_PATH}") from exc

    async def clear(self) -> None:
        """Clear the server-side selection.

        Raises:
            ApiError: On any non-2xx response.
        """
        await self.api.delete(CLEAR_CONTEXT_PATH)
