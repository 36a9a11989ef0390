"""HTTP client for the Care API.

Thin wrapper over ``httpx.AsyncClient`` that attaches the bearer token and
turns every non-2xx response into an ``ApiError``.
"""

import logging
from typing import Any

import httpx

from cuidador.config import settings

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


class ApiError(Exception):
    """Raised for non-2xx responses, transport failures and unusable bodies.

    ``status_code`` is 0 when the request produced no usable response: it
    never completed, or its body could not be decoded or validated.
    """

    def __init__(self, status_code: int, detail: str):
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"{status_code}: {detail}")


class AuthenticationError(ApiError):
    """Raised on 401: the token is missing, invalid, or expired."""

    pass


def _error_detail(response: httpx.Response) -> str:
    """Pull a readable message out of an error response."""
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict):
        detail = body.get("detail") or body.get("message")
        if detail:
            return detail if isinstance(detail, str) else str(detail)
    return response.text or response.reason_phrase


class ApiClient:
    """Async JSON client bound to one base URL and bearer token."""

    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.token = token
        self._client = httpx.AsyncClient(
            base_url=base_url or settings.api_base_url,
            transport=transport,
            timeout=timeout,
        )

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def request(
        self,
        method: str,
        url: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Send a request and return the decoded JSON body (None when empty).

        Raises:
            AuthenticationError: On 401.
            ApiError: On any other non-2xx response, a transport failure, or
                a 2xx body that is not JSON.
        """
        headers = {}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        try:
            response = await self._client.request(
                method, url, json=json, params=params, headers=headers
            )
        except httpx.HTTPError as exc:
            raise ApiError(0, str(exc) or exc.__class__.__name__) from exc

        if response.status_code == 401:
            logger.warning("%s %s rejected: not authenticated", method, url)
            raise AuthenticationError(401, _error_detail(response))
        if not response.is_success:
            raise ApiError(response.status_code, _error_detail(response))

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            logger.warning("%s %s returned a body that is not JSON", method, url)
            raise ApiError(0, f"Invalid JSON in response to {method} {url}") from exc

    async def get(self, url: str, *, params: dict[str, Any] | None = None) -> Any:
        return await self.request("GET", url, params=params)

    async def post(self, url: str, json: Any = None) -> Any:
        return await self.request("POST", url, json=json)

    async def put(self, url: str, json: Any = None) -> Any:
        return await self.request("PUT", url, json=json)

    async def delete(self, url: str) -> Any:
        return await self.request("DELETE", url)
