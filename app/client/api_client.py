"""HTTP access to the survey backend."""
import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from app.client.errors import ApiError, SyncAuthError, SyncTransportError
from app.schemas.response import SyncResultResponse

logger = logging.getLogger(__name__)

API_PREFIX = "/api"


def _detail(response: httpx.Response) -> Optional[str]:
    try:
        body = response.json()
    except ValueError:
        return response.text or None
    if isinstance(body, dict) and "detail" in body:
        detail = body["detail"]
        return detail if isinstance(detail, str) else str(detail)
    return None


def _json(response: httpx.Response) -> Any:
    """Decoded body of a successful reply."""
    try:
        return response.json()
    except ValueError as exc:
        raise SyncTransportError(
            f"{response.request.method} {response.request.url.path}: undecodable reply"
        ) from exc


class SurveyApiClient:
    """
    Thin async wrapper over the REST API.

    Every failure is mapped onto the client error hierarchy:
    connection errors, timeouts and 5xx become ``SyncTransportError``,
    401/403 become ``SyncAuthError`` and other 4xx become ``ApiError``.
    A success reply that is not the expected JSON, such as a captive
    portal page, is also a ``SyncTransportError``.
    """

    def __init__(self, base_url: str, timeout: float = 10.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self._client = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "SurveyApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def _request(self, method: str, path: str, token: Optional[str] = None,
                       **kwargs) -> httpx.Response:
        headers = kwargs.pop("headers", {})
        if token:
            headers["Authorization"] = f"Bearer {token}"

        try:
            response = await self._client.request(method, path, headers=headers, **kwargs)
        except httpx.TransportError as exc:
            logger.info("%s %s failed: %s", method, path, exc)
            raise SyncTransportError(f"{method} {path}: {exc}") from exc

        if response.status_code >= 500:
            raise SyncTransportError(f"{method} {path}: server error {response.status_code}")
        if response.status_code in (401, 403):
            raise SyncAuthError(_detail(response) or f"HTTP {response.status_code}")
        if response.status_code >= 400:
            raise ApiError(response.status_code, _detail(response))
        return response

    async def health(self) -> bool:
        try:
            await self._request("GET", f"{API_PREFIX}/health")
        except (SyncTransportError, ApiError):
            return False
        return True

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        response = await self._request(
            "POST", f"{API_PREFIX}/auth/login",
            data={"username": email, "password": password},
        )
        return _json(response)

    async def get_json(self, path: str, token: Optional[str] = None) -> Any:
        response = await self._request("GET", path, token=token)
        return _json(response)

    async def submit_response(self, candidate: Dict[str, Any], token: str) -> Dict[str, Any]:
        response = await self._request("POST", f"{API_PREFIX}/survey-responses", token=token, json=candidate)
        return _json(response)

    async def sync_batch(self, candidates: List[Dict[str, Any]], token: str) -> SyncResultResponse:
        response = await self._request(
            "POST", f"{API_PREFIX}/survey-responses/sync", token=token,
            json={"responses": candidates},
        )
        body = _json(response)
        try:
            return SyncResultResponse.model_validate(body)
        except ValidationError as exc:
            raise SyncTransportError(f"Unexpected sync reply: {exc.error_count()} invalid fields") from exc
