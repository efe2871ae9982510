"""HTTP client for the remote visit service."""

from __future__ import annotations

import logging
from typing import Protocol

import httpx
from pydantic import TypeAdapter, ValidationError

from ...config import settings
from ...errors import DecodingError, GatewayUnavailable, InvalidResponse, InvalidURL, ServerError
from ...schemas.visits import VisitPayload

logger = logging.getLogger(__name__)

_PAYLOAD_LIST = TypeAdapter(list[VisitPayload])


class RemoteVisitGateway(Protocol):
    async def submit_visit(self, payload: VisitPayload) -> None: ...

    async def fetch_recent_visits(self, limit: int) -> list[VisitPayload]: ...


class HttpVisitGateway:
    """Submits visits with ``POST {base_url}`` and lists them with ``GET {base_url}?limit=N``.

    Any 2xx answer is a success. Other statuses raise ``ServerError`` carrying the
    response body. No retries are attempted here.
    """

    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url or settings.gateway_base_url
        if not self.base_url:
            raise InvalidURL()
        try:
            url = httpx.URL(self.base_url)
        except httpx.InvalidURL as exc:
            raise InvalidURL(f"Invalid visit service URL '{self.base_url}': {exc}") from exc
        if url.scheme not in ("http", "https") or not url.host:
            raise InvalidURL(f"Invalid visit service URL '{self.base_url}'.")
        self.token = token if token is not None else settings.gateway_token
        self.timeout = timeout if timeout is not None else settings.gateway_timeout_seconds
        self._client = client

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is not None:
            return self._client
        return httpx.AsyncClient(timeout=httpx.Timeout(self.timeout, connect=10.0))

    async def _send(self, method: str, **kwargs) -> httpx.Response:
        client = self._get_client()
        try:
            response = await client.request(method, self.base_url, headers=self._headers(), **kwargs)
        except httpx.InvalidURL as exc:
            raise InvalidURL(f"Invalid visit service URL '{self.base_url}': {exc}") from exc
        except httpx.TimeoutException as exc:
            logger.warning(f"Visit service request timed out: {exc}")
            raise GatewayUnavailable(f"The visit service at {self.base_url} timed out.") from exc
        except httpx.HTTPError as exc:
            logger.warning(f"Visit service request failed: {exc}")
            raise GatewayUnavailable(f"Failed to connect to the visit service at {self.base_url}: {exc}") from exc
        finally:
            if client is not self._client:
                await client.aclose()
        self._validate(response)
        return response

    @staticmethod
    def _validate(response: httpx.Response) -> None:
        if not isinstance(response, httpx.Response):
            raise InvalidResponse()
        if response.is_success:
            return
        message = response.text or "Unknown error"
        logger.warning(f"Visit service answered {response.status_code}: {message}")
        raise ServerError(message, status_code=response.status_code)

    async def submit_visit(self, payload: VisitPayload) -> None:
        await self._send("POST", json=payload.model_dump())
        logger.debug(f"Submitted visit {payload.visit_id} for clients {payload.client_ids}")

    async def fetch_recent_visits(self, limit: int) -> list[VisitPayload]:
        response = await self._send("GET", params={"limit": str(limit)})
        try:
            return _PAYLOAD_LIST.validate_json(response.content)
        except ValidationError as exc:
            raise DecodingError(f"Could not decode recent visits: {exc.error_count()} errors") from exc

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
