"""Message store backed by an HTTP API."""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx

from .models import Fragment, Message, MessageRole, MessageType
from .store import PersistenceError, SortOrder

logger = logging.getLogger(__name__)


class HttpMessageStore:
    """MessageStore talking to ``{base_url}/projects/{project_id}/messages``.

    ``GET`` lists messages (``limit`` and ``order`` query params, response
    ``{"messages": [...]}``) and ``POST`` creates one, returning it. HTTP and
    transport errors are raised as PersistenceError.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self._client = client
        self._owns_client = client is None
        self._timeout = timeout

    def _get_headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def _url(self, project_id: str) -> str:
        return f"{self.base_url}/projects/{quote(project_id, safe='')}/messages"

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self._timeout, connect=5.0))
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> HttpMessageStore:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def _request(self, method: str, url: str, **kwargs) -> dict[str, Any]:
        try:
            response = await self._get_client().request(
                method, url, headers=self._get_headers(), **kwargs
            )
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as e:
            raise PersistenceError(
                f"{method} {url} failed with status {e.response.status_code}: {e.response.text}"
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise PersistenceError(f"{method} {url} failed: {e}") from e

        if not isinstance(body, dict):
            raise PersistenceError(
                f"{method} {url} returned {type(body).__name__}, expected a JSON object"
            )
        return body

    async def find_messages(
        self, project_id: str, limit: int, order: SortOrder = "desc"
    ) -> list[Message]:
        result = await self._request(
            "GET", self._url(project_id), params={"limit": limit, "order": order}
        )
        try:
            return [Message.model_validate(item) for item in result.get("messages") or []]
        except (TypeError, ValueError) as e:
            raise PersistenceError(f"Malformed message list for project {project_id}: {e}") from e

    async def create_message(
        self,
        project_id: str,
        content: str,
        role: MessageRole,
        type: MessageType,
        fragment: Fragment | None = None,
    ) -> Message:
        payload: dict[str, Any] = {
            "content": content,
            "role": role.value,
            "type": type.value,
            "fragment": fragment.model_dump(mode="json") if fragment else None,
        }
        result = await self._request("POST", self._url(project_id), json=payload)
        try:
            return Message.model_validate(result)
        except ValueError as e:
            raise PersistenceError(f"Malformed message for project {project_id}: {e}") from e
