"""
REST transport for entity collections.

``RemoteEntityClient`` is the boundary the data layer talks to.
``HttpEntityClient`` implements it on top of ``httpx.AsyncClient`` with the
usual REST conventions:

    GET    /<entity>          list (query params: pagination, search, extras)
    GET    /<entity>/<id>     single record
    POST   /<entity>          create
    PUT    /<entity>/<id>     update
    DELETE /<entity>/<id>     delete
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol

import httpx

from restadmin.errors import ConfigurationError, RecordNotFound, TransportFailure
from restadmin.runtime.logging import get_client_logger, log_with_context

if TYPE_CHECKING:
    from restadmin.settings import RestAdminSettings

Interceptor = Callable[[Any, str, str], Any]
Record = dict[str, Any]

logger = get_client_logger()


@dataclass
class EntityPage:
    """One page of raw records plus the response metadata."""

    records: list[Record]
    headers: Mapping[str, str] = field(default_factory=dict)
    status_code: int = 200


class RemoteEntityClient(Protocol):
    """Transport used by the data layer."""

    async def fetch_page(
        self,
        entity_name: str,
        params: Mapping[str, Any],
        interceptor: Interceptor | None = None,
    ) -> EntityPage: ...

    async def fetch_one(
        self,
        entity_name: str,
        entity_id: Any,
        params: Mapping[str, Any],
        interceptor: Interceptor | None = None,
    ) -> Record: ...

    async def create(self, entity_name: str, record: Mapping[str, Any]) -> Record: ...

    async def update(
        self, entity_name: str, entity_id: Any, record: Mapping[str, Any]
    ) -> Record: ...

    async def delete(self, entity_name: str, entity_id: Any) -> None: ...


class HttpEntityClient:
    """
    httpx-based entity client.

    Usage:
        async with HttpEntityClient("https://api.example.com") as client:
            page = await client.fetch_page("cats", {"page": 1})
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        headers: Mapping[str, str] | None = None,
        client: httpx.AsyncClient | None = None,
        **httpx_kwargs: Any,
    ):
        """
        Initialize the client.

        Args:
            base_url: Base URL of the REST backend
            timeout: Request timeout in seconds
            headers: Headers sent with every request
            client: Pre-built httpx client (not closed by ``aclose``)
            **httpx_kwargs: Additional kwargs for httpx.AsyncClient
        """
        self.base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            headers=dict(headers or {}),
            **httpx_kwargs,
        )

    @classmethod
    def from_settings(cls, settings: RestAdminSettings, **kwargs: Any) -> HttpEntityClient:
        """Build a client from ``RestAdminSettings``."""
        if not settings.api_url:
            raise ConfigurationError("No API URL configured (RESTADMIN_API_URL)")
        return cls(settings.api_url, timeout=settings.http_timeout, **kwargs)

    async def _request(
        self,
        method: str,
        entity_name: str,
        path: str,
        **kwargs: Any,
    ) -> httpx.Response:
        log_with_context(
            logger,
            logging.DEBUG,
            f"{method} {path}",
            entity=entity_name,
            params=dict(kwargs.get("params") or {}),
        )
        try:
            response = await self._client.request(method, path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            error_cls = RecordNotFound if status == 404 else TransportFailure
            raise error_cls(
                entity_name,
                f"{method} {path} failed with status {status}",
                status_code=status,
            ) from e
        except httpx.HTTPError as e:
            raise TransportFailure(entity_name, f"{method} {path} failed: {e}") from e
        return response

    @staticmethod
    def _body(response: httpx.Response, entity_name: str) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise TransportFailure(
                entity_name,
                f"Response for {entity_name} is not JSON",
                status_code=response.status_code,
            ) from e

    @staticmethod
    def _path(entity_name: str, entity_id: Any = None) -> str:
        if entity_id is None:
            return f"/{entity_name}"
        return f"/{entity_name}/{entity_id}"

    async def fetch_page(
        self,
        entity_name: str,
        params: Mapping[str, Any],
        interceptor: Interceptor | None = None,
    ) -> EntityPage:
        """Fetch one page of an entity collection."""
        response = await self._request(
            "GET", entity_name, self._path(entity_name), params=dict(params)
        )
        data = self._body(response, entity_name)
        if interceptor:
            data = interceptor(data, "getList", entity_name)
        if data is None:
            data = []
        if not isinstance(data, list):
            raise TransportFailure(
                entity_name,
                f"Expected a list of {entity_name} records, got {type(data).__name__}",
                status_code=response.status_code,
            )
        if not all(isinstance(record, dict) for record in data):
            raise TransportFailure(
                entity_name,
                f"Expected {entity_name} records to be objects",
                status_code=response.status_code,
            )
        return EntityPage(
            records=data,
            headers=response.headers,
            status_code=response.status_code,
        )

    async def fetch_one(
        self,
        entity_name: str,
        entity_id: Any,
        params: Mapping[str, Any],
        interceptor: Interceptor | None = None,
    ) -> Record:
        """Fetch a single record."""
        response = await self._request(
            "GET", entity_name, self._path(entity_name, entity_id), params=dict(params)
        )
        data = self._body(response, entity_name)
        if interceptor:
            data = interceptor(data, "get", entity_name)
        if not isinstance(data, dict):
            raise TransportFailure(
                entity_name,
                f"Expected a {entity_name} record, got {type(data).__name__}",
                status_code=response.status_code,
            )
        return data

    async def create(self, entity_name: str, record: Mapping[str, Any]) -> Record:
        """POST a new record and return the backend's version of it."""
        response = await self._request(
            "POST", entity_name, self._path(entity_name), json=dict(record)
        )
        return self._body(response, entity_name) or dict(record)

    async def update(
        self, entity_name: str, entity_id: Any, record: Mapping[str, Any]
    ) -> Record:
        """PUT a record and return the backend's version of it."""
        response = await self._request(
            "PUT",
            entity_name,
            self._path(entity_name, entity_id),
            json=dict(record),
        )
        return self._body(response, entity_name) or dict(record)

    async def delete(self, entity_name: str, entity_id: Any) -> None:
        """DELETE a record."""
        await self._request("DELETE", entity_name, self._path(entity_name, entity_id))

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> HttpEntityClient:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()
