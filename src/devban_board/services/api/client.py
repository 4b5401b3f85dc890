"""HTTP client for the Firestore REST API."""

from __future__ import annotations

import asyncio
from typing import Any

import httpx

from devban_board.models.config_models import AppConfig
from devban_board.services.config_service import get_config_service


class FirestoreClient:
    """HTTP client bound to one Firestore database.

    Paths are relative to ``{endpoint}/projects/{project}/databases/{db}``,
    e.g. ``/documents/tasks/abc`` or ``/documents:runQuery``.
    """

    def __init__(self, config: AppConfig | None = None):
        self.config = config or get_config_service().config
        firestore = self.config.firestore
        if not firestore.project_id:
            raise ValueError(
                "firestore.project_id is not set; run 'devban config set "
                "firestore.project_id <id>'"
            )
        self.base_url = (
            f"{firestore.endpoint}/projects/{firestore.project_id}"
            f"/databases/{firestore.database}"
        )
        self.timeout = firestore.timeout
        self._client: httpx.AsyncClient | None = None

    def _get_headers(self) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        token = self.config.session.token
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                follow_redirects=True,
            )
        # Token may have been refreshed since the client was built
        self._client.headers.update(self._get_headers())
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> FirestoreClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | list[tuple[str, Any]] | None = None,
        retry: int | None = None,
    ) -> httpx.Response:
        """Make an HTTP request, retrying server and transport errors.

        Client errors (4xx) are raised immediately.
        """
        if retry is None:
            retry = self.config.firestore.retry

        client = await self._get_client()
        url = path if path.startswith("/") else f"/{path}"

        last_exception: Exception | None = None
        for attempt in range(retry + 1):
            try:
                response = await client.request(
                    method=method,
                    url=url,
                    json=json,
                    params=params,
                )
                response.raise_for_status()
                return response
            except httpx.HTTPStatusError as e:
                if 400 <= e.response.status_code < 500:
                    raise
                last_exception = e
            except httpx.RequestError as e:
                last_exception = e

            if attempt < retry:
                await asyncio.sleep(2**attempt)

        if last_exception:
            raise last_exception
        raise RuntimeError("Request failed after all retries")

    async def get(
        self, path: str, *, params: dict[str, Any] | None = None
    ) -> httpx.Response:
        return await self.request("GET", path, params=params)

    async def post(
        self,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | list[tuple[str, Any]] | None = None,
    ) -> httpx.Response:
        return await self.request("POST", path, json=json, params=params)

    async def delete(self, path: str) -> httpx.Response:
        return await self.request("DELETE", path)


def get_client(config: AppConfig | None = None) -> FirestoreClient:
    """Get a Firestore client for the configured project."""
    return FirestoreClient(config)
