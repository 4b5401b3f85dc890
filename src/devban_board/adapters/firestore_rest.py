"""Firestore REST adapter - DocumentStore implementation over HTTPS.

Live queries are served by polling ``:runQuery`` and emitting a snapshot only
when the result set differs from the last one emitted, which gives listeners
the same full-replacement semantics as a streaming listener.
"""

from __future__ import annotations

import asyncio
import re
from typing import Any

import httpx

from devban_board.adapters.firestore_codec import (
    decode_document,
    encode_fields,
    encode_value,
    nest_dotted,
)
from devban_board.repositories.repository import (
    DELETE_FIELD,
    AlreadyExistsError,
    ArrayUnion,
    Document,
    DocumentStore,
    ErrorCallback,
    Increment,
    ListenerRegistration,
    NotFoundError,
    PermissionDeniedError,
    Query,
    SnapshotCallback,
    StoreError,
)
from devban_board.services.api.client import FirestoreClient
from devban_board.utils.logger import get_logger

_SIMPLE_SEGMENT = re.compile(r"^[A-Za-z_][A-Za-z_0-9]*$")


def quote_field_path(path: str) -> str:
    """Quote each dotted segment that is not a plain identifier.

    ``"members.user-1"`` becomes ``"members.`user-1`"``.
    """
    segments = []
    for segment in path.split("."):
        if _SIMPLE_SEGMENT.match(segment):
            segments.append(segment)
        else:
            escaped = segment.replace("\\", "\\\\").replace("`", "\\`")
            segments.append(f"`{escaped}`")
    return ".".join(segments)


def build_structured_query(query: Query) -> dict[str, Any]:
    structured: dict[str, Any] = {"from": [{"collectionId": query.collection}]}

    filters = [
        {
            "fieldFilter": {
                "field": {"fieldPath": quote_field_path(name)},
                "op": "EQUAL",
                "value": encode_value(value),
            }
        }
        for name, value in query.where
    ]
    if len(filters) == 1:
        structured["where"] = filters[0]
    elif filters:
        structured["where"] = {"compositeFilter": {"op": "AND", "filters": filters}}

    if query.order_by:
        structured["orderBy"] = [
            {
                "field": {"fieldPath": quote_field_path(name)},
                "direction": "DESCENDING" if descending else "ASCENDING",
            }
            for name, descending in query.order_by
        ]
    return structured


def build_update_write(document_name: str, fields: Document) -> dict[str, Any]:
    """Build one ``Write`` for a partial update.

    Plain values go into ``update`` and the mask; ``DELETE_FIELD`` goes into
    the mask only; ``Increment`` and ``ArrayUnion`` become field transforms.
    """
    plain: dict[str, Any] = {}
    mask: list[str] = []
    transforms: list[dict[str, Any]] = []

    for path, value in fields.items():
        quoted = quote_field_path(path)
        if value is DELETE_FIELD:
            mask.append(quoted)
        elif isinstance(value, Increment):
            transforms.append(
                {"fieldPath": quoted, "increment": encode_value(value.amount)}
            )
        elif isinstance(value, ArrayUnion):
            transforms.append(
                {
                    "fieldPath": quoted,
                    "appendMissingElements": {
                        "values": [encode_value(v) for v in value.values]
                    },
                }
            )
        else:
            plain[path] = value
            mask.append(quoted)

    write: dict[str, Any] = {
        "update": {"name": document_name, "fields": encode_fields(nest_dotted(plain))},
        "updateMask": {"fieldPaths": mask},
        "currentDocument": {"exists": True},
    }
    if transforms:
        write["updateTransforms"] = transforms
    return write


def _store_error(error: httpx.HTTPStatusError, resource: str) -> StoreError:
    status = error.response.status_code
    if status == 404:
        return NotFoundError(f"{resource} not found")
    if status == 409:
        return AlreadyExistsError(f"{resource} already exists")
    if status in (401, 403):
        return PermissionDeniedError(f"Permission denied for {resource}")
    return StoreError(f"{resource}: HTTP {status}")


class _PollingListener(ListenerRegistration):
    def __init__(
        self,
        store: FirestoreRestStore,
        query: Query,
        on_snapshot: SnapshotCallback,
        on_error: ErrorCallback,
        interval: float,
    ):
        self._store = store
        self._query = query
        self._on_snapshot = on_snapshot
        self._on_error = on_error
        self._interval = interval
        self._active = True
        self._last: list[Document] | None = None
        self._task = asyncio.get_running_loop().create_task(self._poll())

    @property
    def active(self) -> bool:
        return self._active

    def remove(self) -> None:
        if self._active:
            self._active = False
            self._task.cancel()

    async def _poll(self) -> None:
        logger = get_logger(__name__)
        while self._active:
            try:
                documents = await self._store.run_query(self._query)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.warning(
                    "query listener on %s stopped: %s", self._query.collection, e
                )
                if self._active:
                    self._active = False
                    self._on_error(e)
                return

            if self._active and documents != self._last:
                self._last = documents
                self._on_snapshot(documents)
            await asyncio.sleep(self._interval)


class FirestoreRestStore(DocumentStore):
    """Document store backed by the Firestore v1 REST API."""

    def __init__(self, client: FirestoreClient, poll_interval: float | None = None):
        self.client = client
        self.poll_interval = (
            poll_interval
            if poll_interval is not None
            else client.config.sync.poll_interval
        )

    @property
    def documents_root(self) -> str:
        """Resource name prefix of documents, as used inside request bodies."""
        firestore = self.client.config.firestore
        return (
            f"projects/{firestore.project_id}/databases/{firestore.database}/documents"
        )

    def subscribe(
        self,
        query: Query,
        on_snapshot: SnapshotCallback,
        on_error: ErrorCallback,
    ) -> ListenerRegistration:
        return _PollingListener(self, query, on_snapshot, on_error, self.poll_interval)

    async def run_query(self, query: Query) -> list[Document]:
        """Execute ``query`` once and return decoded documents in order."""
        try:
            response = await self.client.post(
                "/documents:runQuery",
                json={"structuredQuery": build_structured_query(query)},
            )
        except httpx.HTTPStatusError as e:
            raise _store_error(e, query.collection) from e
        return [
            decode_document(entry["document"])
            for entry in response.json()
            if "document" in entry
        ]

    async def get(self, collection: str, doc_id: str) -> Document:
        try:
            response = await self.client.get(f"/documents/{collection}/{doc_id}")
        except httpx.HTTPStatusError as e:
            raise _store_error(e, f"{collection}/{doc_id}") from e
        return decode_document(response.json())

    async def create(self, collection: str, doc_id: str, data: Document) -> None:
        try:
            await self.client.post(
                f"/documents/{collection}",
                params={"documentId": doc_id},
                json={"fields": encode_fields(data)},
            )
        except httpx.HTTPStatusError as e:
            raise _store_error(e, f"{collection}/{doc_id}") from e

    async def update_fields(
        self, collection: str, doc_id: str, fields: Document
    ) -> None:
        name = f"{self.documents_root}/{collection}/{doc_id}"
        try:
            await self.client.post(
                "/documents:commit",
                json={"writes": [build_update_write(name, fields)]},
            )
        except httpx.HTTPStatusError as e:
            raise _store_error(e, f"{collection}/{doc_id}") from e

    async def delete(self, collection: str, doc_id: str) -> None:
        try:
            await self.client.delete(f"/documents/{collection}/{doc_id}")
        except httpx.HTTPStatusError as e:
            raise _store_error(e, f"{collection}/{doc_id}") from e

    async def close(self) -> None:
        await self.client.close()
