"""In-process document store.

Keeps documents in dictionaries and evaluates queries itself. Every write
recomputes the result set of each live query it touches and delivers the
full, ordered snapshot on the event loop, the same way a realtime backend
pushes query results to its listeners.
"""

from __future__ import annotations

import asyncio
import copy
from typing import Any

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
    Query,
    SnapshotCallback,
)


def _sort_key(value: Any) -> tuple[bool, Any]:
    # Missing values sort before present ones, as in Firestore.
    return (value is not None, value)


def evaluate_query(query: Query, documents: dict[str, Document]) -> list[Document]:
    """Filter and order documents the way the remote store would.

    Ties on every ``order_by`` field fall back to ascending document id.
    """
    matching = [
        (doc_id, doc) for doc_id, doc in documents.items() if query.matches(doc)
    ]
    matching.sort(key=lambda item: item[0])
    for name, descending in reversed(query.order_by):
        matching.sort(key=lambda item: _sort_key(item[1].get(name)), reverse=descending)
    return [copy.deepcopy(doc) for _, doc in matching]


def apply_update(document: Document, fields: Document) -> None:
    """Apply a partial update in place, honouring dotted paths and sentinels."""
    for path, value in fields.items():
        *parents, leaf = path.split(".")
        target = document
        for part in parents:
            child = target.get(part)
            if not isinstance(child, dict):
                child = {}
                target[part] = child
            target = child

        if value is DELETE_FIELD:
            target.pop(leaf, None)
        elif isinstance(value, Increment):
            current = target.get(leaf)
            if not isinstance(current, (int, float)) or isinstance(current, bool):
                current = 0
            target[leaf] = current + value.amount
        elif isinstance(value, ArrayUnion):
            current = target.get(leaf)
            items = list(current) if isinstance(current, list) else []
            for item in value.values:
                if item not in items:
                    items.append(item)
            target[leaf] = items
        else:
            target[leaf] = copy.deepcopy(value)


class _MemoryListener(ListenerRegistration):
    def __init__(
        self,
        store: InMemoryDocumentStore,
        query: Query,
        on_snapshot: SnapshotCallback,
        on_error: ErrorCallback,
        loop: asyncio.AbstractEventLoop | None,
    ):
        self._store = store
        self.query = query
        self._on_snapshot = on_snapshot
        self._on_error = on_error
        self._loop = loop
        self._active = True
        self._last: list[Document] | None = None

    @property
    def active(self) -> bool:
        return self._active

    def remove(self) -> None:
        if self._active:
            self._active = False
            self._store._listeners.discard(self)

    def push(self, snapshot: list[Document]) -> None:
        if snapshot == self._last:
            return
        self._last = snapshot
        self._dispatch(self._deliver, snapshot)

    def fail(self, error: Exception) -> None:
        self._store._listeners.discard(self)
        self._dispatch(self._deliver_error, error)

    def _dispatch(self, callback, arg) -> None:
        if self._loop is None:
            callback(arg)
        else:
            self._loop.call_soon(callback, arg)

    def _deliver(self, snapshot: list[Document]) -> None:
        if self._active:
            self._on_snapshot(snapshot)

    def _deliver_error(self, error: Exception) -> None:
        if self._active:
            self._active = False
            self._on_error(error)


class InMemoryDocumentStore(DocumentStore):
    """Document store backed by process memory.

    Snapshots are scheduled with ``loop.call_soon`` when a loop is running,
    so subscribers never receive a callback re-entrantly from ``subscribe``
    or from the write that caused it. Without a running loop they are
    delivered synchronously.
    """

    def __init__(self, collections: dict[str, dict[str, Document]] | None = None):
        self._collections: dict[str, dict[str, Document]] = {
            name: {doc_id: copy.deepcopy(doc) for doc_id, doc in docs.items()}
            for name, docs in (collections or {}).items()
        }
        self._listeners: set[_MemoryListener] = set()

    def _collection(self, name: str) -> dict[str, Document]:
        return self._collections.setdefault(name, {})

    def _notify(self, collection: str) -> None:
        documents = self._collection(collection)
        for listener in list(self._listeners):
            if listener.query.collection == collection:
                listener.push(evaluate_query(listener.query, documents))

    def subscribe(
        self,
        query: Query,
        on_snapshot: SnapshotCallback,
        on_error: ErrorCallback,
    ) -> ListenerRegistration:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None
        listener = _MemoryListener(self, query, on_snapshot, on_error, loop)
        self._listeners.add(listener)
        listener.push(evaluate_query(query, self._collection(query.collection)))
        return listener

    def fail_listeners(self, collection: str, error: Exception) -> None:
        """Report ``error`` to every live listener on ``collection``.

        Mirrors a backend fault on open listeners: each receives one error
        and is then detached.
        """
        for listener in list(self._listeners):
            if listener.query.collection == collection:
                listener.fail(error)

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    async def get(self, collection: str, doc_id: str) -> Document:
        documents = self._collection(collection)
        if doc_id not in documents:
            raise NotFoundError(f"{collection}/{doc_id} not found")
        return copy.deepcopy(documents[doc_id])

    async def create(self, collection: str, doc_id: str, data: Document) -> None:
        documents = self._collection(collection)
        if doc_id in documents:
            raise AlreadyExistsError(f"{collection}/{doc_id} already exists")
        documents[doc_id] = copy.deepcopy(data)
        self._notify(collection)

    async def update_fields(
        self, collection: str, doc_id: str, fields: Document
    ) -> None:
        documents = self._collection(collection)
        if doc_id not in documents:
            raise NotFoundError(f"{collection}/{doc_id} not found")
        apply_update(documents[doc_id], fields)
        self._notify(collection)

    async def delete(self, collection: str, doc_id: str) -> None:
        documents = self._collection(collection)
        if documents.pop(doc_id, None) is not None:
            self._notify(collection)

    def documents(self, collection: str) -> dict[str, Document]:
        """Copy of every document in ``collection``, keyed by id."""
        return copy.deepcopy(self._collection(collection))
