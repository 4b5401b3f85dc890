"""Document store abstraction layer.

This module defines the port every storage backend implements, following the
hexagonal architecture (Ports & Adapters) pattern. The board never executes
queries or persists data itself: filtering, ordering, live listening and
per-document atomicity all belong to the store behind this interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

Document = dict[str, Any]
SnapshotCallback = Callable[[list[Document]], None]
ErrorCallback = Callable[[Exception], None]


class StoreError(Exception):
    """Base class for document store failures."""


class NotFoundError(StoreError):
    """The addressed document does not exist."""


class AlreadyExistsError(StoreError):
    """A document with the same id already exists."""


class PermissionDeniedError(StoreError):
    """The store rejected the caller's credentials."""


class _DeleteField:
    def __repr__(self) -> str:
        return "DELETE_FIELD"


DELETE_FIELD = _DeleteField()
"""Update value that removes the field from the document."""


@dataclass(frozen=True)
class Increment:
    """Update value that atomically adds ``amount`` to a numeric field."""

    amount: int | float


@dataclass(frozen=True)
class ArrayUnion:
    """Update value that appends the missing ``values`` to an array field."""

    values: tuple[Any, ...]

    def __init__(self, values):
        object.__setattr__(self, "values", tuple(values))


@dataclass(frozen=True)
class Query:
    """Equality-filtered, ordered query over one collection.

    Attributes:
        collection: Collection id, e.g. ``"tasks"``
        where: ``(field, value)`` pairs that must all be equal
        order_by: ``(field, descending)`` pairs, most significant first
    """

    collection: str
    where: tuple[tuple[str, Any], ...] = field(default_factory=tuple)
    order_by: tuple[tuple[str, bool], ...] = field(default_factory=tuple)

    def matches(self, document: Document) -> bool:
        return all(document.get(name) == value for name, value in self.where)


class ListenerRegistration(ABC):
    """Handle for a live query subscription."""

    @abstractmethod
    def remove(self) -> None:
        """Stop delivering snapshots.

        Must be synchronous and idempotent: once it returns, the snapshot and
        error callbacks are never invoked again.
        """
        raise NotImplementedError(
            "ListenerRegistration.remove() must be implemented by adapter"
        )

    @property
    @abstractmethod
    def active(self) -> bool:
        raise NotImplementedError


class DocumentStore(ABC):
    """Abstract base class for the remote document database.

    Every write is independent; concurrency control is the store's
    per-document atomicity with last-write-wins on each field.
    """

    @abstractmethod
    def subscribe(
        self,
        query: Query,
        on_snapshot: SnapshotCallback,
        on_error: ErrorCallback,
    ) -> ListenerRegistration:
        """Open a live subscription.

        Args:
            query: Query to evaluate
            on_snapshot: Called with the complete, ordered result set each
                time it changes, starting with the current result
            on_error: Called at most once if the listener fails; no further
                snapshots follow an error

        Returns:
            Registration whose ``remove()`` cancels the subscription

        Raises:
            NotImplementedError: Must be implemented by concrete adapter
        """
        raise NotImplementedError(
            "DocumentStore.subscribe() must be implemented by adapter"
        )

    @abstractmethod
    async def get(self, collection: str, doc_id: str) -> Document:
        """Fetch one document.

        Raises:
            NotImplementedError: Must be implemented by concrete adapter
            NotFoundError: If the document does not exist
        """
        raise NotImplementedError("DocumentStore.get() must be implemented by adapter")

    @abstractmethod
    async def create(self, collection: str, doc_id: str, data: Document) -> None:
        """Create a document with a caller-chosen id.

        Raises:
            NotImplementedError: Must be implemented by concrete adapter
            AlreadyExistsError: If a document with ``doc_id`` exists
        """
        raise NotImplementedError(
            "DocumentStore.create() must be implemented by adapter"
        )

    @abstractmethod
    async def update_fields(
        self, collection: str, doc_id: str, fields: Document
    ) -> None:
        """Partially update a document, leaving unnamed fields untouched.

        Dotted keys (``"members.uid"``) address nested map entries. Values may
        be ``DELETE_FIELD``, ``Increment`` or ``ArrayUnion``.

        Raises:
            NotImplementedError: Must be implemented by concrete adapter
            NotFoundError: If the document does not exist
        """
        raise NotImplementedError(
            "DocumentStore.update_fields() must be implemented by adapter"
        )

    @abstractmethod
    async def delete(self, collection: str, doc_id: str) -> None:
        """Delete a document. Deleting a missing document is not an error.

        Raises:
            NotImplementedError: Must be implemented by concrete adapter
        """
        raise NotImplementedError(
            "DocumentStore.delete() must be implemented by adapter"
        )

    async def close(self) -> None:
        """Release network resources held by the adapter."""
        return None
