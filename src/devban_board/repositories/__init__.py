"""Repository interfaces."""

from devban_board.repositories.repository import (
    DELETE_FIELD,
    AlreadyExistsError,
    ArrayUnion,
    Document,
    DocumentStore,
    Increment,
    ListenerRegistration,
    NotFoundError,
    PermissionDeniedError,
    Query,
    StoreError,
)

__all__ = [
    "DocumentStore",
    "ListenerRegistration",
    "Query",
    "Document",
    "DELETE_FIELD",
    "Increment",
    "ArrayUnion",
    "StoreError",
    "NotFoundError",
    "AlreadyExistsError",
    "PermissionDeniedError",
]
