"""Adapters - DocumentStore implementations for the supported backends.

- memory: in-process store, used by tests and as the base of ``local``
- local_file: in-process store persisted to a JSON file
- firestore_rest: Firestore over its REST API
"""

from __future__ import annotations

from pathlib import Path

from devban_board.models.config_models import AppConfig
from devban_board.repositories.repository import DocumentStore

from .memory import InMemoryDocumentStore
from .local_file import LocalFileDocumentStore


def create_document_store(config: AppConfig, data_dir: Path) -> DocumentStore:
    """Build the document store for the configured backend."""
    if config.backend == "firestore":
        from .firestore_rest import FirestoreRestStore
        from devban_board.services.api.client import get_client

        return FirestoreRestStore(get_client(config))
    return LocalFileDocumentStore(
        Path(config.local.path or data_dir / "board.json"),
        poll_interval=config.sync.poll_interval,
    )


__all__ = [
    "InMemoryDocumentStore",
    "LocalFileDocumentStore",
    "create_document_store",
]
