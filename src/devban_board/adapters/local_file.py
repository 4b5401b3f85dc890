"""Local document store persisted to a JSON file.

Documents are kept in memory by InMemoryDocumentStore and written back to
disk after every write, using the Firestore typed-value encoding so that
timestamps survive the round trip.

Several processes may share one file. While listeners are open the store
polls the file's modification stamp and, when another process has replaced
it, reloads and pushes fresh snapshots. Each write first picks up such
changes, then rewrites the whole file.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

from devban_board.adapters.firestore_codec import decode_fields, encode_fields
from devban_board.adapters.memory import InMemoryDocumentStore
from devban_board.repositories.repository import (
    Document,
    ErrorCallback,
    ListenerRegistration,
    Query,
    SnapshotCallback,
)
from devban_board.utils.logger import get_logger

DEFAULT_POLL_INTERVAL = 1.0

FileStamp = tuple[int, int] | None


class LocalFileDocumentStore(InMemoryDocumentStore):
    """In-memory store that loads from and saves to ``path``."""

    def __init__(self, path: Path, poll_interval: float = DEFAULT_POLL_INTERVAL):
        self.path = Path(path)
        self.poll_interval = poll_interval
        self._stamp: FileStamp = None
        self._watcher: asyncio.Task | None = None
        super().__init__(self._load())

    def _file_stamp(self) -> FileStamp:
        try:
            stat = self.path.stat()
        except FileNotFoundError:
            return None
        return (stat.st_mtime_ns, stat.st_size)

    def _load(self) -> dict[str, dict[str, Document]]:
        self._stamp = self._file_stamp()
        if self._stamp is None:
            return {}
        with open(self.path, encoding="utf-8") as f:
            raw = json.load(f)
        return {
            collection: {doc_id: decode_fields(fields) for doc_id, fields in docs.items()}
            for collection, docs in raw.items()
        }

    def _save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        raw = {
            collection: {doc_id: encode_fields(doc) for doc_id, doc in docs.items()}
            for collection, docs in self._collections.items()
        }
        tmp = self.path.with_suffix(".tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(raw, f, indent=2)
        tmp.replace(self.path)
        self._stamp = self._file_stamp()

    def _notify(self, collection: str) -> None:
        self._save()
        super()._notify(collection)

    def reload_if_changed(self) -> bool:
        """Reload the file if another process replaced it since we last saw it.

        Listeners receive new snapshots for whatever changed.

        Returns:
            True if the file was reloaded
        """
        if self._file_stamp() == self._stamp:
            return False
        self._collections = self._load()
        for collection in {listener.query.collection for listener in self._listeners}:
            super()._notify(collection)
        return True

    def subscribe(
        self,
        query: Query,
        on_snapshot: SnapshotCallback,
        on_error: ErrorCallback,
    ) -> ListenerRegistration:
        registration = super().subscribe(query, on_snapshot, on_error)
        self._start_watcher()
        return registration

    def _start_watcher(self) -> None:
        if self._watcher is not None and not self._watcher.done():
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No loop to poll from; only this process's writes are seen
            return
        self._watcher = loop.create_task(self._watch())

    async def _watch(self) -> None:
        logger = get_logger(__name__)
        while self._listeners:
            await asyncio.sleep(self.poll_interval)
            if not self._listeners:
                break
            try:
                if self.reload_if_changed():
                    logger.debug("reloaded %s after an outside change", self.path)
            except (OSError, ValueError, KeyError) as e:
                logger.warning("cannot reload %s: %s", self.path, e)
                for collection in {lsn.query.collection for lsn in self._listeners}:
                    self.fail_listeners(collection, e)
                return

    async def get(self, collection: str, doc_id: str) -> Document:
        self.reload_if_changed()
        return await super().get(collection, doc_id)

    async def create(self, collection: str, doc_id: str, data: Document) -> None:
        self.reload_if_changed()
        await super().create(collection, doc_id, data)

    async def update_fields(
        self, collection: str, doc_id: str, fields: Document
    ) -> None:
        self.reload_if_changed()
        await super().update_fields(collection, doc_id, fields)

    async def delete(self, collection: str, doc_id: str) -> None:
        self.reload_if_changed()
        await super().delete(collection, doc_id)

    async def close(self) -> None:
        """Stop watching the file."""
        if self._watcher is not None:
            self._watcher.cancel()
            await asyncio.gather(self._watcher, return_exceptions=True)
            self._watcher = None
