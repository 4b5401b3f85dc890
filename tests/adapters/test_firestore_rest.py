"""Unit tests for the Firestore REST adapter, against httpx.MockTransport."""

from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from devban_board.adapters.firestore_rest import (
    FirestoreRestStore,
    build_structured_query,
    build_update_write,
    quote_field_path,
)
from devban_board.models.config_models import AppConfig
from devban_board.repositories.repository import (
    DELETE_FIELD,
    AlreadyExistsError,
    ArrayUnion,
    Increment,
    NotFoundError,
    PermissionDeniedError,
    Query,
    StoreError,
)
from devban_board.services.api.client import FirestoreClient

DOCS = "projects/demo/databases/(default)/documents"


def _make_store(handler, poll_interval: float = 0.01) -> FirestoreRestStore:
    config = AppConfig(backend="firestore")
    config.firestore.project_id = "demo"
    config.firestore.retry = 0
    config.session.token = "tok"
    client = FirestoreClient(config)
    client._client = httpx.AsyncClient(
        base_url=client.base_url, transport=httpx.MockTransport(handler)
    )
    return FirestoreRestStore(client, poll_interval=poll_interval)


def _document(doc_id: str, **fields) -> dict:
    return {
        "name": f"{DOCS}/tasks/{doc_id}",
        "fields": {key: {"stringValue": value} for key, value in fields.items()},
    }


async def _wait_for(predicate, timeout: float = 2.0) -> None:
    async def poll():
        while not predicate():
            await asyncio.sleep(0.005)

    await asyncio.wait_for(poll(), timeout=timeout)


# ---------------------------------------------------------------------------
# Request builders
# ---------------------------------------------------------------------------


def test_quote_field_path():
    assert quote_field_path("title") == "title"
    assert quote_field_path("members.user-1") == "members.`user-1`"
    assert quote_field_path("members.1abc") == "members.`1abc`"


def test_structured_query_single_filter():
    structured = build_structured_query(Query("tasks", where=(("team_id", "t1"),)))
    assert structured["from"] == [{"collectionId": "tasks"}]
    assert structured["where"]["fieldFilter"]["op"] == "EQUAL"
    assert "orderBy" not in structured


def test_structured_query_column():
    query = Query(
        "tasks",
        where=(("team_id", "t1"), ("status", "todo")),
        order_by=(("is_pinned", True), ("created_date", True)),
    )
    structured = build_structured_query(query)

    filters = structured["where"]["compositeFilter"]["filters"]
    assert structured["where"]["compositeFilter"]["op"] == "AND"
    assert [f["fieldFilter"]["field"]["fieldPath"] for f in filters] == [
        "team_id",
        "status",
    ]
    assert filters[1]["fieldFilter"]["value"] == {"stringValue": "todo"}
    assert structured["orderBy"] == [
        {"field": {"fieldPath": "is_pinned"}, "direction": "DESCENDING"},
        {"field": {"fieldPath": "created_date"}, "direction": "DESCENDING"},
    ]


def test_update_write_names_only_given_fields():
    write = build_update_write(f"{DOCS}/tasks/a", {"status": "completed"})
    assert write["updateMask"] == {"fieldPaths": ["status"]}
    assert write["update"]["fields"] == {"status": {"stringValue": "completed"}}
    assert write["currentDocument"] == {"exists": True}
    assert "updateTransforms" not in write


def test_update_write_sentinels():
    write = build_update_write(
        f"{DOCS}/teams/t1",
        {
            "members.user-2": DELETE_FIELD,
            "members.u3": "member",
            "exp": Increment(10),
            "invite_codes": ArrayUnion(["c1"]),
        },
    )
    assert write["updateMask"] == {"fieldPaths": ["members.`user-2`", "members.u3"]}
    assert write["update"]["fields"] == {
        "members": {"mapValue": {"fields": {"u3": {"stringValue": "member"}}}}
    }
    assert write["updateTransforms"] == [
        {"fieldPath": "exp", "increment": {"integerValue": "10"}},
        {
            "fieldPath": "invite_codes",
            "appendMissingElements": {"values": [{"stringValue": "c1"}]},
        },
    ]


# ---------------------------------------------------------------------------
# Document operations
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_get_decodes_document():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "GET"
        assert request.url.path.endswith("/documents/tasks/a")
        assert request.headers["Authorization"] == "Bearer tok"
        return httpx.Response(200, json=_document("a", title="Ship"))

    store = _make_store(handler)
    assert await store.get("tasks", "a") == {"id": "a", "title": "Ship"}
    await store.close()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "status, error",
    [
        (404, NotFoundError),
        (403, PermissionDeniedError),
        (401, PermissionDeniedError),
        (400, StoreError),
    ],
)
async def test_get_maps_http_errors(status, error):
    store = _make_store(lambda request: httpx.Response(status, json={}))
    with pytest.raises(error):
        await store.get("tasks", "a")
    await store.close()


@pytest.mark.asyncio
async def test_create_passes_document_id():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["params"] = dict(request.url.params)
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=_document("a"))

    store = _make_store(handler)
    await store.create("tasks", "a", {"title": "Ship"})

    assert seen["path"].endswith("/documents/tasks")
    assert seen["params"] == {"documentId": "a"}
    assert seen["body"] == {"fields": {"title": {"stringValue": "Ship"}}}
    await store.close()


@pytest.mark.asyncio
async def test_create_conflict():
    store = _make_store(lambda request: httpx.Response(409, json={}))
    with pytest.raises(AlreadyExistsError):
        await store.create("tasks", "a", {})
    await store.close()


@pytest.mark.asyncio
async def test_update_fields_commits_one_write():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"writeResults": [{}]})

    store = _make_store(handler)
    await store.update_fields("tasks", "a", {"progress": 50.0})

    assert seen["path"].endswith("/documents:commit")
    (write,) = seen["body"]["writes"]
    assert write["update"]["name"] == f"{DOCS}/tasks/a"
    assert write["updateMask"] == {"fieldPaths": ["progress"]}
    await store.close()


@pytest.mark.asyncio
async def test_update_missing_document():
    store = _make_store(lambda request: httpx.Response(404, json={}))
    with pytest.raises(NotFoundError):
        await store.update_fields("tasks", "gone", {"title": "x"})
    await store.close()


@pytest.mark.asyncio
async def test_delete():
    methods = []

    def handler(request: httpx.Request) -> httpx.Response:
        methods.append(request.method)
        return httpx.Response(200, json={})

    store = _make_store(handler)
    await store.delete("tasks", "a")
    assert methods == ["DELETE"]
    await store.close()


@pytest.mark.asyncio
async def test_run_query_skips_entries_without_document():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path.endswith("/documents:runQuery")
        assert "structuredQuery" in json.loads(request.content)
        return httpx.Response(
            200,
            json=[
                {"document": _document("b"), "readTime": "2024-01-01T00:00:00Z"},
                {"document": _document("a"), "readTime": "2024-01-01T00:00:00Z"},
            ],
        )

    store = _make_store(handler)
    docs = await store.run_query(Query("tasks"))
    assert [d["id"] for d in docs] == ["b", "a"]

    empty = _make_store(
        lambda request: httpx.Response(200, json=[{"readTime": "2024-01-01T00:00:00Z"}])
    )
    assert await empty.run_query(Query("tasks")) == []
    await store.close()
    await empty.close()


# ---------------------------------------------------------------------------
# Polling listener
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_listener_emits_only_on_change():
    results = [
        [{"document": _document("a")}],
        [{"document": _document("a")}],
        [{"document": _document("a")}, {"document": _document("b")}],
    ]
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        body = results[min(len(calls), len(results)) - 1]
        return httpx.Response(200, json=body)

    store = _make_store(handler)
    snapshots = []
    registration = store.subscribe(Query("tasks"), snapshots.append, lambda e: None)

    await _wait_for(lambda: len(snapshots) == 2)
    await _wait_for(lambda: len(calls) >= 5)
    registration.remove()

    assert [[d["id"] for d in s] for s in snapshots] == [["a"], ["a", "b"]]
    assert not registration.active
    await store.close()


@pytest.mark.asyncio
async def test_listener_stops_after_first_error():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        if len(calls) == 1:
            return httpx.Response(200, json=[{"document": _document("a")}])
        return httpx.Response(403, json={})

    store = _make_store(handler)
    snapshots = []
    errors = []
    registration = store.subscribe(Query("tasks"), snapshots.append, errors.append)

    await _wait_for(lambda: errors)
    await asyncio.sleep(0.05)

    assert len(snapshots) == 1
    assert len(errors) == 1
    assert isinstance(errors[0], PermissionDeniedError)
    assert len(calls) == 2
    assert not registration.active
    await store.close()


@pytest.mark.asyncio
async def test_removed_listener_stops_polling():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json=[])

    store = _make_store(handler)
    snapshots = []
    registration = store.subscribe(Query("tasks"), snapshots.append, lambda e: None)
    await _wait_for(lambda: calls)
    registration.remove()
    settled = len(calls)
    await asyncio.sleep(0.05)

    assert len(calls) == settled
    await store.close()
