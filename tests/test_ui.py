from __future__ import annotations

import json
import re

from fastapi.testclient import TestClient

from firescan.models import DocumentRecord

from conftest import FakeGateway, make_records


def _batch_payload(html: str) -> list[dict[str, str]]:
    match = re.search(r'<script id="batch-data" type="application/json">(.*?)</script>', html, re.S)
    assert match is not None
    return json.loads(match.group(1))


def test_index_lists_collections_with_counts(make_app) -> None:
    gateway = FakeGateway({"users": make_records("u", 42), "orders": make_records("o", 3)})

    with TestClient(make_app(gateway, collections=["users", "orders"])) as client:
        r = client.get("/")

    assert r.status_code == 200
    assert r.headers["content-type"] == "text/html; charset=utf-8"
    assert "test-project" in r.text
    assert 'href="/collection/users"' in r.text
    assert ">42<" in r.text
    assert ">3<" in r.text
    assert gateway.count_calls == ["users", "orders"]


def test_index_count_failure_shows_unknown_and_continues(make_app) -> None:
    gateway = FakeGateway(
        {"users": make_records("u", 7), "secret": make_records("s", 2)},
        count_failures=["secret"],
    )

    with TestClient(make_app(gateway, collections=["secret", "users"])) as client:
        r = client.get("/")

    assert r.status_code == 200
    assert "secret" in r.text
    assert "unknown" in r.text
    assert ">7<" in r.text
    assert gateway.count_calls == ["secret", "users"]


def test_index_without_collections(make_app) -> None:
    with TestClient(make_app(FakeGateway())) as client:
        r = client.get("/")
    assert r.status_code == 200
    assert "No collections configured" in r.text


def test_collection_fetches_batch_containing_record(make_app) -> None:
    gateway = FakeGateway({"users": make_records("u", 30)})

    with TestClient(make_app(gateway, batch_size=10)) as client:
        r = client.get("/collection/users", params={"page": 25})

    assert r.status_code == 200
    assert gateway.fetch_calls == [("users", 20, 10)]
    assert '<h2 id="record-id">u-025</h2>' in r.text
    assert "Record <span id=\"position\">25</span> of 30" in r.text
    assert 'href="/collection/users?page=24"' in r.text
    assert 'href="/collection/users?page=26"' in r.text
    assert 'data-batch-start="21"' in r.text

    payload = _batch_payload(r.text)
    assert [d["id"] for d in payload] == [f"u-{i:03d}" for i in range(21, 31)]
    assert set(payload[0]) == {"id", "json", "timestamp"}


def test_collection_defaults_to_first_record(make_app) -> None:
    gateway = FakeGateway({"users": make_records("u", 3)})

    with TestClient(make_app(gateway)) as client:
        for url in ("/collection/users", "/collection/users?page=0", "/collection/users?page=x"):
            r = client.get(url)
            assert r.status_code == 200
            assert '<h2 id="record-id">u-001</h2>' in r.text
            assert 'id="prev" class="button disabled"' in r.text

    assert gateway.fetch_calls == [("users", 0, 25)] * 3


def test_collection_last_record_has_no_next(make_app) -> None:
    gateway = FakeGateway({"users": make_records("u", 3)})

    with TestClient(make_app(gateway)) as client:
        r = client.get("/collection/users?page=3")

    assert r.status_code == 200
    assert '<h2 id="record-id">u-003</h2>' in r.text
    assert 'id="next" class="button disabled"' in r.text


def test_collection_past_total_renders_blank_record(make_app) -> None:
    gateway = FakeGateway({"users": make_records("u", 3)})

    with TestClient(make_app(gateway, batch_size=10)) as client:
        r = client.get("/collection/users?page=50")

    assert r.status_code == 200
    assert gateway.fetch_calls == [("users", 40, 10)]
    assert "No document at this position." in r.text
    assert '<h2 id="record-id"></h2>' in r.text
    assert 'id="next" class="button disabled"' in r.text
    assert _batch_payload(r.text) == []


def test_collection_count_failure_degrades_to_zero_total(make_app) -> None:
    gateway = FakeGateway({"users": make_records("u", 3)}, count_failures=["users"])

    with TestClient(make_app(gateway)) as client:
        r = client.get("/collection/users")

    assert r.status_code == 200
    assert "of 0" in r.text
    assert '<h2 id="record-id">u-001</h2>' in r.text
    assert 'id="next" class="button disabled"' in r.text


def test_collection_fetch_failure_is_500_without_documents(make_app) -> None:
    gateway = FakeGateway({"users": make_records("u", 3)}, fetch_failures=["users"])

    with TestClient(make_app(gateway)) as client:
        r = client.get("/collection/users")

    assert r.status_code == 500
    assert r.text == "error fetching documents: fetching users: backend unavailable"
    assert "u-001" not in r.text


def test_collection_empty_name_redirects_to_index(make_app) -> None:
    with TestClient(make_app(FakeGateway())) as client:
        for url in ("/collection/", "/collection//"):
            r = client.get(url, follow_redirects=False)
            assert r.status_code == 302
            assert r.headers["location"] == "/"


def test_collection_name_is_trimmed_and_unquoted(make_app) -> None:
    gateway = FakeGateway({"audit log": make_records("a", 1)})

    with TestClient(make_app(gateway)) as client:
        r = client.get("/collection/audit%20log/")

    assert r.status_code == 200
    assert gateway.fetch_calls == [("audit log", 0, 25)]
    assert 'data-base-url="/collection/audit%20log"' in r.text


def test_document_body_is_escaped(make_app) -> None:
    doc = DocumentRecord(id="x", json='{"html": "<script>alert(1)</script>"}', timestamp="")
    gateway = FakeGateway({"c": [doc]})

    with TestClient(make_app(gateway)) as client:
        r = client.get("/collection/c")

    assert r.status_code == 200
    assert "<script>alert(1)</script>" not in r.text
    assert _batch_payload(r.text)[0]["json"] == doc.json


def test_unknown_path_is_404(make_app) -> None:
    with TestClient(make_app(FakeGateway())) as client:
        r = client.get("/nope")
    assert r.status_code == 404
    assert r.text == "404 page not found"
