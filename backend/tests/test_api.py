"""API integration tests."""

from __future__ import annotations

import time
from types import SimpleNamespace

import pytest
import requests
from fastapi.testclient import TestClient

from vector_agent.app import app

DOCUMENT = "# Sample\n\nThis is a sample document about retrieval."


@pytest.fixture
def client() -> TestClient:
    with TestClient(app) as test_client:
        yield test_client


def _create_store(client: TestClient, name: str = "Docs", **extra) -> str:
    resp = client.post("/api/vector-store/create-store", json={"name": name, **extra})
    assert resp.status_code == 201
    return resp.json()["id"]


def _upload(client: TestClient, content: str = DOCUMENT) -> str:
    resp = client.post("/api/file/upload-file", files={"file": ("sample.md", content.encode("utf-8"), "text/markdown")})
    assert resp.status_code == 201
    return resp.json()["id"]


def _wait_until_settled(client: TestClient, store_id: str, timeout: float = 10.0) -> dict:
    deadline = time.monotonic() + timeout
    while True:
        payload = client.post("/api/vector-store/check-status", json={"vectorStoreId": store_id}).json()
        if payload["status"] != "processing" or time.monotonic() > deadline:
            return payload
        time.sleep(0.05)


def test_health(client: TestClient) -> None:
    resp = client.get("/health")
    assert resp.status_code == 200
    payload = resp.json()
    assert payload["status"] == "ok"
    assert payload["services"]["database"] == "ok"


def test_metrics_endpoint(client: TestClient) -> None:
    resp = client.get("/metrics")
    assert resp.status_code == 200
    assert "vagent" in resp.text


def test_new_store_reports_empty(client: TestClient) -> None:
    store_id = _create_store(client)
    resp = client.post("/api/vector-store/check-status", json={"vectorStoreId": store_id})
    assert resp.status_code == 200
    assert resp.json() == {"status": "empty", "fileCount": 0, "processingCount": 0}


def test_ingest_and_search_flow(client: TestClient) -> None:
    store_id = _create_store(client, expiresAfter={"anchor": "last_active_at", "days": 7})
    file_id = _upload(client)

    add_resp = client.post("/api/file/add-file", json={"vectorStoreId": store_id, "fileId": file_id})
    assert add_resp.status_code == 200
    assert add_resp.json() == {"success": True}

    status = _wait_until_settled(client, store_id)
    assert status == {"status": "ready", "fileCount": 1, "processingCount": 0}

    files_resp = client.get(f"/api/vector-store/{store_id}/files")
    assert files_resp.status_code == 200
    [row] = files_resp.json()
    assert row["status"] == "completed"
    assert row["chunk_count"] == 1

    search_resp = client.post(
        "/api/search/search",
        json={
            "vectorStoreId": store_id,
            "query": "retrieval",
            "maxResults": 3,
            "rankingOptions": {"score_threshold": 0.0},
        },
    )
    assert search_resp.status_code == 200
    results = search_resp.json()["results"]
    assert results, "Expected at least one result"
    assert results[0]["source"] == "vector"
    assert results[0]["metadata"]["file_id"] == file_id

    store_resp = client.get(f"/api/vector-store/{store_id}")
    assert store_resp.status_code == 200
    assert store_resp.json()["expiresAt"] is not None
    assert store_resp.json()["expired"] is False


def test_search_and_chat_with_default_threshold(client: TestClient) -> None:
    store_id = _create_store(client)
    file_id = _upload(client)
    client.post("/api/file/add-file", json={"vectorStoreId": store_id, "fileId": file_id})
    _wait_until_settled(client, store_id)

    # The stored chunk is the whole document, so repeating it scores a cosine of 1.0.
    search_resp = client.post("/api/search/search", json={"vectorStoreId": store_id, "query": DOCUMENT})
    assert search_resp.status_code == 200
    [result] = search_resp.json()["results"]
    assert result["source"] == "vector"
    assert result["score"] == pytest.approx(1.0)
    assert result["metadata"]["file_id"] == file_id

    chat_resp = client.post(
        "/api/search/chat",
        json={"vectorStoreId": store_id, "messages": [{"role": "user", "content": DOCUMENT}]},
    )
    assert chat_resp.status_code == 200
    assert chat_resp.json()["context"]


def test_search_with_web_results(client: TestClient) -> None:
    store_id = _create_store(client)
    resp = client.post(
        "/api/search/search",
        json={"vectorStoreId": store_id, "query": "rust", "webSearch": {"enabled": True, "maxResults": 1}},
    )
    assert resp.status_code == 200
    results = resp.json()["results"]
    assert [result["source"] for result in results] == ["web"]


def test_chat_and_query_return_answers(client: TestClient) -> None:
    store_id = _create_store(client)
    file_id = _upload(client)
    client.post("/api/file/add-file", json={"vectorStoreId": store_id, "fileId": file_id})
    _wait_until_settled(client, store_id)

    chat_resp = client.post(
        "/api/search/chat",
        json={
            "vectorStoreId": store_id,
            "messages": [{"role": "user", "content": "sample retrieval"}],
            "rankingOptions": {"score_threshold": 0.0},
        },
    )
    assert chat_resp.status_code == 200
    assert chat_resp.json()["response"]
    assert chat_resp.json()["context"]

    query_resp = client.post("/api/search/query", json={"vectorStoreId": store_id, "question": "anything at all"})
    assert query_resp.status_code == 200
    assert query_resp.json()["answer"]


def test_chat_without_user_message_is_bad_request(client: TestClient) -> None:
    store_id = _create_store(client)
    resp = client.post(
        "/api/search/chat",
        json={"vectorStoreId": store_id, "messages": [{"role": "assistant", "content": "Hi"}]},
    )
    assert resp.status_code == 400
    assert resp.json() == {"error": "No user message found"}


def test_missing_required_fields_are_bad_request(client: TestClient) -> None:
    resp = client.post("/api/search/search", json={"vectorStoreId": "vs_x"})
    assert resp.status_code == 400
    assert resp.json()["fields"] == ["query"]


def test_unknown_store_is_not_found(client: TestClient) -> None:
    resp = client.post("/api/vector-store/check-status", json={"vectorStoreId": "vs_missing"})
    assert resp.status_code == 404
    assert resp.json() == {"error": "Vector store not found"}

    resp = client.post("/api/search/search", json={"vectorStoreId": "vs_missing", "query": "anything"})
    assert resp.status_code == 404


def test_add_unknown_file_is_not_found(client: TestClient) -> None:
    store_id = _create_store(client)
    resp = client.post("/api/file/add-file", json={"vectorStoreId": store_id, "fileId": "file_missing"})
    assert resp.status_code == 404
    assert resp.json() == {"error": "File not found"}


def test_adding_file_twice_conflicts(client: TestClient) -> None:
    store_id = _create_store(client)
    file_id = _upload(client)
    body = {"vectorStoreId": store_id, "fileId": file_id}
    assert client.post("/api/file/add-file", json=body).status_code == 200
    _wait_until_settled(client, store_id)
    assert client.post("/api/file/add-file", json=body).status_code == 409


def test_upload_without_file_is_bad_request(client: TestClient) -> None:
    resp = client.post("/api/file/upload-file", data={"other": "value"})
    assert resp.status_code == 400
    assert resp.json()["error"].startswith("No file provided")


def test_upload_from_url(client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_get(url: str, timeout: float):
        return SimpleNamespace(
            content=b"remote text",
            headers={"content-type": "text/plain"},
            raise_for_status=lambda: None,
        )

    monkeypatch.setattr("vector_agent.ingest.files.requests.get", fake_get)
    resp = client.post("/api/file/upload-file", json={"fileUrl": "https://example.com/docs/notes.txt"})
    assert resp.status_code == 201
    payload = resp.json()
    assert payload["filename"] == "notes.txt"
    assert payload["size"] == len(b"remote text")


def test_upload_from_unreachable_url_is_bad_gateway(client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_get(url: str, timeout: float):
        raise requests.ConnectionError("connection refused")

    monkeypatch.setattr("vector_agent.ingest.files.requests.get", fake_get)
    resp = client.post("/api/file/upload-file", json={"fileUrl": "https://example.com/missing.txt"})
    assert resp.status_code == 502
