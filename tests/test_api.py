from __future__ import annotations

import time
from pathlib import Path
import sys

sys.path.append(str(Path(__file__).resolve().parents[1]))

import pytest
from fastapi.testclient import TestClient

from fakes import FakeCompleter, FakePublisher, download_failure, make_providers
from content_study.application import reset_session_state
from content_study.core.config import Settings, configure_settings
from content_study.core.errors import ProviderNotConfiguredError
from content_study.infrastructure import configure_providers
from content_study.workers.pipeline import reset_pipeline_worker

VIDEO = "https://youtu.be/dQw4w9WgXcQ"
CLIP = "https://tiktok.com/@u/video/123"


@pytest.fixture(autouse=True)
def reset_state():
    reset_session_state()
    reset_pipeline_worker()
    yield
    reset_session_state()
    reset_pipeline_worker()
    configure_providers(None)
    configure_settings(None)


@pytest.fixture()
def providers(tmp_path):
    installed = make_providers(tmp_path / "media", download_failures={CLIP: download_failure("Video unavailable")})
    configure_providers(installed)
    return installed


@pytest.fixture()
def client(tmp_path, providers):
    from content_study.app import create_app

    app = create_app(Settings(download_dir=tmp_path / "media", max_urls=3))
    with TestClient(app) as test_client:
        yield test_client


def _wait_for_terminal(client: TestClient, session_id: str, timeout: float = 10.0) -> dict:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        body = client.get(f"/api/status/{session_id}").json()
        if body["status"] in {"complete", "failed"}:
            return body
        time.sleep(0.02)
    raise AssertionError(f"session {session_id} did not finish")


def test_process_then_poll_until_complete(client, providers):
    response = client.post(
        "/api/process",
        json={"urls": [VIDEO, CLIP], "topicName": "Memory", "userId": "user-1"},
    )
    assert response.status_code == 200
    payload = response.json()
    assert payload["externalPageId"] == "page-1"
    assert payload["externalPageUrl"] == "https://notion.so/page1"
    session_id = payload["sessionId"]
    assert session_id.startswith("session_")

    body = _wait_for_terminal(client, session_id)

    assert body["status"] == "complete"
    assert body["progress"] == {"current": 2, "total": 2, "stage": "Complete"}
    result = body["result"]
    assert result["topicName"] == "Memory"
    assert result["urls"] == [VIDEO, CLIP]
    assert [item["success"] for item in result["transcripts"]] == [True, False]
    assert result["transcripts"][1]["error"] == "Video unavailable"
    assert result["summary"]["keyTakeaways"].startswith("•")
    assert providers.publisher.called("create_page")[0][1:] == ("Memory", [VIDEO, CLIP])


def test_all_failures_report_failed_status(client, providers):
    response = client.post("/api/process", json={"urls": [CLIP]})
    session_id = response.json()["sessionId"]

    body = _wait_for_terminal(client, session_id)

    assert body["status"] == "failed"
    assert body["error"] == "All URLs failed to process"
    assert "result" not in body
    assert providers.publisher.statuses == [("page-1", "Failed")]


def test_process_validation_errors(client):
    empty = client.post("/api/process", json={"urls": ["  ", ""]})
    assert empty.status_code == 400
    assert empty.json()["detail"] == "No URLs provided"

    too_many = client.post("/api/process", json={"urls": [VIDEO] * 4})
    assert too_many.status_code == 400
    assert too_many.json()["detail"] == "Maximum 3 URLs allowed"

    unsupported = client.post("/api/process", json={"urls": ["https://example.com/post"]})
    assert unsupported.status_code == 400
    assert unsupported.json()["detail"].startswith("No valid URLs detected")


def test_concatenated_urls_count_against_the_limit(client, providers):
    pasted = "".join(f"https://x.com/a/status/{index}" for index in range(4))

    response = client.post("/api/process", json={"urls": [pasted]})

    assert response.status_code == 400
    assert response.json()["detail"] == "Maximum 3 URLs allowed"
    assert providers.publisher.called("create_page") == []


def test_process_reports_publisher_outage(tmp_path):
    configure_providers(make_providers(tmp_path, publisher=FakePublisher(fail_on=["create_page"])))
    from content_study.app import create_app

    with TestClient(create_app(Settings(download_dir=tmp_path))) as client:
        response = client.post("/api/process", json={"urls": [VIDEO]})
        listing = client.get("/api/sessions").json()

    assert response.status_code == 502
    assert response.json()["detail"] == "Failed to start processing"
    assert listing == {"sessions": []}


def test_status_of_unknown_session_is_404(client):
    response = client.get("/api/status/session_0_missing")

    assert response.status_code == 404
    assert response.json()["detail"] == "Session not found"


def test_sessions_listing_filters_by_user(client):
    mine = client.post("/api/process", json={"urls": [VIDEO], "topicName": "Mine", "userId": "alice"}).json()
    client.post("/api/process", json={"urls": [VIDEO], "topicName": "Theirs", "userId": "bob"})
    _wait_for_terminal(client, mine["sessionId"])

    sessions = client.get("/api/sessions", params={"userId": "alice"}).json()["sessions"]

    assert [item["id"] for item in sessions] == [mine["sessionId"]]
    assert sessions[0]["topicName"] == "Mine"
    assert sessions[0]["urlCount"] == 1
    assert "createdAt" in sessions[0]
    assert len(client.get("/api/sessions").json()["sessions"]) == 2


def test_chat_answers_with_context(client, providers):
    response = client.post(
        "/api/chat",
        json={"messages": [{"role": "user", "content": "Summarise it"}], "context": "Transcript"},
    )

    assert response.status_code == 200
    assert response.json() == {"response": "Review often."}
    assert "Transcript" in providers.completer.chats[0][1]


def test_chat_validation_and_provider_errors(tmp_path):
    completer = FakeCompleter(error=ProviderNotConfiguredError("ANTHROPIC_API_KEY is not set"))
    configure_providers(make_providers(tmp_path, completer=completer))
    from content_study.app import create_app

    with TestClient(create_app(Settings(download_dir=tmp_path))) as client:
        empty = client.post("/api/chat", json={"messages": []})
        failing = client.post("/api/chat", json={"messages": [{"role": "user", "content": "hi"}]})

    assert empty.status_code == 400
    assert empty.json()["detail"] == "No messages provided"
    assert failing.status_code == 502
    assert failing.json()["detail"] == "Failed to get response"


def test_root_landing_page(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.json()["docs"] == "/docs"
