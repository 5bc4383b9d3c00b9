from pathlib import Path
import re
import sys

sys.path.append(str(Path(__file__).resolve().parents[1]))

import pytest

from content_study.application import SessionService
from content_study.core.errors import InvalidTransitionError, SessionNotFoundError
from content_study.core.urls import classify
from content_study.domain import PLACEHOLDER_TOPIC, Session, SummaryResult, TranscriptResult
from content_study.infrastructure import InMemorySessionRepository, PublishedPage

URLS = "https://youtu.be/dQw4w9WgXcQ https://x.com/a/status/7"


@pytest.fixture()
def service():
    return SessionService(InMemorySessionRepository())


def _create(service, **kwargs):
    page = PublishedPage(page_id="page-1", page_url="https://notion.so/page1")
    return service.create_session(classify(URLS), page, **kwargs)


def test_session_ids_follow_the_expected_format(service):
    first = service.next_session_id()
    second = service.next_session_id()

    assert re.fullmatch(r"session_\d{13}_[a-z0-9]{7}", first)
    assert first != second


def test_new_session_starts_pending_with_placeholder_topic(service):
    session = _create(service, user_id="user-1")

    assert session.status == "pending"
    assert session.topic_name == PLACEHOLDER_TOPIC
    assert session.urls == ["https://youtu.be/dQw4w9WgXcQ", "https://x.com/a/status/7"]
    assert (session.progress.current, session.progress.total) == (0, 2)
    assert session.external_page_id == "page-1"
    assert session.user_id == "user-1"


def test_full_lifecycle_reaches_complete(service):
    session = _create(service, topic_name="Habits")
    service.begin(session.id)
    for index, url in enumerate(session.urls, start=1):
        service.record_transcript(session.id, TranscriptResult.ok(url, "youtube", f"text {index}"))
        service.update_progress(session.id, f"Acquired {index}", current=index)

    done = service.complete(session.id, SummaryResult(summary="notes"))

    assert done.status == "complete"
    assert done.topic_name == "Habits"
    assert (done.progress.current, done.progress.total, done.progress.stage) == (2, 2, "Complete")
    assert done.summary.summary == "notes"


def test_complete_requires_a_result_for_every_url(service):
    session = _create(service)
    service.begin(session.id)
    service.record_transcript(session.id, TranscriptResult.failed(session.urls[0], "youtube", "boom"))

    with pytest.raises(InvalidTransitionError):
        service.complete(session.id, SummaryResult(summary="notes"))


def test_terminal_sessions_reject_changes(service):
    session = _create(service)
    service.begin(session.id)
    service.fail(session.id, "All URLs failed to process")

    with pytest.raises(InvalidTransitionError):
        service.rename(session.id, "Later")
    with pytest.raises(InvalidTransitionError):
        service.complete(session.id, SummaryResult(summary="late"))

    assert service.get_session(session.id).error == "All URLs failed to process"


def test_progress_never_moves_backwards(service):
    session = _create(service)
    service.begin(session.id)
    service.update_progress(session.id, "one", current=1)

    with pytest.raises(InvalidTransitionError):
        service.update_progress(session.id, "back", current=0)
    with pytest.raises(InvalidTransitionError):
        service.update_progress(session.id, "past the end", current=3)


def test_snapshots_do_not_change_after_read(service):
    session = _create(service)
    snapshot = service.get_session(session.id)

    service.begin(session.id)
    service.rename(session.id, "Renamed")

    assert snapshot.status == "pending"
    assert snapshot.topic_name == PLACEHOLDER_TOPIC


def test_unknown_session_raises_not_found(service):
    with pytest.raises(SessionNotFoundError) as excinfo:
        service.get_session("session_missing")
    assert excinfo.value.session_id == "session_missing"

    with pytest.raises(SessionNotFoundError):
        service.begin("session_missing")


def test_list_sessions_filters_by_user_newest_first(service):
    first = _create(service, user_id="alice", topic_name="First")
    _create(service, user_id="bob", topic_name="Other")
    second = _create(service, user_id="alice", topic_name="Second")

    listed = service.list_sessions("alice")

    assert {item["id"] for item in listed} == {first.id, second.id}
    assert listed[0]["createdAt"] >= listed[1]["createdAt"]
    assert {item["topicName"] for item in listed} == {"First", "Second"}
    assert listed[0]["urlCount"] == 2
    assert len(service.list_sessions()) == 3


def test_status_read_model_includes_result_only_when_complete(service):
    session = _create(service)
    pending = service.get_status(session.id)
    assert pending["status"] == "pending"
    assert "result" not in pending

    service.begin(session.id)
    for url in session.urls:
        service.record_transcript(session.id, TranscriptResult.ok(url, "youtube", "words"))
    service.complete(session.id, SummaryResult(summary="notes", key_takeaways="• one"), topic_name="Topic")

    body = service.get_status(session.id)
    assert body["result"]["topicName"] == "Topic"
    assert body["result"]["summary"]["keyTakeaways"] == "• one"
    assert body["result"]["externalPageUrl"] == "https://notion.so/page1"
    assert len(body["result"]["transcripts"]) == 2


def test_pending_session_cannot_fail_before_starting(service):
    session = _create(service)

    with pytest.raises(InvalidTransitionError):
        service.fail(session.id, "too early")

    assert service.get_session(session.id).status == "pending"


def test_stage_update_without_progress_is_rejected():
    session = Session(id="session_1_abcdefg", topic_name="Topic", urls=["https://youtu.be/dQw4w9WgXcQ"])
    session.status = "processing"
    session.progress = None

    with pytest.raises(InvalidTransitionError):
        session.set_stage("Acquiring youtube (1/1)", current=1)
