from datetime import datetime, timedelta

import pytest

from docare.application.services.messaging_service import (
    UNDECRYPTABLE_PLACEHOLDER,
    MessagingService,
    message_view,
)
from docare.exceptions import APIException

from conftest import FakeMessagesRepo, make_user


@pytest.fixture
def repo():
    return FakeMessagesRepo()


@pytest.fixture
def svc(repo, user_repo):
    return MessagingService(repo=repo, user_repo=user_repo)


def test_send_encrypts_content(svc, patient, provider):
    message = svc.send(patient.id, provider.id, "My chest hurts")
    assert message.content_encrypted != "My chest hurts"
    assert message.thread_id
    assert message.status == "sent"
    assert message_view(message)["content"] == "My chest hurts"


def test_send_validates_input(svc, patient, provider):
    with pytest.raises(APIException) as exc:
        svc.send(patient.id, provider.id, "   ")
    assert exc.value.status_code == 400

    with pytest.raises(APIException) as exc:
        svc.send(patient.id, patient.id, "hello me")
    assert exc.value.status_code == 400

    with pytest.raises(APIException) as exc:
        svc.send(patient.id, "ghost", "hello?")
    assert exc.value.status_code == 404


def test_threads_show_latest_message_and_unread(svc, repo, patient, provider):
    first = svc.send(patient.id, provider.id, "Question one")
    second = svc.send(patient.id, provider.id, "Question two", thread_id=first.thread_id)
    first.created_at = datetime.utcnow() - timedelta(minutes=5)
    second.created_at = datetime.utcnow()

    threads = svc.list_threads(provider.id)
    assert len(threads) == 1
    assert threads[0]["participant_id"] == patient.id
    assert threads[0]["unread_count"] == 2
    assert threads[0]["last_message"]["content"] == "Question two"

    # The sender has nothing unread
    assert svc.list_threads(patient.id)[0]["unread_count"] == 0


def test_opening_thread_marks_received_messages_read(svc, repo, patient, provider):
    sent = svc.send(patient.id, provider.id, "Hello doctor")
    reply = svc.send(provider.id, patient.id, "Hello", thread_id=sent.thread_id)
    sent.created_at = datetime.utcnow() - timedelta(minutes=1)

    messages = svc.get_thread(provider.id, sent.thread_id)
    assert [m["content"] for m in messages] == ["Hello doctor", "Hello"]
    assert sent.status == "read"
    assert sent.read_at is not None
    assert reply.status == "sent"


def test_unknown_thread_is_empty(svc, patient, provider):
    assert svc.get_thread(patient.id, "no-thread") == []

    message = svc.send(patient.id, provider.id, "Private")
    outsider = make_user("patient")
    assert svc.get_thread(outsider.id, message.thread_id) == []


def test_only_recipient_updates_status(svc, patient, provider):
    message = svc.send(patient.id, provider.id, "Hi")
    with pytest.raises(APIException) as exc:
        svc.update_status(patient.id, message.id, "read")
    assert exc.value.status_code == 403

    read = svc.mark_read(provider.id, message.id)
    assert read.status == "read"
    assert read.read_at is not None


def test_undecryptable_content_uses_placeholder(svc, patient, provider):
    message = svc.send(patient.id, provider.id, "secret")
    message.content_encrypted = "aa:bb:cc"
    assert message_view(message)["content"] == UNDECRYPTABLE_PLACEHOLDER
