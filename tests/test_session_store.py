"""Unit tests for the session store."""

import threading
from datetime import datetime, timedelta, timezone

import pytest

from models import storage
from models.session import AuthSession

pytestmark = pytest.mark.unit


@pytest.fixture
def sessions(auth_flow):
    return auth_flow.sessions


@pytest.fixture
def user(register_user):
    return register_user().user


def test_create_and_find(sessions, user):
    created = sessions.create(user.id)

    found = sessions.find(created.id)
    assert found is not None
    assert found.user_id == user.id
    assert found.created_at is not None


def test_create_allocates_distinct_ids(sessions, user):
    assert sessions.create(user.id).id != sessions.create(user.id).id


def test_find_unknown_or_empty_id(sessions):
    assert sessions.find("no-such-session") is None
    assert sessions.find(None) is None
    assert sessions.find("") is None


def test_delete_is_idempotent(sessions, user):
    created = sessions.create(user.id)

    sessions.delete(created.id)
    sessions.delete(created.id)
    sessions.delete("never-existed")
    sessions.delete(None)

    assert sessions.find(created.id) is None


def test_consume_returns_session_once(sessions, user):
    created = sessions.create(user.id)

    taken = sessions.consume(created.id)
    assert taken is not None
    assert taken.id == created.id
    assert taken.user_id == user.id

    assert sessions.consume(created.id) is None
    assert sessions.find(created.id) is None


def test_concurrent_consume_has_single_winner(app, sessions, user):
    created = sessions.create(user.id)
    barrier = threading.Barrier(4)
    results = []

    def worker():
        try:
            barrier.wait()
            results.append(sessions.consume(created.id))
        finally:
            storage.close()

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    winners = [r for r in results if r is not None]
    assert len(results) == 4
    assert len(winners) == 1


def test_delete_for_user(sessions, user, register_user):
    other = register_user("b@x.com", "pw").user
    sessions.create(user.id)
    sessions.create(user.id)

    # register_user already opened one session for each user
    assert sessions.delete_for_user(user.id) == 3
    assert storage.get_session().query(AuthSession).filter_by(user_id=other.id).count() == 1


def test_purge_older_than(sessions, user):
    sessions.create(user.id)
    total = storage.count(AuthSession)

    assert sessions.purge_older_than(datetime.now(timezone.utc) - timedelta(days=7)) == 0
    assert sessions.purge_older_than(datetime.now(timezone.utc) + timedelta(seconds=5)) == total
    assert storage.count(AuthSession) == 0


def test_sessions_removed_with_user(sessions, user):
    sessions.create(user.id)
    storage.delete(user)
    storage.save()

    assert storage.count(AuthSession) == 0
