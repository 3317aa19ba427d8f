"""
Session store: durable mapping of session id -> owning user id.

Knows nothing about tokens. Rows are created and deleted, never updated.
`consume()` is the atomic find-and-delete that makes refresh rotation
exactly-once: only the caller whose DELETE actually removed the row gets
the session back.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import delete

from models.session import AuthSession

logger = logging.getLogger(__name__)


class SessionStore:
    def __init__(self, storage):
        self._storage = storage

    def create(self, user_id: str) -> AuthSession:
        auth_session = AuthSession(user_id=user_id)
        self._storage.new(auth_session)
        self._storage.save()
        return auth_session

    def find(self, session_id: Optional[str]) -> Optional[AuthSession]:
        if not session_id:
            return None
        return self._storage.get(AuthSession, session_id)

    def delete(self, session_id: Optional[str]) -> None:
        """Delete a session; a missing id is not an error."""
        if not session_id:
            return
        self._delete_where(AuthSession.id == session_id)

    def consume(self, session_id: Optional[str]) -> Optional[AuthSession]:
        """
        Atomically take a session out of the store.

        Returns the deleted session, or None when it did not exist or a
        concurrent caller removed it first.
        """
        if not session_id:
            return None
        auth_session = self._storage.get(AuthSession, session_id)
        if auth_session is None:
            return None
        removed = self._delete_where(AuthSession.id == session_id)
        if removed != 1:
            logger.info("session %s was consumed concurrently", session_id)
            return None
        return auth_session

    def delete_for_user(self, user_id: str) -> int:
        return self._delete_where(AuthSession.user_id == user_id)

    def purge_older_than(self, cutoff: datetime) -> int:
        """Remove sessions whose refresh lifetime has elapsed."""
        db = self._storage.get_session()
        statement = delete(AuthSession).where(AuthSession.created_at < cutoff)
        result = db.execute(statement.execution_options(synchronize_session=False))
        self._storage.save()
        # no in-memory sync above; drop whatever this session still holds
        db.expunge_all()
        return result.rowcount

    def _delete_where(self, criterion) -> int:
        db = self._storage.get_session()
        result = db.execute(delete(AuthSession).where(criterion))
        self._storage.save()
        return result.rowcount
