"""
Credential validation against the user store.

Register refuses a taken email; login answers with one message for both
"no such email" and "wrong password" so it does not reveal which accounts exist.
"""
from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from sqlalchemy.exc import IntegrityError

from models.user import User
from utils.security import hash_password, verify_password
from services.errors import Conflict, Unauthorized

logger = logging.getLogger(__name__)

EMAIL_IN_USE = "Email in use"
BAD_CREDENTIALS = "Email or password is wrong"


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


class CredentialValidator:
    def __init__(self, storage):
        self._storage = storage

    def get(self, user_id: Optional[str]) -> Optional[User]:
        return self._storage.get(User, user_id)

    def find_by_email(self, email: Optional[str]) -> Optional[User]:
        email = normalize_email(email)
        if not email:
            return None
        db = self._storage.get_session()
        return db.query(User).filter(User.email == email).first()

    def register(
        self,
        email: str,
        password: str,
        name: Optional[str] = None,
        birthday: Optional[date] = None,
        origin_url: Optional[str] = None,
        avatar_url: Optional[str] = None,
    ) -> User:
        email = normalize_email(email)
        if self.find_by_email(email):
            raise Conflict(EMAIL_IN_USE)

        user = User(
            email=email,
            password_hash=hash_password(password),
            name=name,
            birthday=birthday,
            origin_url=origin_url,
            avatar_url=avatar_url or "",
        )
        self._storage.new(user)
        try:
            self._storage.save()
        except IntegrityError:
            # lost a race with a concurrent register for the same email
            raise Conflict(EMAIL_IN_USE)
        logger.info("registered user %s", user.id)
        return user

    def login(self, email: str, password: str) -> User:
        user = self.find_by_email(email)
        if user is None or not verify_password(password or "", user.password_hash):
            raise Unauthorized(BAD_CREDENTIALS)
        return user
