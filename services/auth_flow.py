"""
Auth flow controller: register, login, refresh, signout and Google sign-in.

Every successful flow ends the same way: a new session row, a token pair
naming it, and the pair recorded on the user. A session row is the only
thing that makes its tokens valid; deleting it revokes them.

Refresh is single-use. The session named by the refresh token is taken out
of the store with an atomic find-and-delete before a new one is created, so
two concurrent refreshes with the same token cannot both succeed. Any
refresh token that fails verification burns the session it was presented
with.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from models.session import AuthSession
from models.session_store import SessionStore
from models.user import User
from services.credentials import CredentialValidator
from services.errors import BadRequest, Forbidden, NotFound, Unauthorized
from services.federation import GoogleOAuthClient
from utils.security import ACCESS, REFRESH, TokenIssuer, TokenPair, TokenVerificationError

logger = logging.getLogger(__name__)

INVALID_SESSION = "Invalid session"
INVALID_USER = "Invalid user"
NO_TOKEN = "No token provided"
NOT_AUTHORIZED = "Not authorized"
REGISTER_FIRST = (
    "Register through the application first; "
    "Google sign-in only authenticates existing accounts"
)


@dataclass
class IssuedSession:
    tokens: TokenPair
    session_id: str
    user: User
    redirect_url: Optional[str] = None


def append_query(url: str, params: Dict[str, str]) -> str:
    """Add params to url, keeping whatever query it already carries."""
    parts = urlsplit(url)
    query = parse_qsl(parts.query, keep_blank_values=True)
    query.extend(params.items())
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(query), parts.fragment))


class AuthFlowController:
    def __init__(
        self,
        sessions: SessionStore,
        credentials: CredentialValidator,
        issuer: TokenIssuer,
        federation: GoogleOAuthClient,
        storage,
    ):
        self.sessions = sessions
        self.credentials = credentials
        self.issuer = issuer
        self.federation = federation
        self._storage = storage

    def _open_session(self, user: User) -> IssuedSession:
        auth_session = self.sessions.create(user.id)
        tokens = self.issuer.issue(user.id, auth_session.id)
        user.record_tokens(auth_session.id, tokens.access_token, tokens.refresh_token)
        self._storage.new(user)
        self._storage.save()
        logger.info("opened session %s for user %s", auth_session.id, user.id)
        return IssuedSession(tokens=tokens, session_id=auth_session.id, user=user)

    def register(self, email: str, password: str, **profile) -> IssuedSession:
        user = self.credentials.register(email, password, **profile)
        return self._open_session(user)

    def login(self, email: str, password: str) -> IssuedSession:
        user = self.credentials.login(email, password)
        return self._open_session(user)

    def refresh(self, claimed_session_id: Optional[str], refresh_token: Optional[str]) -> IssuedSession:
        if not refresh_token:
            raise BadRequest(NO_TOKEN)

        if self.sessions.find(claimed_session_id) is None:
            raise NotFound(INVALID_SESSION)

        try:
            payload = self.issuer.verify(refresh_token, REFRESH)
        except TokenVerificationError as exc:
            # a bad presentation burns the session it was made against
            self.sessions.delete(claimed_session_id)
            logger.info("burned session %s after refresh failure: %s", claimed_session_id, exc)
            raise Unauthorized()

        user = self.credentials.get(payload["uid"])
        if user is None:
            raise NotFound(INVALID_USER)
        if self.sessions.find(payload["sid"]) is None:
            raise NotFound(INVALID_SESSION)

        if self.sessions.consume(payload["sid"]) is None:
            raise NotFound(INVALID_SESSION)

        issued = self._open_session(user)
        logger.info("rotated session %s -> %s", payload["sid"], issued.session_id)
        return issued

    def signout(self, user_id: str, session_id: Optional[str]) -> None:
        user = self.credentials.get(user_id)
        if user is not None:
            user.clear_tokens()
            self._storage.new(user)
            self._storage.save()
        self.sessions.delete(session_id)
        logger.info("signed out session %s", session_id)

    def revoke_user_sessions(self, user_id: str) -> int:
        """Delete every session of a user; all their tokens stop working."""
        user = self.credentials.get(user_id)
        if user is not None:
            user.clear_tokens()
            self._storage.new(user)
            self._storage.save()
        removed = self.sessions.delete_for_user(user_id)
        logger.info("revoked %d session(s) for user %s", removed, user_id)
        return removed

    def authenticate(self, access_token: Optional[str]) -> Tuple[User, AuthSession, Dict[str, Any]]:
        """Resolve a bearer access token to its user and live session."""
        try:
            payload = self.issuer.verify(access_token, ACCESS)
        except TokenVerificationError:
            raise Unauthorized(NOT_AUTHORIZED)
        auth_session = self.sessions.find(payload["sid"])
        if auth_session is None or auth_session.user_id != payload["uid"]:
            raise Unauthorized(NOT_AUTHORIZED)
        user = self.credentials.get(payload["uid"])
        if user is None:
            raise Unauthorized(NOT_AUTHORIZED)
        return user, auth_session, payload

    def authorization_url(self, state: Optional[str] = None) -> str:
        return self.federation.authorization_url(state)

    def federated_sign_in(self, code: Optional[str]) -> IssuedSession:
        if not code:
            raise BadRequest("Missing authorization code")

        email = self.federation.fetch_email(code)
        user = self.credentials.find_by_email(email)
        if user is None or not user.origin_url:
            logger.info("Google sign-in refused for an account without prior registration")
            raise Forbidden(REGISTER_FIRST)

        issued = self._open_session(user)
        issued.redirect_url = append_query(
            user.origin_url,
            {
                "accessToken": issued.tokens.access_token,
                "refreshToken": issued.tokens.refresh_token,
                "sessionId": issued.session_id,
            },
        )
        return issued
