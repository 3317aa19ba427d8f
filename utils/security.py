"""
security helpers:
- Argon2 password hashing via argon2-cffi
- JWT access/refresh pair creation and verification via PyJWT
- JTI generation for token identifiers

Access and refresh tokens are signed with different secrets, so a leaked
access secret cannot mint refresh tokens (and the reverse).
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerifyMismatchError

ACCESS = "access"
REFRESH = "refresh"
TOKEN_KINDS = (ACCESS, REFRESH)

ph = PasswordHasher()


def hash_password(password: str) -> str:
    """Hash a plaintext password using Argon2
    """
    return ph.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """ Verify a plaintext password using argon2
    """
    try:
        return ph.verify(password_hash, password)
    except (VerifyMismatchError, InvalidHashError):
        return False


def generate_jti() -> str:
    """Generate a unique JTI (JWT ID).
    """
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class TokenSettings:
    access_secret: str
    refresh_secret: str
    algorithm: str = "HS256"
    access_ttl: timedelta = timedelta(hours=12)
    refresh_ttl: timedelta = timedelta(days=7)
    issuer: str = "session-auth-api"

    @classmethod
    def from_config(cls, config) -> "TokenSettings":
        return cls(
            access_secret=config["ACCESS_SECRET_JWT"],
            refresh_secret=config["REFRESH_SECRET_JWT"],
            algorithm=config.get("JWT_ALGORITHM", "HS256"),
            access_ttl=config.get("ACCESS_TOKEN_EXPIRES", timedelta(hours=12)),
            refresh_ttl=config.get("REFRESH_TOKEN_EXPIRES", timedelta(days=7)),
            issuer=config.get("JWT_ISSUER", "session-auth-api"),
        )


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


class TokenVerificationError(Exception):
    """Bad signature, malformed token, wrong kind, or expired token."""

    def __init__(self, message: str, expired: bool = False):
        super().__init__(message)
        self.expired = expired


class TokenIssuer:
    """Signs and verifies {uid, sid} token pairs."""

    def __init__(self, settings: TokenSettings, clock: Optional[Callable[[], datetime]] = None):
        if not settings.access_secret or not settings.refresh_secret:
            raise ValueError("Both access and refresh signing secrets are required")
        if settings.access_secret == settings.refresh_secret:
            raise ValueError("Access and refresh tokens must use distinct secrets")
        self.settings = settings
        self._clock = clock or _now

    def _secret(self, kind: str) -> str:
        if kind == ACCESS:
            return self.settings.access_secret
        if kind == REFRESH:
            return self.settings.refresh_secret
        raise ValueError(f"Unknown token kind: {kind!r}")

    def _ttl(self, kind: str) -> timedelta:
        return self.settings.access_ttl if kind == ACCESS else self.settings.refresh_ttl

    def _encode(self, kind: str, user_id: str, session_id: str) -> str:
        now = self._clock()
        payload = {
            "iss": self.settings.issuer,
            "uid": str(user_id),
            "sid": str(session_id),
            "iat": int(now.timestamp()),
            "exp": int((now + self._ttl(kind)).timestamp()),
            "type": kind,
            "jti": generate_jti(),
        }
        return jwt.encode(payload, self._secret(kind), algorithm=self.settings.algorithm)

    def issue(self, user_id: str, session_id: str) -> TokenPair:
        return TokenPair(
            access_token=self._encode(ACCESS, user_id, session_id),
            refresh_token=self._encode(REFRESH, user_id, session_id),
        )

    def verify(self, token: str, kind: str) -> Dict[str, Any]:
        """
        Decode and validate a token of the given kind. Raises
        TokenVerificationError on invalid signature, expiry, or wrong kind.
        """
        secret = self._secret(kind)
        if not token:
            raise TokenVerificationError("Missing token")
        try:
            decoded = jwt.decode(
                token,
                secret,
                algorithms=[self.settings.algorithm],
                issuer=self.settings.issuer,
                options={"require": ["exp", "iat", "uid", "sid", "type"]},
            )
        except jwt.ExpiredSignatureError as exc:
            raise TokenVerificationError("Token expired", expired=True) from exc
        except jwt.InvalidTokenError as exc:
            raise TokenVerificationError(f"Invalid token: {exc}") from exc

        if decoded.get("type") != kind:
            raise TokenVerificationError("Wrong token type")
        return decoded
