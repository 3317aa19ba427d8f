from __future__ import annotations
from functools import wraps
from flask import request, g, abort, current_app

from services.auth_flow import NOT_AUTHORIZED


def bearer_token() -> str | None:
    """Return the token from an `Authorization: Bearer <token>` header, if any."""
    auth = request.headers.get("Authorization", "")
    if not auth.startswith("Bearer "):
        return None
    return auth.split(" ", 1)[1].strip() or None


def jwt_required():
    """
    Require a valid access token whose session still exists.
    Sets g.current_user, g.current_session and g.token_payload.
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            token = bearer_token()
            if not token:
                abort(401, description=NOT_AUTHORIZED)

            auth_flow = current_app.extensions["auth_flow"]
            user, auth_session, payload = auth_flow.authenticate(token)

            g.current_user = user
            g.current_session = auth_session
            g.token_payload = payload
            return fn(*args, **kwargs)

        return wrapper

    return decorator
