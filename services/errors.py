"""Errors raised by the auth flows; the HTTP layer maps them to the error envelope."""


class AuthError(Exception):
    status = 400
    code = "BAD_REQUEST"
    default_message = "Bad request"

    def __init__(self, message=None, details=None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class BadRequest(AuthError):
    status = 400
    code = "BAD_REQUEST"
    default_message = "Bad request"


class Unauthorized(AuthError):
    status = 401
    code = "UNAUTHORIZED"
    default_message = "Unauthorized"


class Forbidden(AuthError):
    status = 403
    code = "FORBIDDEN"
    default_message = "Forbidden"


class NotFound(AuthError):
    status = 404
    code = "NOT_FOUND"
    default_message = "Not found"


class Conflict(AuthError):
    status = 409
    code = "CONFLICT"
    default_message = "Conflict"


class FederationError(AuthError):
    """The identity provider could not be reached or answered unexpectedly."""

    status = 502
    code = "BAD_GATEWAY"
    default_message = "Identity provider request failed"
