from marshmallow import EXCLUDE, Schema, fields

from models.schemas.user import UserPublicSchema


class RefreshSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    # a missing id is answered as an unknown session, not a validation error
    session_id = fields.String(data_key="sessionId", allow_none=True, load_default=None)


class TokenPairOutSchema(Schema):
    access_token = fields.String(data_key="accessToken")
    refresh_token = fields.String(data_key="refreshToken")
    session_id = fields.String(data_key="sessionId")


class AuthOutSchema(TokenPairOutSchema):
    user = fields.Nested(UserPublicSchema)


def issued_to_dict(issued, with_user=True) -> dict:
    data = {
        "access_token": issued.tokens.access_token,
        "refresh_token": issued.tokens.refresh_token,
        "session_id": issued.session_id,
    }
    if with_user:
        data["user"] = issued.user
    return data
