from marshmallow import EXCLUDE, Schema, fields, pre_load, validate


def _norm_email(v):
    return v.strip().lower() if isinstance(v, str) else v


class RegisterSchema(Schema):
    class Meta:
        # clients send extra profile fields; keep what we store, drop the rest
        unknown = EXCLUDE

    email = fields.Email(required=True)
    password = fields.String(required=True, load_only=True, validate=validate.Length(min=1))
    name = fields.String(allow_none=True, load_default=None)
    birthday = fields.Date(allow_none=True, load_default=None)
    origin_url = fields.Url(data_key="originUrl", require_tld=False, allow_none=True, load_default=None)
    avatar_url = fields.Url(data_key="avatarUrl", require_tld=False, allow_none=True, load_default=None)

    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict) and "email" in data:
            data["email"] = _norm_email(data["email"])
        return data


class LoginSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    email = fields.String(required=True)
    password = fields.String(required=True, load_only=True)

    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict) and "email" in data:
            data["email"] = _norm_email(data["email"])
        return data


class UserPublicSchema(Schema):
    name = fields.String(allow_none=True)
    email = fields.String()
    birthday = fields.Date(allow_none=True)
