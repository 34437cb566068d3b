"""Authentication header schemas."""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields, validate

DEFAULT_TOKEN_TYPE = "Bearer"

# Wire names carried on requests and responses.
ACCESS_TOKEN_HEADER = "access-token"
CLIENT_HEADER = "client"
EXPIRY_HEADER = "expiry"
UID_HEADER = "uid"
TOKEN_TYPE_HEADER = "token-type"

AUTH_HEADERS = (
    ACCESS_TOKEN_HEADER,
    CLIENT_HEADER,
    EXPIRY_HEADER,
    UID_HEADER,
    TOKEN_TYPE_HEADER,
)


class AuthHeadersSchema(Schema):
    """Token material presented by, and returned to, a client."""

    class Meta:
        unknown = EXCLUDE

    access_token = fields.String(
        required=True, data_key=ACCESS_TOKEN_HEADER, validate=validate.Length(min=1, max=512)
    )
    client = fields.String(required=True, data_key=CLIENT_HEADER, validate=validate.Length(min=1, max=128))
    uid = fields.String(required=True, data_key=UID_HEADER, validate=validate.Length(min=1, max=254))
    expiry = fields.Integer(load_default=None, allow_none=True, data_key=EXPIRY_HEADER)
    token_type = fields.String(load_default=DEFAULT_TOKEN_TYPE, data_key=TOKEN_TYPE_HEADER)
