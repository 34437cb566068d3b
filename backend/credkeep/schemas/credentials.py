"""Marshmallow schemas for the serialized credential map."""

from __future__ import annotations

import math
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from marshmallow import EXCLUDE, Schema, ValidationError, fields

from credkeep.services._shared.dto import CredentialPair


class UnixTimestamp(fields.Field):
    """
    Aware UTC ``datetime`` stored as integer Unix seconds.

    :param round_up: Round fractional seconds up instead of truncating, so a
        stored deadline never ends earlier than the in-memory one.
    """

    def __init__(self, *, round_up: bool = False, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.round_up = round_up

    def _serialize(self, value: Any, attr: str | None, obj: Any, **kwargs: Any) -> int | None:
        if value is None:
            return None
        seconds = value.timestamp()
        return math.ceil(seconds) if self.round_up else int(seconds)

    def _deserialize(
        self, value: Any, attr: str | None, data: Mapping[str, Any] | None, **kwargs: Any
    ) -> datetime:
        try:
            return datetime.fromtimestamp(int(value), tz=UTC)
        except (TypeError, ValueError, OverflowError, OSError) as exc:
            raise ValidationError("Not a valid Unix timestamp.") from exc


class CredentialPairSchema(Schema):
    """
    One entry of the credential map, keyed externally by client id.

    Only digests are ever serialized; ``token`` holds the digest of the
    current access token.
    """

    class Meta:
        unknown = EXCLUDE

    token_digest = fields.String(required=True, data_key="token")
    expiry = UnixTimestamp(required=True)
    last_token = fields.String(allow_none=True, load_default=None)
    last_token_expiry = UnixTimestamp(round_up=True, allow_none=True, load_default=None)
    updated_at = UnixTimestamp(allow_none=True, load_default=None)


_pair_schema = CredentialPairSchema()


def dump_credentials(credentials: Mapping[str, CredentialPair]) -> dict[str, dict[str, Any]]:
    """Serialize a credential map into JSON-compatible primitives."""
    return {cid: _pair_schema.dump(pair) for cid, pair in credentials.items()}


def load_credentials(raw: Mapping[str, Any] | None) -> dict[str, CredentialPair]:
    """
    Rebuild a credential map from its serialized form.

    :raises marshmallow.ValidationError: If an entry is malformed.
    """
    loaded: dict[str, CredentialPair] = {}
    for cid, entry in (raw or {}).items():
        data = _pair_schema.load(entry)
        loaded[cid] = CredentialPair(client_id=cid, **data)
    return loaded
