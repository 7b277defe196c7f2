"""
Cursor codecs.

A codec maps a structured cursor (one value per ordering field, taken from a
boundary row) to an opaque token and back:

    codec = Base64CursorCodec()
    token = codec.encode({"name": "b", "id": 5})   # opaque, URL-safe
    codec.decode(token)                            # {'name': 'b', 'id': 5}

Serialization is delegated to pydantic_core so datetimes, UUIDs, enums and
decimals are written the same way pydantic writes them. Decoding yields plain
JSON values; paginators bound to a model validate them back into field types.
"""

import base64
import binascii
from typing import Any, Protocol, runtime_checkable

from pydantic_core import PydanticSerializationError, from_json, to_json

from .exceptions import CursorDecodeError, CursorEncodeError

Cursor = dict[str, Any]


@runtime_checkable
class CursorCodec(Protocol):
    """Bidirectional mapping between a cursor and an opaque token."""

    def encode(self, cursor: Cursor) -> str: ...

    def decode(self, token: str) -> Cursor: ...


class JsonCursorCodec:
    """Plain-text codec: the token is the compact JSON form of the cursor."""

    def encode(self, cursor: Cursor) -> str:
        try:
            return to_json(cursor).decode("utf-8")
        except PydanticSerializationError as e:
            raise CursorEncodeError(f"Cursor is not serializable: {e}", original_error=e) from e

    def decode(self, token: str) -> Cursor:
        try:
            data = from_json(token)
        except ValueError as e:
            raise CursorDecodeError(f"Cursor is not valid JSON: {e}", original_error=e) from e

        if not isinstance(data, dict):
            raise CursorDecodeError(f"Cursor must be a JSON object, got {type(data).__name__}")
        return data


class Base64CursorCodec(JsonCursorCodec):
    """
    URL-safe codec: the JSON form, base64url encoded with '=' padding stripped.
    Default codec of CursorPaginator.
    """

    def encode(self, cursor: Cursor) -> str:
        text = super().encode(cursor)
        return base64.urlsafe_b64encode(text.encode("utf-8")).decode("ascii").rstrip("=")

    def decode(self, token: str) -> Cursor:
        # Restore base64 padding that was stripped on encode
        padded = token + "=" * ((4 - len(token) % 4) % 4)
        try:
            raw = base64.b64decode(padded, altchars=b"-_", validate=True)
            text = raw.decode("utf-8")
        except (binascii.Error, ValueError) as e:
            raise CursorDecodeError(f"Cursor is not valid base64: {e}", original_error=e) from e
        return super().decode(text)
