from collections.abc import Mapping
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, cast
from uuid import UUID

from boto3.dynamodb.types import TypeDeserializer, TypeSerializer

from .exceptions import DynamoSerializationError


def isoformat(value: date) -> str:
    """ISO 8601 text for dates and datetimes, with 'Z' for UTC as Pydantic writes it."""
    if isinstance(value, datetime):
        offset = value.utcoffset()
        if offset is not None and not offset:
            return value.replace(tzinfo=None).isoformat() + "Z"
    return value.isoformat()


def to_wire(value: Any) -> Any:
    """
    Recursively converts a Python value into something TypeSerializer accepts.

    Decoded cursor values are plain JSON (float, str), while model fields can be
    datetime, UUID or Enum. Both must land on the same DynamoDB representation,
    otherwise the seek filter would compare a string against a number.
    """
    if isinstance(value, bool) or value is None:
        return value
    if isinstance(value, float):
        # str() first so 0.1 stays 0.1
        return Decimal(str(value))
    if isinstance(value, date):
        return isoformat(value)
    if isinstance(value, (UUID, Enum)):
        return str(value) if isinstance(value, UUID) else to_wire(value.value)
    if isinstance(value, Mapping):
        return {k: to_wire(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_wire(v) for v in value]
    if isinstance(value, (set, frozenset)):
        return {to_wire(v) for v in value}
    return value


def from_wire(value: Any) -> Any:
    """Recursively turns Decimals back into int (whole numbers) or float."""
    if isinstance(value, Decimal):
        return int(value) if value % 1 == 0 else float(value)
    if isinstance(value, dict):
        return {k: from_wire(v) for k, v in value.items()}
    if isinstance(value, list):
        return [from_wire(v) for v in value]
    return value


class DynamoSerializer:
    """
    Handles the conversion between Python values and DynamoDB Low-Level format.

    Used in both directions by DynamoScanQuery: filter values (including cursor
    values) on the way out, scanned items on the way back.
    """

    def __init__(self) -> None:
        self._serializer = TypeSerializer()
        self._deserializer = TypeDeserializer()

    def to_dynamo_value(self, value: Any) -> dict[str, Any]:
        """
        Serializes a single value for ExpressionAttributeValues.
        E.g.: 10.5 -> {'N': '10.5'}
        """
        try:
            return cast(dict[str, Any], self._serializer.serialize(to_wire(value)))
        except TypeError as e:
            raise DynamoSerializationError(
                f"Failed to serialize value '{value}'. error={e!s}", original_error=e
            ) from e

    def to_item(self, record: Mapping[str, Any]) -> dict[str, dict[str, Any]]:
        """Serializes a whole record into an Item for put_item."""
        return {key: self.to_dynamo_value(value) for key, value in record.items()}

    def from_dynamo(self, item: dict[str, Any]) -> dict[str, Any]:
        """Converts a scanned Item back to a plain Python dict."""
        return {k: from_wire(self._deserializer.deserialize(v)) for k, v in item.items()}
