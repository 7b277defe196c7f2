from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

from botocore.exceptions import ClientError


class PaginanticError(Exception):
    """Base exception for all Paginantic errors."""

    def __init__(self, message: str, original_error: Exception | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class ConfigurationError(PaginanticError, ValueError):
    """Raised when a paginator is configured with an invalid ordering or take bounds."""

    def __init__(
        self,
        message: str,
        option: str | None = None,
        value: Any | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message, original_error)
        self.option = option
        self.value = value


class ConflictingCursorsError(PaginanticError, ValueError):
    """Raised when both a previous and a next cursor are passed to the same call."""

    def __init__(self, message: str = "prev_cursor and next_cursor are mutually exclusive") -> None:
        super().__init__(message)


class CursorDecodeError(PaginanticError):
    """Raised when a cursor token is malformed, foreign or does not match the ordering."""


class CursorEncodeError(PaginanticError):
    """Raised when a boundary row holds a value the codec cannot serialize."""


class DynamoSerializationError(PaginanticError):
    """Raised when a filter value cannot be serialized to DynamoDB format."""


# --- Scan collaborator errors ---


class TableNotFoundError(PaginanticError):
    """Raised when the scanned table (or index) does not exist."""

    def __init__(self, table_name: str, original_error: Exception | None = None) -> None:
        super().__init__(f"Table '{table_name}' not found", original_error)
        self.table_name = table_name


class ProvisionedThroughputExceededError(PaginanticError):
    """Raised when DynamoDB throttles the scan."""


class RequestTimeoutError(PaginanticError):
    """Raised when a scan request times out."""


class ValidationError(PaginanticError):
    """Raised when DynamoDB rejects a FilterExpression or its values."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message, original_error)
        self.field = field
        self.value = value


_ERROR_CODES: dict[str, type[PaginanticError]] = {
    "ProvisionedThroughputExceededException": ProvisionedThroughputExceededError,
    "ThrottlingException": ProvisionedThroughputExceededError,
    "RequestLimitExceeded": ProvisionedThroughputExceededError,
    "ValidationException": ValidationError,
    "SerializationException": ValidationError,
    "RequestTimeout": RequestTimeoutError,
    "RequestTimeoutException": RequestTimeoutError,
}


@contextmanager
def handle_dynamo_errors(table_name: str | None = None) -> Generator[None, None, None]:
    """
    Translates botocore ClientErrors raised inside the block into
    PaginanticError subclasses. Other exceptions pass through untouched.

    Usage:
        with handle_dynamo_errors(table_name="users"):
            client.scan(...)
    """
    try:
        yield
    except ClientError as e:
        error = e.response.get("Error", {})
        code = error.get("Code", "Unknown")
        message = error.get("Message", str(e))

        if code == "ResourceNotFoundException":
            raise TableNotFoundError(table_name or "unknown", original_error=e) from e

        error_cls = _ERROR_CODES.get(code)
        if error_cls is not None:
            raise error_cls(message, original_error=e) from e

        raise PaginanticError(f"DynamoDB error ({code}): {message}", original_error=e) from e
