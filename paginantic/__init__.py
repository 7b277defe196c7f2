from .codecs import Base64CursorCodec, Cursor, CursorCodec, JsonCursorCodec
from .conditions import Attr, Condition, DynCondition
from .config import DEFAULT_TAKE, TakeBounds
from .cursor_paginator import CursorPaginator
from .exceptions import (
    ConfigurationError,
    ConflictingCursorsError,
    CursorDecodeError,
    CursorEncodeError,
    DynamoSerializationError,
    PaginanticError,
    ProvisionedThroughputExceededError,
    RequestTimeoutError,
    TableNotFoundError,
    ValidationError,
)
from .ordering import OrderTerm, normalize_order_by
from .page_paginator import PagePaginator
from .pagination import (
    CursorPageResult,
    Deferred,
    LazyCursorPageResult,
    LazyPageResult,
    PageResult,
)
from .query import MemoryQuery, Query
from .scan import DynamoScanQuery

__all__ = [
    "CursorPaginator",
    "PagePaginator",
    "TakeBounds",
    "DEFAULT_TAKE",
    "OrderTerm",
    "normalize_order_by",
    # Results
    "CursorPageResult",
    "PageResult",
    "LazyCursorPageResult",
    "LazyPageResult",
    "Deferred",
    # Codecs
    "CursorCodec",
    "JsonCursorCodec",
    "Base64CursorCodec",  # Default codec
    "Cursor",
    # Query collaborators
    "Query",  # Protocol for custom executors
    "MemoryQuery",
    "DynamoScanQuery",
    # Conditions DSL
    "Attr",  # Primary builder for conditions
    "DynCondition",  # Wrapper type (rarely used directly)
    "Condition",  # Type alias for type hints
    # Exceptions
    "PaginanticError",
    "ConfigurationError",
    "ConflictingCursorsError",
    "CursorDecodeError",
    "CursorEncodeError",
    "TableNotFoundError",
    "ProvisionedThroughputExceededError",
    "RequestTimeoutError",
    "ValidationError",
    "DynamoSerializationError",
]
