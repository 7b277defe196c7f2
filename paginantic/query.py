"""
Query collaborators for Paginantic.

Paginators never execute queries themselves. They talk to a Query: a handle on
an as-yet-unexecuted, filterable and orderable query over entities. Any object
implementing the Query protocol can be paginated; two implementations ship
with the library:

- MemoryQuery: evaluates conditions against an in-memory sequence of records
- DynamoScanQuery (paginantic.scan): scans a DynamoDB table through boto3
"""

from collections.abc import Callable, Iterable
from decimal import Decimal
from typing import Any, Generic, Protocol, TypeVar, runtime_checkable

from ._logging import logger
from .conditions import Condition, DynCondition, evaluate_condition, wrap_condition
from .fields import MISSING, read_path
from .serializer import to_wire

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)

# (column, ascending) in the order orderings were added
Ordering = tuple[str, bool]


@runtime_checkable
class Query(Protocol[T_co]):
    """
    The query executor interface paginators depend on.

    Builder methods mutate the handle and return it for chaining; clone()
    returns an independent copy so a row fetch and a count can be issued
    from the same starting filter state.
    """

    def default_column(self, field: str) -> str:
        """Maps a symbolic field name to a column when no override is configured."""
        ...

    def add_ordering(self, column: str, ascending: bool = True) -> "Query[T_co]":
        """Appends one ordering term; successive calls compose major to minor."""
        ...

    def add_predicate(self, condition: Condition) -> "Query[T_co]":
        """Conjoins a filter. Values are bound as placeholders by the executor."""
        ...

    def limit(self, count: int) -> "Query[T_co]": ...

    def offset(self, count: int) -> "Query[T_co]": ...

    def clone(self) -> "Query[T_co]": ...

    def fetch(self) -> list[T_co]:
        """Executes the query and returns the rows."""
        ...

    def count(self) -> int:
        """Executes a count of matching rows, ignoring limit and offset."""
        ...


def check_bound(name: str, count: int) -> None:
    if isinstance(count, bool) or not isinstance(count, int) or count < 0:
        raise ValueError(f"{name} must be a non-negative integer, got {count!r}")


def _rank(value: Any) -> tuple[Any, ...]:
    # Missing and NULL first, then one band per type so mixed columns never
    # compare across types
    if value is MISSING or value is None:
        return (0,)
    value = to_wire(value)
    if isinstance(value, bool):
        return (4, value)
    if isinstance(value, (int, Decimal)):
        return (1, value)
    if isinstance(value, str):
        return (2, value)
    if isinstance(value, (bytes, bytearray)):
        return (3, bytes(value))
    return (5, type(value).__name__)


def _sort_key(column: str, read: Callable[[Any, str], Any]) -> Callable[[Any], tuple[Any, ...]]:
    def key(record: Any) -> tuple[Any, ...]:
        return _rank(read(record, column))

    return key


def sort_records(
    records: Iterable[T],
    orderings: Iterable[Ordering],
    read: Callable[[Any, str], Any] = read_path,
) -> list[T]:
    """
    Sorts records by several (column, ascending) terms, major term first.

    Relies on sort stability: sorting by the minor term first and the major
    term last yields the composite order, with mixed directions per term.
    """
    rows = list(records)
    for column, ascending in reversed(list(orderings)):
        rows.sort(key=_sort_key(column, read), reverse=not ascending)
    return rows


class MemoryQuery(Generic[T]):
    """
    Query over an in-memory sequence of records.

    Records may be mappings or objects (e.g. Pydantic models); columns are
    attribute names, dotted for nested values. Filtering follows DynamoDB
    semantics (see conditions.evaluate_condition).

    Usage:
        query = MemoryQuery(users)
        page = paginator.paginate(query, take=10)
    """

    def __init__(self, records: Iterable[T]) -> None:
        # Shared read-only between clones
        self.records: tuple[T, ...] = tuple(records)

        # Internal state of the query
        self.conditions: list[DynCondition] = []
        self.orderings: list[Ordering] = []
        self.limit_val: int | None = None
        self.offset_val = 0

    def default_column(self, field: str) -> str:
        return field

    # --- BUILDER INTERFACE ---

    def add_ordering(self, column: str, ascending: bool = True) -> "MemoryQuery[T]":
        self.orderings.append((column, ascending))
        return self

    def add_predicate(self, condition: Condition) -> "MemoryQuery[T]":
        """
        Adds a filter condition. Multiple calls are combined with AND.

        Usage:
            MemoryQuery(users).add_predicate(Attr("age") >= 18)
        """
        self.conditions.append(wrap_condition(condition))
        return self

    def limit(self, count: int) -> "MemoryQuery[T]":
        """Sets the maximum number of records to return."""
        check_bound("limit", count)
        self.limit_val = count
        return self

    def offset(self, count: int) -> "MemoryQuery[T]":
        """Sets the number of records to skip."""
        check_bound("offset", count)
        self.offset_val = count
        return self

    def clone(self) -> "MemoryQuery[T]":
        copy: MemoryQuery[T] = MemoryQuery(())
        copy.records = self.records
        copy.conditions = list(self.conditions)
        copy.orderings = list(self.orderings)
        copy.limit_val = self.limit_val
        copy.offset_val = self.offset_val
        return copy

    # --- EXECUTION ---

    def _matching(self) -> list[T]:
        return [
            record
            for record in self.records
            if all(evaluate_condition(condition, record) for condition in self.conditions)
        ]

    def fetch(self) -> list[T]:
        rows = sort_records(self._matching(), self.orderings)
        end = None if self.limit_val is None else self.offset_val + self.limit_val
        result = rows[self.offset_val : end]

        logger.debug(
            "Fetched in-memory records",
            extra={
                "total": len(self.records),
                "matched": len(rows),
                "returned": len(result),
                "limit": self.limit_val,
                "offset": self.offset_val,
            },
        )
        return result

    def count(self) -> int:
        return len(self._matching())
