"""
Ordering declarations for paginators.

An ordering is declared the way callers think about it, either a single mapping
or a list of mappings/pairs when precedence must be explicit:

    {"created_at": False}
    [{"name": True}, {"id": False}]
    [("name", True), ("id", False)]

and normalized into a tuple of OrderTerm, major key first.
"""

from collections.abc import Iterable, Mapping
from typing import Any, NamedTuple, Union

from .exceptions import ConfigurationError


class OrderTerm(NamedTuple):
    """One sort key: the symbolic field name and whether it sorts ascending."""

    field: str
    ascending: bool


# Type alias for the declaration forms accepted by normalize_order_by
OrderBy = Union[
    Mapping[str, bool],
    Iterable[Union[Mapping[str, bool], tuple[str, bool], OrderTerm]],
]


def _iter_pairs(order_by: Any) -> Iterable[tuple[Any, Any]]:
    if isinstance(order_by, Mapping):
        yield from order_by.items()
        return

    if isinstance(order_by, (str, bytes)) or not isinstance(order_by, Iterable):
        raise ConfigurationError(
            f"Unsupported ordering declaration of type {type(order_by).__name__}",
            option="order_by",
            value=order_by,
        )

    for item in order_by:
        if isinstance(item, Mapping):
            yield from item.items()
        elif isinstance(item, tuple) and len(item) == 2:
            yield item[0], item[1]
        else:
            raise ConfigurationError(
                f"Ordering entries must be mappings or (field, ascending) pairs, got {item!r}",
                option="order_by",
                value=item,
            )


def normalize_order_by(order_by: OrderBy) -> tuple[OrderTerm, ...]:
    """
    Normalizes an ordering declaration into canonical OrderTerms.

    Args:
        order_by: A mapping of field -> ascending, or a sequence of such mappings
                  and (field, ascending) pairs, in precedence order

    Returns:
        Tuple of OrderTerm, major to minor

    Raises:
        ConfigurationError: If the ordering is empty, repeats a field, or holds
                            a non-string field or non-bool direction
    """
    terms: list[OrderTerm] = []
    seen: set[str] = set()

    for field, ascending in _iter_pairs(order_by):
        if not isinstance(field, str) or not field:
            raise ConfigurationError(
                f"Ordering field names must be non-empty strings, got {field!r}",
                option="order_by",
                value=field,
            )
        if not isinstance(ascending, bool):
            raise ConfigurationError(
                f"Direction for '{field}' must be a bool (True = ascending), got {ascending!r}",
                option="order_by",
                value=ascending,
            )
        if field in seen:
            raise ConfigurationError(
                f"Field '{field}' appears more than once in the ordering",
                option="order_by",
                value=field,
            )
        seen.add(field)
        terms.append(OrderTerm(field, ascending))

    if not terms:
        raise ConfigurationError("Ordering must declare at least one field", option="order_by")

    return tuple(terms)


def reverse_order(terms: Iterable[OrderTerm]) -> tuple[OrderTerm, ...]:
    """Flips the direction of every term, keeping precedence."""
    return tuple(OrderTerm(term.field, not term.ascending) for term in terms)


def resolve_columns(
    terms: Iterable[OrderTerm],
    query: Any,
    column_names: Mapping[str, str] | None = None,
) -> list[str]:
    """
    Maps each term's field to the column a query orders and filters on.

    An explicit column_names entry wins; otherwise the query's own naming
    convention (query.default_column) applies.
    """
    column_names = column_names or {}
    return [column_names.get(term.field) or query.default_column(term.field) for term in terms]
