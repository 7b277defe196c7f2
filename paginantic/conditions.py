"""
Predicate DSL for Paginantic.

This module provides a DynCondition wrapper and Attr builder that create
condition trees compatible with DynamoDB's expression language. Paginators
use it to express seek predicates; query collaborators either compile the
tree into a DynamoDB FilterExpression (compile_condition) or evaluate it
against in-memory records (evaluate_condition).

Design:
- DynCondition wraps boto3 ConditionBase, stored in .raw attribute
- Attr builder wraps boto3 Attr internally, returns DynCondition
- Operators &, |, ~ on DynCondition produce new DynCondition instances
- Values stay inside the tree and are bound to placeholders at compile time

Usage:
    from paginantic import Attr

    condition = (Attr("name") > "b") | ((Attr("name") == "b") & (Attr("id") < 5))
"""

from __future__ import annotations

import operator
from collections.abc import Callable, Sequence
from functools import reduce
from typing import TYPE_CHECKING, Any, Union

from boto3.dynamodb.conditions import And as Boto3And
from boto3.dynamodb.conditions import Attr as Boto3Attr
from boto3.dynamodb.conditions import AttributeBase as Boto3AttributeBase
from boto3.dynamodb.conditions import ConditionBase as Boto3ConditionBase
from boto3.dynamodb.conditions import Not as Boto3Not
from boto3.dynamodb.conditions import Or as Boto3Or

from .fields import MISSING, read_path
from .serializer import to_wire

if TYPE_CHECKING:
    from .serializer import DynamoSerializer

# Type alias for condition parameter (DynCondition or raw boto3 for passthrough)
Condition = Union["DynCondition", Boto3ConditionBase]

# (column, ascending, cursor value) for one ordering field
SeekKey = tuple[str, bool, Any]


def _extract_raw(condition: Condition) -> Boto3ConditionBase:
    """
    Returns the boto3 condition behind a DynCondition, or a raw boto3 condition as-is.

    Raises:
        TypeError: If condition is neither DynCondition nor boto3 ConditionBase
    """
    if isinstance(condition, DynCondition):
        return condition.raw
    if isinstance(condition, Boto3ConditionBase):
        return condition
    raise TypeError(f"Expected DynCondition or boto3 ConditionBase, got {type(condition).__name__}")


class DynCondition:
    """
    A node of a predicate tree.

    Wraps a boto3 condition (.raw) so trees compose with &, | and ~ whether
    their leaves came from Attr or straight from boto3.dynamodb.conditions.
    """

    __slots__ = ("raw",)

    def __init__(self, raw: Boto3ConditionBase) -> None:
        self.raw = raw

    def __and__(self, other: Condition) -> DynCondition:
        return DynCondition(Boto3And(self.raw, _extract_raw(other)))

    def __rand__(self, other: Condition) -> DynCondition:
        return DynCondition(Boto3And(_extract_raw(other), self.raw))

    def __or__(self, other: Condition) -> DynCondition:
        return DynCondition(Boto3Or(self.raw, _extract_raw(other)))

    def __ror__(self, other: Condition) -> DynCondition:
        return DynCondition(Boto3Or(_extract_raw(other), self.raw))

    def __invert__(self) -> DynCondition:
        return DynCondition(Boto3Not(self.raw))

    def __repr__(self) -> str:
        return f"DynCondition({self.raw!r})"


def wrap_condition(condition: Condition) -> DynCondition:
    """Accepts a DynCondition or a raw boto3 condition and returns a DynCondition."""
    if isinstance(condition, DynCondition):
        return condition
    return DynCondition(_extract_raw(condition))


class Attr:
    """
    A column reference for building predicates.

    Usage:
        Attr("name") == "b"
        Attr("created_at") < cursor_value
        Attr("deleted_at").not_exists()
        Attr("profile.age").between(18, 65)
    """

    __slots__ = ("name", "_attr")

    def __init__(self, name: str) -> None:
        self.name = name
        self._attr = Boto3Attr(name)

    def _build(self, method: str, *args: Any) -> DynCondition:
        return DynCondition(getattr(self._attr, method)(*args))

    def __eq__(self, value: Any) -> DynCondition:  # type: ignore[override]
        return self._build("eq", value)

    def __ne__(self, value: Any) -> DynCondition:  # type: ignore[override]
        return self._build("ne", value)

    def __lt__(self, value: Any) -> DynCondition:
        return self._build("lt", value)

    def __le__(self, value: Any) -> DynCondition:
        return self._build("lte", value)

    def __gt__(self, value: Any) -> DynCondition:
        return self._build("gt", value)

    def __ge__(self, value: Any) -> DynCondition:
        return self._build("gte", value)

    def exists(self) -> DynCondition:
        return self._build("exists")

    def not_exists(self) -> DynCondition:
        return self._build("not_exists")

    def begins_with(self, prefix: str) -> DynCondition:
        return self._build("begins_with", prefix)

    def contains(self, value: Any) -> DynCondition:
        """Substring match for strings, membership for lists and sets."""
        return self._build("contains", value)

    def between(self, low: Any, high: Any) -> DynCondition:
        """Inclusive on both ends."""
        return self._build("between", low, high)

    def is_in(self, values: list[Any]) -> DynCondition:
        return self._build("is_in", values)

    def __repr__(self) -> str:
        return f"Attr({self.name!r})"


# --- PAGINATION PREDICATES ---


def build_seek_condition(keys: Sequence[SeekKey], forward: bool) -> DynCondition:
    """
    Builds the composite-key seek predicate for keyset pagination.

    For keys (f1, d1, c1) .. (fN, dN, cN) the predicate is the OR over i of

        f1 = c1 AND ... AND f(i-1) = c(i-1) AND fi <op> ci

    where <op> is '>' when (di is ascending) == forward, else '<'. Term i
    matches rows tied on the first i-1 keys and strictly past the cursor on
    the i-th, so rows equal on leading keys fall through to later ones.

    Args:
        keys: (column, ascending, cursor value) per ordering field, major first
        forward: True to seek after the cursor, False to seek before it

    Returns:
        DynCondition for the strict lexicographic successor/predecessor set
    """
    if not keys:
        raise ValueError("Seek condition needs at least one key")

    clauses: list[DynCondition] = []
    ties: list[DynCondition] = []

    for column, ascending, value in keys:
        attr = Attr(column)
        step = attr > value if ascending == forward else attr < value
        clauses.append(reduce(operator.and_, [*ties, step]))
        ties.append(attr == value)

    return reduce(operator.or_, clauses)


def never(column: str) -> DynCondition:
    """
    Builds a predicate no record satisfies.

    Used in place of a seek predicate when a cursor cannot be decoded, so the
    query still runs and yields an empty page.
    """
    attr = Attr(column)
    return attr.exists() & attr.not_exists()


# --- EVALUATION ---


def _compare(op: Callable[[Any, Any], bool]) -> Callable[[Any, Any], bool]:
    def compare(left: Any, right: Any) -> bool:
        # Missing/NULL values and mismatched types never satisfy an ordering comparison
        if left is MISSING or right is MISSING or left is None or right is None:
            return False
        try:
            return bool(op(left, right))
        except TypeError:
            return False

    return compare


def _equals(left: Any, right: Any) -> bool:
    if left is MISSING or right is MISSING:
        return False
    return bool(left == right)


_COMPARISONS: dict[str, Callable[[Any, Any], bool]] = {
    "=": _equals,
    "<>": lambda left, right: left is not MISSING and not _equals(left, right),
    "<": _compare(operator.lt),
    "<=": _compare(operator.le),
    ">": _compare(operator.gt),
    ">=": _compare(operator.ge),
}


def evaluate_condition(condition: Condition, record: Any) -> bool:
    """
    Evaluates a condition tree against an in-memory record.

    Attribute names are resolved as dotted paths on mappings or objects.
    Semantics follow DynamoDB filters: both sides are compared in wire form
    (see serializer.to_wire, so datetimes compare as ISO 8601 text), and
    comparisons involving a missing attribute, a NULL value or incompatible
    types are false.

    Args:
        condition: A DynCondition or raw boto3 condition object
        record: Mapping or object to test

    Returns:
        True if the record satisfies the condition

    Raises:
        TypeError: If the tree uses an operator without an in-memory equivalent
    """
    raw = _extract_raw(condition)
    expression = raw.get_expression()
    op = expression["operator"]
    values = expression["values"]

    def operand(value: Any) -> Any:
        # Both sides in the form DynamoDB would compare, so a datetime field
        # matches the ISO string a decoded cursor carries
        if isinstance(value, Boto3AttributeBase):
            value = read_path(record, value.name)
        return value if value is MISSING else to_wire(value)

    if op == "AND":
        return all(evaluate_condition(value, record) for value in values)
    if op == "OR":
        return any(evaluate_condition(value, record) for value in values)
    if op == "NOT":
        return not evaluate_condition(values[0], record)
    if op in _COMPARISONS:
        return _COMPARISONS[op](operand(values[0]), operand(values[1]))
    if op == "attribute_exists":
        return operand(values[0]) is not MISSING
    if op == "attribute_not_exists":
        return operand(values[0]) is MISSING
    if op == "BETWEEN":
        target = operand(values[0])
        return _COMPARISONS[">="](target, operand(values[1])) and _COMPARISONS["<="](
            target, operand(values[2])
        )
    if op == "IN":
        target = operand(values[0])
        return target is not MISSING and target in to_wire(values[1])
    if op == "begins_with":
        target = operand(values[0])
        return isinstance(target, str) and target.startswith(operand(values[1]))
    if op == "contains":
        target = operand(values[0])
        try:
            return target is not MISSING and target is not None and operand(values[1]) in target
        except TypeError:
            return False

    raise TypeError(f"Condition operator '{op}' cannot be evaluated in memory")


# --- COMPILATION ---


def compile_condition(
    condition: Condition,
    serializer: DynamoSerializer,
) -> dict[str, Any]:
    """
    Compiles a condition into DynamoDB request parameters.

    Uses boto3's ConditionExpressionBuilder to generate:
    - ConditionExpression (string)
    - ExpressionAttributeNames (dict)
    - ExpressionAttributeValues (dict)

    Values are emitted as :placeholders and serialized separately, so
    cursor contents never reach the expression text.

    Args:
        condition: A DynCondition or raw boto3 condition object
        serializer: DynamoSerializer for converting values to DynamoDB format

    Returns:
        Dict with ConditionExpression, and optionally ExpressionAttributeNames
        and ExpressionAttributeValues (only included if non-empty)
    """
    from boto3.dynamodb.conditions import ConditionExpressionBuilder

    boto3_condition = _extract_raw(condition)

    builder = ConditionExpressionBuilder()
    expression = builder.build_expression(boto3_condition, is_key_condition=False)

    result: dict[str, Any] = {
        "ConditionExpression": expression.condition_expression,
    }

    if expression.attribute_name_placeholders:
        result["ExpressionAttributeNames"] = dict(expression.attribute_name_placeholders)

    if expression.attribute_value_placeholders:
        # boto3's builder uses placeholder names like :v0, :v1, etc.
        serialized_values = {}
        for placeholder, value in expression.attribute_value_placeholders.items():
            serialized_values[placeholder] = serializer.to_dynamo_value(value)
        result["ExpressionAttributeValues"] = serialized_values

    return result
