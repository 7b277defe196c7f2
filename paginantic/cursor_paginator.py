"""
Keyset (seek) pagination.

CursorPaginator pages through a query by remembering the ordering values of
the boundary rows of each page in opaque cursor tokens. The next page is
everything strictly past the last row in the configured order; the previous
page is everything strictly before the first row, fetched in reverse and
flipped back. A unique last ordering field (e.g. "id") makes the order total,
so pages never skip or repeat rows.

Usage:
    paginator = CursorPaginator([{"created_at": False}, {"id": False}], model=User, take=25)

    first = paginator.paginate(MemoryQuery(users))
    second = paginator.paginate(MemoryQuery(users), next_cursor=first.next_cursor)
    back = paginator.paginate(MemoryQuery(users), prev_cursor=second.prev_cursor)
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

from ._logging import logger, redact_token
from .codecs import Base64CursorCodec, Cursor, CursorCodec
from .conditions import DynCondition, build_seek_condition, never
from .config import TakeBounds
from .exceptions import ConflictingCursorsError, CursorDecodeError
from .fields import Accessor, bind_fields
from .ordering import OrderBy, normalize_order_by, resolve_columns, reverse_order
from .pagination import CursorPageResult, Deferred, LazyCursorPageResult
from .query import Query

T = TypeVar("T")


@dataclass(frozen=True)
class _CursorPlan(Generic[T]):
    """A fully built, not yet executed page request."""

    rows: Query[T]
    counter: Query[T] | None
    take: int
    backward: bool
    has_cursor: bool


class CursorPaginator:
    """
    Cursor-based paginator over any Query.

    The paginator holds no per-call state and never mutates the query it is
    given, so one instance can serve concurrent requests.

    Args:
        order_by: Ordering declaration, e.g. {"id": True} or [{"name": True}, {"id": False}]
        column_names: Optional field -> column overrides (default: query.default_column)
        take: TakeBounds, a default page size, or None for library defaults
        codec: Cursor codec (default: Base64CursorCodec)
        model: Optional Pydantic model of the entities; cursor values are
               validated back into its field types
        accessors: Optional field -> callable(entity) overrides for reading
                   ordering values off fetched entities

    Raises:
        ConfigurationError: If the ordering or take bounds are invalid, or an
                            ordering field is unknown to the model
    """

    def __init__(
        self,
        order_by: OrderBy,
        *,
        column_names: Mapping[str, str] | None = None,
        take: TakeBounds | int | None = None,
        codec: CursorCodec | None = None,
        model: type[BaseModel] | None = None,
        accessors: Mapping[str, Accessor] | None = None,
    ) -> None:
        self.order_by = normalize_order_by(order_by)
        self.take_bounds = TakeBounds.coerce(take)
        self.codec: CursorCodec = codec or Base64CursorCodec()
        self.column_names = dict(column_names or {})
        self.fields = bind_fields(
            [term.field for term in self.order_by], model=model, accessors=accessors
        )

    # --- PUBLIC API ---

    def paginate(
        self,
        query: Query[T],
        *,
        prev_cursor: str | None = None,
        next_cursor: str | None = None,
        take: int | None = None,
        include_count: bool = True,
    ) -> CursorPageResult[T]:
        """
        Fetches one page.

        Args:
            query: Filtered query to paginate; left untouched
            prev_cursor: Token of the first node of a page, to fetch the page before it
            next_cursor: Token of the last node of a page, to fetch the page after it
            take: Requested page size, clamped into the configured bounds
            include_count: Also count all rows of the unpaginated query

        Returns:
            CursorPageResult with nodes in the configured order

        Raises:
            ConflictingCursorsError: If both prev_cursor and next_cursor are given
        """
        plan = self._plan(query, prev_cursor, next_cursor, take, include_count)
        page = self._execute(plan)
        if plan.counter is not None:
            page.count = plan.counter.count()
        return page

    def paginate_lazy(
        self,
        query: Query[T],
        *,
        prev_cursor: str | None = None,
        next_cursor: str | None = None,
        take: int | None = None,
        include_count: bool = True,
    ) -> LazyCursorPageResult[T]:
        """
        Same as paginate(), but defers execution until a field is read.

        Arguments are validated and the queries built immediately. The row
        fetch runs once, on first access to any row-derived field; the count
        runs only if the count field is read.
        """
        plan = self._plan(query, prev_cursor, next_cursor, take, include_count)
        counter = plan.counter

        return LazyCursorPageResult(
            Deferred(lambda: self._execute(plan)),
            Deferred(counter.count) if counter is not None else Deferred(lambda: None),
        )

    # --- PLANNING ---

    def _plan(
        self,
        query: Query[T],
        prev_cursor: str | None,
        next_cursor: str | None,
        take: int | None,
        include_count: bool,
    ) -> _CursorPlan[T]:
        # Empty tokens are treated as absent
        if prev_cursor and next_cursor:
            raise ConflictingCursorsError()

        effective_take = self.take_bounds.clamp(take)
        backward = bool(prev_cursor)
        token = prev_cursor if backward else next_cursor

        # The count runs against the caller's filter only
        counter = query.clone() if include_count else None
        rows = query.clone()

        columns = resolve_columns(self.order_by, query, self.column_names)
        if token:
            rows.add_predicate(self._seek_condition(token, columns, forward=not backward))

        terms = reverse_order(self.order_by) if backward else self.order_by
        for column, term in zip(columns, terms):
            rows.add_ordering(column, term.ascending)
        rows.limit(effective_take + 1)

        logger.debug(
            "Planned cursor page",
            extra={
                "direction": "backward" if backward else "forward",
                "take": effective_take,
                "has_cursor": bool(token),
                "include_count": include_count,
            },
        )
        return _CursorPlan(
            rows=rows,
            counter=counter,
            take=effective_take,
            backward=backward,
            has_cursor=bool(token),
        )

    def _decode(self, token: str) -> Cursor:
        cursor = self.codec.decode(token)

        missing = [field for field in self.fields if field not in cursor]
        if missing:
            raise CursorDecodeError(f"Cursor is missing ordering fields: {', '.join(missing)}")

        return {field: binding.coerce(cursor[field]) for field, binding in self.fields.items()}

    def _seek_condition(self, token: str, columns: list[str], forward: bool) -> DynCondition:
        try:
            cursor = self._decode(token)
        except CursorDecodeError as e:
            # A bad token yields an empty page rather than an error
            logger.warning(
                "Discarding undecodable cursor",
                extra={"token_hash": redact_token(token), "reason": e.message},
            )
            return never(columns[0])

        keys = [
            (column, term.ascending, cursor[term.field])
            for column, term in zip(columns, self.order_by)
        ]
        return build_seek_condition(keys, forward=forward)

    # --- EXECUTION ---

    def _mint(self, entity: Any) -> str:
        cursor = {field: binding.read(entity) for field, binding in self.fields.items()}
        return self.codec.encode(cursor)

    def _execute(self, plan: _CursorPlan[T]) -> CursorPageResult[T]:
        rows = plan.rows.fetch()
        has_more = len(rows) > plan.take
        nodes = rows[: plan.take]

        if plan.backward:
            # Fetched in reverse order, flip back into the configured order
            nodes.reverse()
            has_prev, has_next = has_more, True
        else:
            has_prev, has_next = plan.has_cursor, has_more

        logger.debug(
            "Fetched cursor page",
            extra={
                "direction": "backward" if plan.backward else "forward",
                "returned": len(nodes),
                "has_prev": has_prev,
                "has_next": has_next,
            },
        )
        return CursorPageResult(
            nodes=nodes,
            has_prev=has_prev,
            has_next=has_next,
            prev_cursor=self._mint(nodes[0]) if nodes else None,
            next_cursor=self._mint(nodes[-1]) if nodes else None,
        )
