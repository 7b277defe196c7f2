"""
Page-number (offset) pagination.

Usage:
    paginator = PagePaginator({"id": True}, take=TakeBounds(default=10, max=100))
    page = paginator.paginate(MemoryQuery(users), page=3)
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Generic, TypeVar

from ._logging import logger
from .config import TakeBounds
from .ordering import OrderBy, normalize_order_by, resolve_columns
from .pagination import Deferred, LazyPageResult, PageResult
from .query import Query

T = TypeVar("T")


@dataclass(frozen=True)
class _PagePlan(Generic[T]):
    rows: Query[T]
    counter: Query[T] | None
    take: int
    page: int


class PagePaginator:
    """
    Offset-based paginator over any Query.

    Args:
        order_by: Default ordering declaration; a per-call order_by replaces it
        column_names: Optional field -> column overrides (default: query.default_column)
        take: TakeBounds, a default page size, or None for library defaults
    """

    def __init__(
        self,
        order_by: OrderBy,
        *,
        column_names: Mapping[str, str] | None = None,
        take: TakeBounds | int | None = None,
    ) -> None:
        self.order_by = normalize_order_by(order_by)
        self.take_bounds = TakeBounds.coerce(take)
        self.column_names = dict(column_names or {})

    def paginate(
        self,
        query: Query[T],
        *,
        page: int | None = None,
        take: int | None = None,
        order_by: OrderBy | None = None,
        include_count: bool = True,
    ) -> PageResult[T]:
        """
        Fetches one page.

        Args:
            query: Filtered query to paginate; left untouched
            page: 1-based page number (missing or < 1 means the first page)
            take: Requested page size, clamped into the configured bounds
            order_by: Ordering for this call only
            include_count: Also count all rows of the unpaginated query

        Raises:
            ConfigurationError: If a per-call order_by is invalid
        """
        plan = self._plan(query, page, take, order_by, include_count)
        result = self._execute(plan)
        if plan.counter is not None:
            result.count = plan.counter.count()
        return result

    def paginate_lazy(
        self,
        query: Query[T],
        *,
        page: int | None = None,
        take: int | None = None,
        order_by: OrderBy | None = None,
        include_count: bool = True,
    ) -> LazyPageResult[T]:
        """Same as paginate(), but defers both queries until their fields are read."""
        plan = self._plan(query, page, take, order_by, include_count)
        counter = plan.counter

        return LazyPageResult(
            Deferred(lambda: self._execute(plan)),
            Deferred(counter.count) if counter is not None else Deferred(lambda: None),
        )

    def _plan(
        self,
        query: Query[T],
        page: int | None,
        take: int | None,
        order_by: OrderBy | None,
        include_count: bool,
    ) -> _PagePlan[T]:
        terms = self.order_by if order_by is None else normalize_order_by(order_by)
        effective_page = max(1, page or 1)
        effective_take = self.take_bounds.clamp(take)

        counter = query.clone() if include_count else None
        rows = query.clone()

        for column, term in zip(resolve_columns(terms, query, self.column_names), terms):
            rows.add_ordering(column, term.ascending)
        rows.offset((effective_page - 1) * effective_take).limit(effective_take + 1)

        logger.debug(
            "Planned offset page",
            extra={"page": effective_page, "take": effective_take, "include_count": include_count},
        )
        return _PagePlan(rows=rows, counter=counter, take=effective_take, page=effective_page)

    def _execute(self, plan: _PagePlan[T]) -> PageResult[T]:
        rows = plan.rows.fetch()
        nodes = rows[: plan.take]

        logger.debug(
            "Fetched offset page",
            extra={"page": plan.page, "returned": len(nodes), "has_next": len(rows) > plan.take},
        )
        return PageResult(nodes=nodes, has_next=len(rows) > plan.take)
