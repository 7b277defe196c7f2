"""
Pagination results for Paginantic.

This module provides the data structures returned by paginators: eager page
results, and lazy results whose fields are individually deferred.

A lazy result holds exactly two underlying computations: one row fetch, which
every row-derived field (nodes, has_prev, has_next, cursors) maps into, and one
independent count. Reading a field evaluates only the computation behind it,
at most once:

    lazy = paginator.paginate_lazy(query, take=10)
    lazy.nodes.result()        # runs the row fetch
    lazy.has_next.result()     # reuses it
    await lazy.count           # runs the count query in a worker thread
"""

import asyncio
import threading
from collections.abc import Callable, Generator
from dataclasses import dataclass, replace
from operator import attrgetter
from typing import Any, Generic, TypeVar

T = TypeVar("T")
U = TypeVar("U")


@dataclass
class CursorPageResult(Generic[T]):
    """
    A single page produced by keyset pagination.

    Attributes:
        nodes: Entities of this page, in the configured order
        has_prev: True if rows exist before this page
        has_next: True if rows exist after this page
        prev_cursor: Token of the first node, to fetch the preceding page (None if no nodes)
        next_cursor: Token of the last node, to fetch the following page (None if no nodes)
        count: Total number of rows matched by the unpaginated query (None if not requested)
    """

    nodes: list[T]
    has_prev: bool
    has_next: bool
    prev_cursor: str | None
    next_cursor: str | None
    count: int | None = None


@dataclass
class PageResult(Generic[T]):
    """
    A single page produced by page-number pagination.

    Attributes:
        nodes: Entities of this page
        has_next: True if a following page has rows
        count: Total number of rows matched by the unpaginated query (None if not requested)
    """

    nodes: list[T]
    has_next: bool
    count: int | None = None


class Deferred(Generic[T]):
    """
    A lazily evaluated value, computed at most once.

    The computation runs on the first call to result() (or first await) and
    its value, or exception, is kept for every later consumer. Concurrent
    consumers block on a lock, so the computation never runs twice.
    """

    def __init__(self, func: Callable[[], T]) -> None:
        self._func: Callable[[], T] | None = func
        self._lock = threading.Lock()
        self._done = False
        self._value: T | None = None
        self._error: BaseException | None = None

    @property
    def done(self) -> bool:
        """True once the computation has run, successfully or not."""
        return self._done

    def result(self) -> T:
        """
        Returns the value, computing it on first use.

        Raises:
            Whatever the computation raised, on this and every later call
        """
        if not self._done:
            with self._lock:
                if not self._done:
                    assert self._func is not None
                    try:
                        self._value = self._func()
                    except Exception as e:
                        self._error = e
                    self._done = True
                    self._func = None

        if self._error is not None:
            raise self._error
        return self._value  # type: ignore[return-value]

    def map(self, func: Callable[[T], U]) -> "Deferred[U]":
        """Derives a value from this one; evaluating it evaluates this one once."""
        return Deferred(lambda: func(self.result()))

    def __await__(self) -> Generator[Any, None, T]:
        # The computation may block on I/O, keep it off the event loop
        return asyncio.to_thread(self.result).__await__()

    def __repr__(self) -> str:
        state = "done" if self._done else "pending"
        return f"Deferred({state})"


class LazyCursorPageResult(Generic[T]):
    """
    CursorPageResult whose fields are Deferred values.

    nodes, has_prev, has_next, prev_cursor and next_cursor share one row fetch;
    count is backed by a separate count query and is never triggered by them.
    """

    def __init__(self, page: Deferred[CursorPageResult[T]], count: Deferred[int | None]) -> None:
        self._page = page
        self.nodes: Deferred[list[T]] = page.map(attrgetter("nodes"))
        self.has_prev: Deferred[bool] = page.map(attrgetter("has_prev"))
        self.has_next: Deferred[bool] = page.map(attrgetter("has_next"))
        self.prev_cursor: Deferred[str | None] = page.map(attrgetter("prev_cursor"))
        self.next_cursor: Deferred[str | None] = page.map(attrgetter("next_cursor"))
        self.count = count

    def result(self) -> CursorPageResult[T]:
        """Evaluates both computations and returns the eager result."""
        return replace(self._page.result(), count=self.count.result())

    async def resolve(self) -> CursorPageResult[T]:
        """Awaits the row fetch and the count concurrently."""
        page, count = await asyncio.gather(self._page, self.count)
        return replace(page, count=count)


class LazyPageResult(Generic[T]):
    """
    PageResult whose fields are Deferred values.

    nodes and has_next share one row fetch; count is a separate count query.
    """

    def __init__(self, page: Deferred[PageResult[T]], count: Deferred[int | None]) -> None:
        self._page = page
        self.nodes: Deferred[list[T]] = page.map(attrgetter("nodes"))
        self.has_next: Deferred[bool] = page.map(attrgetter("has_next"))
        self.count = count

    def result(self) -> PageResult[T]:
        """Evaluates both computations and returns the eager result."""
        return replace(self._page.result(), count=self.count.result())

    async def resolve(self) -> PageResult[T]:
        """Awaits the row fetch and the count concurrently."""
        page, count = await asyncio.gather(self._page, self.count)
        return replace(page, count=count)
