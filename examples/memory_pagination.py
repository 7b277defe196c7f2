"""
Example demonstrating cursor and offset pagination over in-memory records.

MemoryQuery implements the same Query protocol as DynamoScanQuery, so the
paginators below work unchanged against any other backend.
"""

import asyncio
from datetime import datetime, timedelta, timezone

from pydantic import BaseModel

from paginantic import (
    Attr,
    CursorPaginator,
    JsonCursorCodec,
    MemoryQuery,
    PagePaginator,
    TakeBounds,
)


class Article(BaseModel):
    """Article with a non-unique sort column"""

    id: int
    author: str
    published_at: datetime


start = datetime(2024, 1, 1, tzinfo=timezone.utc)
articles = [
    Article(id=i, author=author, published_at=start + timedelta(days=i % 3))
    for i, author in enumerate(["ada", "bob", "ada", "cy", "bob", "cy", "ada"], start=1)
]

# Cursor pagination
print("=" * 80)
print("Cursor pagination (author asc, id desc)")
print("=" * 80)

paginator = CursorPaginator(
    [{"author": True}, {"id": False}], model=Article, take=TakeBounds(default=3, max=10)
)

cursor = None
page_number = 1
while True:
    page = paginator.paginate(MemoryQuery(articles), next_cursor=cursor)
    print(f"\n{page_number}. Page (count={page.count}):")
    for article in page.nodes:
        print(f"   - #{article.id} by {article.author}")
    if not page.has_next:
        break
    cursor = page.next_cursor
    page_number += 1

print("\nStepping back one page with prev_cursor:")
back = paginator.paginate(MemoryQuery(articles), prev_cursor=page.prev_cursor)
print(f"   {[a.id for a in back.nodes]} has_prev={back.has_prev}")

# Caller filters are kept
print("\nOnly articles by ada:")
query = MemoryQuery(articles).add_predicate(Attr("author") == "ada")
filtered = paginator.paginate(query, take=10)
print(f"   {[a.id for a in filtered.nodes]} (count={filtered.count})")

# A tampered cursor yields an empty page instead of an error
print("\nTampered cursor:")
empty = paginator.paginate(MemoryQuery(articles), next_cursor="not-a-cursor")
print(f"   nodes={empty.nodes} has_next={empty.has_next}")

# Readable cursors while debugging
print("\nPlain JSON cursors:")
debug_paginator = CursorPaginator({"published_at": False}, model=Article, codec=JsonCursorCodec())
print(f"   {debug_paginator.paginate(MemoryQuery(articles), take=2).next_cursor}")
print(f"   default codec: {type(paginator.codec).__name__}")

# Offset pagination
print("\n" + "=" * 80)
print("Offset pagination (published_at desc)")
print("=" * 80)

numbered = PagePaginator([{"published_at": False}, {"id": True}], take=4)
for number in (1, 2):
    result = numbered.paginate(MemoryQuery(articles), page=number)
    print(f"\nPage {number}: {[a.id for a in result.nodes]} has_next={result.has_next}")

# Lazy results
print("\nLazy result, count resolved separately:")
lazy = paginator.paginate_lazy(MemoryQuery(articles))
print(f"   count={lazy.count.result()} nodes pending={not lazy.nodes.done}")
resolved = asyncio.run(lazy.resolve())
print(f"   resolved: {[a.id for a in resolved.nodes]}")

print("\n" + "=" * 80)
print("Memory pagination examples completed!")
print("=" * 80)
