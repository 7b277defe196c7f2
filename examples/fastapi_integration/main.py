"""
FastAPI Integration Example

Exposes a DynamoDB table through cursor and offset paginated endpoints.
"""

from datetime import datetime

from fastapi import FastAPI, HTTPException, Query, status
from pydantic import BaseModel

from paginantic import (
    Attr,
    ConflictingCursorsError,
    CursorPaginator,
    DynamoScanQuery,
    PagePaginator,
    PaginanticError,
    TableNotFoundError,
    TakeBounds,
)


class User(BaseModel):
    """User stored in the Users table"""

    user_id: str
    name: str
    age: int
    is_active: bool = True
    created_at: datetime


class UserCursorPage(BaseModel):
    """Response model for cursor pages"""

    nodes: list[User]
    has_prev: bool
    has_next: bool
    prev_cursor: str | None
    next_cursor: str | None
    count: int | None = None


class UserOffsetPage(BaseModel):
    """Response model for numbered pages"""

    nodes: list[User]
    has_next: bool
    count: int | None = None


app = FastAPI(title="Paginantic FastAPI Example")

bounds = TakeBounds(default=20, max=100)

# Newest first, user_id breaks ties between equal timestamps.
cursor_paginator = CursorPaginator(
    [{"created_at": False}, {"user_id": True}], model=User, take=bounds
)
page_paginator = PagePaginator({"name": True}, take=bounds)


def users_query() -> DynamoScanQuery[User]:
    return DynamoScanQuery("Users", model=User)


@app.get("/users", response_model=UserCursorPage)
def list_users(
    next_cursor: str | None = None,
    prev_cursor: str | None = None,
    take: int | None = Query(default=None, ge=0),
    active_only: bool = False,
):
    """Walk users newest first with opaque cursors."""
    query = users_query()
    if active_only:
        query.add_predicate(Attr("is_active") == True)  # noqa: E712

    try:
        page = cursor_paginator.paginate(
            query, next_cursor=next_cursor, prev_cursor=prev_cursor, take=take
        )
    except ConflictingCursorsError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message) from e
    except TableNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=e.message) from e
    except PaginanticError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=e.message
        ) from e

    return UserCursorPage(
        nodes=page.nodes,
        has_prev=page.has_prev,
        has_next=page.has_next,
        prev_cursor=page.prev_cursor,
        next_cursor=page.next_cursor,
        count=page.count,
    )


@app.get("/users/by-name", response_model=UserOffsetPage)
async def list_users_by_name(page: int = Query(default=1, ge=1), take: int | None = None):
    """Numbered pages ordered by name, resolved without blocking the event loop."""
    try:
        result = await page_paginator.paginate_lazy(
            DynamoScanQuery("Users", model=User), page=page, take=take
        ).resolve()
    except PaginanticError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=e.message
        ) from e

    return UserOffsetPage(nodes=result.nodes, has_next=result.has_next, count=result.count)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
