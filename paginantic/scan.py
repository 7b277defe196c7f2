"""
DynamoDB Scan collaborator.

This module provides DynamoScanQuery, a Query implementation that pages
through a DynamoDB table (or GSI) with boto3 Scan requests.

DynamoDB Scans have no server-side ORDER BY, so the filter (including the
seek predicate) is pushed down as a FilterExpression and the matching items
are ordered and sliced client-side. Suited to small and medium tables or
narrow filters; every page read consumes capacity for the whole scan.
"""

import operator
from functools import reduce
from typing import Any, Generic, TypeVar

import boto3
from pydantic import BaseModel

from ._logging import logger
from .conditions import Condition, DynCondition, compile_condition, wrap_condition
from .exceptions import handle_dynamo_errors
from .query import Ordering, check_bound, sort_records
from .serializer import DynamoSerializer

T = TypeVar("T")


class DynamoScanQuery(Generic[T]):
    """
    Implements the Query protocol on top of DynamoDB Scans.

    Columns are DynamoDB attribute names. Items are returned as plain dicts,
    or validated into `model` when one is given (Pydantic aliases apply, so a
    field `name = Field(alias="user_name")` reads the `user_name` attribute).

    Usage:
        query = DynamoScanQuery("users", client=client, model=User)
        page = paginator.paginate(query, take=25)
    """

    def __init__(
        self,
        table_name: str,
        *,
        client: Any | None = None,
        model: type[BaseModel] | None = None,
        index_name: str | None = None,
        serializer: DynamoSerializer | None = None,
    ) -> None:
        self.table_name = table_name
        self.model = model
        self.index_name = index_name
        self.serializer = serializer or DynamoSerializer()
        self._client = client

        # Internal state of the scan
        self.conditions: list[DynCondition] = []
        self.orderings: list[Ordering] = []
        self.limit_val: int | None = None
        self.offset_val = 0

    @property
    def client(self) -> Any:
        """
        Returns the Boto3 DynamoDB Client, creating a default one on first use.
        Boto3 clients are thread-safe, so clones share it.
        """
        if self._client is None:
            self._client = boto3.client("dynamodb")
        return self._client

    def default_column(self, field: str) -> str:
        return field

    # --- BUILDER INTERFACE ---

    def add_ordering(self, column: str, ascending: bool = True) -> "DynamoScanQuery[T]":
        self.orderings.append((column, ascending))
        return self

    def add_predicate(self, condition: Condition) -> "DynamoScanQuery[T]":
        """
        Adds a filter condition on any attributes.
        Multiple calls are combined with AND.

        Usage:
            DynamoScanQuery("movies", client=client).add_predicate(Attr("rating") >= 8.0)
        """
        self.conditions.append(wrap_condition(condition))
        return self

    def limit(self, count: int) -> "DynamoScanQuery[T]":
        """Sets the maximum number of items to return."""
        check_bound("limit", count)
        self.limit_val = count
        return self

    def offset(self, count: int) -> "DynamoScanQuery[T]":
        """Sets the number of ordered items to skip."""
        check_bound("offset", count)
        self.offset_val = count
        return self

    def clone(self) -> "DynamoScanQuery[T]":
        copy: DynamoScanQuery[T] = DynamoScanQuery(
            self.table_name,
            client=self._client,
            model=self.model,
            index_name=self.index_name,
            serializer=self.serializer,
        )
        copy.conditions = list(self.conditions)
        copy.orderings = list(self.orderings)
        copy.limit_val = self.limit_val
        copy.offset_val = self.offset_val
        return copy

    # --- EXECUTION ---

    def _scan_kwargs(self) -> dict[str, Any]:
        kwargs: dict[str, Any] = {"TableName": self.table_name}
        if self.index_name:
            kwargs["IndexName"] = self.index_name

        if self.conditions:
            combined = reduce(operator.and_, self.conditions)
            params = compile_condition(combined, self.serializer)
            kwargs["FilterExpression"] = params["ConditionExpression"]
            if "ExpressionAttributeNames" in params:
                kwargs["ExpressionAttributeNames"] = params["ExpressionAttributeNames"]
            if "ExpressionAttributeValues" in params:
                kwargs["ExpressionAttributeValues"] = params["ExpressionAttributeValues"]

        return kwargs

    def _deserialize_item(self, raw_data: dict[str, Any]) -> Any:
        if self.model is None:
            return raw_data
        return self.model.model_validate(raw_data)

    def fetch(self) -> list[T]:
        """
        Scans every matching item, then orders and slices them client-side.
        WARNING: Reads the whole filtered result set into memory.
        """
        kwargs = self._scan_kwargs()

        logger.info(
            "Starting scan for pagination",
            extra={
                "table": self.table_name,
                "index": self.index_name,
                "has_filter": bool(self.conditions),
                "limit": self.limit_val,
                "offset": self.offset_val,
            },
        )

        with handle_dynamo_errors(table_name=self.table_name):
            paginator = self.client.get_paginator("scan")
            items = [
                self.serializer.from_dynamo(item)
                for page in paginator.paginate(**kwargs)
                for item in page.get("Items", [])
            ]

        rows = sort_records(items, self.orderings)
        end = None if self.limit_val is None else self.offset_val + self.limit_val
        result = [self._deserialize_item(item) for item in rows[self.offset_val : end]]

        logger.debug(
            "Scan finished",
            extra={"table": self.table_name, "matched": len(items), "returned": len(result)},
        )
        return result

    def count(self) -> int:
        """Counts matching items with Select=COUNT (no item payloads are transferred)."""
        kwargs = self._scan_kwargs()
        kwargs["Select"] = "COUNT"

        logger.info(
            "Starting scan count",
            extra={
                "table": self.table_name,
                "index": self.index_name,
                "has_filter": bool(self.conditions),
            },
        )

        with handle_dynamo_errors(table_name=self.table_name):
            paginator = self.client.get_paginator("scan")
            return sum(page.get("Count", 0) for page in paginator.paginate(**kwargs))
