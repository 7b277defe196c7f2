"""
Integration test helpers for Paginantic.

Seeds and tears down the LocalStack tables the pagination tests scan.
"""

from collections.abc import Iterable

from botocore.exceptions import ClientError
from pydantic import BaseModel

from paginantic.serializer import DynamoSerializer


class LocalStackHelper:
    """
    Manages single-key tables on a LocalStack DynamoDB client.

    Items are written through DynamoSerializer, so they come back from a scan
    in exactly the form DynamoScanQuery compares cursor values against.
    """

    def __init__(self, client) -> None:
        self.client = client
        self.serializer = DynamoSerializer()

    def ensure_table(self, table_name: str, key: str, key_type: str = "S") -> None:
        """Creates the table unless it already exists, then waits for it."""
        try:
            self.client.create_table(
                TableName=table_name,
                KeySchema=[{"AttributeName": key, "KeyType": "HASH"}],
                AttributeDefinitions=[{"AttributeName": key, "AttributeType": key_type}],
                BillingMode="PAY_PER_REQUEST",
            )
        except ClientError as e:
            if e.response["Error"]["Code"] != "ResourceInUseException":
                raise
        self.client.get_waiter("table_exists").wait(TableName=table_name)

    def seed(self, table_name: str, entities: Iterable[BaseModel]) -> None:
        for entity in entities:
            self.client.put_item(
                TableName=table_name, Item=self.serializer.to_item(entity.model_dump())
            )

    def clear(self, table_name: str, key: str) -> None:
        """Deletes every item, leaving the table in place."""
        pages = self.client.get_paginator("scan").paginate(
            TableName=table_name, ProjectionExpression="#k", ExpressionAttributeNames={"#k": key}
        )
        for page in pages:
            for item in page["Items"]:
                self.client.delete_item(TableName=table_name, Key={key: item[key]})
