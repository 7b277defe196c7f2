"""
Example demonstrating cursor pagination over a DynamoDB table.

The seek predicate is compiled into the Scan FilterExpression; the page is
ordered and trimmed client-side. Point AWS_ENDPOINT_URL at LocalStack to run
it locally.
"""

import logging
from datetime import datetime, timedelta, timezone

import boto3
from pydantic import BaseModel

from paginantic import Attr, CursorPaginator, DynamoScanQuery, PagePaginator
from paginantic.serializer import DynamoSerializer

logging.basicConfig(level=logging.INFO)
logging.getLogger("paginantic").setLevel(logging.DEBUG)


class Order(BaseModel):
    """Order row, keyed by order_id"""

    order_id: str
    customer: str
    total: float
    placed_at: datetime


TABLE = "Orders"
client = boto3.client("dynamodb")
serializer = DynamoSerializer()

print("Creating table and test orders...")
client.create_table(
    TableName=TABLE,
    KeySchema=[{"AttributeName": "order_id", "KeyType": "HASH"}],
    AttributeDefinitions=[{"AttributeName": "order_id", "AttributeType": "S"}],
    BillingMode="PAY_PER_REQUEST",
)
client.get_waiter("table_exists").wait(TableName=TABLE)

start = datetime(2024, 5, 1, tzinfo=timezone.utc)
for i in range(1, 11):
    order = Order(
        order_id=f"o-{i:02d}",
        customer="acme" if i % 2 else "globex",
        total=10.5 * i,
        placed_at=start + timedelta(hours=i // 2),
    )
    item = serializer.to_item(order.model_dump())
    client.put_item(TableName=TABLE, Item=item)

paginator = CursorPaginator([{"placed_at": False}, {"order_id": True}], model=Order, take=4)


def orders() -> DynamoScanQuery[Order]:
    return DynamoScanQuery(TABLE, client=client, model=Order)


print("\n1. Newest orders first:")
cursor = None
while True:
    page = paginator.paginate(orders(), next_cursor=cursor)
    for order in page.nodes:
        print(f"   - {order.order_id} {order.placed_at:%H:%M} ${order.total}")
    if not page.has_next:
        break
    cursor = page.next_cursor
    print("   -- next page --")

print("\n2. Only acme orders over $30:")
query = orders().add_predicate((Attr("customer") == "acme") & (Attr("total") > 30))
page = paginator.paginate(query)
print(f"   {[o.order_id for o in page.nodes]} (count={page.count})")

print("\n3. Numbered pages by total:")
numbered = PagePaginator({"total": False}, take=3)
second = numbered.paginate(orders(), page=2, include_count=False)
print(f"   {[o['order_id'] for o in second.nodes]} has_next={second.has_next}")

client.delete_table(TableName=TABLE)
print("\nDynamoDB scan pagination example completed!")
