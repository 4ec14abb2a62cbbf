import logging
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from decimal import Decimal
from functools import reduce

from boto3.dynamodb.conditions import Attr
from botocore.exceptions import BotoCoreError, ClientError

from aws_config import KITCHENS_TABLE, MENU_ITEMS_TABLE, ORDERING_LINKS_TABLE
from .base_client import AWSBaseClient

logger = logging.getLogger(__name__)


class GatewayError(Exception):
    """
    Raised when a DynamoDB call fails. ``message`` carries the
    human-readable text returned by AWS so views can show it as-is.
    """

    def __init__(self, message, table=None):
        super().__init__(message)
        self.message = message
        self.table = table


@contextmanager
def gateway_errors(table):
    """Translate botocore failures into GatewayError."""
    try:
        yield
    except ClientError as e:
        message = e.response.get("Error", {}).get("Message") or str(e)
        logger.warning("DynamoDB call on %s failed: %s", table, message)
        raise GatewayError(message, table) from e
    except BotoCoreError as e:
        logger.warning("DynamoDB call on %s failed: %s", table, e)
        raise GatewayError(str(e), table) from e


def utc_now():
    return datetime.now(timezone.utc).isoformat()


def order_records(records, order_by):
    """
    Sort records by a list of field names; a leading "-" means descending.
    Records missing the field (or holding None) always go last.
    """
    records = list(records)
    for spec in reversed(order_by or []):
        descending = spec.startswith("-")
        field = spec.lstrip("-")
        present = [r for r in records if r.get(field) is not None]
        missing = [r for r in records if r.get(field) is None]
        present.sort(key=lambda r: r[field], reverse=descending)
        records = present + missing
    return records


class DynamoDBClient(AWSBaseClient):
    def __init__(self, **kwargs):
        super().__init__("dynamodb", **kwargs)

    def _deserialize(self, value):
        """Convert DynamoDB data into plain Python types."""
        if isinstance(value, dict):
            return {k: self._deserialize(v) for k, v in value.items()}
        if isinstance(value, list):
            return [self._deserialize(v) for v in value]
        if isinstance(value, Decimal):
            return int(value) if value % 1 == 0 else float(value)
        return value

    def _convert_to_decimal(self, data):
        """Recursively convert numbers to Decimal for DynamoDB put_item."""
        if isinstance(data, dict):
            return {k: self._convert_to_decimal(v) for k, v in data.items()}
        if isinstance(data, list):
            return [self._convert_to_decimal(v) for v in data]
        if isinstance(data, bool):
            return data
        if isinstance(data, int):
            return Decimal(data)
        if isinstance(data, float):
            return Decimal(str(data))
        return data

# CRUD

    def put(self, table, item):
        tbl = self.resource.Table(table)
        clean_item = self._convert_to_decimal(item)
        with gateway_errors(table):
            return tbl.put_item(Item=clean_item)

    def get(self, table, key):
        tbl = self.resource.Table(table)
        with gateway_errors(table):
            resp = tbl.get_item(Key=key)
        item = resp.get("Item")
        return self._deserialize(item) if item else {}

    def scan(self, table, filter_expression=None):
        """Full table scan, following LastEvaluatedKey until exhausted."""
        tbl = self.resource.Table(table)
        kwargs = {}
        if filter_expression is not None:
            kwargs["FilterExpression"] = filter_expression

        items = []
        with gateway_errors(table):
            while True:
                resp = tbl.scan(**kwargs)
                items.extend(resp.get("Items", []))
                last_key = resp.get("LastEvaluatedKey")
                if not last_key:
                    break
                kwargs["ExclusiveStartKey"] = last_key
        return [self._deserialize(i) for i in items]

    def query(self, table, filters=None, order_by=None, limit=None):
        """
        Filtered, ordered read over a table.

        filters:  {field: value} equality predicates, AND-ed together
        order_by: ["field", "-other_field"]; nulls sort last
        limit:    maximum number of rows returned after ordering
        """
        condition = None
        if filters:
            condition = reduce(
                lambda acc, cond: acc & cond,
                [Attr(field).eq(self._convert_to_decimal(value)) for field, value in filters.items()],
            )
        rows = order_records(self.scan(table, condition), order_by)
        if limit is not None:
            rows = rows[:limit]
        return rows

    def single(self, table, **filters):
        """First row matching the equality filters, or {} when none does."""
        rows = self.query(table, filters=filters, limit=1)
        return rows[0] if rows else {}

    def upsert(self, table, item):
        """
        Insert when the record has no id, otherwise merge the changes onto
        the stored record. Returns the record as written.
        """
        record = dict(item)
        now = utc_now()
        existing = self.get(table, {"id": record["id"]}) if record.get("id") else {}

        if existing:
            record = {**existing, **record, "updated_at": now}
        else:
            if not record.get("id"):
                record["id"] = str(uuid.uuid4())
            record["created_at"] = now
            record["updated_at"] = now

        self.put(table, record)
        return record

    def update(self, table, key, changes):
        """SET the given attributes on one record."""
        tbl = self.resource.Table(table)
        names = {f"#f{i}": field for i, field in enumerate(changes)}
        values = {
            f":v{i}": self._convert_to_decimal(value)
            for i, value in enumerate(changes.values())
        }
        expression = "SET " + ", ".join(f"#f{i} = :v{i}" for i in range(len(changes)))
        with gateway_errors(table):
            return tbl.update_item(
                Key=key,
                UpdateExpression=expression,
                ExpressionAttributeNames=names,
                ExpressionAttributeValues=values,
            )

    def delete(self, table, key):
        """
        Delete an item from the DynamoDB table.
        """
        tbl = self.resource.Table(table)
        with gateway_errors(table):
            return tbl.delete_item(Key=key)

    def delete_where(self, table, **filters):
        """Delete every row matching the filters; returns how many went."""
        rows = self.query(table, filters=filters)
        for row in rows:
            self.delete(table, {"id": row["id"]})
        return len(rows)

# relations

    def fetch_kitchen(self, kitchen_id):
        """
        Kitchen with its nested menu_items and ordering_links,
        or {} when the kitchen does not exist.
        """
        kitchen = self.get(KITCHENS_TABLE, {"id": kitchen_id})
        if not kitchen:
            return {}

        kitchen["menu_items"] = self.query(
            MENU_ITEMS_TABLE,
            filters={"kitchen_id": kitchen_id},
            order_by=["category", "name"],
        )
        kitchen["ordering_links"] = self.query(
            ORDERING_LINKS_TABLE,
            filters={"kitchen_id": kitchen_id},
            order_by=["platform_name"],
        )
        return kitchen
