"""DynamoDB implementation of the ItemStore.

Targets a table keyed by string attributes PK (hash) and SK (range).
Numbers come back from DynamoDB as Decimal; integral values are turned
back into int so that counters compare equal to Python ints.
"""

from decimal import Decimal
from typing import Any

import boto3
import structlog
from boto3.dynamodb.types import TypeDeserializer, TypeSerializer
from botocore.config import Config
from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    ReadTimeoutError,
)

from eventreg.stores.errors import (
    ItemAlreadyExistsError,
    PreconditionFailedError,
    StoreTimeoutError,
    StoreUnavailableError,
)
from eventreg.stores.interfaces import PARTITION_KEY, SORT_KEY, Item, ItemPage, ItemStore, Key

logger = structlog.get_logger(__name__)

CONDITIONAL_CHECK_FAILED = "ConditionalCheckFailedException"

_serializer = TypeSerializer()
_deserializer = TypeDeserializer()


def _normalize(value: Any) -> Any:
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else value
    if isinstance(value, dict):
        return {k: _normalize(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_normalize(v) for v in value]
    if isinstance(value, set):
        return {_normalize(v) for v in value}
    return value


def marshall(item: Item) -> dict[str, Any]:
    return {k: _serializer.serialize(v) for k, v in item.items()}


def unmarshall(raw: dict[str, Any]) -> Item:
    return {k: _normalize(_deserializer.deserialize(v)) for k, v in raw.items()}


def _attribute_path(field: str) -> tuple[str, dict[str, str]]:
    """Build a `#a0.#a1` path plus its ExpressionAttributeNames."""
    names = {f"#a{i}": part for i, part in enumerate(field.split("."))}
    return ".".join(names), names


class DynamoItemStore(ItemStore):
    """Item store backed by a DynamoDB table via boto3."""

    def __init__(
        self,
        table_name: str,
        *,
        region: str | None = None,
        endpoint_url: str | None = None,
        timeout: float = 5.0,
        client: Any = None,
    ) -> None:
        self.table_name = table_name
        if client is None:
            client = boto3.client(
                "dynamodb",
                region_name=region,
                endpoint_url=endpoint_url,
                # No SDK retries: a retried conditional write would hide an ambiguous outcome
                config=Config(
                    connect_timeout=timeout,
                    read_timeout=timeout,
                    retries={"max_attempts": 1, "mode": "standard"},
                ),
            )
        self.client = client

    def get_item(self, partition_key: str, sort_key: str) -> Item | None:
        response = self._call(
            "get_item",
            TableName=self.table_name,
            Key=marshall({PARTITION_KEY: partition_key, SORT_KEY: sort_key}),
            ConsistentRead=True,
        )
        raw = response.get("Item")
        return unmarshall(raw) if raw else None

    def put_item(self, item: Item, *, fail_if_exists: bool = False) -> None:
        params: dict[str, Any] = {"TableName": self.table_name, "Item": marshall(item)}
        if fail_if_exists:
            params["ConditionExpression"] = "attribute_not_exists(#pk)"
            params["ExpressionAttributeNames"] = {"#pk": PARTITION_KEY}
        try:
            self._call("put_item", **params)
        except PreconditionFailedError as e:
            raise ItemAlreadyExistsError(f"{item[PARTITION_KEY]}/{item[SORT_KEY]} already exists") from e

    def conditional_update(
        self,
        partition_key: str,
        sort_key: str,
        *,
        field: str,
        expected: Any,
        value: Any,
    ) -> Item:
        path, names = _attribute_path(field)
        response = self._call(
            "update_item",
            TableName=self.table_name,
            Key=marshall({PARTITION_KEY: partition_key, SORT_KEY: sort_key}),
            UpdateExpression=f"SET {path} = :value",
            ConditionExpression=f"{path} = :expected",
            ExpressionAttributeNames=names,
            ExpressionAttributeValues=marshall({":value": value, ":expected": expected}),
            ReturnValues="ALL_NEW",
        )
        return unmarshall(response["Attributes"])

    def range_query(
        self,
        partition_key: str,
        sort_key_prefix: str,
        *,
        start_key: Key | None = None,
        limit: int | None = None,
    ) -> ItemPage:
        params: dict[str, Any] = {
            "TableName": self.table_name,
            "KeyConditionExpression": "#pk = :pk AND begins_with(#sk, :prefix)",
            "ExpressionAttributeNames": {"#pk": PARTITION_KEY, "#sk": SORT_KEY},
            "ExpressionAttributeValues": marshall({":pk": partition_key, ":prefix": sort_key_prefix}),
            "ConsistentRead": True,
        }
        return self._page("query", params, start_key, limit)

    def scan(
        self,
        *,
        sort_key: str,
        start_key: Key | None = None,
        limit: int | None = None,
    ) -> ItemPage:
        params: dict[str, Any] = {
            "TableName": self.table_name,
            "FilterExpression": "#sk = :sk",
            "ExpressionAttributeNames": {"#sk": SORT_KEY},
            "ExpressionAttributeValues": marshall({":sk": sort_key}),
        }
        return self._page("scan", params, start_key, limit)

    def _page(self, operation: str, params: dict[str, Any], start_key: Key | None, limit: int | None) -> ItemPage:
        if start_key is not None:
            params["ExclusiveStartKey"] = marshall(start_key)
        if limit is not None and limit > 0:
            params["Limit"] = limit
        response = self._call(operation, **params)
        last_key = response.get("LastEvaluatedKey")
        return ItemPage(
            items=[unmarshall(raw) for raw in response.get("Items", [])],
            last_key=unmarshall(last_key) if last_key else None,
        )

    def _call(self, operation: str, **params: Any) -> dict[str, Any]:
        try:
            return getattr(self.client, operation)(**params)
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code")
            if code == CONDITIONAL_CHECK_FAILED:
                raise PreconditionFailedError(f"{operation} condition failed") from e
            logger.warning("dynamodb.client_error", operation=operation, code=code)
            raise StoreUnavailableError(f"{operation} failed: {code}") from e
        except ReadTimeoutError as e:
            logger.warning("dynamodb.timeout", operation=operation)
            raise StoreTimeoutError(f"{operation} timed out") from e
        except BotoCoreError as e:
            logger.warning("dynamodb.unavailable", operation=operation, error=str(e))
            raise StoreUnavailableError(f"{operation} failed") from e
