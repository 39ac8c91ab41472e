"""DynamoDB availability store: one item per user, key availability:{user_id}."""

from __future__ import annotations

import os
import sys
from datetime import datetime, timezone
from typing import Any

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from .availability import ScheduleFormatError, WeeklySchedule, default_schedule, deserialize, serialize
from .errors import StorageCorruptionError, StorageUnavailable, StorageWriteError

PK = "availability_key"
KEY_PREFIX = "availability:"


def make_client():
    """DynamoDB client from env. Create once per process and pass it to AvailabilityStore."""
    endpoint = os.environ.get("DYNAMODB_ENDPOINT_URL")
    region = os.environ.get("AWS_REGION", "us-west-2")
    kwargs = {"region_name": region}
    if endpoint:
        kwargs["endpoint_url"] = endpoint
    return boto3.client("dynamodb", config=Config(retries={"mode": "standard", "max_attempts": 3}), **kwargs)


def table_name() -> str:
    return os.environ.get("DYNAMODB_TABLE_NAME", "availability")


def storage_key(user_id: str) -> str:
    return f"{KEY_PREFIX}{user_id}"


class AvailabilityStore:
    """
    Reads and writes a user's WeeklySchedule.

    Each call is an independent point read or write. Concurrent saves for the
    same user are not coordinated: whichever put_item lands last wins.
    """

    def __init__(self, client: Any, table: str):
        self._client = client
        self._table = table

    def _get_raw(self, user_id: str) -> str | None:
        """Stored JSON text, or None if there is no record. Raises StorageUnavailable."""
        try:
            resp = self._client.get_item(
                TableName=self._table,
                Key={PK: {"S": storage_key(user_id)}},
                ProjectionExpression="schedule",
            )
        except (BotoCoreError, ClientError) as e:
            raise StorageUnavailable(f"get_item failed for {storage_key(user_id)}: {e!r}") from e
        item = resp.get("Item")
        if not item or "schedule" not in item:
            return None
        text = item["schedule"].get("S")
        if text is None:
            raise StorageCorruptionError(f"{storage_key(user_id)} schedule is not a string attribute")
        return text

    def load(self, user_id: str) -> WeeklySchedule:
        """
        Return the stored schedule, or the default if none is stored or the store is down.

        A record that exists but cannot be parsed raises StorageCorruptionError
        instead of falling back, so bad data is never silently replaced.
        """
        try:
            text = self._get_raw(user_id)
        except StorageUnavailable as e:
            print(f"[store.load] {e.message}; serving default schedule", file=sys.stderr)
            return default_schedule()
        if text is None:
            return default_schedule()
        try:
            return deserialize(text)
        except ScheduleFormatError as e:
            raise StorageCorruptionError(f"{storage_key(user_id)}: {e}") from e

    def save(self, user_id: str, schedule: WeeklySchedule) -> None:
        """Replace the stored schedule. Raises StorageWriteError; no retry here."""
        now = datetime.now(timezone.utc).isoformat()
        try:
            self._client.put_item(
                TableName=self._table,
                Item={
                    PK: {"S": storage_key(user_id)},
                    "schedule": {"S": serialize(schedule)},
                    "updated_at": {"S": now},
                },
            )
        except (BotoCoreError, ClientError) as e:
            print(f"[store.save] put_item failed for {storage_key(user_id)}: {e!r}", file=sys.stderr)
            raise StorageWriteError("Failed to save availability") from e
