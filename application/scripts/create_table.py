#!/usr/bin/env python3
"""Create the availability table used by AvailabilityStore. Set DYNAMODB_ENDPOINT_URL for local DynamoDB."""

import sys
from pathlib import Path

from dotenv import load_dotenv

# Load .env from application/ or repo root so AWS_REGION etc. are set
_app_dir = Path(__file__).resolve().parent.parent
_repo_root = _app_dir.parent
load_dotenv(_app_dir / ".env")
load_dotenv(_repo_root / ".env")
load_dotenv(_repo_root / ".env.local")

# Allow running as `python scripts/create_table.py` from application/ without installing
sys.path.insert(0, str(_app_dir))

from src.availability_api import store


def create_table(client, table: str) -> bool:
    """Create the table keyed on store.PK. Returns False if it already exists."""
    try:
        client.create_table(
            TableName=table,
            KeySchema=[{"AttributeName": store.PK, "KeyType": "HASH"}],
            AttributeDefinitions=[{"AttributeName": store.PK, "AttributeType": "S"}],
            BillingMode="PAY_PER_REQUEST",
        )
    except client.exceptions.ResourceInUseException:
        return False
    return True


def main():
    table = store.table_name()
    try:
        created = create_table(store.make_client(), table)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    if created:
        print(f"Created table: {table}")
    else:
        print(f"Table {table} already exists.", file=sys.stderr)


if __name__ == "__main__":
    main()
