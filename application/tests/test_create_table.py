"""Unit tests for scripts/create_table.py: key schema shared with the store, existing table tolerated."""

from __future__ import annotations

import importlib.util
import os
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from src.availability_api import store

_SCRIPT = Path(__file__).resolve().parent.parent / "scripts" / "create_table.py"


@pytest.fixture(scope="module")
def create_table_script():
    spec = importlib.util.spec_from_file_location("create_table", _SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


class ResourceInUseException(Exception):
    pass


def _client() -> MagicMock:
    client = MagicMock()
    client.exceptions.ResourceInUseException = ResourceInUseException
    return client


def test_table_keyed_like_the_store(create_table_script):
    client = _client()
    assert create_table_script.create_table(client, "availability_test") is True
    kwargs = client.create_table.call_args.kwargs
    assert kwargs["TableName"] == "availability_test"
    assert kwargs["KeySchema"] == [{"AttributeName": store.PK, "KeyType": "HASH"}]
    assert kwargs["AttributeDefinitions"] == [{"AttributeName": store.PK, "AttributeType": "S"}]


def test_existing_table_is_not_an_error(create_table_script):
    client = _client()
    client.create_table.side_effect = ResourceInUseException("exists")
    assert create_table_script.create_table(client, "availability_test") is False


@patch.dict(os.environ, {"DYNAMODB_TABLE_NAME": "availability_env"})
def test_main_uses_store_config(create_table_script):
    client = _client()
    with patch.object(store, "make_client", return_value=client) as make_client:
        create_table_script.main()
    make_client.assert_called_once()
    assert client.create_table.call_args.kwargs["TableName"] == "availability_env"


def test_main_exits_on_other_errors(create_table_script):
    client = _client()
    client.create_table.side_effect = RuntimeError("no credentials")
    with patch.object(store, "make_client", return_value=client):
        with pytest.raises(SystemExit) as exc_info:
            create_table_script.main()
    assert exc_info.value.code == 1
