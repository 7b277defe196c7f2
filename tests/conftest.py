"""
Shared pytest fixtures and configuration for Paginantic tests.

Unit tests page through MemoryQuery or a mocked boto3 client; integration
tests scan a LocalStack table seeded with the same sample users.
"""

import os
from typing import Any
from unittest.mock import MagicMock

import boto3
import pytest

from tests.helpers.entities import User, make_users
from tests.helpers.localstack import LocalStackHelper

USERS_TABLE = "integration_paginated_users"


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests with mocked dependencies")
    config.addinivalue_line("markers", "integration: Integration tests against LocalStack")


@pytest.fixture
def users() -> list[User]:
    return make_users()


@pytest.fixture
def user_records() -> list[dict[str, Any]]:
    """The sample users as plain dicts (created_at kept as a datetime)."""
    return [user.model_dump() for user in make_users()]


@pytest.fixture
def mock_client():
    """
    A mocked boto3 DynamoDB client.

    Tests set the scan pages with
    client.get_paginator.return_value.paginate.return_value = [...]
    """
    client = MagicMock()
    client.get_paginator.return_value = MagicMock()
    return client


# Integration Test Fixtures


@pytest.fixture(scope="session")
def localstack_client():
    """A session-wide boto3 client pointed at LOCALSTACK_ENDPOINT."""
    return boto3.client(
        "dynamodb",
        endpoint_url=os.getenv("LOCALSTACK_ENDPOINT", "http://localhost:4566"),
        region_name="eu-south-1",
        aws_access_key_id="test",
        aws_secret_access_key="test",
    )


@pytest.fixture
def users_table(localstack_client):
    """Yields the name of a table holding exactly the sample users."""
    helper = LocalStackHelper(localstack_client)
    helper.ensure_table(USERS_TABLE, key="id", key_type="N")
    helper.clear(USERS_TABLE, key="id")
    helper.seed(USERS_TABLE, make_users())

    yield USERS_TABLE

    helper.clear(USERS_TABLE, key="id")
