"""
Shared fixtures for offline unit tests.
"""

from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError


class FakeClock:
    """Monotonic clock whose sleep only advances time."""

    def __init__(self, start: float = 0.0):
        self.now = start
        self.sleeps = []

    def time(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


def _client_error(code, message="", operation="DescribeVpcs"):
    return ClientError({"Error": {"Code": code, "Message": message}}, operation)


@pytest.fixture
def client_error():
    """Factory for botocore ClientErrors with a given code and message."""
    return _client_error


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def aws_client():
    """Stand-in for tfacc.client.AWSClient with a MagicMock EC2 client."""
    client = MagicMock()
    client.region = "us-west-2"
    client.partition = "aws"
    client.account_id = "123456789012"
    return client
