"""Shared pytest fixtures for roamrpc tests.

Fixtures from ``roamrpc.testing.fixtures`` (client_config, memory_pubsub,
mock_peer, sync_client, async_client) are loaded as a plugin.
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from roamrpc.models import ProfileReq, PRStartReq
from roamrpc.observability import reset_metrics

# Load roamrpc.testing fixtures
pytest_plugins = ["roamrpc.testing.fixtures"]

TEST_DEV_EUI = "0102030405060708"


@pytest.fixture(autouse=True)
def _reset_metrics() -> Iterator[None]:
    """Give every test a zeroed process-wide metrics collector."""
    reset_metrics()
    yield
    reset_metrics()


@pytest.fixture
def pr_start_request() -> PRStartReq:
    """PRStartReq with a fixed transaction id."""
    return PRStartReq(transaction_id=42, phy_payload="40aabbccdd", ul_meta_data={"RSSI": -60})


@pytest.fixture
def profile_request() -> ProfileReq:
    return ProfileReq(dev_eui=TEST_DEV_EUI)
