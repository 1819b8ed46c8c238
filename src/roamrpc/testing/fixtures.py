"""Pytest fixtures for roamrpc tests.

Register with ``pytest_plugins = ["roamrpc.testing.fixtures"]``.

Fixtures:
    client_config: ClientConfig pointing at DEFAULT_TEST_SERVER.
    memory_pubsub: In-memory pub/sub backend, closed after the test.
    mock_peer: Fresh MockPeer (sync mode until attached to a backend).
    sync_client: Open BackendClient answering through mock_peer's HTTP body.
    async_client: Open BackendClient receiving answers via memory_pubsub.
"""

from typing import AsyncIterator

import pytest

from roamrpc.config import ClientConfig
from roamrpc.pubsub.memory import InMemoryPubSub
from roamrpc.testing.mocks import MockPeer
from roamrpc.transport.client import BackendClient

DEFAULT_TEST_SERVER = "http://peer.test/api"
DEFAULT_TEST_SENDER_ID = "000001"
DEFAULT_TEST_RECEIVER_ID = "000002"


@pytest.fixture
def client_config() -> ClientConfig:
    return ClientConfig(
        server=DEFAULT_TEST_SERVER,
        sender_id=DEFAULT_TEST_SENDER_ID,
        receiver_id=DEFAULT_TEST_RECEIVER_ID,
    )


@pytest.fixture
async def memory_pubsub() -> AsyncIterator[InMemoryPubSub]:
    pubsub = InMemoryPubSub()
    yield pubsub
    await pubsub.aclose()


@pytest.fixture
def mock_peer() -> MockPeer:
    """Create a fresh MockPeer for the test."""
    return MockPeer()


@pytest.fixture
async def sync_client(
    client_config: ClientConfig, mock_peer: MockPeer
) -> AsyncIterator[BackendClient]:
    """Provide a sync-mode BackendClient wired to mock_peer."""
    async with BackendClient(client_config, transport=mock_peer) as client:
        yield client


@pytest.fixture
async def async_client(
    client_config: ClientConfig, mock_peer: MockPeer, memory_pubsub: InMemoryPubSub
) -> AsyncIterator[BackendClient]:
    """Provide an async-mode BackendClient; mock_peer publishes on memory_pubsub."""
    mock_peer.attach_pubsub(memory_pubsub, namespace=client_config.namespace)
    async with BackendClient(client_config, pubsub=memory_pubsub, transport=mock_peer) as client:
        yield client


__all__ = [
    "DEFAULT_TEST_RECEIVER_ID",
    "DEFAULT_TEST_SENDER_ID",
    "DEFAULT_TEST_SERVER",
    "async_client",
    "client_config",
    "memory_pubsub",
    "mock_peer",
    "sync_client",
]
