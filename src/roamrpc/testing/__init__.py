"""roamrpc testing utilities.

Modules:
    fixtures: Pytest fixtures (client_config, memory_pubsub, mock_peer,
              sync_client, async_client).
    mocks: MockPeer, an httpx transport simulating the remote network server.
    assertions: assert_success, assert_correlates.

Example:
    >>> from roamrpc.testing import MockPeer, assert_success
    >>> # conftest.py: pytest_plugins = ["roamrpc.testing.fixtures"]
"""

from roamrpc.testing.assertions import assert_correlates, assert_success
from roamrpc.testing.mocks import MockPeer

__all__ = [
    "MockPeer",
    "assert_correlates",
    "assert_success",
]
