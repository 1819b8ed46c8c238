"""Pub/sub backend protocol used for async answer delivery.

An async-mode requester subscribes to the correlation key of its request
and waits for one message; the answering side publishes the serialized
answer on the same key. Any broker that can publish by key and deliver to
every current subscriber of that key can back this protocol.
"""

from types import TracebackType
from typing import Protocol, runtime_checkable

from roamrpc.models.types import CorrelationKey


@runtime_checkable
class Subscription(Protocol):
    """A live listener on one correlation key.

    A subscription is armed when returned by PubSubBackend.subscribe: any
    message published on its key from then on is delivered to it.
    """

    key: CorrelationKey

    async def get(self) -> bytes:
        """Wait for and return the next message published on the key.

        Raises:
            BrokerError: If the broker connection fails while waiting
        """
        ...

    async def close(self) -> None:
        """Stop listening and release broker resources. Idempotent."""
        ...

    async def __aenter__(self) -> "Subscription": ...

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None: ...


@runtime_checkable
class PubSubBackend(Protocol):
    """Protocol for pub/sub broker implementations.

    Implementations must be safe for concurrent use by many coroutines on
    one event loop.
    """

    async def subscribe(self, key: CorrelationKey) -> Subscription:
        """Register a listener on key and return once it is armed.

        Raises:
            BrokerError: If the broker cannot register the listener
        """
        ...

    async def publish(self, key: CorrelationKey, message: bytes) -> int:
        """Publish message on key.

        Returns:
            Number of subscribers the message was delivered to

        Raises:
            BrokerError: If the broker rejects the message or is unreachable
        """
        ...

    async def aclose(self) -> None:
        """Release the broker connection."""
        ...
