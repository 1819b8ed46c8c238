"""In-process pub/sub backend.

Backs async mode when requester and answer publisher share one event loop,
and is the broker used throughout the test suite. Delivery is immediate: a
publish puts the message on the queue of every subscription currently
registered on the key.
"""

import asyncio
from types import TracebackType

from roamrpc.errors import BrokerError
from roamrpc.models.types import CorrelationKey
from roamrpc.observability import get_logger

logger = get_logger(__name__)


class MemorySubscription:
    """Queue-backed subscription handed out by InMemoryPubSub."""

    def __init__(self, broker: "InMemoryPubSub", key: CorrelationKey) -> None:
        self.key = key
        self._broker = broker
        self._queue: asyncio.Queue[bytes] = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def _deliver(self, message: bytes) -> None:
        self._queue.put_nowait(message)

    async def get(self) -> bytes:
        if self._closed:
            raise BrokerError(f"Subscription on '{self.key}' is closed")
        return await self._queue.get()

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._broker._unregister(self)

    async def __aenter__(self) -> "MemorySubscription":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()


class InMemoryPubSub:
    """In-memory implementation of PubSubBackend.

    Not thread-safe: all coroutines using one instance must run on the same
    event loop.

    Example:
        >>> broker = InMemoryPubSub()
        >>> async with await broker.subscribe("lora:backend:async:ProfileReq:1") as sub:
        ...     await broker.publish("lora:backend:async:ProfileReq:1", b"{}")
        ...     await sub.get()
        b'{}'
    """

    def __init__(self) -> None:
        self._subscriptions: dict[CorrelationKey, set[MemorySubscription]] = {}
        self._closed = False

    def subscriber_count(self, key: CorrelationKey) -> int:
        """Number of armed subscriptions on key."""
        return len(self._subscriptions.get(key, ()))

    @property
    def active_keys(self) -> list[CorrelationKey]:
        return sorted(self._subscriptions)

    async def subscribe(self, key: CorrelationKey) -> MemorySubscription:
        if self._closed:
            raise BrokerError("In-memory broker is closed")
        subscription = MemorySubscription(self, key)
        self._subscriptions.setdefault(key, set()).add(subscription)
        logger.debug("roamrpc.pubsub.memory.subscribed", key=key)
        return subscription

    async def publish(self, key: CorrelationKey, message: bytes) -> int:
        if self._closed:
            raise BrokerError("In-memory broker is closed")
        receivers = list(self._subscriptions.get(key, ()))
        for subscription in receivers:
            subscription._deliver(bytes(message))
        logger.debug("roamrpc.pubsub.memory.published", key=key, receivers=len(receivers))
        return len(receivers)

    def _unregister(self, subscription: MemorySubscription) -> None:
        registered = self._subscriptions.get(subscription.key)
        if registered is None:
            return
        registered.discard(subscription)
        if not registered:
            del self._subscriptions[subscription.key]

    async def aclose(self) -> None:
        for registered in list(self._subscriptions.values()):
            for subscription in list(registered):
                await subscription.close()
        self._closed = True
