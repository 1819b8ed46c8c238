"""Redis pub/sub backend.

Each subscription holds its own PubSub connection, so concurrent requests
never read each other's channels. ``subscribe`` only returns after Redis
has confirmed the SUBSCRIBE, which is what makes "listen before send"
hold across processes.
"""

import asyncio
from types import TracebackType
from typing import Any

import redis.asyncio as aioredis
from redis.asyncio.client import PubSub
from redis.exceptions import RedisError

from roamrpc.errors import BrokerError
from roamrpc.models.types import CorrelationKey
from roamrpc.observability import get_logger
from roamrpc.utils.sanitization import sanitize_url

logger = get_logger(__name__)

# Upper bound on waiting for the server's SUBSCRIBE confirmation
DEFAULT_SUBSCRIBE_TIMEOUT = 5.0


def _as_bytes(data: Any) -> bytes:
    if isinstance(data, bytes):
        return data
    return str(data).encode("utf-8")


class RedisSubscription:
    """Subscription bound to one redis.asyncio PubSub connection."""

    def __init__(self, pubsub: PubSub, key: CorrelationKey) -> None:
        self.key = key
        self._pubsub = pubsub
        self._closed = False

    async def get(self) -> bytes:
        if self._closed:
            raise BrokerError(f"Subscription on '{self.key}' is closed")
        try:
            while True:
                message = await self._pubsub.get_message(
                    ignore_subscribe_messages=True, timeout=None
                )
                if message is not None and message.get("type") == "message":
                    return _as_bytes(message["data"])
        except RedisError as e:
            raise BrokerError(f"Redis subscription on '{self.key}' failed: {e}", cause=e) from e

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            await self._pubsub.unsubscribe(self.key)
        except RedisError as e:
            raise BrokerError(f"Redis unsubscribe from '{self.key}' failed: {e}", cause=e) from e
        finally:
            await self._pubsub.aclose()

    async def __aenter__(self) -> "RedisSubscription":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()


class RedisPubSub:
    """PubSubBackend on top of a redis.asyncio client.

    Example:
        >>> broker = RedisPubSub.from_url("redis://localhost:6379/0")
        >>> subscription = await broker.subscribe("lora:backend:async:PRStartReq:7")
    """

    def __init__(
        self,
        client: aioredis.Redis,
        subscribe_timeout: float = DEFAULT_SUBSCRIBE_TIMEOUT,
        owns_client: bool = False,
    ) -> None:
        self._client = client
        self._subscribe_timeout = subscribe_timeout
        self._owns_client = owns_client

    @classmethod
    def from_url(cls, url: str, **kwargs: Any) -> "RedisPubSub":
        """Create a backend owning a new Redis connection pool for url."""
        logger.info("roamrpc.pubsub.redis.connect", url=sanitize_url(url))
        return cls(aioredis.Redis.from_url(url), owns_client=True, **kwargs)

    async def subscribe(self, key: CorrelationKey) -> RedisSubscription:
        pubsub = self._client.pubsub()
        try:
            await pubsub.subscribe(key)
            await self._wait_confirmed(pubsub, key)
        except (RedisError, asyncio.TimeoutError) as e:
            await pubsub.aclose()
            raise BrokerError(f"Redis subscribe to '{key}' failed: {e}", cause=e) from e
        except BaseException:
            await pubsub.aclose()
            raise
        return RedisSubscription(pubsub, key)

    async def _wait_confirmed(self, pubsub: PubSub, key: CorrelationKey) -> None:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self._subscribe_timeout
        while True:
            remaining = deadline - loop.time()
            if remaining <= 0:
                raise asyncio.TimeoutError(f"no SUBSCRIBE confirmation for '{key}'")
            message = await pubsub.get_message(timeout=remaining)
            if message is not None and message.get("type") == "subscribe":
                return

    async def publish(self, key: CorrelationKey, message: bytes) -> int:
        try:
            receivers = await self._client.publish(key, message)
        except RedisError as e:
            raise BrokerError(f"Redis publish to '{key}' failed: {e}", cause=e) from e
        return int(receivers)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
