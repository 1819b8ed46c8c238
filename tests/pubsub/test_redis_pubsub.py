"""Tests for the Redis pub/sub backend (redis.asyncio client mocked)."""

from unittest.mock import AsyncMock, MagicMock

import pytest

pytest.importorskip("redis")

from redis.exceptions import ConnectionError as RedisConnectionError  # noqa: E402

from roamrpc.errors import BrokerError  # noqa: E402
from roamrpc.pubsub.redis import RedisPubSub, RedisSubscription  # noqa: E402

KEY = "lora:backend:async:PRStartReq:7"


def _mock_pubsub(messages: list[dict | None]) -> MagicMock:
    pubsub = MagicMock()
    pubsub.subscribe = AsyncMock()
    pubsub.unsubscribe = AsyncMock()
    pubsub.aclose = AsyncMock()
    pubsub.get_message = AsyncMock(side_effect=messages)
    return pubsub


def _mock_client(pubsub: MagicMock) -> MagicMock:
    client = MagicMock()
    client.pubsub = MagicMock(return_value=pubsub)
    client.publish = AsyncMock(return_value=1)
    client.aclose = AsyncMock()
    return client


class TestRedisPubSub:
    async def test_subscribe_waits_for_confirmation(self) -> None:
        pubsub = _mock_pubsub([None, {"type": "subscribe", "channel": KEY}])
        broker = RedisPubSub(_mock_client(pubsub))

        subscription = await broker.subscribe(KEY)

        assert isinstance(subscription, RedisSubscription)
        pubsub.subscribe.assert_awaited_once_with(KEY)
        assert pubsub.get_message.await_count == 2

    async def test_subscribe_failure_maps_to_broker_error(self) -> None:
        pubsub = _mock_pubsub([])
        pubsub.subscribe.side_effect = RedisConnectionError("refused")
        broker = RedisPubSub(_mock_client(pubsub))

        with pytest.raises(BrokerError, match="subscribe"):
            await broker.subscribe(KEY)
        pubsub.aclose.assert_awaited_once()

    async def test_subscribe_confirmation_timeout(self) -> None:
        pubsub = _mock_pubsub([None] * 1000)
        broker = RedisPubSub(_mock_client(pubsub), subscribe_timeout=0.0)

        with pytest.raises(BrokerError):
            await broker.subscribe(KEY)

    async def test_get_returns_first_message(self) -> None:
        pubsub = _mock_pubsub(
            [
                {"type": "subscribe", "channel": KEY},
                None,
                {"type": "message", "channel": KEY, "data": b'{"TransactionID":7}'},
            ]
        )
        broker = RedisPubSub(_mock_client(pubsub))

        async with await broker.subscribe(KEY) as subscription:
            assert await subscription.get() == b'{"TransactionID":7}'

        pubsub.unsubscribe.assert_awaited_once_with(KEY)
        pubsub.aclose.assert_awaited_once()

    async def test_get_failure_maps_to_broker_error(self) -> None:
        pubsub = _mock_pubsub(
            [{"type": "subscribe", "channel": KEY}, RedisConnectionError("reset")]
        )
        broker = RedisPubSub(_mock_client(pubsub))
        subscription = await broker.subscribe(KEY)

        with pytest.raises(BrokerError, match="failed"):
            await subscription.get()

    async def test_close_is_idempotent(self) -> None:
        pubsub = _mock_pubsub([{"type": "subscribe", "channel": KEY}])
        broker = RedisPubSub(_mock_client(pubsub))
        subscription = await broker.subscribe(KEY)

        await subscription.close()
        await subscription.close()

        pubsub.unsubscribe.assert_awaited_once()

    async def test_publish_returns_receivers(self) -> None:
        client = _mock_client(_mock_pubsub([]))
        client.publish.return_value = 2
        broker = RedisPubSub(client)

        assert await broker.publish(KEY, b"answer") == 2
        client.publish.assert_awaited_once_with(KEY, b"answer")

    async def test_publish_failure_maps_to_broker_error(self) -> None:
        client = _mock_client(_mock_pubsub([]))
        client.publish.side_effect = RedisConnectionError("down")
        broker = RedisPubSub(client)

        with pytest.raises(BrokerError, match="publish"):
            await broker.publish(KEY, b"answer")

    async def test_aclose_only_closes_owned_client(self) -> None:
        client = _mock_client(_mock_pubsub([]))

        await RedisPubSub(client).aclose()
        client.aclose.assert_not_awaited()

        await RedisPubSub(client, owns_client=True).aclose()
        client.aclose.assert_awaited_once()
