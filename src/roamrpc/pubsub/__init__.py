"""Pub/sub backends for async answer delivery.

Public exports:
    PubSubBackend: Protocol every broker adapter implements
    Subscription: Protocol of an armed listener on one key
    InMemoryPubSub: Single-process backend (tests, embedded peers)

The Redis backend lives in ``roamrpc.pubsub.redis`` and needs the
``redis`` extra.
"""

from roamrpc.pubsub.base import PubSubBackend, Subscription
from roamrpc.pubsub.memory import InMemoryPubSub, MemorySubscription

__all__ = [
    "InMemoryPubSub",
    "MemorySubscription",
    "PubSubBackend",
    "Subscription",
]
