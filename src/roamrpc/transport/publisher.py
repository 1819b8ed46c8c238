"""Publish async answers on their correlation key.

The answering side of async mode: after the peer has acknowledged a
request over HTTP and computed the answer, the answer is published on the
key the requester is listening on.
"""

from pydantic import ValidationError

from roamrpc.errors import BrokerError, PublishError, SerializationError
from roamrpc.models.constants import DEFAULT_KEY_NAMESPACE
from roamrpc.models.enums import MessageType
from roamrpc.models.ids import build_correlation_key
from roamrpc.models.payloads import BasePayloadResult
from roamrpc.pubsub.base import PubSubBackend
from roamrpc.observability import get_logger, get_metrics

logger = get_logger(__name__)


class AsyncAnswerPublisher:
    """Publishes answers for a requester working in async mode.

    Args:
        pubsub: Broker shared with the requester
        namespace: First key segment; must match the requester's
    """

    def __init__(self, pubsub: PubSubBackend, namespace: str = DEFAULT_KEY_NAMESPACE) -> None:
        self._pubsub = pubsub
        self.namespace = namespace

    async def publish(
        self, request_message_type: MessageType | str, answer: BasePayloadResult
    ) -> int:
        """Publish answer on the key of (request message type, answer transaction id).

        Returns:
            Number of listeners that received the answer. Zero means the
            requester has already given up; the answer is dropped.

        Raises:
            ValueError: If the answer has no transaction id
            SerializationError: If the answer cannot be serialized
            PublishError: If the broker rejects the publish
        """
        if answer.transaction_id is None:
            raise ValueError("answer has no TransactionID; cannot build the correlation key")

        key = build_correlation_key(
            request_message_type, answer.transaction_id, namespace=self.namespace
        )
        try:
            message = answer.to_wire()
        except (ValidationError, ValueError, TypeError) as e:
            raise SerializationError(str(e), details={"key": key}) from e

        metrics = get_metrics()
        try:
            receivers = await self._pubsub.publish(key, message)
        except BrokerError as e:
            metrics.increment_counter("roamrpc_publish_errors_total")
            logger.error("roamrpc.publisher.failed", key=key, error=str(e))
            raise PublishError(key, e.message) from e

        metrics.increment_counter("roamrpc_answers_published_total")
        if receivers == 0:
            logger.info("roamrpc.publisher.no_listener", key=key)
        else:
            logger.debug("roamrpc.publisher.published", key=key, receivers=receivers)
        return receivers
