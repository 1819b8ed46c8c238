"""Correlate a sent request with its answer.

In sync mode the answer is the body of the HTTP response. In async mode the
peer acknowledges the POST and publishes the answer later on a pub/sub key
derived from (request message type, transaction id); the correlator arms a
listener on that key before sending, then races the answer against a
deadline.

Example:
    >>> correlator = ResponseCorrelator(http, InMemoryPubSub(), async_timeout=2.0)
    >>> answer_bytes = await correlator.exchange(body, key="lora:backend:async:PRStartReq:7")
"""

import asyncio
import time

from roamrpc.errors import AsyncTimeoutError, BrokerError, TransportError
from roamrpc.models.constants import ANSWER_ACK_STATUS, DEFAULT_ASYNC_TIMEOUT
from roamrpc.models.enums import CorrelationMode, SendFailurePolicy
from roamrpc.models.types import CorrelationKey
from roamrpc.observability import get_logger, get_metrics
from roamrpc.pubsub.base import PubSubBackend, Subscription
from roamrpc.transport.http import HTTPTransport, TransportResponse

logger = get_logger(__name__)


def _record_transport_error(mode: CorrelationMode, error: BaseException) -> None:
    get_metrics().increment_counter(
        "roamrpc_transport_errors_total",
        {"mode": mode.value, "reason": type(error).__name__},
    )


class ResponseCorrelator:
    """Sends one serialized request and returns the serialized answer.

    The mode is fixed at construction: with a pub/sub backend the
    correlator works in async mode, without one in sync mode.

    Sends started in async mode are never cancelled by a timeout or by the
    caller being cancelled; they are tracked until they finish and
    ``aclose()`` waits for them.

    Args:
        transport: Open HTTPTransport to the peer
        pubsub: Pub/sub backend; enables async mode
        async_timeout: Seconds to wait for an answer once the listener is armed
        send_failure_policy: What to do when the async-mode send fails
    """

    def __init__(
        self,
        transport: HTTPTransport,
        pubsub: PubSubBackend | None = None,
        *,
        async_timeout: float = DEFAULT_ASYNC_TIMEOUT,
        send_failure_policy: SendFailurePolicy = SendFailurePolicy.FAIL_FAST,
    ) -> None:
        if async_timeout <= 0:
            raise ValueError(f"async_timeout must be positive, got {async_timeout}")
        self._transport = transport
        self._pubsub = pubsub
        self.async_timeout = async_timeout
        self.send_failure_policy = SendFailurePolicy(send_failure_policy)
        self._pending_sends: set[asyncio.Task[TransportResponse]] = set()

    @property
    def mode(self) -> CorrelationMode:
        return CorrelationMode.SYNC if self._pubsub is None else CorrelationMode.ASYNC

    @property
    def pending_sends(self) -> int:
        """Number of async-mode sends still in flight."""
        return len(self._pending_sends)

    async def exchange(self, body: bytes, key: CorrelationKey | None = None) -> bytes:
        """Send body and return the answer bytes.

        Args:
            body: Serialized request
            key: Correlation key of the request; required in async mode

        Raises:
            ValueError: If key is missing in async mode
            TransportError: If the send (or, in async mode, the subscribe)
                fails
            AsyncTimeoutError: If no answer is published before the deadline
        """
        if self._pubsub is None:
            return await self._exchange_sync(body)
        if key is None:
            raise ValueError("a correlation key is required in async mode")
        return await self._exchange_async(self._pubsub, body, key)

    async def _exchange_sync(self, body: bytes) -> bytes:
        try:
            response = await self._transport.post(body)
        except TransportError as e:
            _record_transport_error(CorrelationMode.SYNC, e)
            raise
        if response.status_code != ANSWER_ACK_STATUS:
            logger.warning(
                "roamrpc.correlator.unexpected_status",
                status_code=response.status_code,
                mode=CorrelationMode.SYNC.value,
            )
        return response.content

    async def _exchange_async(
        self, pubsub: PubSubBackend, body: bytes, key: CorrelationKey
    ) -> bytes:
        try:
            subscription = await pubsub.subscribe(key)
        except BrokerError as e:
            _record_transport_error(CorrelationMode.ASYNC, e)
            raise TransportError(f"subscribe error: {e.message}", cause=e) from e

        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.async_timeout
        logger.debug("roamrpc.correlator.armed", key=key, timeout=self.async_timeout)
        try:
            send_task = self._start_send(body, key)
            return await self._await_answer(subscription, send_task, deadline, key)
        finally:
            await self._close_subscription(subscription)

    def _start_send(self, body: bytes, key: CorrelationKey) -> "asyncio.Task[TransportResponse]":
        task = asyncio.create_task(self._send(body, key))
        self._pending_sends.add(task)
        task.add_done_callback(lambda t: self._send_finished(t, key))
        return task

    async def _send(self, body: bytes, key: CorrelationKey) -> TransportResponse:
        started = time.perf_counter()
        response = await self._transport.post(body)
        log = logger.debug if response.status_code == ANSWER_ACK_STATUS else logger.warning
        log(
            "roamrpc.correlator.ack",
            key=key,
            status_code=response.status_code,
            duration_ms=round((time.perf_counter() - started) * 1000, 2),
        )
        return response

    def _send_finished(self, task: "asyncio.Task[TransportResponse]", key: CorrelationKey) -> None:
        self._pending_sends.discard(task)
        if task.cancelled():
            logger.warning("roamrpc.correlator.send_cancelled", key=key)
            return
        error = task.exception()
        if error is not None:
            _record_transport_error(CorrelationMode.ASYNC, error)
            logger.warning(
                "roamrpc.correlator.send_failed",
                key=key,
                error=str(error),
                error_type=type(error).__name__,
            )

    async def _await_answer(
        self,
        subscription: Subscription,
        send_task: "asyncio.Task[TransportResponse]",
        deadline: float,
        key: CorrelationKey,
    ) -> bytes:
        loop = asyncio.get_running_loop()
        listen_task = asyncio.create_task(subscription.get())
        waiting: set[asyncio.Task[object]] = {listen_task, send_task}  # type: ignore[arg-type]
        send_error: BaseException | None = None
        try:
            while True:
                remaining = deadline - loop.time()
                if remaining <= 0:
                    break
                done, _ = await asyncio.wait(
                    waiting, timeout=remaining, return_when=asyncio.FIRST_COMPLETED
                )
                if listen_task in done:
                    return self._answer_from(listen_task, key)
                if send_task in done:
                    waiting.discard(send_task)  # type: ignore[arg-type]
                    send_error = None if send_task.cancelled() else send_task.exception()
                    if send_error is not None and (
                        self.send_failure_policy is SendFailurePolicy.FAIL_FAST
                    ):
                        raise send_error
        finally:
            if not listen_task.done():
                listen_task.cancel()
                await asyncio.wait({listen_task})

        if send_error is not None:
            raise send_error
        get_metrics().increment_counter("roamrpc_async_timeouts_total")
        logger.warning("roamrpc.correlator.timeout", key=key, timeout=self.async_timeout)
        raise AsyncTimeoutError(key, self.async_timeout)

    @staticmethod
    def _answer_from(listen_task: "asyncio.Task[bytes]", key: CorrelationKey) -> bytes:
        try:
            answer = listen_task.result()
        except BrokerError as e:
            raise TransportError(f"receive answer error: {e.message}", cause=e) from e
        logger.debug("roamrpc.correlator.answer", key=key, size=len(answer))
        return answer

    async def _close_subscription(self, subscription: Subscription) -> None:
        try:
            await subscription.close()
        except BrokerError as e:
            logger.warning(
                "roamrpc.correlator.unsubscribe_failed",
                key=subscription.key,
                error=str(e),
            )

    async def aclose(self) -> None:
        """Wait for every async-mode send still in flight."""
        if self._pending_sends:
            logger.debug("roamrpc.correlator.draining", pending=len(self._pending_sends))
            await asyncio.gather(*list(self._pending_sends), return_exceptions=True)
