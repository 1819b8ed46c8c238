"""Backend client for the roaming request/answer protocol.

BackendClient sends the five roaming requests (PRStartReq, PRStopReq,
XmitDataReq, ProfileReq, HomeNSReq) to one peer and returns the typed
answer. Every operation goes through the same pipeline:

1. stamp protocol version, sender/receiver ids, message type and
   transaction id on the request
2. serialize it and hand it to the ResponseCorrelator
3. decode the answer, check it carries the request's transaction id
4. raise ResultError if the answer's result code is not Success

Without a pub/sub backend the answer is read from the HTTP response (sync
mode). With one, the client listens on the request's correlation key and
the peer publishes the answer there (async mode).

Example:
    >>> config = ClientConfig(server="https://ns.example.com/api",
    ...                       sender_id="000001", receiver_id="000002")
    >>> async with BackendClient(config) as client:
    ...     answer = await client.profile_req(ProfileReq(dev_eui="0102030405060708"))
    ...     print(answer.result.result_code)
"""

import ssl
import time
from types import TracebackType
from typing import Any, TypeVar

import httpx
from pydantic import ValidationError

from roamrpc.config import ClientConfig
from roamrpc.errors import (
    AnswerRejectedError,
    AsyncTimeoutError,
    ResultError,
    RoamError,
    SerializationError,
    TransactionMismatchError,
    TransportError,
)
from roamrpc.models.constants import ANSWER_ACK_STATUS
from roamrpc.models.enums import CorrelationMode, MessageType
from roamrpc.models.ids import build_correlation_key, generate_transaction_id
from roamrpc.models.payloads import (
    HOME_NS,
    PR_START,
    PR_STOP,
    PROFILE,
    XMIT_DATA,
    BasePayload,
    BasePayloadResult,
    HomeNSAns,
    HomeNSReq,
    Operation,
    PRStartAns,
    PRStartReq,
    PRStopAns,
    PRStopReq,
    ProfileAns,
    ProfileReq,
    XmitDataAns,
    XmitDataReq,
)
from roamrpc.models.types import TransactionID
from roamrpc.observability import get_logger, get_metrics
from roamrpc.pubsub.base import PubSubBackend
from roamrpc.transport.correlator import ResponseCorrelator
from roamrpc.transport.http import HTTPTransport
from roamrpc.transport.mtls import TLSConfig, create_client_ssl_context
from roamrpc.transport.publisher import AsyncAnswerPublisher
from roamrpc.utils.sanitization import sanitize_url

logger = get_logger(__name__)

ReqT = TypeVar("ReqT", bound=BasePayload)
AnsT = TypeVar("AnsT", bound=BasePayloadResult)


def _outcome(error: BaseException | None) -> str:
    if error is None:
        return "success"
    if isinstance(error, ResultError):
        return "result_error"
    if isinstance(error, AsyncTimeoutError):
        return "timeout"
    if isinstance(error, SerializationError):
        return "serialization_error"
    if isinstance(error, TransportError):
        return "transport_error"
    return "error"


def _build_ssl_context(config: ClientConfig) -> ssl.SSLContext | None:
    if not config.uses_tls_files:
        return None
    return create_client_ssl_context(
        TLSConfig(ca_certs=config.ca_cert, cert_file=config.tls_cert, key_file=config.tls_key)
    )


class BackendClient:
    """Async client sending roaming requests to one peer.

    Args:
        config: Identity and connection settings
        pubsub: Pub/sub backend; when given the client works in async mode
        transport: Optional custom httpx transport, used for testing

    Raises:
        FileNotFoundError: If a configured CA, certificate or key file is missing
    """

    def __init__(
        self,
        config: ClientConfig,
        pubsub: PubSubBackend | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self._pubsub = pubsub
        self._http = HTTPTransport(
            config.server,
            timeout=config.http_timeout,
            ssl_context=_build_ssl_context(config),
            transport=transport,
        )
        self._correlator = ResponseCorrelator(
            self._http,
            pubsub,
            async_timeout=config.async_timeout,
            send_failure_policy=config.send_failure_policy,
        )
        self._publisher = (
            AsyncAnswerPublisher(pubsub, namespace=config.namespace) if pubsub else None
        )

    @property
    def sender_id(self) -> str:
        return self.config.sender_id

    @property
    def receiver_id(self) -> str:
        return self.config.receiver_id

    @property
    def is_async(self) -> bool:
        return self._correlator.mode is CorrelationMode.ASYNC

    @staticmethod
    def random_transaction_id() -> TransactionID:
        """Draw a random 32-bit transaction id."""
        return generate_transaction_id()

    async def __aenter__(self) -> "BackendClient":
        await self._http.__aenter__()
        logger.debug(
            "roamrpc.client.open",
            target_url=sanitize_url(self.config.server),
            mode=self._correlator.mode.value,
        )
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Wait for in-flight async sends, then close the HTTP connection pool."""
        await self._correlator.aclose()
        await self._http.aclose()

    async def pr_start_req(self, payload: PRStartReq) -> PRStartAns:
        return await self.request(PR_START, payload)

    async def pr_stop_req(self, payload: PRStopReq) -> PRStopAns:
        return await self.request(PR_STOP, payload)

    async def xmit_data_req(self, payload: XmitDataReq) -> XmitDataAns:
        return await self.request(XMIT_DATA, payload)

    async def profile_req(self, payload: ProfileReq) -> ProfileAns:
        return await self.request(PROFILE, payload)

    async def home_ns_req(self, payload: HomeNSReq) -> HomeNSAns:
        return await self.request(HOME_NS, payload)

    def _stamp(self, operation: Operation[ReqT, AnsT], payload: ReqT) -> ReqT:
        transaction_id = payload.transaction_id
        if transaction_id is None:
            transaction_id = generate_transaction_id()
        return payload.model_copy(
            update={
                "protocol_version": self.config.protocol_version,
                "sender_id": self.config.sender_id,
                "receiver_id": self.config.receiver_id,
                "message_type": operation.request_type,
                "transaction_id": transaction_id,
            }
        )

    async def request(
        self, operation: Operation[ReqT, AnsT], payload: ReqT | dict[str, Any]
    ) -> AnsT:
        """Send payload as operation's request and return the decoded answer.

        Args:
            operation: Operation descriptor (e.g. PR_START)
            payload: Request model, or a dict validated into it

        Returns:
            The answer, whose result code is Success

        Raises:
            SerializationError: If the request or answer cannot be (de)serialized,
                or the answer's transaction id differs from the request's
            TransportError: If the HTTP exchange fails
            AsyncTimeoutError: If no async answer arrives in time
            ResultError: If the answer carries a failure result code
        """
        started = time.perf_counter()
        error: BaseException | None = None
        request: ReqT | None = None
        try:
            if isinstance(payload, dict):
                try:
                    payload = operation.request_model.model_validate(payload)
                except ValidationError as e:
                    raise SerializationError(str(e)) from e
            request = self._stamp(operation, payload)
            return await self._exchange(operation, request)
        except BaseException as e:
            error = e
            raise
        finally:
            self._record(operation, request, started, error)

    async def _exchange(self, operation: Operation[ReqT, AnsT], request: ReqT) -> AnsT:
        transaction_id = request.transaction_id
        assert transaction_id is not None
        key = None
        if self.is_async:
            key = build_correlation_key(
                operation.request_type, transaction_id, namespace=self.config.namespace
            )

        try:
            body = request.to_wire()
        except (ValueError, TypeError) as e:
            raise SerializationError(f"marshal request error: {e}") from e

        raw = await self._correlator.exchange(body, key)

        try:
            answer = operation.answer_model.model_validate_json(raw)
        except ValueError as e:
            raise SerializationError(
                f"unmarshal response error: {e}",
                details={"message_type": operation.answer_type.value},
            ) from e

        if answer.transaction_id != transaction_id:
            raise TransactionMismatchError(transaction_id, answer.transaction_id)
        if not answer.result.is_success:
            raise ResultError(answer.result.result_code, answer.result.description, answer)
        return answer

    def _record(
        self,
        operation: Operation[Any, Any],
        request: BasePayload | None,
        started: float,
        error: BaseException | None,
    ) -> None:
        duration = time.perf_counter() - started
        labels = {
            "message_type": operation.request_type.value,
            "mode": self._correlator.mode.value,
            "outcome": _outcome(error),
        }
        metrics = get_metrics()
        metrics.increment_counter("roamrpc_requests_total", labels)
        metrics.observe_histogram("roamrpc_request_duration_seconds", duration, labels)

        fields: dict[str, Any] = {
            "message_type": operation.request_type.value,
            "transaction_id": request.transaction_id if request is not None else None,
            "mode": labels["mode"],
            "duration_ms": round(duration * 1000, 2),
        }
        if error is None:
            logger.info("roamrpc.client.answer", **fields)
        elif isinstance(error, RoamError):
            logger.warning(
                "roamrpc.client.failed", error_code=error.code, error=error.message, **fields
            )
        elif isinstance(error, Exception):
            logger.error(
                "roamrpc.client.error",
                error_type=type(error).__name__,
                exc_info=error,
                **fields,
            )

    async def send_answer(self, answer: BasePayloadResult) -> None:
        """POST an answer to the peer; the peer must acknowledge with HTTP 200.

        Raises:
            SerializationError: If the answer cannot be serialized
            TransportError: If the HTTP exchange fails
            AnswerRejectedError: If the peer responds with any other status
        """
        try:
            body = answer.to_wire()
        except (ValueError, TypeError) as e:
            raise SerializationError(f"marshal answer error: {e}") from e

        response = await self._http.post(body)
        if response.status_code != ANSWER_ACK_STATUS:
            raise AnswerRejectedError(
                response.status_code, response.text, url=sanitize_url(self.config.server)
            )
        logger.info(
            "roamrpc.client.answer_sent",
            message_type=answer.message_type.value if answer.message_type else None,
            transaction_id=answer.transaction_id,
        )

    def _require_publisher(self) -> AsyncAnswerPublisher:
        if self._publisher is None:
            raise ValueError("no pub/sub backend configured; async answers cannot be published")
        return self._publisher

    async def handle_async_pr_start_ans(self, answer: PRStartAns) -> None:
        await self._require_publisher().publish(MessageType.PR_START_REQ, answer)

    async def handle_async_pr_stop_ans(self, answer: PRStopAns) -> None:
        await self._require_publisher().publish(MessageType.PR_STOP_REQ, answer)

    async def handle_async_xmit_data_ans(self, answer: XmitDataAns) -> None:
        await self._require_publisher().publish(MessageType.XMIT_DATA_REQ, answer)

    async def handle_async_profile_ans(self, answer: ProfileAns) -> None:
        await self._require_publisher().publish(MessageType.PROFILE_REQ, answer)

    async def handle_async_home_ns_ans(self, answer: HomeNSAns) -> None:
        await self._require_publisher().publish(MessageType.HOME_NS_REQ, answer)
