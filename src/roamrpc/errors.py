"""roamrpc error taxonomy.

Every failure surfaced by the client belongs to one of five kinds:

- ``SerializationError``: a payload could not be encoded or decoded.
- ``TransportError``: the HTTP send/receive could not complete.
- ``AsyncTimeoutError``: no matching answer was published in time.
- ``ResultError``: the peer answered with a non-success result code.
- ``PublishError``: an async answer could not be handed to the broker.

``AsyncTimeoutError`` deliberately sits outside the transport and
serialization branches: the request may still be pending at the peer,
while the other kinds are final for the attempt.
"""

from __future__ import annotations

from typing import Any


class RoamError(Exception):
    """Base exception for all roamrpc errors.

    Attributes:
        code: Error code following the roamrpc:<area>/<reason> pattern
        message: Human-readable error message
        details: Optional additional error context
    """

    def __init__(self, code: str, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Serialize to ``{code, message, details}`` dict."""
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class SerializationError(RoamError):
    """Raised when a request or answer cannot be encoded or decoded.

    Attributes:
        reason: Short description of what failed
    """

    def __init__(
        self,
        reason: str,
        details: dict[str, Any] | None = None,
        code: str = "roamrpc:codec/serialization",
    ) -> None:
        super().__init__(code=code, message=f"Serialization failed: {reason}", details=details)
        self.reason = reason


class TransactionMismatchError(SerializationError):
    """Raised when a decoded answer does not carry the request's transaction id."""

    def __init__(
        self,
        expected: int,
        received: int | None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            reason=f"answer transaction id {received} does not match request {expected}",
            details={"expected": expected, "received": received, **(details or {})},
            code="roamrpc:codec/transaction_mismatch",
        )
        self.expected = expected
        self.received = received


class TransportError(RoamError):
    """Raised when the HTTP exchange with the peer cannot complete.

    Attributes:
        url: Endpoint the request was sent to (credentials masked)
        cause: Original exception, if any
    """

    def __init__(
        self,
        message: str,
        url: str | None = None,
        cause: BaseException | None = None,
        details: dict[str, Any] | None = None,
        code: str = "roamrpc:transport/send_failed",
    ) -> None:
        merged: dict[str, Any] = {**(details or {})}
        if url:
            merged["url"] = url
        if cause is not None:
            merged["cause"] = type(cause).__name__
        super().__init__(code=code, message=message, details=merged)
        self.url = url
        self.cause = cause


class AnswerRejectedError(TransportError):
    """Raised when the peer does not acknowledge a pushed answer with HTTP 200."""

    def __init__(
        self,
        status_code: int,
        body: str,
        url: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=f"expected: 200, got: {status_code} ({body})",
            url=url,
            details={"status_code": status_code, **(details or {})},
            code="roamrpc:transport/answer_rejected",
        )
        self.status_code = status_code
        self.body = body


class AsyncTimeoutError(RoamError):
    """Raised when no answer is published on the correlation key in time.

    The request may still be processed by the peer; a late answer is
    dropped because the listener has been released.

    Attributes:
        key: Correlation key that was listened on
        timeout: Timeout in seconds
    """

    def __init__(self, key: str, timeout: float, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            code="roamrpc:transport/async_timeout",
            message=f"async timeout: no answer on '{key}' within {timeout}s",
            details={"key": key, "timeout": timeout, **(details or {})},
        )
        self.key = key
        self.timeout = timeout


class ResultError(RoamError):
    """Raised when the peer answers with a result code other than Success.

    Attributes:
        result_code: Result code exactly as received
        description: Result description exactly as received
        answer: The decoded answer carrying the failure
    """

    def __init__(
        self,
        result_code: str,
        description: str | None,
        answer: Any = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            code="roamrpc:answer/result",
            message=f"response error, code: {result_code}, description: {description}",
            details={
                "result_code": result_code,
                "description": description,
                **(details or {}),
            },
        )
        self.result_code = result_code
        self.description = description
        self.answer = answer


class BrokerError(RoamError):
    """Raised by pub/sub backends when the broker cannot be reached or refuses a command."""

    def __init__(
        self,
        message: str,
        cause: BaseException | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(code="roamrpc:pubsub/broker", message=message, details=details)
        self.cause = cause


class PublishError(RoamError):
    """Raised when an async answer cannot be published on its correlation key.

    Attributes:
        key: Correlation key the answer was meant for
    """

    def __init__(
        self,
        key: str,
        reason: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            code="roamrpc:pubsub/publish",
            message=f"publish answer error on '{key}': {reason}",
            details={"key": key, **(details or {})},
        )
        self.key = key
        self.reason = reason
