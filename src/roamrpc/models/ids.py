"""Transaction id generation and correlation key derivation.

A transaction id identifies one request/answer pair. The correlation key is
the pub/sub channel on which an async answer for that pair is published;
requester and publisher must derive it identically.

Note: transaction ids are random, not unique. Two in-flight requests of the
same message type that draw the same id inside one timeout window would see
each other's answers; avoiding that is up to the caller.
"""

import secrets

from roamrpc.models.constants import (
    ASYNC_KEY_SEGMENT,
    DEFAULT_KEY_COMPONENT,
    DEFAULT_KEY_NAMESPACE,
    KEY_SEPARATOR,
    MAX_TRANSACTION_ID,
    TRANSACTION_ID_BITS,
)
from roamrpc.models.enums import MessageType
from roamrpc.models.types import CorrelationKey, TransactionID


def generate_transaction_id() -> TransactionID:
    """Draw a transaction id from the OS CSPRNG.

    Returns:
        An integer uniformly distributed over 0..2**32-1

    Example:
        >>> 0 <= generate_transaction_id() <= 0xFFFFFFFF
        True
    """
    return secrets.randbits(TRANSACTION_ID_BITS)


def validate_transaction_id(transaction_id: int) -> TransactionID:
    """Return transaction_id unchanged if it fits in 32 unsigned bits."""
    if isinstance(transaction_id, bool) or not isinstance(transaction_id, int):
        raise ValueError(f"Transaction id must be an integer, got {transaction_id!r}")
    if not 0 <= transaction_id <= MAX_TRANSACTION_ID:
        raise ValueError(
            f"Transaction id must be within 0..{MAX_TRANSACTION_ID}, got {transaction_id}"
        )
    return transaction_id


def _validate_segment(name: str, value: str) -> str:
    if not value:
        raise ValueError(f"Correlation key {name} must not be empty")
    if KEY_SEPARATOR in value:
        raise ValueError(f"Correlation key {name} must not contain '{KEY_SEPARATOR}': {value!r}")
    return value


def build_correlation_key(
    message_type: MessageType | str,
    transaction_id: TransactionID,
    *,
    namespace: str = DEFAULT_KEY_NAMESPACE,
    component: str = DEFAULT_KEY_COMPONENT,
) -> CorrelationKey:
    """Build the pub/sub key for (message type, transaction id).

    Answers are keyed by the request's message type on both sides, so an
    answer tag is mapped back to its request tag first.

    Args:
        message_type: Request (or answer) message type
        transaction_id: Transaction id of the request
        namespace: Leading key segment shared by both peers
        component: Second key segment

    Returns:
        ``<namespace>:<component>:async:<message type>:<transaction id>``

    Raises:
        ValueError: If the message type is unknown, the transaction id is out
            of range, or a segment is empty or contains the separator

    Example:
        >>> build_correlation_key(MessageType.PR_START_REQ, 7, namespace="ns")
        'ns:backend:async:PRStartReq:7'
    """
    request_type = MessageType(message_type).request_type
    validate_transaction_id(transaction_id)
    return KEY_SEPARATOR.join(
        (
            _validate_segment("namespace", namespace),
            _validate_segment("component", component),
            ASYNC_KEY_SEGMENT,
            request_type.value,
            str(transaction_id),
        )
    )
