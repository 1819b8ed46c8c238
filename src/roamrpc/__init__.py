"""roamrpc: asyncio client for the roaming-interconnect backend protocol.

Peers exchange JSON request/answer documents over HTTP. Answers come back
either in the HTTP response body (sync mode) or out-of-band on a pub/sub
channel keyed by message type and transaction id (async mode).

Example:
    >>> from roamrpc import BackendClient, ClientConfig
    >>> from roamrpc.models import ProfileReq
    >>>
    >>> config = ClientConfig(server="https://ns.example.com/api", sender_id="000001", receiver_id="000002")
    >>> async with BackendClient(config) as client:
    ...     answer = await client.profile_req(ProfileReq(dev_eui="0102030405060708"))
"""

__version__ = "0.3.0"

from roamrpc.config import ClientConfig
from roamrpc.errors import (
    AnswerRejectedError,
    AsyncTimeoutError,
    PublishError,
    ResultError,
    RoamError,
    SerializationError,
    TransactionMismatchError,
    TransportError,
)
from roamrpc.transport.client import BackendClient

__all__ = [
    "__version__",
    "AnswerRejectedError",
    "AsyncTimeoutError",
    "BackendClient",
    "ClientConfig",
    "PublishError",
    "ResultError",
    "RoamError",
    "SerializationError",
    "TransactionMismatchError",
    "TransportError",
]
