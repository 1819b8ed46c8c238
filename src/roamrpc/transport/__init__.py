"""roamrpc transport layer.

Public exports:
    BackendClient: Sends requests to a peer and returns typed answers
    ResponseCorrelator: Matches a sent request with its answer (sync or async)
    AsyncAnswerPublisher: Publishes async answers on their correlation key
    HTTPTransport: httpx-based POST to the peer endpoint
    TransportResponse: Status and body of one POST
    TLSConfig: CA bundle and client certificate settings
    create_client_ssl_context: Build an SSL context from a TLSConfig
"""

from roamrpc.transport.client import BackendClient
from roamrpc.transport.correlator import ResponseCorrelator
from roamrpc.transport.http import HTTPTransport, TransportResponse
from roamrpc.transport.mtls import TLSConfig, create_client_ssl_context
from roamrpc.transport.publisher import AsyncAnswerPublisher

__all__ = [
    "AsyncAnswerPublisher",
    "BackendClient",
    "HTTPTransport",
    "ResponseCorrelator",
    "TLSConfig",
    "TransportResponse",
    "create_client_ssl_context",
]
