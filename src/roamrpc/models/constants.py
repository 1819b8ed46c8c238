"""Constants for the roamrpc protocol client.

This module defines protocol-wide constants used across the codebase.
"""

# Protocol version stamped on every outgoing request
PROTOCOL_VERSION_1_0 = "1.0"

# Transaction ids are unsigned 32-bit integers
TRANSACTION_ID_BITS = 32
MAX_TRANSACTION_ID = 2**TRANSACTION_ID_BITS - 1

# Correlation key layout: <namespace>:<component>:async:<message type>:<transaction id>
DEFAULT_KEY_NAMESPACE = "lora"
DEFAULT_KEY_COMPONENT = "backend"
KEY_SEPARATOR = ":"
ASYNC_KEY_SEGMENT = "async"

DEFAULT_ASYNC_TIMEOUT = 1.0
"""Default time in seconds to wait for an answer published on the correlation key.

The window starts when the listener is armed, before the request is sent,
so it also covers the peer's acknowledgement round trip.
"""

DEFAULT_HTTP_TIMEOUT = 10.0
"""Default timeout in seconds for a single HTTP POST to the peer."""

# Status a peer must return to acknowledge a pushed answer
ANSWER_ACK_STATUS = 200

JSON_CONTENT_TYPE = "application/json"
