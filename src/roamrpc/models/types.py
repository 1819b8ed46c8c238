"""Type aliases for roamrpc.

These aliases document the semantic meaning of plain int/str types.
"""

from typing import TypeAlias

TransactionID: TypeAlias = int
"""Unsigned 32-bit identifier of one request/answer pair"""

CorrelationKey: TypeAlias = str
"""Pub/sub channel name derived from message type and transaction id"""

NetID: TypeAlias = str
"""Hex-encoded network identifier (e.g. '000001')"""

HEXBytes: TypeAlias = str
"""Hex-encoded binary field (e.g. DevEUI, PHYPayload)"""
