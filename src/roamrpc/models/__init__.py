"""roamrpc protocol models.

Pydantic models for the five request/answer pairs, the shared base fields,
enums, constants, and the id/key helpers.
"""

# Base models
from roamrpc.models.base import RoamBaseModel

# Constants
from roamrpc.models.constants import (
    DEFAULT_ASYNC_TIMEOUT,
    DEFAULT_KEY_NAMESPACE,
    MAX_TRANSACTION_ID,
    PROTOCOL_VERSION_1_0,
)

# Enums
from roamrpc.models.enums import CorrelationMode, MessageType, ResultCode, SendFailurePolicy

# Type aliases
from roamrpc.models.types import CorrelationKey, HEXBytes, NetID, TransactionID

# ID and key utilities
from roamrpc.models.ids import build_correlation_key, generate_transaction_id

# Payloads
from roamrpc.models.payloads import (
    HOME_NS,
    OPERATIONS,
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
    Result,
    XmitDataAns,
    XmitDataReq,
    get_operation,
)

__all__ = [
    # Base
    "RoamBaseModel",
    # Constants
    "DEFAULT_ASYNC_TIMEOUT",
    "DEFAULT_KEY_NAMESPACE",
    "MAX_TRANSACTION_ID",
    "PROTOCOL_VERSION_1_0",
    # Enums
    "CorrelationMode",
    "MessageType",
    "ResultCode",
    "SendFailurePolicy",
    # Types
    "CorrelationKey",
    "HEXBytes",
    "NetID",
    "TransactionID",
    # IDs
    "build_correlation_key",
    "generate_transaction_id",
    # Payloads
    "BasePayload",
    "BasePayloadResult",
    "Result",
    "PRStartReq",
    "PRStartAns",
    "PRStopReq",
    "PRStopAns",
    "XmitDataReq",
    "XmitDataAns",
    "ProfileReq",
    "ProfileAns",
    "HomeNSReq",
    "HomeNSAns",
    # Operations
    "Operation",
    "OPERATIONS",
    "PR_START",
    "PR_STOP",
    "XMIT_DATA",
    "PROFILE",
    "HOME_NS",
    "get_operation",
]
