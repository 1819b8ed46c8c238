"""Enumerations for the roamrpc protocol.

This module defines the closed set of message types and the known result
codes, so the rest of the code base never compares magic strings.
"""

from enum import Enum


class MessageType(str, Enum):
    """Message type tag carried in every payload.

    Request and answer of an operation have distinct tags on the wire, but
    the correlation key is always built from the request tag.

    Example:
        >>> MessageType.PR_START_REQ.value
        'PRStartReq'
        >>> MessageType.PR_START_REQ.answer_type
        <MessageType.PR_START_ANS: 'PRStartAns'>
    """

    PR_START_REQ = "PRStartReq"
    PR_START_ANS = "PRStartAns"
    PR_STOP_REQ = "PRStopReq"
    PR_STOP_ANS = "PRStopAns"
    XMIT_DATA_REQ = "XmitDataReq"
    XMIT_DATA_ANS = "XmitDataAns"
    PROFILE_REQ = "ProfileReq"
    PROFILE_ANS = "ProfileAns"
    HOME_NS_REQ = "HomeNSReq"
    HOME_NS_ANS = "HomeNSAns"

    def is_request(self) -> bool:
        return self.value.endswith("Req")

    @property
    def answer_type(self) -> "MessageType":
        """Answer tag paired with this request tag."""
        if not self.is_request():
            raise ValueError(f"{self.value} is not a request message type")
        return MessageType(self.value[: -len("Req")] + "Ans")

    @property
    def request_type(self) -> "MessageType":
        """Request tag paired with this answer tag."""
        if self.is_request():
            return self
        return MessageType(self.value[: -len("Ans")] + "Req")

    def __str__(self) -> str:
        return self.value


class ResultCode(str, Enum):
    """Result codes defined by the backend interfaces protocol.

    Only SUCCESS denotes an application-level success. Peers may send codes
    outside this set, so answer models store the code as a plain string;
    comparing against a member works because the enum is str-based.
    """

    SUCCESS = "Success"
    MIC_FAILED = "MICFailed"
    JOIN_REQ_FAILED = "JoinReqFailed"
    NO_ROAMING_AGREEMENT = "NoRoamingAgreement"
    DEV_ROAMING_DISALLOWED = "DevRoamingDisallowed"
    ROAMING_ACT_DISALLOWED = "RoamingActDisallowed"
    ACTIVATION_DISALLOWED = "ActivationDisallowed"
    UNKNOWN_DEV_EUI = "UnknownDevEUI"
    UNKNOWN_DEV_ADDR = "UnknownDevAddr"
    UNKNOWN_SENDER = "UnknownSender"
    UNKNOWN_RECEIVER = "UnknownReceiver"
    DEFERRED = "Deferred"
    XMIT_FAILED = "XmitFailed"
    INVALID_FPORT = "InvalidFPort"
    INVALID_PROTOCOL_VERSION = "InvalidProtocolVersion"
    STALE_DEVICE_PROFILE = "StaleDeviceProfile"
    MALFORMED_REQUEST = "MalformedRequest"
    FRAME_SIZE_ERROR = "FrameSizeError"
    OTHER = "Other"


class CorrelationMode(str, Enum):
    """How answers reach the requester; fixed per client."""

    SYNC = "sync"
    ASYNC = "async"


class SendFailurePolicy(str, Enum):
    """What an async-mode request does when its HTTP send fails.

    FAIL_FAST raises the transport error as soon as the send fails.
    AWAIT_ANSWER keeps listening until the deadline: an answer published
    despite the failed acknowledgement is returned, otherwise the transport
    error is raised once the deadline passes.
    """

    FAIL_FAST = "fail_fast"
    AWAIT_ANSWER = "await_answer"
