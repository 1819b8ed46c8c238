"""Payload models for the five roamrpc operations.

Each operation is a request/answer pair sharing the base fields of
BasePayload; answers add a mandatory Result. Operation-specific fields are
typed where they are common to most deployments, and any other field a
peer sends is kept as an extra and written back out unchanged.
"""

from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from pydantic import ConfigDict, Field, field_validator

from roamrpc.models.base import RoamBaseModel
from roamrpc.models.constants import MAX_TRANSACTION_ID
from roamrpc.models.enums import MessageType, ResultCode
from roamrpc.models.types import HEXBytes, NetID, TransactionID


class Result(RoamBaseModel):
    """Outcome of an operation as reported by the answering peer.

    Attributes:
        result_code: Result code; "Success" or any failure code (kept verbatim)
        description: Optional human-readable description
    """

    model_config = ConfigDict(extra="allow")

    result_code: str = Field(..., alias="ResultCode", description="Result code")
    description: str | None = Field(default=None, alias="Description")

    @property
    def is_success(self) -> bool:
        return self.result_code == ResultCode.SUCCESS


class BasePayload(RoamBaseModel):
    """Fields shared by every request and answer.

    The client stamps protocol_version, sender_id, receiver_id and
    message_type on outgoing requests; callers normally set only the
    transaction_id (or leave it for the client to draw) and the
    operation-specific fields.
    """

    model_config = ConfigDict(extra="allow")

    protocol_version: str | None = Field(default=None, alias="ProtocolVersion")
    sender_id: NetID | None = Field(default=None, alias="SenderID")
    receiver_id: NetID | None = Field(default=None, alias="ReceiverID")
    transaction_id: TransactionID | None = Field(
        default=None, alias="TransactionID", ge=0, le=MAX_TRANSACTION_ID
    )
    message_type: MessageType | None = Field(default=None, alias="MessageType")
    sender_token: HEXBytes | None = Field(default=None, alias="SenderToken")
    receiver_token: HEXBytes | None = Field(default=None, alias="ReceiverToken")
    sender_ns_id: str | None = Field(default=None, alias="SenderNSID")
    receiver_ns_id: str | None = Field(default=None, alias="ReceiverNSID")
    vs_extension: dict[str, Any] | None = Field(default=None, alias="VSExtension")

    @field_validator("transaction_id", mode="before")
    @classmethod
    def reject_bool_transaction_id(cls, v: Any) -> Any:
        if isinstance(v, bool):
            raise ValueError("TransactionID must be an integer")
        return v


class BasePayloadResult(BasePayload):
    """Base for answers: BasePayload plus the mandatory Result."""

    result: Result = Field(..., alias="Result")


class PRStartReq(BasePayload):
    """Start a passive-roaming session for an uplink received by the sender."""

    phy_payload: HEXBytes | None = Field(default=None, alias="PHYPayload")
    ul_meta_data: dict[str, Any] | None = Field(default=None, alias="ULMetaData")


class PRStartAns(BasePayloadResult):
    """Answer to PRStartReq."""

    dev_eui: HEXBytes | None = Field(default=None, alias="DevEUI")
    lifetime: int | None = Field(default=None, alias="Lifetime", ge=0)
    fcnt_up: int | None = Field(default=None, alias="FCntUp", ge=0)
    service_profile: dict[str, Any] | None = Field(default=None, alias="ServiceProfile")
    dl_freq_1: float | None = Field(default=None, alias="DLFreq1")
    dl_freq_2: float | None = Field(default=None, alias="DLFreq2")


class PRStopReq(BasePayload):
    """Stop a passive-roaming session."""

    dev_eui: HEXBytes | None = Field(default=None, alias="DevEUI")
    lifetime: int | None = Field(default=None, alias="Lifetime", ge=0)


class PRStopAns(BasePayloadResult):
    """Answer to PRStopReq."""


class XmitDataReq(BasePayload):
    """Relay an uplink or downlink frame to the peer."""

    phy_payload: HEXBytes | None = Field(default=None, alias="PHYPayload")
    frm_payload: HEXBytes | None = Field(default=None, alias="FRMPayload")
    ul_meta_data: dict[str, Any] | None = Field(default=None, alias="ULMetaData")
    dl_meta_data: dict[str, Any] | None = Field(default=None, alias="DLMetaData")


class XmitDataAns(BasePayloadResult):
    """Answer to XmitDataReq."""

    dl_freq_1: float | None = Field(default=None, alias="DLFreq1")
    dl_freq_2: float | None = Field(default=None, alias="DLFreq2")


class ProfileReq(BasePayload):
    """Query the device profile held by the device's home network."""

    dev_eui: HEXBytes | None = Field(default=None, alias="DevEUI")


class ProfileAns(BasePayloadResult):
    """Answer to ProfileReq."""

    device_profile: dict[str, Any] | None = Field(default=None, alias="DeviceProfile")
    device_profile_timestamp: str | None = Field(default=None, alias="DeviceProfileTimestamp")
    roaming_activity_type: str | None = Field(default=None, alias="RoamingActivityType")


class HomeNSReq(BasePayload):
    """Resolve the home network server of a device."""

    dev_eui: HEXBytes | None = Field(default=None, alias="DevEUI")


class HomeNSAns(BasePayloadResult):
    """Answer to HomeNSReq."""

    h_net_id: NetID | None = Field(default=None, alias="HNetID")


ReqT = TypeVar("ReqT", bound=BasePayload)
AnsT = TypeVar("AnsT", bound=BasePayloadResult)


@dataclass(frozen=True)
class Operation(Generic[ReqT, AnsT]):
    """Descriptor tying an operation's tags to its payload models.

    Attributes:
        name: Short operation name (used by the CLI and in logs)
        request_type: Message type of the request; also keys async answers
        request_model: Pydantic model of the request
        answer_model: Pydantic model of the answer
    """

    name: str
    request_type: MessageType
    request_model: type[ReqT]
    answer_model: type[AnsT]

    @property
    def answer_type(self) -> MessageType:
        return self.request_type.answer_type


PR_START = Operation("pr-start", MessageType.PR_START_REQ, PRStartReq, PRStartAns)
PR_STOP = Operation("pr-stop", MessageType.PR_STOP_REQ, PRStopReq, PRStopAns)
XMIT_DATA = Operation("xmit-data", MessageType.XMIT_DATA_REQ, XmitDataReq, XmitDataAns)
PROFILE = Operation("profile", MessageType.PROFILE_REQ, ProfileReq, ProfileAns)
HOME_NS = Operation("home-ns", MessageType.HOME_NS_REQ, HomeNSReq, HomeNSAns)

# Request message type -> Operation
OPERATIONS: dict[MessageType, Operation[Any, Any]] = {
    op.request_type: op for op in (PR_START, PR_STOP, XMIT_DATA, PROFILE, HOME_NS)
}


def get_operation(key: MessageType | str) -> Operation[Any, Any]:
    """Look up an operation by request/answer message type or by name.

    Raises:
        KeyError: If no operation matches
    """
    for op in OPERATIONS.values():
        if key == op.name:
            return op
    try:
        message_type = MessageType(key)
    except ValueError:
        raise KeyError(f"Unknown operation: {key}") from None
    return OPERATIONS[message_type.request_type]
