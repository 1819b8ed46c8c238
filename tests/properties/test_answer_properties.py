"""Property-based tests for roamrpc payload models.

Serialization roundtrip: answer -> wire JSON -> answer preserves every field,
including operation fields, vendor extensions and unknown fields sent as null.
"""

from __future__ import annotations

from typing import Any

from hypothesis import given
from hypothesis import strategies as st

from roamrpc.models import (
    OPERATIONS,
    BasePayloadResult,
    MessageType,
    Operation,
)
from roamrpc.models.constants import MAX_TRANSACTION_ID

# --- Shared strategies ---

_HEX = st.text(alphabet="0123456789abcdef", min_size=2, max_size=32)
_NET_ID = st.text(alphabet="0123456789ABCDEF", min_size=6, max_size=6)
_TXID = st.integers(min_value=0, max_value=MAX_TRANSACTION_ID)
_RESULT_CODE = st.sampled_from(["Success", "UnknownDevEUI", "Deferred", "500", "XmitFailed"])
_DESCRIPTION = st.none() | st.text(min_size=1, max_size=40)
_OPERATION = st.sampled_from(list(OPERATIONS.values()))
_FREQ = st.floats(min_value=0, max_value=1e10, allow_nan=False, allow_infinity=False)
_COUNT = st.integers(min_value=0, max_value=MAX_TRANSACTION_ID)

_JSON = st.recursive(
    st.none()
    | st.booleans()
    | st.integers(min_value=-(2**53), max_value=2**53)
    | st.text(max_size=12),
    lambda children: st.lists(children, max_size=3)
    | st.dictionaries(st.text(max_size=8), children, max_size=3),
    max_leaves=8,
)
_OBJECT = st.dictionaries(st.text(min_size=1, max_size=8), _JSON, max_size=4)

# Prefix keeps extra keys clear of every field name and alias
_EXTRA_KEY = st.from_regex(r"Vendor[A-Za-z0-9]{1,10}", fullmatch=True)
_EXTRAS = st.dictionaries(_EXTRA_KEY, _JSON, max_size=3)

# Answer message type -> strategies for that answer's own fields, by wire name
_ANSWER_FIELDS: dict[MessageType, dict[str, st.SearchStrategy[Any]]] = {
    MessageType.PR_START_ANS: {
        "DevEUI": _HEX,
        "Lifetime": _COUNT,
        "FCntUp": _COUNT,
        "ServiceProfile": _OBJECT,
        "DLFreq1": _FREQ,
        "DLFreq2": _FREQ,
    },
    MessageType.PR_STOP_ANS: {},
    MessageType.XMIT_DATA_ANS: {"DLFreq1": _FREQ, "DLFreq2": _FREQ},
    MessageType.PROFILE_ANS: {
        "DeviceProfile": _OBJECT,
        "DeviceProfileTimestamp": st.text(max_size=30),
        "RoamingActivityType": st.sampled_from(["Passive", "Handover"]),
    },
    MessageType.HOME_NS_ANS: {"HNetID": _NET_ID},
}


@st.composite
def _optional_fields(
    draw: st.DrawFn, fields: dict[str, st.SearchStrategy[Any]]
) -> dict[str, Any]:
    data: dict[str, Any] = {}
    for alias, strategy in fields.items():
        choice = draw(st.sampled_from(["absent", "null", "value"]))
        if choice == "null":
            data[alias] = None
        elif choice == "value":
            data[alias] = draw(strategy)
    return data


@st.composite
def answers(draw: st.DrawFn) -> BasePayloadResult:
    operation: Operation[Any, Any] = draw(_OPERATION)
    result: dict[str, Any] = {"ResultCode": draw(_RESULT_CODE)}
    description = draw(_DESCRIPTION)
    if description is not None:
        result["Description"] = description
    result.update(draw(_EXTRAS))
    data: dict[str, Any] = {
        "ProtocolVersion": "1.0",
        "SenderID": draw(_NET_ID),
        "ReceiverID": draw(_NET_ID),
        "TransactionID": draw(_TXID),
        "MessageType": operation.answer_type.value,
        "Result": result,
    }
    data.update(
        draw(
            _optional_fields(
                {"SenderToken": _HEX, "ReceiverToken": _HEX, "VSExtension": _OBJECT}
            )
        )
    )
    data.update(draw(_optional_fields(_ANSWER_FIELDS[operation.answer_type])))
    data.update(draw(_EXTRAS))
    return operation.answer_model.model_validate(data)


@given(answers())
def test_answer_roundtrip(answer: BasePayloadResult) -> None:
    decoded = type(answer).model_validate_json(answer.to_wire())

    assert decoded == answer
    assert decoded.model_extra == answer.model_extra
    assert decoded.result == answer.result


@given(answers())
def test_answer_message_type_is_answer_tag(answer: BasePayloadResult) -> None:
    assert answer.message_type is not None
    assert not MessageType(answer.message_type).is_request()
