"""Tests for roamrpc error taxonomy."""

import pytest

from roamrpc.errors import (
    AnswerRejectedError,
    AsyncTimeoutError,
    BrokerError,
    PublishError,
    ResultError,
    RoamError,
    SerializationError,
    TransactionMismatchError,
    TransportError,
)


class TestRoamError:
    """Test RoamError base class."""

    def test_basic_error_creation(self) -> None:
        error = RoamError(code="roamrpc:test/error", message="Test error message")

        assert error.code == "roamrpc:test/error"
        assert error.message == "Test error message"
        assert error.details == {}
        assert str(error) == "Test error message"

    def test_error_details_not_shared(self) -> None:
        error1 = RoamError("code", "msg", {"key": "value1"})
        error2 = RoamError("code", "msg", {"key": "value2"})

        assert error1.details["key"] == "value1"
        assert error2.details["key"] == "value2"

    def test_to_dict(self) -> None:
        error = RoamError("roamrpc:test/x", "boom", {"a": 1})

        assert error.to_dict() == {
            "code": "roamrpc:test/x",
            "message": "boom",
            "details": {"a": 1},
        }


class TestSerializationError:
    def test_reason_and_code(self) -> None:
        error = SerializationError("unexpected end of JSON")

        assert error.code == "roamrpc:codec/serialization"
        assert error.reason == "unexpected end of JSON"
        assert "unexpected end of JSON" in str(error)

    def test_transaction_mismatch_is_serialization_error(self) -> None:
        error = TransactionMismatchError(expected=42, received=43)

        assert isinstance(error, SerializationError)
        assert error.code == "roamrpc:codec/transaction_mismatch"
        assert error.details == {"expected": 42, "received": 43}


class TestTransportError:
    def test_details_include_url_and_cause(self) -> None:
        cause = ConnectionRefusedError("refused")
        error = TransportError("send request error", url="https://peer/api", cause=cause)

        assert error.code == "roamrpc:transport/send_failed"
        assert error.details["url"] == "https://peer/api"
        assert error.details["cause"] == "ConnectionRefusedError"
        assert error.cause is cause

    def test_answer_rejected_message(self) -> None:
        error = AnswerRejectedError(503, "unavailable")

        assert isinstance(error, TransportError)
        assert error.status_code == 503
        assert error.body == "unavailable"
        assert str(error) == "expected: 200, got: 503 (unavailable)"
        assert error.details["status_code"] == 503


class TestAsyncTimeoutError:
    def test_not_transport_or_serialization(self) -> None:
        error = AsyncTimeoutError("lora:backend:async:ProfileReq:1", 1.0)

        assert not isinstance(error, TransportError)
        assert not isinstance(error, SerializationError)
        assert error.code == "roamrpc:transport/async_timeout"
        assert error.details == {"key": "lora:backend:async:ProfileReq:1", "timeout": 1.0}


class TestResultError:
    def test_message_carries_code_and_description(self) -> None:
        error = ResultError("500", "server error")

        assert error.result_code == "500"
        assert error.description == "server error"
        assert str(error) == "response error, code: 500, description: server error"
        assert error.code == "roamrpc:answer/result"

    def test_answer_attached(self) -> None:
        sentinel = object()
        error = ResultError("UnknownDevEUI", None, answer=sentinel)

        assert error.answer is sentinel


class TestPubSubErrors:
    def test_publish_error(self) -> None:
        error = PublishError("lora:backend:async:PRStopReq:9", "connection reset")

        assert error.code == "roamrpc:pubsub/publish"
        assert error.key == "lora:backend:async:PRStopReq:9"
        assert "connection reset" in str(error)

    def test_broker_error_keeps_cause(self) -> None:
        cause = OSError("down")
        error = BrokerError("broker unreachable", cause=cause)

        assert error.code == "roamrpc:pubsub/broker"
        assert error.cause is cause


@pytest.mark.parametrize(
    "error",
    [
        SerializationError("x"),
        TransportError("x"),
        AsyncTimeoutError("k", 1.0),
        ResultError("x", None),
        PublishError("k", "x"),
    ],
)
def test_every_kind_is_a_roam_error(error: RoamError) -> None:
    assert isinstance(error, RoamError)
    assert error.code.startswith("roamrpc:")
