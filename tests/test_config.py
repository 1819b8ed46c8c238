"""Tests for ClientConfig."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from roamrpc.config import ClientConfig
from roamrpc.models import SendFailurePolicy

REQUIRED = {"server": "https://ns.example.com/api", "sender_id": "000001", "receiver_id": "000002"}


class TestClientConfig:
    def test_defaults(self) -> None:
        config = ClientConfig(**REQUIRED)

        assert config.protocol_version == "1.0"
        assert config.async_timeout == 1.0
        assert config.http_timeout == 10.0
        assert config.namespace == "lora"
        assert config.send_failure_policy is SendFailurePolicy.FAIL_FAST
        assert not config.uses_tls_files

    def test_frozen(self) -> None:
        config = ClientConfig(**REQUIRED)

        with pytest.raises(ValidationError):
            config.sender_id = "other"  # type: ignore[misc]

    @pytest.mark.parametrize("server", ["ftp://ns.example.com", "ns.example.com", "http://"])
    def test_rejects_bad_server(self, server: str) -> None:
        with pytest.raises(ValidationError, match="Invalid server URL"):
            ClientConfig(**{**REQUIRED, "server": server})

    @pytest.mark.parametrize("timeout", [0, -0.5])
    def test_async_timeout_must_be_positive(self, timeout: float) -> None:
        with pytest.raises(ValidationError):
            ClientConfig(**REQUIRED, async_timeout=timeout)

    def test_namespace_without_separator(self) -> None:
        with pytest.raises(ValidationError, match="namespace"):
            ClientConfig(**REQUIRED, namespace="a:b")

    def test_tls_cert_requires_key(self, tmp_path: Path) -> None:
        with pytest.raises(ValidationError, match="together"):
            ClientConfig(**REQUIRED, tls_cert=tmp_path / "client.crt")

    def test_ca_alone_is_allowed(self, tmp_path: Path) -> None:
        config = ClientConfig(**REQUIRED, ca_cert=tmp_path / "ca.pem")

        assert config.uses_tls_files

    def test_missing_identity(self) -> None:
        with pytest.raises(ValidationError):
            ClientConfig(server="https://ns.example.com/api")  # type: ignore[call-arg]


class TestFromEnv:
    def test_reads_prefixed_variables(self) -> None:
        environ = {
            "ROAMRPC_SERVER": "https://ns.example.com/api",
            "ROAMRPC_SENDER_ID": "000001",
            "ROAMRPC_RECEIVER_ID": "000002",
            "ROAMRPC_ASYNC_TIMEOUT": "2.5",
            "ROAMRPC_NAMESPACE": "ns",
            "ROAMRPC_SEND_FAILURE_POLICY": "await_answer",
            "ROAMRPC_REDIS_URL": "redis://localhost:6379/0",
        }

        config = ClientConfig.from_env(environ)

        assert config.async_timeout == 2.5
        assert config.namespace == "ns"
        assert config.send_failure_policy is SendFailurePolicy.AWAIT_ANSWER
        assert config.redis_url == "redis://localhost:6379/0"

    def test_overrides_win_and_none_is_ignored(self) -> None:
        environ = {**{f"ROAMRPC_{k.upper()}": v for k, v in REQUIRED.items()}}

        config = ClientConfig.from_env(environ, sender_id="0000AA", receiver_id=None)

        assert config.sender_id == "0000AA"
        assert config.receiver_id == "000002"

    def test_empty_values_are_unset(self) -> None:
        environ = {**{f"ROAMRPC_{k.upper()}": v for k, v in REQUIRED.items()}}
        environ["ROAMRPC_NAMESPACE"] = ""

        assert ClientConfig.from_env(environ).namespace == "lora"

    def test_reads_os_environ(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for key, value in REQUIRED.items():
            monkeypatch.setenv(f"ROAMRPC_{key.upper()}", value)

        assert ClientConfig.from_env().server == REQUIRED["server"]
