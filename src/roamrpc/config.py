"""Client configuration for roamrpc.

ClientConfig is the immutable identity and connection settings of one
BackendClient. It can be built directly or from ROAMRPC_* environment
variables.

Environment Variables:
    ROAMRPC_SERVER: Peer endpoint URL (http or https)
    ROAMRPC_SENDER_ID / ROAMRPC_RECEIVER_ID: Identities stamped on requests
    ROAMRPC_PROTOCOL_VERSION: Protocol version (default "1.0")
    ROAMRPC_CA_CERT: CA bundle used to verify the peer
    ROAMRPC_TLS_CERT / ROAMRPC_TLS_KEY: Client certificate and key (mutual TLS)
    ROAMRPC_HTTP_TIMEOUT: Seconds per HTTP POST
    ROAMRPC_ASYNC_TIMEOUT: Seconds to wait for an async answer
    ROAMRPC_NAMESPACE: First segment of correlation keys
    ROAMRPC_SEND_FAILURE_POLICY: "fail_fast" or "await_answer"
    ROAMRPC_REDIS_URL: Redis URL for async mode (used by the CLI)
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from roamrpc.models.constants import (
    DEFAULT_ASYNC_TIMEOUT,
    DEFAULT_HTTP_TIMEOUT,
    DEFAULT_KEY_NAMESPACE,
    KEY_SEPARATOR,
    PROTOCOL_VERSION_1_0,
)
from roamrpc.models.enums import SendFailurePolicy

ENV_PREFIX = "ROAMRPC_"

_ENV_FIELDS = (
    "server",
    "sender_id",
    "receiver_id",
    "protocol_version",
    "ca_cert",
    "tls_cert",
    "tls_key",
    "http_timeout",
    "async_timeout",
    "namespace",
    "send_failure_policy",
    "redis_url",
)


class ClientConfig(BaseModel):
    """Identity and connection settings of a BackendClient.

    Attributes:
        server: Peer endpoint every request is POSTed to
        sender_id: Identity of this network server (SenderID)
        receiver_id: Identity of the peer (ReceiverID)
        protocol_version: Version stamped on every request
        ca_cert: Optional CA bundle to verify the peer's certificate
        tls_cert: Optional client certificate for mutual TLS
        tls_key: Optional client key for mutual TLS
        http_timeout: Timeout in seconds of one HTTP POST
        async_timeout: Seconds to wait for an answer in async mode
        namespace: First segment of correlation keys (must match the peer)
        send_failure_policy: Behaviour when the send fails in async mode
        redis_url: Redis URL used to build an async-mode backend
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    server: str = Field(..., description="Peer endpoint URL")
    sender_id: str = Field(..., min_length=1, description="SenderID stamped on requests")
    receiver_id: str = Field(..., min_length=1, description="ReceiverID stamped on requests")
    protocol_version: str = Field(default=PROTOCOL_VERSION_1_0, min_length=1)
    ca_cert: Path | None = Field(default=None, description="CA bundle (PEM)")
    tls_cert: Path | None = Field(default=None, description="Client certificate (PEM)")
    tls_key: Path | None = Field(default=None, description="Client key (PEM)")
    http_timeout: float = Field(default=DEFAULT_HTTP_TIMEOUT, gt=0)
    async_timeout: float = Field(default=DEFAULT_ASYNC_TIMEOUT, gt=0)
    namespace: str = Field(default=DEFAULT_KEY_NAMESPACE, min_length=1)
    send_failure_policy: SendFailurePolicy = Field(default=SendFailurePolicy.FAIL_FAST)
    redis_url: str | None = Field(default=None)

    @field_validator("server")
    @classmethod
    def validate_server_url(cls, v: str) -> str:
        parsed = urlparse(v)
        if parsed.scheme.lower() not in ("http", "https") or not parsed.netloc:
            raise ValueError(
                f"Invalid server URL: {v}. Must be an http(s) URL (e.g. https://ns.example.com/api)"
            )
        return v

    @field_validator("namespace")
    @classmethod
    def validate_namespace(cls, v: str) -> str:
        if KEY_SEPARATOR in v:
            raise ValueError(f"namespace must not contain '{KEY_SEPARATOR}'")
        return v

    @model_validator(mode="after")
    def validate_tls_pair(self) -> "ClientConfig":
        if (self.tls_cert is None) != (self.tls_key is None):
            raise ValueError("tls_cert and tls_key must be set together")
        return self

    @property
    def uses_tls_files(self) -> bool:
        return any(p is not None for p in (self.ca_cert, self.tls_cert, self.tls_key))

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None, **overrides: Any) -> "ClientConfig":
        """Build a config from ROAMRPC_* variables; explicit overrides win.

        Overrides set to None are ignored so CLI options can be passed through
        unconditionally.

        Raises:
            pydantic.ValidationError: If a required value is missing or invalid
        """
        env = os.environ if environ is None else environ
        values: dict[str, Any] = {}
        for name in _ENV_FIELDS:
            raw = env.get(f"{ENV_PREFIX}{name.upper()}")
            if raw not in (None, ""):
                values[name] = raw
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
