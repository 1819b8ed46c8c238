"""TLS settings for the peer connection.

The peer may require a client certificate (mutual TLS) and may present a
certificate signed by a private CA. Both are optional and independent:
a CA bundle alone only changes how the peer is verified.
"""

from __future__ import annotations

import ssl
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class TLSConfig:
    ca_certs: str | Path | None = None
    cert_file: str | Path | None = None
    key_file: str | Path | None = None
    key_password: str | None = None

    @property
    def is_empty(self) -> bool:
        return self.ca_certs is None and self.cert_file is None and self.key_file is None


def _existing(path: str | Path, what: str) -> str:
    resolved = Path(path)
    if not resolved.exists():
        raise FileNotFoundError(f"{what} file not found: {resolved}")
    return str(resolved)


def create_client_ssl_context(config: TLSConfig) -> ssl.SSLContext:
    """Build the client-side SSL context, loading all files once.

    Raises:
        FileNotFoundError: If a configured file does not exist
        ValueError: If only one of cert_file / key_file is set
        ssl.SSLError: If a file cannot be parsed
    """
    if (config.cert_file is None) != (config.key_file is None):
        raise ValueError("cert_file and key_file must be set together")

    ctx = ssl.create_default_context(ssl.Purpose.SERVER_AUTH)
    if config.ca_certs is not None:
        ctx.load_verify_locations(cafile=_existing(config.ca_certs, "CA certs"))
    if config.cert_file is not None and config.key_file is not None:
        ctx.load_cert_chain(
            certfile=_existing(config.cert_file, "Certificate"),
            keyfile=_existing(config.key_file, "Key"),
            password=config.key_password,
        )
    ctx.check_hostname = True
    ctx.verify_mode = ssl.CERT_REQUIRED
    return ctx
