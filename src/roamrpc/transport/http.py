"""HTTP leg of every exchange with the peer.

HTTPTransport owns one httpx.AsyncClient for the lifetime of a
BackendClient and POSTs JSON bodies to the configured server. It never
interprets the response body: in sync mode the body is the answer, in async
mode it is only an acknowledgement.
"""

import ssl
from dataclasses import dataclass
from types import TracebackType

import httpx

from roamrpc.errors import TransportError
from roamrpc.models.constants import DEFAULT_HTTP_TIMEOUT, JSON_CONTENT_TYPE
from roamrpc.observability import get_logger
from roamrpc.utils.sanitization import sanitize_url

logger = get_logger(__name__)

# Connection pool defaults
DEFAULT_POOL_CONNECTIONS = 20
DEFAULT_POOL_MAXSIZE = 100
DEFAULT_POOL_TIMEOUT = 5.0


@dataclass(frozen=True)
class TransportResponse:
    """Status and raw body of one POST."""

    status_code: int
    content: bytes

    @property
    def text(self) -> str:
        return self.content.decode("utf-8", errors="replace")


class HTTPTransport:
    """POSTs JSON bodies to a single peer endpoint.

    Args:
        server: Peer endpoint URL
        timeout: Timeout in seconds of one POST
        ssl_context: Client SSL context (CA bundle and/or client certificate)
        transport: Optional custom httpx transport, used for testing

    Example:
        >>> async with HTTPTransport("https://ns.example.com/api") as http:
        ...     response = await http.post(b'{"MessageType":"ProfileReq"}')
    """

    def __init__(
        self,
        server: str,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
        ssl_context: ssl.SSLContext | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.server = server
        self.timeout = timeout
        self._ssl_context = ssl_context
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    async def __aenter__(self) -> "HTTPTransport":
        limits = httpx.Limits(
            max_keepalive_connections=DEFAULT_POOL_CONNECTIONS,
            max_connections=DEFAULT_POOL_MAXSIZE,
        )
        timeout_config = httpx.Timeout(self.timeout, pool=DEFAULT_POOL_TIMEOUT)
        if self._transport is not None:
            self._client = httpx.AsyncClient(
                transport=self._transport, timeout=timeout_config, limits=limits
            )
        else:
            self._client = httpx.AsyncClient(
                timeout=timeout_config,
                limits=limits,
                verify=self._ssl_context if self._ssl_context is not None else True,
            )
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def post(self, body: bytes) -> TransportResponse:
        """POST body to the server and return the raw response.

        Any HTTP status is returned; only failures to complete the exchange
        raise.

        Raises:
            TransportError: On connection failure, timeout or protocol error,
                or if the transport is not open
        """
        target = sanitize_url(self.server)
        if self._client is None:
            raise TransportError("HTTP transport is not open; use 'async with'", url=target)

        try:
            response = await self._client.post(
                self.server,
                content=body,
                headers={"Content-Type": JSON_CONTENT_TYPE},
            )
        except httpx.TimeoutException as e:
            raise TransportError(
                f"send request error: timeout after {self.timeout}s", url=target, cause=e
            ) from e
        except httpx.HTTPError as e:
            raise TransportError(f"send request error: {e}", url=target, cause=e) from e

        logger.debug(
            "roamrpc.http.response",
            target_url=target,
            status_code=response.status_code,
            content_length=len(response.content),
        )
        return TransportResponse(status_code=response.status_code, content=response.content)
