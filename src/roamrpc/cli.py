"""Command-line interface for roamrpc.

Example:
    >>> # From terminal:
    >>> # roamrpc --version
    >>> # roamrpc transaction-id
    >>> # roamrpc key PRStartReq 7 --namespace ns
    >>> # roamrpc send profile request.json --server https://ns.example.com/api \\
    >>> #     --sender-id 000001 --receiver-id 000002
"""

import asyncio
import json
from pathlib import Path
from typing import Annotated, Any, Optional

import typer
from pydantic import ValidationError

from roamrpc import __version__
from roamrpc.config import ClientConfig
from roamrpc.errors import RoamError
from roamrpc.models import BasePayloadResult, MessageType, Operation, get_operation
from roamrpc.models.constants import DEFAULT_KEY_NAMESPACE
from roamrpc.models.ids import build_correlation_key, generate_transaction_id
from roamrpc.observability import configure_logging
from roamrpc.pubsub.base import PubSubBackend
from roamrpc.transport.client import BackendClient

app = typer.Typer(help="roamrpc roaming backend client.")


def _version_callback(value: bool) -> None:
    """Print the version and exit when requested."""
    if value:
        typer.echo(__version__)
        raise typer.Exit()


VERSION_OPTION = typer.Option(
    False,
    "--version",
    help="Show roamrpc version and exit.",
    callback=_version_callback,
    is_eager=True,
)


@app.callback()
def cli(
    version: bool = VERSION_OPTION,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """roamrpc CLI entrypoint."""
    # stdout carries command output; logs go to stderr
    configure_logging(log_level="DEBUG" if verbose else None, force=True)


@app.command("version")
def version() -> None:
    """Print the roamrpc version."""
    typer.echo(__version__)


@app.command("transaction-id")
def transaction_id() -> None:
    """Print a random 32-bit transaction id."""
    typer.echo(str(generate_transaction_id()))


@app.command("key")
def key(
    message_type: Annotated[str, typer.Argument(help="Request or answer message type.")],
    txid: Annotated[int, typer.Argument(metavar="TRANSACTION_ID", help="Transaction id.")],
    namespace: Annotated[
        str, typer.Option("--namespace", help="First segment of the key.")
    ] = DEFAULT_KEY_NAMESPACE,
) -> None:
    """Print the async correlation key of a message type and transaction id."""
    try:
        typer.echo(build_correlation_key(MessageType(message_type), txid, namespace=namespace))
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _load_payload(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise typer.BadParameter(f"File not found: {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise typer.BadParameter(f"Invalid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise typer.BadParameter("JSON root must be an object")
    return data


def _create_pubsub(redis_url: str) -> PubSubBackend:
    # redis is an optional extra; only imported when async mode is requested
    from roamrpc.pubsub.redis import RedisPubSub

    return RedisPubSub.from_url(redis_url)


async def _send(
    config: ClientConfig, operation: Operation[Any, Any], payload: dict[str, Any]
) -> BasePayloadResult:
    pubsub = _create_pubsub(config.redis_url) if config.redis_url else None
    try:
        async with BackendClient(config, pubsub=pubsub) as client:
            answer: BasePayloadResult = await client.request(operation, payload)
            return answer
    finally:
        if pubsub is not None:
            await pubsub.aclose()


@app.command("send")
def send(
    operation_name: Annotated[
        str,
        typer.Argument(
            metavar="OPERATION",
            help="pr-start, pr-stop, xmit-data, profile, home-ns (or a request message type).",
        ),
    ],
    payload_file: Annotated[Path, typer.Argument(help="JSON file with the request payload.")],
    server: Annotated[Optional[str], typer.Option("--server", help="Peer endpoint URL.")] = None,
    sender_id: Annotated[Optional[str], typer.Option("--sender-id")] = None,
    receiver_id: Annotated[Optional[str], typer.Option("--receiver-id")] = None,
    ca_cert: Annotated[Optional[Path], typer.Option("--ca-cert", help="CA bundle (PEM).")] = None,
    tls_cert: Annotated[
        Optional[Path], typer.Option("--tls-cert", help="Client certificate (PEM).")
    ] = None,
    tls_key: Annotated[Optional[Path], typer.Option("--tls-key", help="Client key (PEM).")] = None,
    redis_url: Annotated[
        Optional[str], typer.Option("--redis-url", help="Enables async mode.")
    ] = None,
    async_timeout: Annotated[
        Optional[float], typer.Option("--async-timeout", help="Seconds to wait for an answer.")
    ] = None,
    namespace: Annotated[Optional[str], typer.Option("--namespace")] = None,
) -> None:
    """Send one request and print the answer as JSON.

    Options not given fall back to the ROAMRPC_* environment variables.
    """
    try:
        operation = get_operation(operation_name)
    except KeyError as exc:
        raise typer.BadParameter(f"Unknown operation: {operation_name}") from exc

    payload = _load_payload(payload_file)
    try:
        config = ClientConfig.from_env(
            server=server,
            sender_id=sender_id,
            receiver_id=receiver_id,
            ca_cert=ca_cert,
            tls_cert=tls_cert,
            tls_key=tls_key,
            redis_url=redis_url,
            async_timeout=async_timeout,
            namespace=namespace,
        )
    except ValidationError as exc:
        raise typer.BadParameter(f"Invalid configuration: {exc}") from exc

    try:
        answer = asyncio.run(_send(config, operation, payload))
    except RoamError as exc:
        typer.echo(f"Error [{exc.code}]: {exc.message}", err=True)
        raise typer.Exit(1) from exc
    except FileNotFoundError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1) from exc

    typer.echo(answer.model_dump_json(by_alias=True, exclude_none=True, indent=2))


def main() -> None:
    """Run the roamrpc CLI."""
    app()


if __name__ == "__main__":
    main()
