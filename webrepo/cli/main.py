"""CLI commands for executing calls and managing stored credentials."""

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

import click
import httpx
from pydantic import ValidationError

from webrepo import __version__
from webrepo.credentials import CredentialStore, CredentialStoreError, bearer_headers
from webrepo.fetch import (
    AcceptanceSet,
    APICall,
    APIError,
    CallExecutor,
    DescriptorError,
    HttpCodeError,
    HttpxTransport,
    parse_log_options,
)
from webrepo.observability.logging import bind_call_context, configure_logging
from webrepo.settings import AppSettings, get_settings


def parse_pairs(values: tuple[str, ...], option: str) -> dict[str, str]:
    """Parse repeated ``key=value`` options into a dictionary."""
    pairs: dict[str, str] = {}
    for value in values:
        key, sep, item = value.partition("=")
        if not sep or not key:
            msg = f"Expected key=value, got '{value}'"
            raise click.BadParameter(msg, param_hint=option)
        pairs[key.strip()] = item.strip()
    return pairs


def render_result(value: Any) -> str:
    """Render a decoded value for stdout."""
    if isinstance(value, str):
        return value
    return json.dumps(value, indent=2, sort_keys=True, ensure_ascii=False)


def open_store(settings: AppSettings, credentials_db: Path | None) -> CredentialStore:
    """Open the credential store named on the command line or in settings."""
    db_path = credentials_db or settings.credentials_db
    if db_path is None:
        click.echo(
            "Error: no credential database (use --credentials-db or "
            "WEBREPO_CREDENTIALS_DB)",
            err=True,
        )
        sys.exit(1)
    store = CredentialStore(db_path)
    store.connect()
    return store


async def run_call(
    endpoint: APICall,
    base_url: str,
    settings: AppSettings,
    accept: AcceptanceSet | None,
    log_stages: str | None,
    text: bool,
    timeout: float | None,
) -> Any:
    """Execute one call with a transport scoped to the call."""
    config = settings.call_config()
    if log_stages is not None:
        config = config.model_copy(update={"log_stages": parse_log_options(log_stages)})

    async with HttpxTransport(
        timeout=timeout or settings.timeout_seconds,
        user_agent=settings.user_agent,
    ) as transport:
        executor = CallExecutor(transport, base_url, config)
        if text:
            return await executor.execute_text(endpoint, accept=accept)
        return await executor.execute(endpoint, Any, accept=accept)  # type: ignore[arg-type]


@click.group()
@click.version_option(version=__version__)
def cli() -> None:
    """Typed HTTP call executor CLI."""


@cli.command()
@click.argument("path", default="")
@click.option("--base-url", default=None, help="Base URL (default: WEBREPO_BASE_URL).")
@click.option("--method", "-X", default="GET", help="HTTP method (default: GET).")
@click.option("--query", "-q", multiple=True, help="Query parameter as key=value.")
@click.option("--header", "-H", multiple=True, help="Request header as key=value.")
@click.option("--json", "json_body", default=None, help="JSON request body.")
@click.option(
    "--accept",
    default=None,
    help="Accepted status codes, e.g. 200-299,304 (default: 200-299).",
)
@click.option(
    "--log",
    "log_stages",
    default=None,
    help="Stages to log: request,response,data,error (default: error).",
)
@click.option("--text", is_flag=True, help="Fall back to raw text if the body is not JSON.")
@click.option("--timeout", type=float, default=None, help="Timeout in seconds.")
@click.option("--auth", default=None, help="Stored bearer token as service:account.")
@click.option(
    "--credentials-db",
    type=click.Path(path_type=Path),
    default=None,
    help="Path to SQLite credential database.",
)
@click.option(
    "--json-logs/--no-json-logs",
    default=True,
    help="Use JSON format for logs (default: true).",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging.")
def call(  # noqa: PLR0913
    path: str,
    base_url: str | None,
    method: str,
    query: tuple[str, ...],
    header: tuple[str, ...],
    json_body: str | None,
    accept: str | None,
    log_stages: str | None,
    text: bool,
    timeout: float | None,
    auth: str | None,
    credentials_db: Path | None,
    json_logs: bool,
    verbose: bool,
) -> None:
    """Execute one call and print the decoded body."""
    configure_logging(
        level=logging.DEBUG if verbose else logging.INFO,
        json_format=json_logs,
    )
    bind_call_context()
    settings = get_settings()

    base_url = base_url or settings.base_url
    if not base_url:
        click.echo("Error: no base URL (use --base-url or WEBREPO_BASE_URL)", err=True)
        sys.exit(1)

    headers = parse_pairs(header, "--header")
    if auth:
        service, sep, account = auth.partition(":")
        if not sep:
            raise click.BadParameter("Expected service:account", param_hint="--auth")
        store = open_store(settings, credentials_db)
        try:
            headers.update(bearer_headers(store, service, account))
        except CredentialStoreError as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)
        finally:
            store.close()

    try:
        endpoint = APICall(
            path=path,
            method=method,
            query=parse_pairs(query, "--query"),
            headers=headers,
            json_body=json.loads(json_body) if json_body is not None else None,
        )
        acceptance = AcceptanceSet.parse(accept) if accept else None
    except (ValidationError, ValueError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(2)

    try:
        result = asyncio.run(
            run_call(endpoint, base_url, settings, acceptance, log_stages, text, timeout)
        )
    except HttpCodeError as e:
        click.echo(f"Error: HTTP {e.code}", err=True)
        if e.reason:
            click.echo(e.reason, err=True)
        sys.exit(1)
    except (APIError, DescriptorError, httpx.HTTPError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(render_result(result))


@cli.group()
def credentials() -> None:
    """Manage stored credentials."""


@credentials.command("set")
@click.argument("service")
@click.argument("account")
@click.option("--secret", prompt=True, hide_input=True, help="Secret value.")
@click.option("--credentials-db", type=click.Path(path_type=Path), default=None)
def credentials_set(
    service: str, account: str, secret: str, credentials_db: Path | None
) -> None:
    """Store a secret for SERVICE and ACCOUNT."""
    store = open_store(get_settings(), credentials_db)
    try:
        store.save(secret, service, account)
    finally:
        store.close()
    click.echo(f"Saved {service}/{account}")


@credentials.command("get")
@click.argument("service")
@click.argument("account")
@click.option("--credentials-db", type=click.Path(path_type=Path), default=None)
def credentials_get(service: str, account: str, credentials_db: Path | None) -> None:
    """Print the secret stored for SERVICE and ACCOUNT."""
    store = open_store(get_settings(), credentials_db)
    try:
        secret = store.read(service, account, str)
    except CredentialStoreError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    finally:
        store.close()
    if secret is None:
        click.echo(f"No credential for {service}/{account}", err=True)
        sys.exit(1)
    click.echo(secret)


@credentials.command("delete")
@click.argument("service")
@click.argument("account")
@click.option("--credentials-db", type=click.Path(path_type=Path), default=None)
def credentials_delete(service: str, account: str, credentials_db: Path | None) -> None:
    """Delete the secret stored for SERVICE and ACCOUNT."""
    store = open_store(get_settings(), credentials_db)
    try:
        deleted = store.delete(service, account)
    finally:
        store.close()
    if not deleted:
        click.echo(f"No credential for {service}/{account}", err=True)
        sys.exit(1)
    click.echo(f"Deleted {service}/{account}")


if __name__ == "__main__":
    cli()
