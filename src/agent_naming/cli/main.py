"""CLI entry point for agent-naming.

Invoked as::

    agent-naming [OPTIONS] COMMAND [ARGS]...

or, during development::

    python -m agent_naming.cli.main

Commands
--------
codec encode        Encode an agent identity text value
codec decode        Decode an agent identity text value
name normalize      Normalize a name
name agent          Derive the full name of an agent under an organization
resolve account     Name -> account
resolve identity    Name -> agent identity record
resolve name        Account -> name (optionally -> identity)
resolve text        Name -> url / description / avatar text record
owner               Check whether an agent subdomain is already claimed
prepare create      Build the create/update call batch
prepare identity    Build the agent-identity text record call batch

Chain-dependent commands read ``--config FILE`` (JSON) or, without it,
``AGENT_NAMING_<NETWORK>_*`` environment variables.  A lookup that finds
nothing exits with status 1; a configuration, input or transport error
exits with status 2.
"""
from __future__ import annotations

import asyncio
import json
import logging
import sys
from typing import Any, Awaitable, Callable, NoReturn, Optional, TypeVar

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from agent_naming.batch.calls import CallBatch
from agent_naming.client import AgentNamingClient
from agent_naming.codec.identity import (
    AgentIdentityRecord,
    decode_agent_identity,
    encode_agent_identity,
)
from agent_naming.config import NamingConfig, load_config, load_config_from_env
from agent_naming.errors import NamingError
from agent_naming.naming.convention import agent_full_name, normalize_name
from agent_naming.resolution.engine import TEXT_KEYS
from agent_naming.resolution.result import ResolutionResult

console = Console()

T = TypeVar("T")

DEFAULT_CHAIN_ID = 11155111

EXIT_NOT_FOUND = 1
EXIT_ERROR = 2


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------


def _fail(message: str) -> NoReturn:
    console.print(f"[red]Error:[/red] {escape(message)}")
    sys.exit(EXIT_ERROR)


def _load(config_file: Optional[str]) -> NamingConfig:
    if config_file:
        return load_config(config_file)
    return load_config_from_env()


def _make_client(config: NamingConfig) -> AgentNamingClient:
    return AgentNamingClient(config)


def _run(
    config_file: Optional[str], operation: Callable[[AgentNamingClient], Awaitable[T]]
) -> T:
    """Build a client, run *operation* on it and close it; errors exit with status 2."""

    async def runner() -> T:
        async with _make_client(_load(config_file)) as client:
            return await operation(client)

    try:
        return asyncio.run(runner())
    except NamingError as exc:
        _fail(str(exc))


def _print_result(result: ResolutionResult[Any], render: Callable[[Any], str]) -> None:
    if not result.found:
        console.print(f"[yellow]Not found:[/yellow] {escape(result.reason or '')}")
        sys.exit(EXIT_NOT_FOUND)
    console.print(render(result.value), soft_wrap=True)
    if result.backend:
        console.print(f"  [dim]via {escape(result.backend)}[/dim]")


def _print_record(record: AgentIdentityRecord) -> None:
    console.print(f"  Chain ID:  {record.chain_id}", soft_wrap=True)
    console.print(f"  Registry:  {record.registry}", soft_wrap=True)
    console.print(f"  Agent ID:  {record.agent_id}", soft_wrap=True)


def _print_batch(batch: CallBatch, as_json: bool) -> None:
    if as_json:
        console.out(json.dumps(batch.to_list(), indent=2), highlight=False)
        return
    table = Table(title=f"Call batch ({len(batch)} calls)", show_header=True)
    table.add_column("#", justify="right")
    table.add_column("Call", style="cyan")
    table.add_column("To")
    table.add_column("Value", justify="right")
    for index, call in enumerate(batch, start=1):
        table.add_row(str(index), escape(call.label), call.to, str(call.value))
    console.print(table)


def _chain_options(command: Callable[..., Any]) -> Callable[..., Any]:
    command = click.option(
        "--chain",
        "chain_id",
        type=int,
        default=DEFAULT_CHAIN_ID,
        show_default=True,
        help="Chain id to resolve on.",
    )(command)
    command = click.option(
        "--config",
        "config_file",
        type=click.Path(exists=True, dir_okay=False),
        default=None,
        help="JSON configuration file (defaults to AGENT_NAMING_* environment variables).",
    )(command)
    return command


# ------------------------------------------------------------------
# Root group
# ------------------------------------------------------------------


@click.group()
@click.version_option(package_name="agent-naming")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Logging level for resolution diagnostics (written to stderr).",
)
def cli(log_level: str) -> None:
    """Resolve agent names to on-chain agent identities, and back"""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


@cli.command(name="version")
def version_command() -> None:
    """Show detailed version information."""
    from agent_naming import __version__

    console.print(f"[bold]agent-naming[/bold] v{__version__}")


# ------------------------------------------------------------------
# codec command group
# ------------------------------------------------------------------


@cli.group(name="codec")
def codec_group() -> None:
    """Encode and decode agent identity text values."""


@codec_group.command(name="encode")
@click.argument("chain_id", type=int)
@click.argument("registry")
@click.argument("agent_id", type=int)
def codec_encode_command(chain_id: int, registry: str, agent_id: int) -> None:
    """Encode CHAIN_ID, REGISTRY and AGENT_ID as an agent-identity value."""
    try:
        record = AgentIdentityRecord(chain_id=chain_id, registry=registry, agent_id=agent_id)
    except ValueError as exc:
        _fail(str(exc))
    console.print(encode_agent_identity(record), soft_wrap=True)


@codec_group.command(name="decode")
@click.argument("value")
@click.option("--json", "as_json", is_flag=True, default=False, help="Print the record as JSON.")
def codec_decode_command(value: str, as_json: bool) -> None:
    """Decode an agent-identity VALUE."""
    record = decode_agent_identity(value)
    if record is None:
        console.print("[yellow]Not found:[/yellow] value is not a valid agent identity")
        sys.exit(EXIT_NOT_FOUND)
    if as_json:
        console.out(json.dumps(record.to_dict()), highlight=False)
    else:
        _print_record(record)


# ------------------------------------------------------------------
# name command group
# ------------------------------------------------------------------


@cli.group(name="name")
def name_group() -> None:
    """Derive canonical names."""


@name_group.command(name="normalize")
@click.argument("name")
def name_normalize_command(name: str) -> None:
    """Print the normalized form of NAME."""
    normalized = normalize_name(name)
    if normalized is None:
        _fail(f"{name!r} is not a valid name")
    console.print(normalized, soft_wrap=True)


@name_group.command(name="agent")
@click.argument("org")
@click.argument("agent")
def name_agent_command(org: str, agent: str) -> None:
    """Print the full name of AGENT under organization ORG."""
    full_name = agent_full_name(org, agent)
    if full_name is None:
        _fail(f"cannot derive a name from {org!r} and {agent!r}")
    console.print(full_name, soft_wrap=True)


# ------------------------------------------------------------------
# resolve command group
# ------------------------------------------------------------------


@cli.group(name="resolve")
def resolve_group() -> None:
    """Forward and reverse lookups."""


@resolve_group.command(name="account")
@click.argument("name")
@_chain_options
def resolve_account_command(name: str, config_file: Optional[str], chain_id: int) -> None:
    """Resolve NAME to the account it points at."""
    result = _run(config_file, lambda client: client.resolve_account(chain_id, name))
    _print_result(result, str)


@resolve_group.command(name="identity")
@click.argument("name")
@_chain_options
def resolve_identity_command(name: str, config_file: Optional[str], chain_id: int) -> None:
    """Resolve the agent identity record of NAME."""
    result = _run(config_file, lambda client: client.resolve_identity(chain_id, name))
    _print_result(result, lambda record: f"[bold]{escape(name)}[/bold]")
    _print_record(result.unwrap())


@resolve_group.command(name="text")
@click.argument("name")
@click.argument("key", type=click.Choice(list(TEXT_KEYS)))
@_chain_options
def resolve_text_command(
    name: str, key: str, config_file: Optional[str], chain_id: int
) -> None:
    """Resolve text record KEY of NAME."""
    result = _run(config_file, lambda client: client.resolve_text(chain_id, name, key))
    _print_result(result, escape)


@resolve_group.command(name="name")
@click.argument("account")
@click.option(
    "--with-identity",
    is_flag=True,
    default=False,
    help="Also resolve the identity record of the name found.",
)
@_chain_options
def resolve_name_command(
    account: str, with_identity: bool, config_file: Optional[str], chain_id: int
) -> None:
    """Resolve ACCOUNT to its reverse-registered name."""
    if not with_identity:
        result = _run(config_file, lambda client: client.resolve_name(chain_id, account))
        _print_result(result, escape)
        return
    composite = _run(
        config_file, lambda client: client.resolve_identity_by_account(chain_id, account)
    )
    _print_result(composite, lambda found: escape(found.name))
    _print_record(composite.unwrap().identity)


# ------------------------------------------------------------------
# owner
# ------------------------------------------------------------------


@cli.command(name="owner")
@click.argument("org")
@click.argument("agent")
@_chain_options
def owner_command(org: str, agent: str, config_file: Optional[str], chain_id: int) -> None:
    """Check whether AGENT's subdomain under ORG is already claimed."""
    claimed = _run(config_file, lambda client: client.has_owner(chain_id, org, agent))
    full_name = agent_full_name(org, agent) or f"{agent}.{org}"
    if claimed:
        console.print(f"[bold]{escape(full_name)}[/bold] is [red]taken[/red]")
    else:
        console.print(f"[bold]{escape(full_name)}[/bold] is [green]available[/green]")


# ------------------------------------------------------------------
# prepare command group
# ------------------------------------------------------------------


@cli.group(name="prepare")
def prepare_group() -> None:
    """Build call batches for the submission layer (nothing is sent)."""


@prepare_group.command(name="create")
@click.argument("org")
@click.argument("agent")
@click.argument("owner")
@click.option("--url", default=None, help="Value of the url text record.")
@click.option("--description", default=None, help="Value of the description text record.")
@click.option("--json", "as_json", is_flag=True, default=False, help="Print the batch as JSON.")
@_chain_options
def prepare_create_command(
    org: str,
    agent: str,
    owner: str,
    url: Optional[str],
    description: Optional[str],
    as_json: bool,
    config_file: Optional[str],
    chain_id: int,
) -> None:
    """Build the batch that creates AGENT under ORG, owned by OWNER."""
    batch = _run(
        config_file,
        lambda client: client.prepare_create_calls(chain_id, org, agent, owner, url, description),
    )
    _print_batch(batch, as_json)


@prepare_group.command(name="identity")
@click.argument("name")
@click.argument("agent_id", type=int)
@click.option("--registry", default=None, help="Identity registry (defaults to the chain's).")
@click.option("--json", "as_json", is_flag=True, default=False, help="Print the batch as JSON.")
@_chain_options
def prepare_identity_command(
    name: str,
    agent_id: int,
    registry: Optional[str],
    as_json: bool,
    config_file: Optional[str],
    chain_id: int,
) -> None:
    """Build the batch that points NAME at identity AGENT_ID."""
    batch = _run(
        config_file,
        lambda client: client.prepare_set_identity_calls(chain_id, name, agent_id, registry),
    )
    _print_batch(batch, as_json)


if __name__ == "__main__":
    cli()
