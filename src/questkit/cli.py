"""
Questkit CLI

Command-line interface for the Quest Manager Soroban contract.

State-changing commands are signed with the admin or user secret and
submitted; read-only commands are simulated and need no key.

Commands:
  info           - Show configuration and network status
  whoami         - Show the address of a signing role
  keygen         - Create a signing key for a role
  create         - Create a quest (admin)
  register       - Register the user in a quest
  mark-eligible  - Mark a user as eligible (admin)
  resolve        - Resolve a finished quest (admin)
  distribute     - Distribute rewards of a resolved quest (admin)
  cancel         - Cancel an active quest (admin)
  list           - List active quests
  quest          - Show one quest
  user           - Show a user's quests and stats
  workflow       - Smoke test against a deployed contract
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

import click
import httpx

from .client import QuestManagerClient
from .config import NetworkConfig
from .domain.errors import ConfigurationError, QuestClientError
from .signer.keys import ROLE_ENV_VARS, get_address
from .soroban import rpc


# ============ Constants ============

VERSION = "0.1.0"


# ============ Banner ============


def _print_banner(compact: bool = False) -> None:
    """Print the Questkit CLI banner.

    Args:
        compact: If True, print a single-line banner (for subcommands).
    """
    if compact:
        click.echo(
            click.style("  ◆ ", fg="cyan")
            + click.style("Q U E S T K I T", fg="bright_white", bold=True)
            + click.style(f"  v{VERSION}", dim=True)
        )
        click.echo()
        return

    border = click.style("  ◆ ═══════════════════════════════════════ ◆", fg="cyan")
    click.echo()
    click.echo(border)
    click.echo()
    click.echo(
        click.style("        Q U E S T K I T", fg="bright_white", bold=True)
        + click.style(f"        v{VERSION}", dim=True)
    )
    click.secho("        ─── Soroban Quest Manager ───", fg="cyan")
    click.echo()
    click.echo(border)
    click.echo()


# ============ Main CLI Group ============


@click.group(invoke_without_command=True)
@click.version_option(version=VERSION, prog_name="questkit")
@click.option("--verbose", "-v", is_flag=True, help="Log RPC calls and polling to stderr")
@click.option("--rpc-url", default=None, help="Soroban RPC endpoint (default: $STELLAR_RPC_URL)")
@click.option("--contract-id", default=None,
              help="Quest Manager contract address (default: $QUEST_MANAGER_CONTRACT_ID)")
@click.option("--network-passphrase", default=None,
              help="Network passphrase (default: $STELLAR_NETWORK_PASSPHRASE)")
@click.option("--timeout", type=float, default=None,
              help="Seconds to wait for confirmation (default: $QUEST_TX_TIMEOUT or 60)")
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    rpc_url: Optional[str],
    contract_id: Optional[str],
    network_passphrase: Optional[str],
    timeout: Optional[float],
) -> None:
    """Questkit — Quest Manager contract client."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if timeout is not None and timeout <= 0:
        raise click.BadParameter("must be positive", param_hint="--timeout")

    try:
        config = NetworkConfig.from_env().with_overrides(
            rpc_url=rpc_url,
            contract_id=contract_id,
            network_passphrase=network_passphrase,
            confirm_timeout=timeout,
        )
    except ConfigurationError as exc:
        click.secho(f"ERROR: {exc}", fg="red")
        sys.exit(exc.exit_code)

    ctx.ensure_object(dict)
    ctx.obj["config"] = config

    if ctx.invoked_subcommand is None:
        _print_banner()
        click.echo(ctx.get_help())


# ============ Top-level Commands ============

from .commands.create import create
from .commands.inspect import list_quests, quest, user
from .commands.keygen import keygen
from .commands.manage import cancel, distribute, mark_eligible, register, resolve
from .commands.workflow import workflow

cli.add_command(keygen)
cli.add_command(create)
cli.add_command(register)
cli.add_command(mark_eligible)
cli.add_command(resolve)
cli.add_command(distribute)
cli.add_command(cancel)
cli.add_command(list_quests)
cli.add_command(quest)
cli.add_command(user)
cli.add_command(workflow)


# ============ Identity ============


@cli.command()
@click.option("--role", type=click.Choice(list(ROLE_ENV_VARS)), default="admin", show_default=True)
def whoami(role: str) -> None:
    """Show the account address of a signing role."""
    try:
        address = get_address(role=role)
        click.echo(f"Address: {address}")
    except ConfigurationError as exc:
        click.echo(f"No {role} key found ({exc}).")
        click.echo(f"Run 'questkit keygen --role {role}' to create one.")
        sys.exit(1)


# ============ Info ============


def _row(label: str, value: str, fg: Optional[str] = "bright_white") -> None:
    click.echo(click.style(f"  {label:<13}", dim=True) + click.style(value, fg=fg))


@cli.command()
@click.pass_context
def info(ctx: click.Context) -> None:
    """Show configuration and network status."""
    config: NetworkConfig = ctx.find_root().obj["config"]
    _print_banner()

    # ── Config ──
    click.secho("  Config ─────────────────────────────────", fg="cyan")
    click.echo()
    _row("RPC:", config.rpc_url)
    _row("Network:", config.network_passphrase)
    if config.contract_id:
        _row("Contract:", config.contract_id)
    else:
        _row("Contract:", "not set  (QUEST_MANAGER_CONTRACT_ID)", fg="yellow")
    for role in ROLE_ENV_VARS:
        try:
            _row(f"{role.capitalize()}:", get_address(role=role))
        except ConfigurationError:
            _row(f"{role.capitalize()}:", f"not set  (run: questkit keygen --role {role})", fg="yellow")
    _row("Timeout:", f"{config.confirm_timeout:g}s (poll every {config.poll_interval:g}s)")
    click.echo()

    # ── Network ──
    click.secho("  Network ────────────────────────────────", fg="cyan")
    click.echo()
    try:
        health = rpc.get_health(rpc_url=config.rpc_url)
        _row("Health:", str(health.get("status", "unknown")), fg="green")
        _row("Ledger:", str(rpc.get_latest_ledger(rpc_url=config.rpc_url)))
        network = rpc.get_network(rpc_url=config.rpc_url)
        passphrase = network.get("passphrase", "")
        if passphrase and passphrase != config.network_passphrase:
            _row("Passphrase:", f"mismatch, node reports {passphrase!r}", fg="red")
        _row("Protocol:", str(network.get("protocolVersion", "?")))
    except (QuestClientError, httpx.HTTPError) as exc:
        _row("Health:", f"unreachable ({exc})", fg="red")
        click.echo()
        return

    if config.contract_id:
        try:
            counter = QuestManagerClient(config).get_quest_counter()
        except QuestClientError as exc:
            _row("Quests:", f"error ({exc})", fg="red")
        else:
            if counter.success:
                _row("Quests:", str(counter.data))
            else:
                _row("Quests:", f"error ({counter.error})", fg="red")
    click.echo()


# ============ Entry Points ============


def main() -> None:
    """Questkit CLI entry point."""
    # Ensure UTF-8 output on Windows (for Unicode box-drawing / symbols)
    if sys.platform == "win32":
        try:
            sys.stdout.reconfigure(encoding="utf-8")  # type: ignore[union-attr]
            sys.stderr.reconfigure(encoding="utf-8")  # type: ignore[union-attr]
        except (AttributeError, OSError):
            pass
    cli(obj={})


if __name__ == "__main__":
    main()
