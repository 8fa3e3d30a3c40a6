"""Helpers shared by the CLI commands."""

from __future__ import annotations

import sys
from typing import Any, Optional

import click

from ..client import QuestManagerClient
from ..config import NetworkConfig
from ..domain.errors import QuestClientError
from ..domain.models import InvokeResult, Quest
from ..utils import format_duration, utc_from_timestamp


def get_config(ctx: click.Context) -> NetworkConfig:
    return ctx.find_root().obj["config"]


def make_client(ctx: click.Context) -> QuestManagerClient:
    """Build a client, exiting before any network I/O if config is invalid."""
    config = get_config(ctx)
    try:
        config.validate()
    except QuestClientError as exc:
        fail(exc)
    return QuestManagerClient(config)


def fail(exc: Exception) -> None:
    click.secho(f"ERROR: {exc}", fg="red")
    sys.exit(getattr(exc, "exit_code", 1))


def report_tx(result: InvokeResult, success_message: str) -> None:
    """Print a transaction outcome; exits 1 on failure."""
    if result.success:
        click.secho(f"SUCCESS: {success_message}", fg="green")
        if result.hash:
            click.echo(f"  TX: {result.hash}")
        if result.data is not None:
            click.echo(f"  Result: {result.data}")
        return

    click.secho("FAILED: Transaction did not succeed", fg="red")
    if result.hash:
        click.echo(f"  TX: {result.hash}")
    if result.status:
        click.echo(f"  Status: {result.status}")
    if result.error is not None:
        click.echo(f"  Error: {result.error}")
        if result.error.code is None and result.error.raw:
            click.echo(click.style(f"  Raw: {result.error.raw}", dim=True))
    sys.exit(1)


def echo_failure(label: str, result: InvokeResult) -> None:
    click.echo(
        click.style(f"  {label}: ", dim=True)
        + click.style(f"(error: {result.error})", fg="red")
    )


def echo_field(label: str, value: Any, width: int = 18) -> None:
    click.echo(click.style(f"  {label + ':':<{width}}", dim=True) + str(value))


def echo_quest(quest: Quest, now: Optional[int] = None) -> None:
    click.echo(f"  Quest #{quest.id}: {quest.title}")
    click.echo("  ─────────────────────────────")
    echo_field("Description", quest.description)
    echo_field("Admin", quest.admin)
    echo_field("Reward token", quest.reward_token)
    echo_field("Reward/winner", quest.reward_per_winner)
    echo_field("Max winners", quest.max_winners)
    echo_field("Reward pool", quest.total_reward_pool)
    echo_field("Distribution", quest.distribution.value)
    params = ", ".join(str(v) for v in quest.quest_type.values())
    echo_field("Quest type", f"{quest.quest_type.tag}({params})")
    ends = utc_from_timestamp(quest.end_timestamp)
    if now is not None and quest.end_timestamp > now:
        ends += f" (in {format_duration(quest.end_timestamp - now)})"
    echo_field("Ends", ends)
    status = click.style("active", fg="green") if quest.is_active else click.style("closed", fg="yellow")
    echo_field("Status", status)


def echo_addresses(label: str, addresses: list[str]) -> None:
    if not addresses:
        echo_field(label, "(none)")
        return
    echo_field(label, len(addresses))
    for address in addresses:
        click.echo(f"    - {address}")


__all__ = [
    "echo_addresses",
    "echo_failure",
    "echo_field",
    "echo_quest",
    "fail",
    "get_config",
    "make_client",
    "report_tx",
]
