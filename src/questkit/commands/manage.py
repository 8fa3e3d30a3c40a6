"""
Manage - Quest lifecycle transactions.

- register:      user joins a quest (signed by USER1_SECRET_KEY)
- mark-eligible: admin records that a user completed the task
- resolve:       admin closes a finished quest (draws raffle winners)
- distribute:    admin pays the winners of a resolved quest
- cancel:        admin deactivates an active quest
"""

from __future__ import annotations

import click

from ..domain.errors import QuestClientError
from ..signer.keys import get_keypair
from ._common import fail, make_client, report_tx


def _signer(role: str):
    try:
        return get_keypair(role=role)
    except QuestClientError as exc:
        fail(exc)


@click.command()
@click.argument("quest_id", type=int, default=0)
@click.pass_context
def register(ctx: click.Context, quest_id: int) -> None:
    """Register the user account in QUEST_ID (default 0)."""
    click.echo("=== Register ===")
    client = make_client(ctx)
    user = _signer("user")

    click.echo(f"  User:  {user.public_key}")
    click.echo(f"  Quest: #{quest_id}")
    click.echo("")

    try:
        result = client.register(quest_id, user=user)
    except QuestClientError as exc:
        fail(exc)
    report_tx(result, "User registered")


@click.command("mark-eligible")
@click.argument("quest_id", type=int)
@click.argument("user_address")
@click.pass_context
def mark_eligible(ctx: click.Context, quest_id: int, user_address: str) -> None:
    """Mark USER_ADDRESS as eligible in QUEST_ID (admin only)."""
    click.echo("=== Mark Eligible ===")
    client = make_client(ctx)
    admin = _signer("admin")

    click.echo(f"  Quest: #{quest_id}")
    click.echo(f"  User:  {user_address}")
    click.echo("")

    try:
        result = client.mark_user_eligible(quest_id, user_address, admin=admin)
    except QuestClientError as exc:
        fail(exc)
    report_tx(result, "User marked as eligible")


def _admin_action(ctx: click.Context, quest_id: int, function_name: str, title: str, done: str) -> None:
    click.echo(f"=== {title} ===")
    client = make_client(ctx)
    admin = _signer("admin")

    click.echo(f"  Admin: {admin.public_key}")
    click.echo(f"  Quest: #{quest_id}")
    click.echo("")

    try:
        result = client.invoke(function_name, [quest_id], signer=admin)
    except QuestClientError as exc:
        fail(exc)
    report_tx(result, done)


@click.command()
@click.argument("quest_id", type=int)
@click.pass_context
def resolve(ctx: click.Context, quest_id: int) -> None:
    """Resolve QUEST_ID once its end time has passed (admin only)."""
    _admin_action(ctx, quest_id, "resolve_quest", "Resolve Quest", f"Quest #{quest_id} resolved")


@click.command()
@click.argument("quest_id", type=int)
@click.pass_context
def distribute(ctx: click.Context, quest_id: int) -> None:
    """Distribute rewards of resolved QUEST_ID (admin only)."""
    _admin_action(ctx, quest_id, "distribute_rewards", "Distribute Rewards", "Rewards distributed")


@click.command()
@click.argument("quest_id", type=int)
@click.confirmation_option(prompt="Cancel this quest? It cannot be reactivated.")
@click.pass_context
def cancel(ctx: click.Context, quest_id: int) -> None:
    """Cancel active QUEST_ID (admin only)."""
    _admin_action(ctx, quest_id, "cancel_quest", "Cancel Quest", f"Quest #{quest_id} cancelled")
