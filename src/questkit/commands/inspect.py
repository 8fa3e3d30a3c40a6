"""
Inspect - Read-only quest queries.

All commands simulate calls; nothing is signed or submitted, so no secret
key is needed.
"""

from __future__ import annotations

import time
from typing import Optional

import click

from ..domain.errors import QuestClientError
from ..utils import format_duration
from ._common import (
    echo_addresses,
    echo_failure,
    echo_field,
    echo_quest,
    fail,
    make_client,
)


@click.command("list")
@click.pass_context
def list_quests(ctx: click.Context) -> None:
    """Show the quest counter and all active quests."""
    click.echo("=== Quests ===")
    click.echo("")
    client = make_client(ctx)

    try:
        counter = client.get_quest_counter()
        if not counter.success:
            echo_failure("Quest counter", counter)
        else:
            echo_field("Quests created", counter.data)

        active = client.get_active_quests()
        if not active.success:
            echo_failure("Active quests", active)
            raise SystemExit(1)
        echo_field("Active quests", len(active.data))
        click.echo("")

        if not active.data:
            click.secho("  No active quests. Use 'questkit create' to open one.", fg="yellow")
            return

        now = int(time.time())
        for quest in active.data:
            echo_quest(quest, now=now)
            click.echo("")

        first = active.data[0]
        winners = client.get_winners(first.id)
        if winners.success:
            echo_addresses(f"Winners #{first.id}", winners.data)
        else:
            echo_failure(f"Winners #{first.id}", winners)
    except QuestClientError as exc:
        fail(exc)


@click.command()
@click.argument("quest_id", type=int)
@click.pass_context
def quest(ctx: click.Context, quest_id: int) -> None:
    """Show details, statistics, participants and winners of QUEST_ID."""
    click.echo("=== Quest ===")
    click.echo("")
    client = make_client(ctx)

    try:
        details = client.get_quest(quest_id)
        if not details.success:
            echo_failure(f"Quest #{quest_id}", details)
            raise SystemExit(1)
        echo_quest(details.data, now=int(time.time()))
        click.echo("")

        stats = client.get_quest_stats(quest_id)
        if stats.success:
            s = stats.data
            echo_field("Registered", s.total_registered)
            echo_field("Eligible", s.total_eligible)
            echo_field("Winners", s.total_winners)
            echo_field("Resolved", "yes" if s.is_resolved else "no")
            echo_field("Time remaining", format_duration(s.time_remaining))
        else:
            echo_failure("Stats", stats)
        click.echo("")

        participants = client.get_participants(quest_id)
        if participants.success:
            echo_addresses("Participants", participants.data)
        else:
            echo_failure("Participants", participants)

        winners = client.get_winners(quest_id)
        if winners.success:
            echo_addresses("Winners", winners.data)
        else:
            echo_failure("Winners", winners)
    except QuestClientError as exc:
        fail(exc)


@click.command()
@click.argument("address")
@click.option("--quest-id", type=int, default=None, help="Also show standing in this quest")
@click.pass_context
def user(ctx: click.Context, address: str, quest_id: Optional[int]) -> None:
    """Show quests and statistics of ADDRESS."""
    click.echo("=== User ===")
    click.echo("")
    client = make_client(ctx)

    echo_field("Address", address)

    try:
        quests = client.get_user_quests(address)
        if quests.success:
            joined = ", ".join(f"#{q}" for q in quests.data) or "(none)"
            echo_field("Quests", joined)
        else:
            echo_failure("Quests", quests)

        stats = client.get_user_stats(address)
        if stats.success:
            s = stats.data
            echo_field("Participated", s.total_participated)
            echo_field("Won", s.total_won)
            echo_field("Total rewards", s.total_rewards)
            echo_field("Win rate", f"{s.win_rate_percent:.2f}%")
        else:
            echo_failure("Stats", stats)

        if quest_id is not None:
            click.echo("")
            standing = client.get_participation(quest_id, address)
            if standing.success:
                p = standing.data
                echo_field(f"Quest #{quest_id}", "")
                echo_field("  Registered", "yes" if p.registered else "no")
                echo_field("  Eligible", "yes" if p.eligible else "no")
                echo_field("  Winner", "yes" if p.winner else "no")
            else:
                echo_failure(f"Quest #{quest_id}", standing)
    except QuestClientError as exc:
        fail(exc)
