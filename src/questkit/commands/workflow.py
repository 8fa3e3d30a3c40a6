"""
Workflow - End-to-end smoke test against a deployed contract.

1. Read the quest counter
2. List active quests
3. If any quest exists, register the user account in quest 0

Quest creation is left to ``questkit create`` since it moves tokens.
"""

from __future__ import annotations

import click

from ..domain.errors import QuestClientError
from ..signer.keys import get_keypair
from ._common import echo_failure, echo_field, fail, make_client, report_tx


@click.command()
@click.pass_context
def workflow(ctx: click.Context) -> None:
    """Run the counter / active quests / register smoke test."""
    click.echo("=== Workflow ===")
    client = make_client(ctx)

    try:
        click.echo("")
        click.secho("[1] Quest counter", fg="cyan")
        counter = client.get_quest_counter()
        if not counter.success:
            echo_failure("Quest counter", counter)
            raise SystemExit(1)
        echo_field("Quests created", counter.data)

        click.echo("")
        click.secho("[2] Active quests", fg="cyan")
        active = client.get_active_quests()
        if active.success:
            echo_field("Active quests", len(active.data))
            for quest in active.data:
                click.echo(f"    - #{quest.id} {quest.title}")
        else:
            echo_failure("Active quests", active)

        click.echo("")
        click.secho("[3] Register in quest #0", fg="cyan")
        if counter.data == 0:
            click.secho("  Skipped: no quests created yet.", fg="yellow")
            return

        user = get_keypair(role="user")
        echo_field("User", user.public_key)
        result = client.register(0, user=user)
    except QuestClientError as exc:
        fail(exc)

    report_tx(result, "User registered in quest #0")
