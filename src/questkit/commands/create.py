"""
Create - Open a new quest as the admin.

The admin signs the transaction; the contract pulls the reward pool from the
admin's balance of the reward token.
"""

from __future__ import annotations

from typing import Optional

import click

from ..domain.errors import QuestClientError
from ..domain.models import DistributionType, QUEST_TYPE_VARIANTS, make_quest_type
from ..signer.keys import get_keypair
from ..utils import format_duration, parse_duration
from ._common import echo_field, fail, make_client, report_tx


@click.command()
@click.option("--reward-token", envvar="REWARD_TOKEN_ADDRESS", required=True,
              help="Reward token contract address (C...)")
@click.option("--reward-per-winner", type=int, required=True,
              help="Reward paid to each winner, in token base units")
@click.option("--max-winners", type=int, required=True, help="Maximum number of winners")
@click.option("--distribution", type=click.Choice([d.value for d in DistributionType], case_sensitive=False),
              default=DistributionType.RAFFLE.value, show_default=True,
              help="Raffle draws winners at resolution; Fcfs rewards the first eligible users")
@click.option("--quest-type", type=click.Choice(list(QUEST_TYPE_VARIANTS), case_sensitive=False),
              default="TradeVolume", show_default=True, help="Task users must complete")
@click.option("--threshold", type=int, required=True,
              help="Target volume, minimum position, or minimum held amount")
@click.option("--token", "hold_token", default=None,
              help="Token to hold (TokenHold quests only)")
@click.option("--duration", default="7d", show_default=True,
              help="Quest duration (seconds, or with unit: 90m, 12h, 7d, 2w)")
@click.option("--reward-pool", type=int, default=None,
              help="Reward pool amount (default: reward-per-winner * max-winners)")
@click.option("--title", required=True, help="Quest title")
@click.option("--description", default="", help="Quest description")
@click.pass_context
def create(
    ctx: click.Context,
    reward_token: str,
    reward_per_winner: int,
    max_winners: int,
    distribution: str,
    quest_type: str,
    threshold: int,
    hold_token: Optional[str],
    duration: str,
    reward_pool: Optional[int],
    title: str,
    description: str,
) -> None:
    """
    Create a new quest.

    \b
    Examples:
      questkit create --reward-token C... --reward-per-winner 1000000 \\
          --max-winners 5 --threshold 10000000 --title "Weekly Volume"
      questkit create --quest-type TokenHold --token C... --threshold 500 ...
    """
    click.echo("=== Create Quest ===")
    click.echo("")

    client = make_client(ctx)

    try:
        admin = get_keypair(role="admin")
        seconds = parse_duration(duration)
        if quest_type.lower() == "tokenhold":
            if not hold_token:
                raise click.UsageError("--token is required for TokenHold quests")
            variant = make_quest_type("TokenHold", hold_token, threshold)
        elif hold_token:
            raise click.UsageError("--token only applies to TokenHold quests")
        else:
            variant = make_quest_type(quest_type, threshold)
    except (QuestClientError, ValueError) as exc:
        fail(exc)

    pool = reward_pool if reward_pool is not None else reward_per_winner * max_winners

    echo_field("Admin", admin.public_key)
    echo_field("Reward token", reward_token)
    echo_field("Reward/winner", reward_per_winner)
    echo_field("Max winners", max_winners)
    echo_field("Reward pool", pool)
    echo_field("Distribution", distribution)
    echo_field("Quest type", f"{variant.tag}{variant.values()}")
    echo_field("Duration", format_duration(seconds))
    echo_field("Title", title)
    click.echo("")

    try:
        result = client.create_quest(
            reward_token=reward_token,
            reward_per_winner=reward_per_winner,
            max_winners=max_winners,
            distribution=distribution,
            quest_type=variant,
            duration_seconds=seconds,
            reward_pool_amount=pool,
            title=title,
            description=description or title,
            admin=admin,
        )
    except QuestClientError as exc:
        fail(exc)

    report_tx(result, f"Quest #{result.data} created" if result.success else "")
