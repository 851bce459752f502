"""
Shared embed utilities for the Elo bot.

Ratings and deltas arrive unrounded from the operations layer and are
rounded here, once, for display.
"""

from typing import List

import discord

from elo_bot.database.models import ChallengeOutcome
from elo_bot.operations.challenge_operations import (
    ChallengeAccepted, ChallengeProposed, PendingSummary, PendingEntry
)
from elo_bot.operations.player_operations import PlayerRating
from elo_bot.utils.elo import EloCalculator

# Discord rejects embed field values longer than this
FIELD_VALUE_LIMIT = 1024

OUTCOME_LABELS = {
    ChallengeOutcome.WIN: "won",
    ChallengeOutcome.LOSE: "lost",
}


def build_register_embed(player: PlayerRating) -> discord.Embed:
    return discord.Embed(
        title="✅ Registered",
        description=(
            f"Welcome, **{player.name}**! "
            f"Your starting Elo is **{EloCalculator.format_elo(player.elo)}**."
        ),
        color=discord.Color.green()
    )


def build_rating_embed(player: PlayerRating) -> discord.Embed:
    return discord.Embed(
        title=f"📊 {player.name}",
        description=f"Elo: **{EloCalculator.format_elo(player.elo)}**",
        color=discord.Color.blue()
    )


def build_proposed_embed(result: ChallengeProposed, opponent_mention: str) -> discord.Embed:
    """Tell the opponent a result is waiting for their confirmation"""
    outcome = OUTCOME_LABELS[result.outcome]
    embed = discord.Embed(
        title="⚔️ Challenge Result Submitted",
        description=(
            f"**{result.caller_name}** reports that they **{outcome}** against "
            f"**{result.opponent_name}**.\n\n"
            f"{opponent_mention}, confirm with `/elo confirm` (or `/elo update`) "
            f"naming {result.caller_name}."
        ),
        color=discord.Color.orange()
    )
    embed.set_footer(text=f"Challenge #{result.challenge_id}")
    return embed


def build_accepted_embed(result: ChallengeAccepted) -> discord.Embed:
    """Symmetric report of a confirmed result"""
    if result.outcome is ChallengeOutcome.WIN:
        winner, loser = result.caller_name, result.opponent_name
    else:
        winner, loser = result.opponent_name, result.caller_name

    embed = discord.Embed(
        title="🏆 Result Confirmed",
        description=f"**{winner}** won against **{loser}**.",
        color=discord.Color.gold()
    )
    embed.add_field(
        name=result.caller_name,
        value=(
            f"{EloCalculator.format_elo(result.caller_elo)} "
            f"({EloCalculator.format_elo_change(result.caller_delta)})"
        ),
        inline=True
    )
    embed.add_field(
        name=result.opponent_name,
        value=(
            f"{EloCalculator.format_elo(result.opponent_elo)} "
            f"({EloCalculator.format_elo_change(result.opponent_delta)})"
        ),
        inline=True
    )
    embed.set_footer(text=f"Challenge #{result.challenge_id}")
    return embed


def _describe_entry(entry: PendingEntry) -> str:
    return (
        f"#{entry.challenge_id}: **{entry.challenger_name}** "
        f"{OUTCOME_LABELS[entry.outcome]} vs **{entry.opponent_name}**"
    )


def _entry_list(entries: List[PendingEntry]) -> str:
    """Newline-separated entries, cut short to fit one embed field"""
    lines = []
    used = 0
    for index, entry in enumerate(entries):
        line = _describe_entry(entry)
        remaining = len(entries) - index - 1
        # Leave room for the overflow note in case a later entry does not fit
        reserve = len(f"\n…and {len(entries)} more") if remaining else 0
        if used + len(line) + 1 + reserve > FIELD_VALUE_LIMIT:
            lines.append(f"…and {len(entries) - index} more")
            break
        lines.append(line)
        used += len(line) + 1
    return "\n".join(lines)


def build_pending_embed(summary: PendingSummary) -> discord.Embed:
    embed = discord.Embed(title="⏳ Pending Challenges", color=discord.Color.blue())
    if not summary.incoming and not summary.outgoing:
        embed.description = "You have no pending challenges."
        return embed

    if summary.incoming:
        embed.add_field(
            name="Awaiting your confirmation",
            value=_entry_list(summary.incoming),
            inline=False
        )
    if summary.outgoing:
        embed.add_field(
            name="Awaiting your opponent",
            value=_entry_list(summary.outgoing),
            inline=False
        )
    return embed
