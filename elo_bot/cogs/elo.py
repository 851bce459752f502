"""
Elo commands

Slash commands for registration, rating lookup and pairwise challenges.
A result is proposed with /elo update and takes effect once the opponent
answers with /elo update (or /elo confirm) naming the proposer.
"""

import discord
from discord import app_commands
from discord.ext import commands
from typing import Optional

from elo_bot.config import Config
from elo_bot.database.models import ChallengeOutcome
from elo_bot.operations.challenge_operations import ChallengeOperations, ChallengeAccepted
from elo_bot.operations.player_operations import PlayerOperations
from elo_bot.utils.elo_exceptions import EloException
from elo_bot.utils.embeds import (
    build_register_embed, build_rating_embed, build_proposed_embed,
    build_accepted_embed, build_pending_embed
)
from elo_bot.utils.error_embeds import ErrorEmbeds
from elo_bot.utils.logger import setup_logger

logger = setup_logger(__name__)


def player_id(user: discord.abc.User) -> str:
    """Stable player identity for a Discord user"""
    return str(user.id)


class EloCog(commands.Cog):
    """Elo rating and challenge commands"""

    elo = app_commands.Group(name="elo", description="Elo ratings and challenges")
    elo_admin = app_commands.Group(name="elo-admin", description="Elo administration")

    def __init__(self, bot):
        self.bot = bot
        settings = bot.elo_settings
        self.player_ops = PlayerOperations(bot.db, settings)
        self.challenge_ops = ChallengeOperations(bot.db, settings)
        self.logger = logger

    async def _send_error(self, interaction: discord.Interaction, error: EloException):
        await interaction.response.send_message(
            embed=ErrorEmbeds.from_exception(error),
            ephemeral=True
        )

    @elo.command(name="register", description="Register for Elo ratings")
    @app_commands.describe(name="Display name to register with")
    async def register(self, interaction: discord.Interaction, name: str):
        try:
            player = await self.player_ops.register(player_id(interaction.user), name)
        except EloException as e:
            await self._send_error(interaction, e)
            return
        await interaction.response.send_message(embed=build_register_embed(player))

    @elo.command(name="check", description="Show a player's Elo rating")
    @app_commands.describe(member="The player to look up (defaults to you)")
    async def check(self, interaction: discord.Interaction, member: Optional[discord.Member] = None):
        target_id = player_id(member) if member else None
        try:
            player = await self.player_ops.inspect(player_id(interaction.user), target_id)
        except EloException as e:
            await self._send_error(interaction, e)
            return
        await interaction.response.send_message(embed=build_rating_embed(player))

    @elo.command(name="update", description="Report a result against a player, or confirm theirs")
    @app_commands.describe(
        member="Your opponent",
        result="Whether you won or lost"
    )
    @app_commands.choices(result=[
        app_commands.Choice(name="Win", value="win"),
        app_commands.Choice(name="Lose", value="lose"),
    ])
    async def update(self, interaction: discord.Interaction, member: discord.Member,
                     result: app_commands.Choice[str]):
        outcome = ChallengeOutcome.WIN if result.value == "win" else ChallengeOutcome.LOSE
        try:
            challenge_result = await self.challenge_ops.challenge(
                player_id(interaction.user), player_id(member), outcome
            )
        except EloException as e:
            await self._send_error(interaction, e)
            return

        if isinstance(challenge_result, ChallengeAccepted):
            embed = build_accepted_embed(challenge_result)
        else:
            embed = build_proposed_embed(challenge_result, member.mention)
        await interaction.response.send_message(embed=embed)

    @elo.command(name="confirm", description="Confirm a result a player reported against you")
    @app_commands.describe(member="The player who reported the result")
    async def confirm(self, interaction: discord.Interaction, member: discord.Member):
        try:
            accepted = await self.challenge_ops.confirm(player_id(interaction.user), player_id(member))
        except EloException as e:
            await self._send_error(interaction, e)
            return
        await interaction.response.send_message(embed=build_accepted_embed(accepted))

    @elo.command(name="pending", description="List your pending challenges")
    async def pending(self, interaction: discord.Interaction):
        try:
            summary = await self.challenge_ops.pending_for(player_id(interaction.user))
        except EloException as e:
            await self._send_error(interaction, e)
            return
        await interaction.response.send_message(embed=build_pending_embed(summary), ephemeral=True)

    @elo_admin.command(name="cancel", description="Remove a pending challenge without changing ratings")
    @app_commands.describe(
        challenger="Player who proposed the challenge",
        opponent="Player the challenge was proposed against"
    )
    @app_commands.check(lambda interaction: interaction.user.id == Config.OWNER_DISCORD_ID)
    async def cancel(self, interaction: discord.Interaction,
                     challenger: discord.Member, opponent: discord.Member):
        try:
            removed = await self.challenge_ops.cancel_challenge(player_id(challenger), player_id(opponent))
        except EloException as e:
            await self._send_error(interaction, e)
            return

        if not removed:
            await interaction.response.send_message(embed=ErrorEmbeds.challenge_not_found(), ephemeral=True)
            return

        self.logger.info(f"Owner {interaction.user.id} cancelled challenge {challenger.id} -> {opponent.id}")
        await interaction.response.send_message(
            f"✅ Pending challenge from {challenger.mention} to {opponent.mention} removed.",
            ephemeral=True
        )


async def setup(bot):
    await bot.add_cog(EloCog(bot))
