"""
Centralized error embeds for consistent error handling across the Elo bot.
"""

import discord

from elo_bot.utils.elo_exceptions import EloException, StoreUnavailableError


class ErrorEmbeds:
    """Centralized error embed factory for consistent error handling."""

    @staticmethod
    def from_exception(error: EloException) -> discord.Embed:
        """Create embed from an Elo error's user-facing message."""
        if isinstance(error, StoreUnavailableError):
            return ErrorEmbeds.database_error()
        return discord.Embed(
            title="Elo Error",
            description=error.user_message,
            color=discord.Color.red()
        )

    @staticmethod
    def database_error() -> discord.Embed:
        """Create embed for database-related errors."""
        return discord.Embed(
            title="Database Error",
            description="A database error occurred. Please try again later or contact an administrator.",
            color=discord.Color.red()
        )

    @staticmethod
    def challenge_not_found() -> discord.Embed:
        """Create embed for when a challenge is not found."""
        return discord.Embed(
            title="Challenge Not Found",
            description="The specified challenge could not be found.",
            color=discord.Color.red()
        )
