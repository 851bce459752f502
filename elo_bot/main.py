import asyncio
from typing import List, Optional, Tuple

import discord
from discord import app_commands
from discord.ext import commands

from elo_bot.config import Config, EloSettings
from elo_bot.database.database import Database
from elo_bot.utils.logger import setup_logger

logger = setup_logger(__name__)

EXTENSIONS = ('elo_bot.cogs.elo',)


def describe_command_error(error: Exception) -> Tuple[str, str]:
    """Title and description shown to a user whose command failed outside the cog"""
    if isinstance(error, (app_commands.CheckFailure, commands.CheckFailure)):
        return ("❌ Permission Denied",
                "You don't have the required permissions to use this command.")
    return ("❌ An unexpected error occurred",
            "Something went wrong while processing your command. Please try again later.")


def error_embed(error: Exception) -> discord.Embed:
    title, description = describe_command_error(error)
    return discord.Embed(title=title, description=description, color=discord.Color.red())


class EloBot(commands.Bot):
    def __init__(self, elo_settings: Optional[EloSettings] = None):
        intents = discord.Intents.default()
        intents.guilds = True
        intents.members = True

        super().__init__(
            command_prefix=Config.COMMAND_PREFIX,
            intents=intents,
            help_command=None
        )
        self.tree.on_error = self.on_app_command_error

        self.db: Optional[Database] = None
        self.elo_settings = elo_settings or Config.elo_settings()

    async def setup_hook(self):
        s = self.elo_settings
        logger.info(f"Starting with initial={s.initial_elo}, k={s.k_factor}, scale={s.logistic_scale}")

        self.db = Database()
        await self.db.initialize()

        for extension in EXTENSIONS:
            try:
                await self.load_extension(extension)
                logger.info(f"Loaded extension {extension}")
            except commands.ExtensionError as e:
                logger.error(f"Failed to load {extension}: {e}", exc_info=True)

        await self._sync_commands(Config.get_guild_ids())

    async def _sync_commands(self, guild_ids: List[int]):
        """Sync to each configured guild, or globally when none are configured"""
        if not self.tree.get_commands():
            logger.warning("No application commands registered; nothing to sync")
            return

        if not guild_ids:
            # Global propagation can take up to an hour
            synced = await self._sync_to(None)
            logger.info(f"Synced {synced} command(s) globally")
            return

        total = 0
        for guild_id in guild_ids:
            guild = discord.Object(id=guild_id)
            self.tree.copy_global_to(guild=guild)
            total += await self._sync_to(guild)
        logger.info(f"Synced {total} command(s) across {len(guild_ids)} guild(s)")

    async def _sync_to(self, guild: Optional[discord.abc.Snowflake]) -> int:
        where = f"guild {guild.id}" if guild else "global scope"
        try:
            return len(await self.tree.sync(guild=guild))
        except discord.Forbidden:
            logger.error(f"Missing applications.commands scope for {where}")
        except discord.HTTPException as e:
            logger.error(f"Sync to {where} failed with status {e.status}: {e.text}")
        return 0

    async def on_ready(self):
        logger.info(f"{self.user} connected; serving {len(self.guilds)} guild(s)")
        await self.change_presence(activity=discord.Game(name="Elo | /elo register"))

    async def on_app_command_error(self, interaction: discord.Interaction,
                                   error: app_commands.AppCommandError):
        """Fallback for slash command errors the cog did not turn into a reply"""
        command_name = interaction.command.name if interaction.command else 'unknown'
        if isinstance(error, app_commands.CheckFailure):
            logger.info(f"{interaction.user} denied /{command_name}")
        else:
            logger.error(f"Unhandled error in /{command_name}: {error}", exc_info=error)

        send = (interaction.followup.send if interaction.response.is_done()
                else interaction.response.send_message)
        try:
            await send(embed=error_embed(error), ephemeral=True)
        except discord.HTTPException as e:
            logger.error(f"Could not deliver error reply for /{command_name}: {e}")

    async def on_command_error(self, ctx: commands.Context, error: commands.CommandError):
        if isinstance(error, commands.CommandNotFound):
            return
        if not isinstance(error, commands.CheckFailure):
            logger.error(f"Unhandled error in {ctx.command}: {error}", exc_info=error)
        await ctx.send(embed=error_embed(error))

    async def close(self):
        logger.info("Shutting down")
        if self.db:
            await self.db.close()
        await super().close()


async def main():
    Config.validate()

    bot = EloBot()
    async with bot:
        await bot.start(Config.DISCORD_TOKEN)


def run():
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Interrupted")


if __name__ == "__main__":
    run()
