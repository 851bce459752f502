import discord
from discord import app_commands
from discord.ext import commands

from elo_bot.main import describe_command_error, error_embed


def test_check_failures_read_as_permission_denied():
    for error in (app_commands.CheckFailure(), commands.CheckFailure()):
        title, _ = describe_command_error(error)
        assert title == "❌ Permission Denied"


def test_other_errors_hide_details():
    embed = error_embed(RuntimeError("connection string with secrets"))

    assert embed.title == "❌ An unexpected error occurred"
    assert "secrets" not in embed.description
    assert embed.color == discord.Color.red()
