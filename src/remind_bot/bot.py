"""Discord adapter: the /remind slash command and channel delivery."""

import discord
from discord import app_commands
from discord.ext import commands

from remind_bot.config import GUILD_ID
from remind_bot.delivery import DeliveryError
from remind_bot.scheduling.reminders import ReminderStore
from remind_bot.scheduling.schedule import ValidationError
from remind_bot.scheduling.scheduler import ReminderScheduler
from remind_bot.service import ReminderRequest, ReminderService, confirmation

_Mentionable = discord.Member | discord.User | discord.Role

# Reminders may ping the users and roles they name, never @everyone.
_ALLOWED_MENTIONS = discord.AllowedMentions(everyone=False, users=True, roles=True)


class DiscordSink:
    """Deliver reminder text to a channel the bot can see."""

    def __init__(self, client: discord.Client) -> None:
        self.client = client

    async def send(self, channel_id: str, text: str) -> None:
        try:
            cid = int(channel_id)
        except ValueError:
            raise DeliveryError(channel_id, "not a Discord channel ID") from None
        try:
            channel = self.client.get_channel(cid)
            if channel is None:
                channel = await self.client.fetch_channel(cid)
            if not isinstance(channel, discord.abc.Messageable):
                raise DeliveryError(channel_id, "channel cannot receive messages")
            await channel.send(text, allowed_mentions=_ALLOWED_MENTIONS)
        except discord.NotFound:
            raise DeliveryError(channel_id, "channel not found") from None
        except discord.Forbidden:
            raise DeliveryError(channel_id, "missing permission to send") from None
        except discord.HTTPException as e:
            raise DeliveryError(channel_id, f"HTTP {e.status}: {e.text}") from e


def mention_id(target: _Mentionable | None) -> str | None:
    """Role IDs get a ``&`` prefix so they render as ``<@&id>``."""
    if target is None:
        return None
    if isinstance(target, discord.Role):
        return f"&{target.id}"
    return str(target.id)


def create_bot(
    store: ReminderStore | None = None,
    scheduler: ReminderScheduler | None = None,
) -> commands.Bot:
    """Stored reminders are restored in setup_hook, before the gateway connects."""
    intents = discord.Intents.default()

    bot = commands.Bot(command_prefix="!", intents=intents)
    scheduler = scheduler or ReminderScheduler()
    service = ReminderService(store or ReminderStore(), scheduler, DiscordSink(bot))
    bot.reminder_service = service  # type: ignore[attr-defined]

    @bot.event
    async def setup_hook():
        restored = service.startup()
        scheduler.start()
        print(f"restored {restored} reminders; scheduler has {len(scheduler.jobs)} jobs")

        if GUILD_ID is not None:
            guild = discord.Object(id=GUILD_ID)
            bot.tree.copy_global_to(guild=guild)
            synced = await bot.tree.sync(guild=guild)
        else:
            synced = await bot.tree.sync()
        print(f"synced {len(synced)} slash commands")

    @bot.event
    async def on_ready():
        print(f"online as {bot.user}")

    @bot.tree.command(
        name="remind", description="Set a reminder for a specific date and time in UTC"
    )
    @app_commands.describe(
        time="The time in HH:MM format (UTC)",
        date="The date in YYYY-MM-DD format (UTC)",
        message="The reminder message",
        frequency="How often to repeat (weekly reminders fire on Sundays)",
        interval="Custom interval in minutes (only if frequency is custom)",
        mention="User or role to mention",
    )
    @app_commands.choices(
        frequency=[
            app_commands.Choice(name="Once", value="once"),
            app_commands.Choice(name="Daily", value="daily"),
            app_commands.Choice(name="Weekly", value="weekly"),
            app_commands.Choice(name="Custom Interval", value="custom"),
        ]
    )
    async def slash_remind(
        interaction: discord.Interaction,
        time: str,
        date: str,
        message: str,
        frequency: app_commands.Choice[str],
        interval: int | None = None,
        mention: _Mentionable | None = None,
    ):
        if not service.ready:
            await interaction.response.send_message(
                "still starting up, try again in a moment.", ephemeral=True
            )
            return
        request = ReminderRequest(
            time=time,
            date=date,
            message=message,
            frequency=frequency.value,
            channel_id=str(interaction.channel_id or ""),
            interval=interval,
            mention=mention_id(mention),
        )
        try:
            reminder = service.create_reminder(request)
        except ValidationError as e:
            await interaction.response.send_message(
                f"couldn't set that reminder: {e}", ephemeral=True
            )
            return
        await interaction.response.send_message(confirmation(reminder))

    @bot.tree.error
    async def on_app_command_error(
        interaction: discord.Interaction,
        error: app_commands.AppCommandError,
    ) -> None:
        if not interaction.response.is_done():
            await interaction.response.send_message(
                "something went wrong saving that reminder.", ephemeral=True
            )
        raise error

    return bot
