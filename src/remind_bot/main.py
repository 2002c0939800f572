"""Entry point for remind-bot."""

from __future__ import annotations

import asyncio
import logging
import os
import signal
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import discord
from dotenv import load_dotenv

if TYPE_CHECKING:
    from discord.ext.commands import Bot

    from remind_bot.scheduling.scheduler import ReminderScheduler

PROJECT_DIR = Path(__file__).resolve().parent.parent.parent

HELP = """\
remind-bot -- schedule reminder messages into Discord channels

commands:
  remind-bot                  Run the Discord bot
  remind-bot reminder list    Show stored reminders
  remind-bot help             Show this help message

environment:
  DISCORD_TOKEN               Bot token (required to run the bot)
  REMIND_BOT_DATA_DIR         Where reminders.json lives (default ~/.remind-bot)
  REMIND_BOT_MISSED_ONESHOT   fire | skip: one-shots missed while offline
  REMIND_BOT_MISFIRE_GRACE    Seconds a late job may still run (default 60)
  REMIND_BOT_GUILD_ID         Sync slash commands to one guild only
  REMIND_BOT_LOG_LEVEL        Logging level (default INFO)
"""

log = logging.getLogger(__name__)


def _dispatch_subcommand() -> bool:
    """Route CLI subcommands. Returns True if handled."""
    if len(sys.argv) < 2:
        return False
    cmd = sys.argv[1]
    rest = sys.argv[2:]
    if cmd in ("help", "--help", "-h"):
        print(HELP)
        return True
    if cmd == "reminder":
        from remind_bot.scheduling.reminder_cmd import run_reminder_command

        run_reminder_command(rest)
        return True
    print(f"unknown command: {cmd}\n\n{HELP}", file=sys.stderr)
    raise SystemExit(2)


async def _run(bot: Bot, scheduler: ReminderScheduler, token: str) -> None:
    """Run the bot until signalled; close cleanly on SIGTERM/SIGINT."""
    loop = asyncio.get_running_loop()
    _background_tasks: set[asyncio.Task[None]] = set()

    def _on_signal(sig_name: str) -> None:
        log.info("received %s, shutting down", sig_name)
        task = loop.create_task(bot.close())
        _background_tasks.add(task)
        task.add_done_callback(_background_tasks.discard)

    loop.add_signal_handler(signal.SIGTERM, _on_signal, "SIGTERM")
    loop.add_signal_handler(signal.SIGINT, _on_signal, "SIGINT")

    try:
        await bot.start(token)
    except asyncio.CancelledError:
        pass  # Signal handler already closed the bot
    finally:
        scheduler.shutdown()
        if not bot.is_closed():
            await bot.close()


def main() -> None:
    if _dispatch_subcommand():
        return

    load_dotenv(PROJECT_DIR / ".env")

    token = os.environ.get("DISCORD_TOKEN")
    if not token:
        print("Set DISCORD_TOKEN in .env")
        raise SystemExit(1)

    from remind_bot.bot import create_bot
    from remind_bot.config import LOG_LEVEL
    from remind_bot.scheduling.scheduler import ReminderScheduler

    discord.utils.setup_logging(level=getattr(logging, LOG_LEVEL, logging.INFO))

    scheduler = ReminderScheduler()
    bot = create_bot(scheduler=scheduler)
    asyncio.run(_run(bot, scheduler, token))


if __name__ == "__main__":
    main()
