"""CLI handler for `remind-bot reminder` subcommand."""

import argparse
import sys

from remind_bot.scheduling.delivered import DeliveredLog
from remind_bot.scheduling.reminders import Reminder, ReminderStore
from remind_bot.scheduling.schedule import ValidationError


def _fmt_schedule(r: Reminder) -> str:
    try:
        return r.schedule().describe()
    except ValidationError as e:
        return f"invalid ({e})"


def _fmt_mention(r: Reminder) -> str:
    if not r.mention:
        return ""
    if r.mention.startswith("&"):
        return f"  (mention role {r.mention[1:]})"
    return f"  (mention {r.mention})"


def run_reminder_command(argv: list[str]) -> None:
    parser = argparse.ArgumentParser(prog="remind-bot reminder")
    sub = parser.add_subparsers(dest="action")

    list_p = sub.add_parser("list", help="Show stored reminders")
    list_p.add_argument("--channel", default=None, help="Only this channel ID")

    args = parser.parse_args(argv)

    if args.action == "list":
        _handle_list(args.channel)
    else:
        parser.print_help()
        sys.exit(1)


def _handle_list(channel: str | None) -> None:
    reminders = ReminderStore().load_all()
    if channel is not None:
        reminders = [r for r in reminders if r.channel_id == channel]
    if not reminders:
        print("no reminders")
        return
    delivered = DeliveredLog()
    for r in reminders:
        done = "  [delivered]" if r.frequency == "once" and r.id in delivered else ""
        print(
            f"  {r.id}  #{r.channel_id}  {_fmt_schedule(r):32s}  {r.message}"
            f"{_fmt_mention(r)}{done}"
        )
