"""User-configurable values loaded from environment variables."""

import os
import sys
from pathlib import Path
from zoneinfo import ZoneInfo

from dotenv import load_dotenv

load_dotenv()

_MISSED_ONESHOT_CHOICES = ("fire", "skip")


def _fail(message: str) -> None:
    print(message, file=sys.stderr)
    print("Set it in .env or your environment.", file=sys.stderr)
    raise SystemExit(1)


# All reminder times are entered and fired in UTC.
TZ: ZoneInfo = ZoneInfo("UTC")

DATA_DIR: Path = Path(
    os.environ.get("REMIND_BOT_DATA_DIR") or Path.home() / ".remind-bot"
).expanduser()

MISSED_ONESHOT: str = os.environ.get("REMIND_BOT_MISSED_ONESHOT", "fire").lower()
if MISSED_ONESHOT not in _MISSED_ONESHOT_CHOICES:
    _fail(
        f"REMIND_BOT_MISSED_ONESHOT must be one of "
        f"{', '.join(_MISSED_ONESHOT_CHOICES)} (got {MISSED_ONESHOT!r})"
    )

try:
    MISFIRE_GRACE: int = int(os.environ.get("REMIND_BOT_MISFIRE_GRACE", "60"))
except ValueError:
    _fail("REMIND_BOT_MISFIRE_GRACE must be a whole number of seconds")

_guild = os.environ.get("REMIND_BOT_GUILD_ID")
GUILD_ID: int | None = int(_guild) if _guild and _guild.isdigit() else None

LOG_LEVEL: str = os.environ.get("REMIND_BOT_LOG_LEVEL", "INFO").upper()
