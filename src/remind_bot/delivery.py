"""The outbound side of a firing: send rendered text to a channel."""

from typing import Protocol


class DeliveryError(Exception):
    """A firing could not be delivered, e.g. the channel no longer exists."""

    def __init__(self, channel_id: str, reason: str) -> None:
        super().__init__(f"channel {channel_id}: {reason}")
        self.channel_id = channel_id
        self.reason = reason


class DeliverySink(Protocol):
    async def send(self, channel_id: str, text: str) -> None:
        """Deliver text to channel_id. Raises DeliveryError on failure."""
        ...
