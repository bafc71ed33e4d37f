"""Data models for the collector."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Message(BaseModel):
    """An incoming message from a chat/channel feed.

    Attributes:
        text: Message text.
        channel_id: Id of the channel/chat the message was posted in.
        message_id: Id of the message within that channel.
        raw: Transport payload, kept for audit and never interpreted.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    text: str = ""
    channel_id: int
    message_id: int
    raw: Any = Field(default=None, repr=False)
