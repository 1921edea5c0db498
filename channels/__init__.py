"""Outbound messaging channels."""

from .base_channel import BaseChannel
from .manychat_channel import ManyChatChannel
from .console_channel import ConsoleChannel

__all__ = ["BaseChannel", "ManyChatChannel", "ConsoleChannel"]
