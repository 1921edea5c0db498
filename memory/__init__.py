"""Conversation memory for subscribers."""

from .models import ConversationTurn
from .conversation_memory import ConversationMemory

__all__ = [
    "ConversationTurn",
    "ConversationMemory",
]
