"""
Clients for external services: moderator notification channels with their dispatcher, and the AI joke source.
"""

from .base import Notifier
from .discord import DiscordNotifier
from .dispatcher import NotificationDispatcher, NotificationJob
from .email_notifier import EmailNotifier
from .openai_source import OpenAIJokeSource
from .telegram import TelegramNotifier

__all__ = [
    "Notifier",
    "DiscordNotifier",
    "EmailNotifier",
    "NotificationDispatcher",
    "NotificationJob",
    "OpenAIJokeSource",
    "TelegramNotifier",
]
