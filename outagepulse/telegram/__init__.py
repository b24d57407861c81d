# OutagePulse Telegram Integration
"""Telegram Bot API transport for OutagePulse."""

from .client import TelegramClient
from .models import SentMessage, TelegramResponse, TelegramMessage

__all__ = ["TelegramClient", "SentMessage", "TelegramResponse", "TelegramMessage"]
