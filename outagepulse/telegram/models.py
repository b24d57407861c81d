"""Pydantic models for Telegram Bot API responses."""

from dataclasses import dataclass
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict


class TelegramMessage(BaseModel):
    """Subset of the Bot API Message object we rely on."""

    model_config = ConfigDict(extra="ignore")

    message_id: int
    date: int
    edit_date: Optional[int] = None


class TelegramResponse(BaseModel):
    """Envelope returned by every Bot API method."""

    model_config = ConfigDict(extra="ignore")

    ok: bool
    result: Optional[Union[TelegramMessage, bool]] = None
    description: Optional[str] = None
    error_code: Optional[int] = None


@dataclass(frozen=True)
class SentMessage:
    """Identity of a message after a successful send or edit."""
    message_id: int
    date: int
