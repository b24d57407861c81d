"""Data models for the notification ledger."""

import enum
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Any, Union


MessageId = Union[int, str]


@dataclass(frozen=True)
class NotificationRecord:
    """Pointer to the currently live Telegram message."""
    message_id: MessageId
    date: int

    def __post_init__(self):
        if self.message_id in (None, ""):
            raise ValueError("message_id is required")
        if isinstance(self.date, bool) or not isinstance(self.date, int):
            raise ValueError("date must be a Unix timestamp in seconds")

    @property
    def posted_at(self) -> datetime:
        """Posting time in the local process timezone."""
        return datetime.fromtimestamp(self.date)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NotificationRecord":
        """Create NotificationRecord from dictionary."""
        return cls(
            message_id=data.get("message_id"),
            date=data.get("date")
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert NotificationRecord to dictionary."""
        return {
            "message_id": self.message_id,
            "date": self.date
        }


class PurgeResult(enum.Enum):
    """Result of removing the ledger storage."""
    DELETED = "deleted"
    ALREADY_ABSENT = "already_absent"
