# OutagePulse Ledger
"""Persistence of the live notification pointer."""

from .models import NotificationRecord, PurgeResult
from .manager import NotificationLedger

__all__ = ["NotificationRecord", "PurgeResult", "NotificationLedger"]
