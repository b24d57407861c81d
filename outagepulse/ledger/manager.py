"""Notification ledger with same-day validity and atomic writes.

Holds at most one NotificationRecord in a JSON file. The directory that
contains the file is owned by the ledger and is removed wholesale on purge.
Cycles are single-flight, so no file locking is done here.
"""

import json
import logging
import os
import shutil
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Optional, Callable

from ..errors import LedgerError
from .models import NotificationRecord, PurgeResult


logger = logging.getLogger("outagepulse.ledger")


def is_protected_dir(path: Path) -> bool:
    """True if a purge of path would remove the working, home or root directory."""
    resolved = Path(path).resolve()
    return resolved in (Path.cwd().resolve(), Path.home().resolve(), Path(resolved.anchor))


class NotificationLedger:
    """Persists the identity of the live notification message."""

    def __init__(
        self,
        state_file: Optional[Path] = None,
        clock: Callable[[], datetime] = datetime.now
    ):
        """Initialize ledger.

        Args:
            state_file: Path to record JSON file. Defaults to artifacts/last-message.json
            clock: Local wall-clock provider used for day rollover
        """
        self.state_file = Path(state_file) if state_file else Path("artifacts") / "last-message.json"
        self._clock = clock

    @property
    def storage_dir(self) -> Path:
        return self.state_file.parent

    def _ensure_dir(self):
        """Ensure storage directory exists."""
        self.storage_dir.mkdir(parents=True, exist_ok=True)

    def peek(self) -> Optional[NotificationRecord]:
        """Read the stored record without day-rollover purging."""
        if not self.state_file.exists():
            return None

        try:
            with open(self.state_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise LedgerError(f"Invalid JSON in ledger file: {e}")
        except OSError as e:
            raise LedgerError(f"Failed to read ledger file: {e}")

        if not isinstance(data, dict):
            raise LedgerError("Ledger file must contain a JSON object")

        try:
            return NotificationRecord.from_dict(data)
        except ValueError as e:
            raise LedgerError(f"Invalid ledger record: {e}")

    def is_stale(self, record: NotificationRecord) -> bool:
        """True if the record was posted on a calendar day before today."""
        return record.posted_at.date() < self._clock().date()

    def load(self) -> Optional[NotificationRecord]:
        """Load the live record, purging it if it was posted before today.

        Returns:
            NotificationRecord or None when no usable record exists
        """
        record = self.peek()
        if record is None:
            return None

        if self.is_stale(record):
            logger.info("Ledger record is from a previous day, purging", extra={
                'extra_fields': {
                    'message_id': record.message_id,
                    'posted_on': record.posted_at.date().isoformat(),
                }
            })
            self.delete()
            return None

        return record

    def save(self, record: NotificationRecord) -> None:
        """Write record atomically using temp file + rename."""
        self._ensure_dir()

        fd, tmp_path = tempfile.mkstemp(
            dir=self.storage_dir,
            suffix='.tmp'
        )

        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(record.to_dict(), f)
                f.flush()
                os.fsync(f.fileno())

            os.replace(tmp_path, str(self.state_file))
        except OSError as e:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise LedgerError(f"Failed to write ledger file: {e}")

        logger.debug("Ledger record saved", extra={
            'extra_fields': record.to_dict()
        })

    def delete(self) -> PurgeResult:
        """Remove the record together with its storage directory.

        Returns:
            PurgeResult.DELETED or PurgeResult.ALREADY_ABSENT

        Raises:
            LedgerError: If the storage directory is the working, home or root directory
        """
        if not self.storage_dir.exists():
            return PurgeResult.ALREADY_ABSENT

        if is_protected_dir(self.storage_dir):
            raise LedgerError(f"Refusing to purge protected directory {self.storage_dir}")

        try:
            shutil.rmtree(self.storage_dir)
        except FileNotFoundError:
            return PurgeResult.ALREADY_ABSENT
        except OSError as e:
            raise LedgerError(f"Failed to delete ledger storage: {e}")

        logger.info("Ledger storage purged")
        return PurgeResult.DELETED
