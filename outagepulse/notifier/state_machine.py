"""Decide what to do with the live notification message."""

import enum
from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo

from ..ledger.models import NotificationRecord, MessageId
from ..provider.models import OutageState
from .messages import RenderedMessage, render_outage_message


class ActionKind(enum.Enum):
    NONE = "none"
    CREATE = "create"
    UPDATE = "update"


@dataclass(frozen=True)
class Action:
    """Decision for one cycle."""
    kind: ActionKind
    message: Optional[RenderedMessage] = None
    message_id: Optional[MessageId] = None

    @classmethod
    def none(cls) -> "Action":
        return cls(kind=ActionKind.NONE)

    @classmethod
    def create(cls, message: RenderedMessage) -> "Action":
        return cls(kind=ActionKind.CREATE, message=message)

    @classmethod
    def update(cls, message_id: MessageId, message: RenderedMessage) -> "Action":
        return cls(kind=ActionKind.UPDATE, message=message, message_id=message_id)


def decide(
    state: OutageState,
    record: Optional[NotificationRecord],
    now: Optional[datetime] = None,
    tz: ZoneInfo = ZoneInfo('Europe/Kyiv')
) -> Action:
    """Map the observed state and the ledger snapshot to an action.

    An outage that cleared leaves the last message as it is; nothing is
    edited or deleted on recovery.

    Args:
        state: Current outage state
        record: Ledger snapshot, None when no live message exists
        now: Render wall-clock time
        tz: Zone used for the render timestamp

    Returns:
        Action to hand to the delivery coordinator
    """
    if not state.active:
        return Action.none()

    message = render_outage_message(state, now=now, tz=tz)

    if record is None:
        return Action.create(message)

    return Action.update(record.message_id, message)
