"""Execute notification actions against Telegram and record the outcome."""

import enum
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Protocol, Any
from zoneinfo import ZoneInfo

from ..config import TelegramConfig
from ..errors import DeliveryError, MessageNotModifiedError
from ..ledger.manager import NotificationLedger
from ..ledger.models import NotificationRecord, MessageId
from ..provider.models import OutageState
from ..telegram.models import SentMessage
from .state_machine import Action, ActionKind, decide


logger = logging.getLogger("outagepulse.notifier")


class MessageTransport(Protocol):
    """Messaging RPCs the coordinator depends on."""

    def send_message(self, text: str, parse_mode: str = "HTML") -> SentMessage: ...

    def edit_message_text(
        self, message_id: Any, text: str, parse_mode: str = "HTML"
    ) -> SentMessage: ...


class OutcomeKind(enum.Enum):
    NONE = "none"
    CREATED = "created"
    UPDATED = "updated"
    UNCHANGED = "unchanged"


@dataclass(frozen=True)
class DeliveryOutcome:
    """What delivery did and what the ledger now points at."""
    kind: OutcomeKind
    attempts: int = 0
    message_id: Optional[MessageId] = None
    record: Optional[NotificationRecord] = None


class DeliveryCoordinator:
    """Sends or edits the live message, with one purge-and-recreate retry."""

    MAX_RETRIES = 1

    def __init__(
        self,
        ledger: NotificationLedger,
        transport: MessageTransport,
        telegram_config: TelegramConfig,
        tz: ZoneInfo = ZoneInfo("Europe/Kyiv")
    ):
        """Initialize coordinator.

        Args:
            ledger: Ledger written after each successful delivery
            transport: Object exposing send_message / edit_message_text
            telegram_config: Checked before any transport call
            tz: Zone used when re-rendering a retried message
        """
        self.ledger = ledger
        self.transport = transport
        self.telegram_config = telegram_config
        self.tz = tz

    def _dispatch(self, action: Action) -> SentMessage:
        # A known message id means edit, otherwise post a new one
        if action.message_id is not None:
            return self.transport.edit_message_text(
                action.message_id,
                action.message.text,
                parse_mode=action.message.parse_mode,
            )
        return self.transport.send_message(
            action.message.text,
            parse_mode=action.message.parse_mode,
        )

    def deliver(
        self,
        action: Action,
        state: OutageState,
        now: Optional[datetime] = None
    ) -> DeliveryOutcome:
        """Carry out an action.

        On a transport failure the ledger is purged and the action is
        re-derived (always a create) for a single retry. A failing retry
        propagates.

        Args:
            action: Action returned by decide()
            state: Outage state the action was derived from
            now: Render time for a re-derived action

        Returns:
            DeliveryOutcome

        Raises:
            ConfigError: If bot token or chat id is missing
            DeliveryError: If the retry also fails
        """
        if action.kind is ActionKind.NONE:
            return DeliveryOutcome(kind=OutcomeKind.NONE)

        self.telegram_config.require()

        attempts = 0
        while True:
            attempts += 1
            logger.info("Sending notification...", extra={
                'extra_fields': {
                    'action': action.kind.value,
                    'message_id': action.message_id,
                    'attempt': attempts,
                }
            })

            try:
                sent = self._dispatch(action)
            except MessageNotModifiedError:
                logger.info("Notification text unchanged, keeping live message")
                return DeliveryOutcome(
                    kind=OutcomeKind.UNCHANGED,
                    attempts=attempts,
                    message_id=action.message_id,
                )
            except DeliveryError as e:
                if attempts > self.MAX_RETRIES:
                    logger.error("Notification not sent, giving up", extra={
                        'extra_fields': {'error': str(e), 'attempts': attempts}
                    })
                    raise
                logger.warning("Notification not sent, retrying as new message", extra={
                    'extra_fields': {'error': str(e)}
                })
                self.ledger.delete()
                action = decide(state, None, now=now, tz=self.tz)
                continue

            record = NotificationRecord(message_id=sent.message_id, date=sent.date)
            self.ledger.save(record)

            kind = OutcomeKind.UPDATED if action.kind is ActionKind.UPDATE else OutcomeKind.CREATED
            logger.info("Notification sent", extra={
                'extra_fields': {'outcome': kind.value, 'message_id': sent.message_id}
            })
            return DeliveryOutcome(
                kind=kind,
                attempts=attempts,
                message_id=sent.message_id,
                record=record,
            )
