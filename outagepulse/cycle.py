"""Poll cycle runner: fetch, normalize, decide, deliver."""

import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, Protocol
from zoneinfo import ZoneInfo

from .config import Config
from .errors import CycleInProgressError, OutagePulseError
from .ledger.manager import NotificationLedger
from .notifier.coordinator import DeliveryCoordinator, DeliveryOutcome
from .notifier.state_machine import Action, decide
from .provider.client import DtekClient
from .provider.models import OutageState
from .provider.normalizer import normalize
from .telegram.client import TelegramClient
from .utils.logging_config import log_with_fields


logger = logging.getLogger("outagepulse.cycle")


class StatusProvider(Protocol):
    def fetch_outage_status(self) -> Dict[str, Any]: ...


@dataclass(frozen=True)
class CycleResult:
    """Summary of one completed cycle."""
    state: OutageState
    action: Action
    outcome: DeliveryOutcome

    def to_dict(self) -> Dict[str, Any]:
        return {
            'outage_active': self.state.active,
            'reason': self.state.reason,
            'start_time': self.state.start_time,
            'end_time': self.state.end_time,
            'observed_at': self.state.observed_at,
            'action': self.action.kind.value,
            'outcome': self.outcome.kind.value,
            'message_id': self.outcome.message_id,
            'attempts': self.outcome.attempts,
        }


class CycleRunner:
    """Runs single-flight poll cycles for one address."""

    def __init__(
        self,
        config: Config,
        provider: StatusProvider,
        ledger: NotificationLedger,
        coordinator: DeliveryCoordinator,
        clock: Callable[..., datetime] = datetime.now
    ):
        self.config = config
        self.provider = provider
        self.ledger = ledger
        self.coordinator = coordinator
        self.tz = ZoneInfo(config.provider.timezone)
        self._clock = clock
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, config: Config) -> "CycleRunner":
        """Wire the real DTEK provider, ledger and Telegram transport."""
        tz = ZoneInfo(config.provider.timezone)
        ledger = NotificationLedger(config.ledger.state_file)
        transport = TelegramClient.from_config(
            config.telegram,
            timeout=config.provider.http_timeout_sec,
        )
        return cls(
            config=config,
            provider=DtekClient.from_config(config.address, config.provider),
            ledger=ledger,
            coordinator=DeliveryCoordinator(ledger, transport, config.telegram, tz=tz),
        )

    @property
    def in_progress(self) -> bool:
        return self._lock.locked()

    def run_once(self) -> CycleResult:
        """Execute one full cycle.

        Raises:
            CycleInProgressError: If another cycle is running
            OutagePulseError: Any fatal fetch, config, ledger or delivery error
        """
        if not self._lock.acquire(blocking=False):
            raise CycleInProgressError("A poll cycle is already running")

        try:
            return self._run()
        except OutagePulseError as e:
            log_with_fields(
                logger, 'error', 'Poll cycle failed',
                exc_info=True,
                error_type=type(e).__name__,
                error=str(e),
            )
            raise
        finally:
            self._lock.release()

    def _run(self) -> CycleResult:
        raw = self.provider.fetch_outage_status()
        state = normalize(raw, self.config.address.house)

        record = None
        if state.active:
            self.config.telegram.require()
            record = self.ledger.load()
        now = self._clock(self.tz)
        action = decide(state, record, now=now, tz=self.tz)
        outcome = self.coordinator.deliver(action, state, now=now)

        result = CycleResult(state=state, action=action, outcome=outcome)
        log_with_fields(logger, 'info', 'Poll cycle finished', **result.to_dict())
        return result
