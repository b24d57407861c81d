"""Telegram message rendering for OutagePulse."""

import html
from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo

from ..provider.models import OutageState


UNKNOWN_REASON = 'Невідома'
UNKNOWN_VALUE = 'Невідомий'


@dataclass(frozen=True)
class RenderedMessage:
    """Message body ready for the Bot API."""
    text: str
    parse_mode: str = 'HTML'


def _field(value: Optional[str], placeholder: str) -> str:
    return html.escape(value) if value else placeholder


def format_render_timestamp(now: datetime, tz: ZoneInfo) -> str:
    """Format the render time as ``HH:MM DD.MM.YYYY`` in the target zone.

    Naive datetimes are taken to be in the local process timezone.
    """
    local = now.astimezone(tz)
    return f'{local:%H:%M} {local:%d.%m.%Y}'


def render_outage_message(
    state: OutageState,
    now: Optional[datetime] = None,
    tz: ZoneInfo = ZoneInfo('Europe/Kyiv')
) -> RenderedMessage:
    """Build the live outage notification.

    Args:
        state: Current outage state
        now: Render wall-clock time (defaults to current time)
        tz: Zone used for the render timestamp

    Returns:
        RenderedMessage with HTML text
    """
    rendered_at = format_render_timestamp(now or datetime.now(tz), tz)

    lines = [
        '🪫 <b>Електроенергія відсутня!</b>',
        '',
        'ℹ️ <b>Причина:</b>',
        _field(state.reason, UNKNOWN_REASON) + '.',
        '',
        '🔴 <b>Час початку:</b>',
        _field(state.start_time, UNKNOWN_VALUE),
        '',
        '🟢 <b>Час відновлення:</b>',
        _field(state.end_time, UNKNOWN_VALUE),
        '',
        '⏰ <b>Час оновлення інформації:</b>',
        _field(state.observed_at, UNKNOWN_VALUE),
        '⏰ <b>Час оновлення повідомлення:</b>',
        rendered_at,
    ]

    return RenderedMessage(text='\n'.join(lines))
