# OutagePulse - DTEK Outage Notifier
"""OutagePulse: live Telegram notifications for scheduled power outages.

This package polls the DTEK shutdowns endpoint for one address and keeps a
single Telegram message up to date while an outage is active.

Core Components:
- Provider: DTEK status fetch and normalization into OutageState
- Ledger: JSON pointer to the live message with same-day validity
- Notifier: decision state machine and delivery with purge-and-retry
- Telegram: Bot API wrapper for sendMessage / editMessageText
"""

__version__ = "1.0.0"
