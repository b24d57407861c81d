"""Logging configuration for OutagePulse.

Records go to the 'outagepulse' logger tree as one JSON object per line (or
plain text). Bot API URLs carry the bot token in their path, and requests
repeats those URLs in its exception text, so every rendered record is passed
through redact_secrets() before it is written.
"""

import json
import logging
import re
import sys
from datetime import datetime, timezone
from typing import Optional


ROOT_LOGGER = 'outagepulse'
TEXT_FORMAT = '%(asctime)s %(levelname)s %(name)s: %(message)s'

# Chatty HTTP libraries never log below WARNING
NOISY_LOGGERS = ('urllib3', 'werkzeug')

_BOT_TOKEN = re.compile(r'bot\d+:[A-Za-z0-9_-]+')


def redact_secrets(text: str) -> str:
    """Mask Telegram bot tokens embedded in text."""
    return _BOT_TOKEN.sub('bot<redacted>', text)


class JSONFormatter(logging.Formatter):
    """One JSON object per record, UTC timestamps, tokens masked."""

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        log_data = {
            'timestamp': created.isoformat(timespec='milliseconds'),
            'level': record.levelname,
            'logger': record.name,
            'message': redact_secrets(record.getMessage()),
        }

        fields = getattr(record, 'extra_fields', None)
        if fields:
            log_data.update(fields)

        if record.exc_info:
            log_data['exception'] = redact_secrets(self.formatException(record.exc_info))

        return redact_secrets(json.dumps(log_data, ensure_ascii=False, default=str))


class TextFormatter(logging.Formatter):
    """Human-readable lines for local runs."""

    def __init__(self):
        super().__init__(TEXT_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        fields = getattr(record, 'extra_fields', None)
        if fields:
            line += ' ' + ' '.join(f'{key}={value}' for key, value in fields.items())
        return redact_secrets(line)


def setup_logging(
    level: str = 'INFO',
    handler: Optional[logging.Handler] = None,
    fmt: str = 'json',
    log_file: Optional[str] = None
) -> logging.Logger:
    """Attach a single handler to the OutagePulse logger.

    Args:
        level: Logging level name; unknown names fall back to INFO
        handler: Custom handler (stdout, or log_file, by default)
        fmt: 'json' or 'text'
        log_file: File path used when no handler is given

    Returns:
        The configured 'outagepulse' logger
    """
    log_level = getattr(logging, str(level).upper(), logging.INFO)

    if handler is None:
        if log_file:
            handler = logging.FileHandler(log_file, encoding='utf-8')
        else:
            handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.setFormatter(JSONFormatter() if fmt == 'json' else TextFormatter())

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(log_level)
    logger.handlers = [handler]

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))

    return logger


def log_with_fields(
    logger: logging.Logger,
    level: str,
    message: str,
    exc_info: bool = False,
    **fields
):
    """Log message with structured fields under 'extra_fields'."""
    log_func = getattr(logger, level.lower(), logger.info)
    log_func(message, extra={'extra_fields': fields} if fields else None, exc_info=exc_info)
