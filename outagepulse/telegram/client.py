"""Telegram Bot API wrapper for OutagePulse."""

import logging
from typing import Optional, Dict, Any

import requests
from pydantic import ValidationError

from ..config import TelegramConfig
from ..errors import DeliveryError, MessageNotModifiedError
from ..utils.logging_config import redact_secrets
from .models import TelegramResponse, TelegramMessage, SentMessage


logger = logging.getLogger("outagepulse.telegram")

NOT_MODIFIED_MARKER = "message is not modified"


class TelegramClient:
    """Sends and edits messages in a single Telegram chat."""

    DEFAULT_API_BASE = "https://api.telegram.org"

    def __init__(
        self,
        bot_token: Optional[str],
        chat_id: Optional[str],
        api_base: str = DEFAULT_API_BASE,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None
    ):
        """Initialize Telegram client.

        Args:
            bot_token: Bot API token
            chat_id: Target chat or channel id
            api_base: Bot API base URL
            session: requests session for connection pooling
            timeout: Request timeout in seconds, None for no timeout
        """
        self.bot_token = bot_token or ""
        self.chat_id = chat_id or ""
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()

    @classmethod
    def from_config(
        cls,
        config: TelegramConfig,
        timeout: Optional[float] = None
    ) -> "TelegramClient":
        """Create client from configuration."""
        return cls(
            bot_token=config.bot_token,
            chat_id=config.chat_id,
            api_base=config.api_base,
            timeout=timeout,
        )

    def is_configured(self) -> bool:
        """Check if client is properly configured."""
        return bool(self.bot_token and self.chat_id)

    def _call(self, method: str, payload: Dict[str, Any]) -> SentMessage:
        """Invoke a Bot API method that returns a Message.

        Raises:
            DeliveryError: On network failure, non-2xx or malformed response
        """
        url = f"{self.api_base}/bot{self.bot_token}/{method}"

        try:
            response = self._session.post(url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            raise DeliveryError(f"{method} request failed: {redact_secrets(str(e))}")

        try:
            body = TelegramResponse.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            if response.status_code >= 400:
                raise DeliveryError(f"{method} failed with HTTP {response.status_code}")
            raise DeliveryError(f"{method} returned malformed response: {redact_secrets(str(e))}")

        if not body.ok or response.status_code >= 400:
            description = body.description or f"HTTP {response.status_code}"
            if NOT_MODIFIED_MARKER in description.lower():
                raise MessageNotModifiedError(description)
            raise DeliveryError(f"{method} failed: {description}")

        if not isinstance(body.result, TelegramMessage):
            raise DeliveryError(f"{method} returned no message in result")

        logger.debug(f"{method} succeeded", extra={
            'extra_fields': {'message_id': body.result.message_id}
        })
        return SentMessage(message_id=body.result.message_id, date=body.result.date)

    def send_message(self, text: str, parse_mode: str = "HTML") -> SentMessage:
        """Post a new message to the chat."""
        return self._call("sendMessage", {
            "chat_id": self.chat_id,
            "text": text,
            "parse_mode": parse_mode,
        })

    def edit_message_text(
        self,
        message_id: Any,
        text: str,
        parse_mode: str = "HTML"
    ) -> SentMessage:
        """Replace the text of an existing message."""
        return self._call("editMessageText", {
            "chat_id": self.chat_id,
            "message_id": message_id,
            "text": text,
            "parse_mode": parse_mode,
        })
