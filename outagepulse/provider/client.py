"""DTEK shutdowns client.

Negotiates a CSRF token from the public shutdowns page and queries the
AJAX endpoint that backs the address lookup form.
"""

import logging
import re
from datetime import datetime
from typing import Optional, Dict, Any, Callable
from zoneinfo import ZoneInfo

import requests

from ..config import AddressConfig, ProviderConfig, DEFAULT_PROVIDER_URL
from ..errors import FetchError


logger = logging.getLogger("outagepulse.provider")

CSRF_META_RE = re.compile(
    r'<meta\s+name=["\']csrf-token["\']\s+content=["\']([^"\']+)["\']',
    re.IGNORECASE,
)


def extract_csrf_token(html: str) -> Optional[str]:
    """Pull the CSRF token out of the shutdowns page markup."""
    match = CSRF_META_RE.search(html)
    return match.group(1) if match else None


class DtekClient:
    """Fetches raw outage status for one street from DTEK."""

    SHUTDOWNS_PATH = "/ua/shutdowns"
    AJAX_PATH = "/ua/ajax"

    def __init__(
        self,
        city: str,
        street: str,
        base_url: str = DEFAULT_PROVIDER_URL,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
        timezone: str = "Europe/Kyiv",
        clock: Callable[..., datetime] = datetime.now
    ):
        """Initialize DTEK client.

        Args:
            city: City name as shown in the DTEK form
            street: Street name as shown in the DTEK form
            base_url: Regional DTEK site
            session: requests session (cookies must persist between calls)
            timeout: Request timeout in seconds, None for no timeout
            timezone: Zone used for the updateFact form field
            clock: Current time provider
        """
        self.city = city
        self.street = street
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.timezone = ZoneInfo(timezone)
        self._clock = clock
        self._session = session or requests.Session()

    @classmethod
    def from_config(cls, address: AddressConfig, provider: ProviderConfig) -> "DtekClient":
        """Create client from configuration."""
        return cls(
            city=address.city,
            street=address.street,
            base_url=provider.base_url,
            timeout=provider.http_timeout_sec,
            timezone=provider.timezone,
        )

    def _get_csrf_token(self) -> str:
        url = f"{self.base_url}{self.SHUTDOWNS_PATH}"
        logger.debug(f"Loading shutdowns page {url}")

        try:
            response = self._session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise FetchError(f"Getting info failed: {e}")

        token = extract_csrf_token(response.text)
        if not token:
            raise FetchError("Getting info failed: csrf-token meta tag not found")
        return token

    def _form_data(self) -> Dict[str, str]:
        update_fact = self._clock(self.timezone).strftime("%d.%m.%Y, %H:%M:%S")
        return {
            "method": "getHomeNum",
            "data[0][name]": "city",
            "data[0][value]": self.city,
            "data[1][name]": "street",
            "data[1][value]": self.street,
            "data[2][name]": "updateFact",
            "data[2][value]": update_fact,
        }

    def fetch_outage_status(self) -> Dict[str, Any]:
        """Fetch the raw status payload for the configured street.

        Returns:
            Decoded JSON payload keyed by house number under ``data``

        Raises:
            FetchError: On network failure, bad status or undecodable body
        """
        logger.info("Getting info...")
        token = self._get_csrf_token()

        try:
            response = self._session.post(
                f"{self.base_url}{self.AJAX_PATH}",
                data=self._form_data(),
                headers={
                    "x-requested-with": "XMLHttpRequest",
                    "x-csrf-token": token,
                },
                timeout=self.timeout,
            )
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as e:
            raise FetchError(f"Getting info failed: {e}")
        except ValueError as e:
            raise FetchError(f"Getting info failed: response is not JSON ({e})")

        logger.info("Getting info finished")
        return payload
