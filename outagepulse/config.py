"""Configuration management for OutagePulse.

Loads configuration from environment variables and optional YAML file.
All secrets come from environment variables only. The resulting Config is
immutable and is passed explicitly into the cycle runner.
"""

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Optional, Dict, Any

import yaml

from .errors import ConfigError
from .ledger.manager import is_protected_dir


DEFAULT_PROVIDER_URL = "https://www.dtek-krem.com.ua"
DEFAULT_TIMEZONE = "Europe/Kyiv"
LEDGER_FILE_NAME = "last-message.json"


def _as_float(name: str, value: Any) -> Optional[float]:
    if value in (None, ""):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{name} must be a number, got {value!r}")


def _env_float(name: str) -> Optional[float]:
    return _as_float(name, os.environ.get(name))


def _as_int(name: str, value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{name} must be an integer, got {value!r}")


@dataclass(frozen=True)
class TelegramConfig:
    """Telegram bot configuration."""

    bot_token: str = ""
    chat_id: str = ""
    api_base: str = "https://api.telegram.org"

    @classmethod
    def from_env(cls) -> "TelegramConfig":
        """Load Telegram configuration from environment variables."""
        return cls(
            bot_token=os.environ.get("TELEGRAM_BOT_TOKEN", ""),
            chat_id=os.environ.get("TELEGRAM_CHAT_ID", ""),
            api_base=os.environ.get("TELEGRAM_API_BASE", "https://api.telegram.org"),
        )

    def require(self) -> None:
        """Fail fast when the credential or channel is missing.

        Raises:
            ConfigError: If bot token or chat id is empty
        """
        if not self.bot_token:
            raise ConfigError("Missing telegram bot token")
        if not self.chat_id:
            raise ConfigError("Missing telegram chat id")


@dataclass(frozen=True)
class AddressConfig:
    """Address selector sent to the provider."""

    city: str = ""
    street: str = ""
    house: str = ""

    @classmethod
    def from_env(cls) -> "AddressConfig":
        """Load address selector from environment variables."""
        return cls(
            city=os.environ.get("OUTAGEPULSE_CITY", ""),
            street=os.environ.get("OUTAGEPULSE_STREET", ""),
            house=os.environ.get("OUTAGEPULSE_HOUSE", ""),
        )


@dataclass(frozen=True)
class ProviderConfig:
    """Provider endpoint and presentation settings."""

    base_url: str = DEFAULT_PROVIDER_URL
    timezone: str = DEFAULT_TIMEZONE
    http_timeout_sec: Optional[float] = None

    @classmethod
    def from_env(cls) -> "ProviderConfig":
        """Load provider configuration from environment variables."""
        return cls(
            base_url=os.environ.get("OUTAGEPULSE_PROVIDER_URL", DEFAULT_PROVIDER_URL),
            timezone=os.environ.get("OUTAGEPULSE_TIMEZONE", DEFAULT_TIMEZONE),
            http_timeout_sec=_env_float("OUTAGEPULSE_HTTP_TIMEOUT"),
        )


@dataclass(frozen=True)
class LedgerConfig:
    """Ledger storage configuration.

    The whole state_dir is removed on purge, so it must be a directory
    owned by OutagePulse alone.
    """

    state_dir: Path = field(default_factory=lambda: Path("artifacts"))

    @property
    def state_file(self) -> Path:
        return self.state_dir / LEDGER_FILE_NAME

    @classmethod
    def from_env(cls) -> "LedgerConfig":
        """Load ledger configuration from environment variables."""
        return cls(
            state_dir=Path(os.environ.get("OUTAGEPULSE_STATE_DIR", "artifacts")),
        )


@dataclass(frozen=True)
class APIConfig:
    """API server configuration."""

    host: str = "0.0.0.0"
    port: int = 18801
    debug: bool = False
    api_key: str = ""

    # Rate limiting
    rate_limit_cycle: str = "6 per minute"
    rate_limit_get: str = "100 per minute"

    @classmethod
    def from_env(cls) -> "APIConfig":
        """Load API configuration from environment variables."""
        return cls(
            host=os.environ.get("OUTAGEPULSE_HOST", "0.0.0.0"),
            port=_as_int("OUTAGEPULSE_PORT", os.environ.get("OUTAGEPULSE_PORT", "18801")),
            debug=os.environ.get("OUTAGEPULSE_DEBUG", "false").lower() == "true",
            api_key=os.environ.get("OUTAGEPULSE_API_KEY", ""),
        )


@dataclass(frozen=True)
class LoggingConfig:
    """Logging configuration."""

    level: str = "INFO"
    format: str = "json"
    file: Optional[str] = None

    @classmethod
    def from_env(cls) -> "LoggingConfig":
        """Load logging configuration from environment variables."""
        return cls(
            level=os.environ.get("OUTAGEPULSE_LOG_LEVEL", "INFO"),
            format=os.environ.get("OUTAGEPULSE_LOG_FORMAT", "json"),
            file=os.environ.get("OUTAGEPULSE_LOG_FILE"),
        )


def _coerce(section: str, key: str, value: Any) -> Any:
    """Convert a YAML value to the type of its dataclass field."""
    name = f"{section}.{key}"
    if key == "http_timeout_sec":
        return _as_float(name, value)
    if key == "port":
        return _as_int(name, value)
    if key == "state_dir":
        return Path(value)
    return value


# YAML section -> (attribute, environment variable that wins over it)
_YAML_OVERRIDES = {
    "address": {
        "city": "OUTAGEPULSE_CITY",
        "street": "OUTAGEPULSE_STREET",
        "house": "OUTAGEPULSE_HOUSE",
    },
    "provider": {
        "base_url": "OUTAGEPULSE_PROVIDER_URL",
        "timezone": "OUTAGEPULSE_TIMEZONE",
        "http_timeout_sec": "OUTAGEPULSE_HTTP_TIMEOUT",
    },
    "ledger": {
        "state_dir": "OUTAGEPULSE_STATE_DIR",
    },
    "logging": {
        "level": "OUTAGEPULSE_LOG_LEVEL",
        "format": "OUTAGEPULSE_LOG_FORMAT",
        "file": "OUTAGEPULSE_LOG_FILE",
    },
    "api": {
        "host": "OUTAGEPULSE_HOST",
        "port": "OUTAGEPULSE_PORT",
        "rate_limit_cycle": None,
        "rate_limit_get": None,
    },
}


@dataclass(frozen=True)
class Config:
    """Main configuration container."""

    telegram: TelegramConfig
    address: AddressConfig
    provider: ProviderConfig
    ledger: LedgerConfig
    logging: LoggingConfig
    api: APIConfig

    # Runtime settings
    environment: str = "development"

    @classmethod
    def from_env(cls) -> "Config":
        """Load all configuration from environment variables."""
        return cls(
            telegram=TelegramConfig.from_env(),
            address=AddressConfig.from_env(),
            provider=ProviderConfig.from_env(),
            ledger=LedgerConfig.from_env(),
            logging=LoggingConfig.from_env(),
            api=APIConfig.from_env(),
            environment=os.environ.get("OUTAGEPULSE_ENV", "development"),
        )

    @classmethod
    def from_yaml(cls, path: str) -> "Config":
        """Load configuration from YAML file, env vars override."""
        config_path = Path(path)

        if config_path.exists():
            with open(config_path, "r", encoding="utf-8") as f:
                yaml_config = yaml.safe_load(f) or {}
        else:
            yaml_config = {}

        if not isinstance(yaml_config, dict):
            raise ConfigError(f"Config file {config_path} must contain a mapping")

        config = cls.from_env()
        sections: Dict[str, Any] = {}

        for section, keys in _YAML_OVERRIDES.items():
            values = yaml_config.get(section) or {}
            current = getattr(config, section)
            changes = {}
            for key, env_var in keys.items():
                if key not in values:
                    continue
                if env_var and os.environ.get(env_var):
                    continue
                changes[key] = _coerce(section, key, values[key])
            sections[section] = replace(current, **changes) if changes else current

        return replace(config, **sections)

    def validate(self) -> list[str]:
        """Validate configuration and return list of errors."""
        errors = []

        if not self.telegram.bot_token:
            errors.append("TELEGRAM_BOT_TOKEN is required")

        if not self.telegram.chat_id:
            errors.append("TELEGRAM_CHAT_ID is required")

        if not self.address.city:
            errors.append("OUTAGEPULSE_CITY is required")

        if not self.address.street:
            errors.append("OUTAGEPULSE_STREET is required")

        if not self.address.house:
            errors.append("OUTAGEPULSE_HOUSE is required")

        if is_protected_dir(self.ledger.state_dir):
            errors.append("OUTAGEPULSE_STATE_DIR must be a dedicated directory")

        return errors


def load_config(path: Optional[str] = None) -> Config:
    """Build the runtime configuration.

    Args:
        path: Optional YAML file with non-secret overrides

    Returns:
        Immutable Config instance
    """
    if path:
        return Config.from_yaml(path)
    return Config.from_env()
