# OutagePulse Utilities
"""Utility functions and decorators for OutagePulse."""

from .logging_config import setup_logging, log_with_fields, redact_secrets
from .decorators import require_api_key

__all__ = ["setup_logging", "log_with_fields", "redact_secrets", "require_api_key"]
