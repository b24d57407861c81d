"""Exception hierarchy for OutagePulse."""


class OutagePulseError(Exception):
    """Base class for all OutagePulse failures."""
    pass


class FetchError(OutagePulseError):
    """Provider response was absent, malformed or unreachable."""
    pass


class MissingDataError(FetchError):
    """Provider payload has no top-level data collection."""
    pass


class ConfigError(OutagePulseError):
    """Required configuration is missing."""
    pass


class DeliveryError(OutagePulseError):
    """Telegram transport call failed."""
    pass


class MessageNotModifiedError(DeliveryError):
    """Telegram refused an edit because the text did not change."""
    pass


class LedgerError(OutagePulseError):
    """Exception raised for ledger file operations failures."""
    pass


class CycleInProgressError(OutagePulseError):
    """Another poll cycle is already running in this process."""
    pass
