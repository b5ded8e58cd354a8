"""
Exceptions raised by the missed-blocks checker.

Configuration errors are fatal at startup. Everything else is recovered
at the cycle or validator level by the caller.
"""

from typing import Optional


class CheckerError(Exception):
    """Base class for checker errors."""
    pass


class ConfigurationError(CheckerError):
    """Invalid configuration detected before polling starts."""
    pass


class SeverityBandsError(ConfigurationError):
    """Severity band ladder violates one of its invariants."""

    def __init__(self, message: str, index: Optional[int] = None):
        super().__init__(message)
        self.index = index


class BandNotFoundError(CheckerError):
    """No severity band contains the given missed-blocks counter."""

    def __init__(self, missed_blocks: int):
        super().__init__(
            f"Could not find a band for missed blocks counter = {missed_blocks}"
        )
        self.missed_blocks = missed_blocks


class SnapshotFetchError(CheckerError):
    """Validator data could not be retrieved from the node."""
    pass


class DeliveryError(CheckerError):
    """A reporter failed to deliver a report."""
    pass
