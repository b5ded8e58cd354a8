"""
Include/exclude policy deciding which validators are monitored.
"""

import logging
from enum import Enum
from typing import FrozenSet, Iterable, Optional

from checker.errors import ConfigurationError

logger = logging.getLogger(__name__)


class FilterMode(Enum):
    """Monitoring mode."""
    ALL = "all"                    # no include/exclude configured
    INCLUDE_ONLY = "include_only"  # only the listed validators
    EXCLUDE = "exclude"            # everyone except the listed validators


class MonitorFilter:
    """Decide whether a validator, by operator address, is tracked."""

    def __init__(self, mode: FilterMode = FilterMode.ALL, addresses: Iterable[str] = ()):
        self.mode = mode
        self.addresses: FrozenSet[str] = frozenset(addresses)

        if mode == FilterMode.ALL and self.addresses:
            raise ConfigurationError("Addresses given for a filter that monitors all validators")

    @classmethod
    def from_lists(
        cls,
        include: Optional[Iterable[str]] = None,
        exclude: Optional[Iterable[str]] = None,
    ) -> "MonitorFilter":
        """
        Build the filter from include/exclude config lists.

        Raises:
            ConfigurationError: if both lists are non-empty
        """
        include = [a for a in (include or []) if a]
        exclude = [a for a in (exclude or []) if a]

        if include and exclude:
            raise ConfigurationError("Cannot use include and exclude validators at the same time!")

        if include:
            return cls(FilterMode.INCLUDE_ONLY, include)
        if exclude:
            return cls(FilterMode.EXCLUDE, exclude)
        return cls()

    def is_monitored(self, operator_address: str) -> bool:
        if self.mode == FilterMode.INCLUDE_ONLY:
            return operator_address in self.addresses
        if self.mode == FilterMode.EXCLUDE:
            return operator_address not in self.addresses
        return True

    def describe(self) -> str:
        if self.mode == FilterMode.ALL:
            return "all validators"
        return f"{self.mode.value} ({len(self.addresses)} validators)"
