"""
Reporter interface shared by all delivery channels.
"""

from abc import ABC, abstractmethod
from typing import Optional

from checker.jail_time import estimate_time_to_jail, format_duration
from checker.schemas import ChainParams, Direction, Report, ReportEntry


class Reporter(ABC):
    """Delivers a Report to one notification channel."""

    @abstractmethod
    def name(self) -> str:
        pass

    @abstractmethod
    def init(self) -> None:
        """Set up clients; leaves the reporter disabled if not configured."""
        pass

    @abstractmethod
    def enabled(self) -> bool:
        pass

    @abstractmethod
    def serialize(self, report: Report) -> str:
        pass

    @abstractmethod
    def send_report(self, report: Report) -> None:
        """
        Raises:
            DeliveryError: if the channel rejected or did not receive the report
        """
        pass


def time_to_jail_suffix(entry: ReportEntry, params: Optional[ChainParams]) -> str:
    """' (1h2m3s till jail)' for increasing entries, '' otherwise."""
    if entry.direction != Direction.INCREASING or params is None:
        return ""

    time_to_jail = estimate_time_to_jail(
        entry.missing_blocks,
        params.missed_blocks_to_jail,
        params.avg_block_time,
    )
    return f" ({format_duration(time_to_jail)} till jail)"
