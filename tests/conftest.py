"""Shared fixtures for checker tests."""

import sys
from pathlib import Path

import pytest

# Ensure root project directory is first in path
root = Path(__file__).parent.parent
if str(root) not in sys.path:
    sys.path.insert(0, str(root))

from checker.schemas import ValidatorSnapshot  # noqa: E402
from checker.severity_bands import SeverityBand, SeverityBands  # noqa: E402


@pytest.fixture
def make_snapshot():
    """Factory for ValidatorSnapshot with sensible defaults."""

    def _make(
        consensus_address="cosmosvalcons1aaa",
        operator_address="cosmosvaloper1aaa",
        moniker="Validator A",
        missed_blocks=0,
        jailed=False,
        tombstoned=False,
    ):
        return ValidatorSnapshot(
            consensus_address=consensus_address,
            operator_address=operator_address,
            moniker=moniker,
            missed_blocks=missed_blocks,
            jailed=jailed,
            tombstoned=tombstoned,
        )

    return _make


@pytest.fixture
def custom_bands():
    """Five hand-written bands covering a window of 1000."""
    ranges = [(0, 49), (50, 99), (100, 129), (130, 199), (200, 1000)]
    return SeverityBands(
        SeverityBand(
            start=start,
            end=end,
            emoji_start=f"up{i}",
            emoji_end=f"down{i}",
            desc_start=f"entered band {i}",
            desc_end=f"recovered to band {i}",
        )
        for i, (start, end) in enumerate(ranges)
    )
