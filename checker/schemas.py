"""
Pydantic schemas for validator snapshots and reports.

All snapshot and report models are immutable (frozen).
"""

from enum import Enum
from typing import Dict, Iterable, List

from pydantic import BaseModel, ConfigDict, Field


class Direction(str, Enum):
    """Kind of status change a report entry describes."""
    INCREASING = "INCREASING"
    DECREASING = "DECREASING"
    JAILED = "JAILED"
    UNJAILED = "UNJAILED"
    TOMBSTONED = "TOMBSTONED"


class ValidatorSnapshot(BaseModel):
    """Signing state of one validator at one point in time."""

    model_config = ConfigDict(frozen=True)

    operator_address: str = ""  # empty if the validator record was not found
    consensus_address: str
    moniker: str = ""
    missed_blocks: int = Field(default=0, ge=0)
    jailed: bool = False
    tombstoned: bool = False


# consensus address -> snapshot, one entry per monitored signing validator
SnapshotSet = Dict[str, ValidatorSnapshot]


def build_snapshot_set(snapshots: Iterable[ValidatorSnapshot]) -> SnapshotSet:
    """Key snapshots by consensus address."""
    return {snapshot.consensus_address: snapshot for snapshot in snapshots}


class ReportEntry(BaseModel):
    """Single notable event for one validator."""

    model_config = ConfigDict(frozen=True)

    validator_address: str
    validator_moniker: str = ""
    consensus_address: str = ""
    emoji: str
    description: str
    missing_blocks: int
    direction: Direction


class Report(BaseModel):
    """Events produced by one diff pass, sorted by validator address."""

    entries: List[ReportEntry] = []

    def is_empty(self) -> bool:
        return not self.entries


class ChainParams(BaseModel):
    """Slashing parameters and block timing, fetched once at startup."""

    model_config = ConfigDict(frozen=True)

    signed_blocks_window: int = Field(gt=0)
    min_signed_per_window: float = Field(ge=0, le=1)
    missed_blocks_to_jail: int
    avg_block_time: float = Field(default=0.0, ge=0)  # seconds

    @classmethod
    def from_slashing_params(
        cls,
        signed_blocks_window: int,
        min_signed_per_window: float,
        avg_block_time: float = 0.0,
    ) -> "ChainParams":
        """Derive the jail threshold from the slashing window parameters."""
        return cls(
            signed_blocks_window=signed_blocks_window,
            min_signed_per_window=min_signed_per_window,
            missed_blocks_to_jail=int(signed_blocks_window * (1 - min_signed_per_window)),
            avg_block_time=avg_block_time,
        )
