"""
Missed-blocks checker core.

Turns two snapshots of a validator set into severity-banded alerts:
- Severity band ladder (validation, lookup, default generation)
- Snapshot and report schemas
- Include/exclude monitor filter
- Classification engine and monitor loop
- Time-to-jail estimation
"""

from checker.classifier import ClassificationEngine
from checker.errors import (
    BandNotFoundError,
    CheckerError,
    ConfigurationError,
    DeliveryError,
    SeverityBandsError,
    SnapshotFetchError,
)
from checker.jail_time import estimate_time_to_jail, format_duration
from checker.monitor_filter import FilterMode, MonitorFilter
from checker.schemas import (
    ChainParams,
    Direction,
    Report,
    ReportEntry,
    SnapshotSet,
    ValidatorSnapshot,
    build_snapshot_set,
)
from checker.severity_bands import SeverityBand, SeverityBands

__all__ = [
    "BandNotFoundError",
    "ChainParams",
    "CheckerError",
    "ClassificationEngine",
    "ConfigurationError",
    "DeliveryError",
    "Direction",
    "FilterMode",
    "MonitorFilter",
    "Report",
    "ReportEntry",
    "SeverityBand",
    "SeverityBands",
    "SeverityBandsError",
    "SnapshotFetchError",
    "SnapshotSet",
    "ValidatorSnapshot",
    "build_snapshot_set",
    "estimate_time_to_jail",
    "format_duration",
]
