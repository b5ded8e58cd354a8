"""
State-diff and classification engine.

Compares two snapshots of the validator set and turns the differences into
report entries. Rules are applied per validator in fixed priority:

1. tombstoning (terminal, nothing else is reported)
2. jailing / unjailing edges (steady jailed state is silent)
3. crossing from one severity band into another

Movement inside a single band is never reported.
"""

import logging
from typing import Optional

from checker.errors import BandNotFoundError, SnapshotFetchError
from checker.schemas import Direction, Report, ReportEntry, SnapshotSet, ValidatorSnapshot
from checker.severity_bands import SeverityBands

logger = logging.getLogger(__name__)


TOMBSTONED_EMOJI = "💀"
TOMBSTONED_DESC = "was tombstoned"
JAILED_EMOJI = "❌"
JAILED_DESC = "was jailed"
UNJAILED_EMOJI = "👌"
UNJAILED_DESC = "was unjailed"


class ClassificationEngine:
    """
    Hold the last snapshot of the validator set and diff new ones against it.

    One engine per monitored chain. The retained snapshot lives in memory
    only, so every restart begins with a fresh first observation.
    """

    def __init__(self, snapshot_source, bands: SeverityBands):
        """
        Args:
            snapshot_source: Object with fetch_snapshot() -> SnapshotSet,
                raising SnapshotFetchError on failure
            bands: Validated severity band ladder
        """
        self.snapshot_source = snapshot_source
        self.bands = bands
        self.previous: Optional[SnapshotSet] = None

    @property
    def is_seeded(self) -> bool:
        return self.previous is not None

    def generate_report(self) -> Report:
        """
        Run one cycle: fetch, diff against the held snapshot, swap.

        Returns:
            Report for this cycle (empty on fetch failure or first fetch)
        """
        logger.debug("Querying for validators state...")

        try:
            current = self.snapshot_source.fetch_snapshot()
        except SnapshotFetchError as e:
            logger.error(f"Error getting new state, skipping this cycle: {e}")
            return Report()

        if self.previous is None:
            logger.info(f"No previous state, seeding with {len(current)} validators.")
            self.previous = current
            return Report()

        report = self.diff(self.previous, current, self.bands)
        self.previous = current

        logger.info(
            f"Processed {len(current)} validators, {len(report.entries)} report entries"
        )
        return report

    @classmethod
    def diff(
        cls,
        previous: SnapshotSet,
        current: SnapshotSet,
        bands: SeverityBands,
    ) -> Report:
        """
        Compare two snapshots. Pure: neither input is modified.

        Validators missing from `previous` are skipped. Entries are sorted
        by validator address, then consensus address.
        """
        entries = []

        for address, new_state in current.items():
            old_state = previous.get(address)
            if old_state is None:
                logger.debug(f"No previous state for {address}, skipping")
                continue

            entry = cls.classify(old_state, new_state, bands)
            if entry is not None:
                entries.append(entry)

        entries.sort(key=lambda e: (e.validator_address, e.consensus_address))
        return Report(entries=entries)

    @staticmethod
    def classify(
        old: ValidatorSnapshot,
        new: ValidatorSnapshot,
        bands: SeverityBands,
    ) -> Optional[ReportEntry]:
        """
        Classify the change of a single validator.

        Returns:
            ReportEntry, or None when nothing notable happened or the
            counters fall outside the band ladder (logged, not raised)
        """
        address = new.consensus_address

        def entry(emoji: str, description: str, direction: Direction) -> ReportEntry:
            return ReportEntry(
                validator_address=new.operator_address or new.consensus_address,
                validator_moniker=new.moniker,
                consensus_address=new.consensus_address,
                emoji=emoji,
                description=description,
                missing_blocks=new.missed_blocks,
                direction=direction,
            )

        if new.tombstoned and not old.tombstoned:
            logger.debug(f"Validator {address} is tombstoned")
            return entry(TOMBSTONED_EMOJI, TOMBSTONED_DESC, Direction.TOMBSTONED)

        if new.jailed and not old.jailed:
            logger.debug(f"Validator {address} is jailed")
            return entry(JAILED_EMOJI, JAILED_DESC, Direction.JAILED)

        if old.jailed and not new.jailed:
            logger.debug(f"Validator {address} is unjailed")
            return entry(UNJAILED_EMOJI, UNJAILED_DESC, Direction.UNJAILED)

        if new.jailed and old.jailed:
            logger.debug(f"Validator {address} is and was jailed, no need to send report")
            return None

        try:
            old_band = bands.lookup(old.missed_blocks)
            new_band = bands.lookup(new.missed_blocks)
        except BandNotFoundError as e:
            logger.error(f"Could not get band for validator {address}: {e}")
            return None

        if old_band.start == new_band.start:
            logger.debug(
                f"Validator {address} didn't change band "
                f"({old.missed_blocks} -> {new.missed_blocks}), no need to send report"
            )
            return None

        # Either the validator is skipping blocks, or it recovered and the
        # signing window moved past the blocks it missed earlier.
        if old.missed_blocks < new.missed_blocks:
            logger.debug(
                f"Validator {address} missed blocks increasing: "
                f"{old.missed_blocks} -> {new.missed_blocks}"
            )
            return entry(new_band.emoji_start, new_band.desc_start, Direction.INCREASING)

        logger.debug(
            f"Validator {address} missed blocks decreasing: "
            f"{old.missed_blocks} -> {new.missed_blocks}"
        )
        return entry(new_band.emoji_end, new_band.desc_end, Direction.DECREASING)
