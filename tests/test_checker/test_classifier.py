"""Unit tests for ClassificationEngine."""

from unittest.mock import Mock

import pytest

from checker.classifier import (
    JAILED_DESC,
    JAILED_EMOJI,
    TOMBSTONED_EMOJI,
    UNJAILED_DESC,
    ClassificationEngine,
)
from checker.errors import SnapshotFetchError
from checker.schemas import Direction, build_snapshot_set
from checker.severity_bands import SeverityBands


@pytest.fixture
def default_bands():
    return SeverityBands.generate_default(100)


class TestDiff:
    """Test the pure diff between two snapshots."""

    def test_band_crossing_up(self, make_snapshot, default_bands):
        """0 -> 1 crosses from the lowest band into the next one."""
        previous = build_snapshot_set([make_snapshot(missed_blocks=0)])
        current = build_snapshot_set([make_snapshot(missed_blocks=1)])

        report = ClassificationEngine.diff(previous, current, default_bands)

        assert len(report.entries) == 1
        entry = report.entries[0]
        assert entry.direction == Direction.INCREASING
        assert entry.emoji == default_bands[1].emoji_start
        assert entry.description == default_bands[1].desc_start
        assert entry.missing_blocks == 1
        assert entry.validator_address == "cosmosvaloper1aaa"
        assert entry.validator_moniker == "Validator A"

    def test_jailing_overrides_band_noise(self, make_snapshot, default_bands):
        previous = build_snapshot_set([make_snapshot(missed_blocks=5, jailed=False)])
        current = build_snapshot_set([make_snapshot(missed_blocks=5, jailed=True)])

        report = ClassificationEngine.diff(previous, current, default_bands)

        assert len(report.entries) == 1
        assert report.entries[0].direction == Direction.JAILED
        assert report.entries[0].emoji == JAILED_EMOJI
        assert report.entries[0].description == JAILED_DESC

    def test_jailing_with_band_change_reports_only_jail(self, make_snapshot, default_bands):
        previous = build_snapshot_set([make_snapshot(missed_blocks=0)])
        current = build_snapshot_set([make_snapshot(missed_blocks=95, jailed=True)])

        report = ClassificationEngine.diff(previous, current, default_bands)

        assert [e.direction for e in report.entries] == [Direction.JAILED]

    def test_tombstoning_overrides_jailing(self, make_snapshot, default_bands):
        previous = build_snapshot_set([make_snapshot(jailed=True, tombstoned=False)])
        current = build_snapshot_set([make_snapshot(jailed=True, tombstoned=True)])

        report = ClassificationEngine.diff(previous, current, default_bands)

        assert len(report.entries) == 1
        assert report.entries[0].direction == Direction.TOMBSTONED
        assert report.entries[0].emoji == TOMBSTONED_EMOJI

    def test_tombstoning_overrides_jail_edge(self, make_snapshot, default_bands):
        previous = build_snapshot_set([make_snapshot(jailed=False)])
        current = build_snapshot_set([make_snapshot(jailed=True, tombstoned=True)])

        report = ClassificationEngine.diff(previous, current, default_bands)

        assert [e.direction for e in report.entries] == [Direction.TOMBSTONED]

    def test_steady_tombstoned_is_silent(self, make_snapshot, default_bands):
        previous = build_snapshot_set([make_snapshot(jailed=True, tombstoned=True)])
        current = build_snapshot_set([make_snapshot(jailed=True, tombstoned=True)])

        report = ClassificationEngine.diff(previous, current, default_bands)

        assert report.entries == []

    def test_missing_previous_entry_skipped(self, make_snapshot, default_bands):
        previous = build_snapshot_set([make_snapshot(consensus_address="cosmosvalcons1aaa")])
        current = build_snapshot_set([
            make_snapshot(consensus_address="cosmosvalcons1aaa"),
            make_snapshot(consensus_address="cosmosvalcons1new", missed_blocks=90, jailed=True),
        ])

        report = ClassificationEngine.diff(previous, current, default_bands)

        assert report.entries == []

    def test_recovery_crossing_two_bands(self, make_snapshot, custom_bands):
        """150 -> 90 skips band [100, 129] and lands in [50, 99]."""
        previous = build_snapshot_set([make_snapshot(missed_blocks=150)])
        current = build_snapshot_set([make_snapshot(missed_blocks=90)])

        report = ClassificationEngine.diff(previous, current, custom_bands)

        assert len(report.entries) == 1
        entry = report.entries[0]
        assert entry.direction == Direction.DECREASING
        assert entry.emoji == "down1"
        assert entry.description == "recovered to band 1"
        assert entry.missing_blocks == 90

    def test_unjailed(self, make_snapshot, default_bands):
        previous = build_snapshot_set([make_snapshot(missed_blocks=50, jailed=True)])
        current = build_snapshot_set([make_snapshot(missed_blocks=50, jailed=False)])

        report = ClassificationEngine.diff(previous, current, default_bands)

        assert len(report.entries) == 1
        assert report.entries[0].direction == Direction.UNJAILED
        assert report.entries[0].description == UNJAILED_DESC
        assert report.entries[0].missing_blocks == 50

    def test_steady_jailed_is_silent(self, make_snapshot, default_bands):
        previous = build_snapshot_set([make_snapshot(missed_blocks=10, jailed=True)])
        current = build_snapshot_set([make_snapshot(missed_blocks=90, jailed=True)])

        report = ClassificationEngine.diff(previous, current, default_bands)

        assert report.entries == []

    def test_fluctuation_within_band_is_silent(self, make_snapshot, custom_bands):
        previous = build_snapshot_set([make_snapshot(missed_blocks=250)])
        current = build_snapshot_set([make_snapshot(missed_blocks=900)])

        report = ClassificationEngine.diff(previous, current, custom_bands)

        assert report.entries == []

    def test_self_diff_is_empty(self, make_snapshot, custom_bands):
        snapshots = build_snapshot_set([
            make_snapshot(consensus_address="a", missed_blocks=0),
            make_snapshot(consensus_address="b", missed_blocks=120, jailed=True),
            make_snapshot(consensus_address="c", missed_blocks=500, tombstoned=True),
        ])

        report = ClassificationEngine.diff(snapshots, snapshots, custom_bands)

        assert report.is_empty()

    def test_lookup_failure_skips_only_that_validator(self, make_snapshot, custom_bands):
        previous = build_snapshot_set([
            make_snapshot(consensus_address="a", operator_address="op_a", missed_blocks=0),
            make_snapshot(consensus_address="b", operator_address="op_b", missed_blocks=0),
        ])
        current = build_snapshot_set([
            make_snapshot(consensus_address="a", operator_address="op_a", missed_blocks=5000),
            make_snapshot(consensus_address="b", operator_address="op_b", missed_blocks=60),
        ])

        report = ClassificationEngine.diff(previous, current, custom_bands)

        assert [e.validator_address for e in report.entries] == ["op_b"]

    def test_entries_sorted_by_address(self, make_snapshot, custom_bands):
        previous = build_snapshot_set([
            make_snapshot(consensus_address="c3", operator_address="op_c", missed_blocks=0),
            make_snapshot(consensus_address="c1", operator_address="op_a", missed_blocks=0),
            make_snapshot(consensus_address="c2", operator_address="op_b", missed_blocks=0),
        ])
        current = build_snapshot_set([
            make_snapshot(consensus_address="c3", operator_address="op_c", missed_blocks=60),
            make_snapshot(consensus_address="c1", operator_address="op_a", missed_blocks=60),
            make_snapshot(consensus_address="c2", operator_address="op_b", jailed=True),
        ])

        report = ClassificationEngine.diff(previous, current, custom_bands)

        assert [e.validator_address for e in report.entries] == ["op_a", "op_b", "op_c"]

    def test_unknown_operator_falls_back_to_consensus_address(self, make_snapshot, custom_bands):
        previous = build_snapshot_set([make_snapshot(operator_address="", moniker="")])
        current = build_snapshot_set([make_snapshot(operator_address="", moniker="", jailed=True)])

        report = ClassificationEngine.diff(previous, current, custom_bands)

        assert report.entries[0].validator_address == "cosmosvalcons1aaa"
        assert report.entries[0].consensus_address == "cosmosvalcons1aaa"

    def test_diff_does_not_modify_inputs(self, make_snapshot, custom_bands):
        previous = build_snapshot_set([make_snapshot(missed_blocks=0)])
        current = build_snapshot_set([make_snapshot(missed_blocks=60)])
        previous_copy, current_copy = dict(previous), dict(current)

        ClassificationEngine.diff(previous, current, custom_bands)

        assert previous == previous_copy
        assert current == current_copy


class TestGenerateReport:
    """Test the stateful fetch/diff/swap cycle."""

    @pytest.fixture
    def source(self):
        return Mock()

    def test_first_fetch_seeds_and_reports_nothing(self, source, make_snapshot, custom_bands):
        source.fetch_snapshot.return_value = build_snapshot_set([
            make_snapshot(missed_blocks=900, jailed=True, tombstoned=True),
        ])
        engine = ClassificationEngine(source, custom_bands)

        report = engine.generate_report()

        assert report.is_empty()
        assert engine.is_seeded
        assert "cosmosvalcons1aaa" in engine.previous

    def test_second_fetch_diffs_and_swaps(self, source, make_snapshot, custom_bands):
        first = build_snapshot_set([make_snapshot(missed_blocks=0)])
        second = build_snapshot_set([make_snapshot(missed_blocks=60)])
        source.fetch_snapshot.side_effect = [first, second]
        engine = ClassificationEngine(source, custom_bands)

        engine.generate_report()
        report = engine.generate_report()

        assert [e.direction for e in report.entries] == [Direction.INCREASING]
        assert engine.previous is second

    def test_repeat_alert_suppressed(self, source, make_snapshot, custom_bands):
        source.fetch_snapshot.side_effect = [
            build_snapshot_set([make_snapshot(missed_blocks=0)]),
            build_snapshot_set([make_snapshot(missed_blocks=60)]),
            build_snapshot_set([make_snapshot(missed_blocks=70)]),
        ]
        engine = ClassificationEngine(source, custom_bands)

        engine.generate_report()
        assert len(engine.generate_report().entries) == 1
        assert engine.generate_report().is_empty()

    def test_fetch_error_keeps_previous_state(self, source, make_snapshot, custom_bands):
        first = build_snapshot_set([make_snapshot(missed_blocks=0)])
        source.fetch_snapshot.side_effect = [first, SnapshotFetchError("node down")]
        engine = ClassificationEngine(source, custom_bands)

        engine.generate_report()
        report = engine.generate_report()

        assert report.is_empty()
        assert engine.previous is first

    def test_fetch_error_before_seed_does_not_seed(self, source, custom_bands):
        source.fetch_snapshot.side_effect = SnapshotFetchError("node down")
        engine = ClassificationEngine(source, custom_bands)

        assert engine.generate_report().is_empty()
        assert not engine.is_seeded

    def test_state_swapped_even_when_validator_skipped(self, source, make_snapshot, custom_bands):
        second = build_snapshot_set([make_snapshot(missed_blocks=5000)])
        source.fetch_snapshot.side_effect = [
            build_snapshot_set([make_snapshot(missed_blocks=0)]),
            second,
        ]
        engine = ClassificationEngine(source, custom_bands)

        engine.generate_report()
        report = engine.generate_report()

        assert report.is_empty()
        assert engine.previous is second

    def test_empty_first_snapshot_still_seeds(self, source, make_snapshot, custom_bands):
        source.fetch_snapshot.side_effect = [
            {},
            build_snapshot_set([make_snapshot(missed_blocks=60)]),
        ]
        engine = ClassificationEngine(source, custom_bands)

        engine.generate_report()
        report = engine.generate_report()

        assert engine.is_seeded
        assert report.is_empty()
