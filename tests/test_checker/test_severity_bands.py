"""Unit tests for SeverityBands."""

import pytest
from pydantic import ValidationError

from checker.errors import BandNotFoundError, SeverityBandsError
from checker.severity_bands import SeverityBand, SeverityBands


def band(start, end):
    return SeverityBand(
        start=start,
        end=end,
        emoji_start="🔴",
        emoji_end="🟢",
        desc_start="is skipping blocks",
        desc_end="is recovering",
    )


class TestValidate:
    """Test ladder invariants."""

    def test_valid_ladder(self):
        bands = SeverityBands([band(0, 99), band(100, 199), band(200, 300)])
        bands.validate(300)

    def test_last_band_may_exceed_window(self):
        SeverityBands([band(0, 99), band(100, 500)]).validate(300)

    def test_empty_rejected(self):
        with pytest.raises(SeverityBandsError, match="empty"):
            SeverityBands([]).validate(100)

    def test_first_band_not_at_zero(self):
        with pytest.raises(SeverityBandsError) as exc_info:
            SeverityBands([band(1, 100)]).validate(100)
        assert exc_info.value.index == 0

    def test_last_band_below_window(self):
        with pytest.raises(SeverityBandsError) as exc_info:
            SeverityBands([band(0, 50)]).validate(300)
        assert "300" in str(exc_info.value)

    def test_gap_rejected(self):
        bands = SeverityBands([band(0, 99), band(100, 149), band(151, 300)])
        with pytest.raises(SeverityBandsError) as exc_info:
            bands.validate(300)
        assert exc_info.value.index == 1

    def test_overlap_rejected(self):
        bands = SeverityBands([band(0, 99), band(99, 300)])
        with pytest.raises(SeverityBandsError) as exc_info:
            bands.validate(300)
        assert exc_info.value.index == 0

    def test_band_end_before_start_rejected(self):
        with pytest.raises(ValidationError):
            band(10, 5)


class TestLookup:
    """Test band lookup."""

    def test_lookup_boundaries(self):
        bands = SeverityBands([band(0, 99), band(100, 199), band(200, 300)])
        assert bands.lookup(0).start == 0
        assert bands.lookup(99).start == 0
        assert bands.lookup(100).start == 100
        assert bands.lookup(300).start == 200

    def test_lookup_outside_coverage(self):
        bands = SeverityBands([band(0, 99), band(100, 300)])
        with pytest.raises(BandNotFoundError) as exc_info:
            bands.lookup(301)
        assert exc_info.value.missed_blocks == 301

    @pytest.mark.parametrize("window", [5, 100, 1000, 10000, 30000])
    def test_lookup_total_and_monotonic(self, window):
        """Every counter in [0, window] maps to exactly one band, in order."""
        bands = SeverityBands.generate_default(window)
        bands.validate(window)

        previous_start = -1
        for missed in range(window + 1):
            matching = [b for b in bands if b.contains(missed)]
            assert len(matching) == 1

            found = bands.lookup(missed)
            assert found.start >= previous_start
            previous_start = found.start


class TestDefaultBands:
    """Test default ladder generation."""

    def test_large_window_has_nine_bands(self):
        bands = SeverityBands.generate_default(10000)

        assert len(bands) == 9
        assert [(b.start, b.end) for b in bands] == [
            (0, 49),
            (50, 99),
            (100, 499),
            (500, 999),
            (1000, 2499),
            (2500, 4999),
            (5000, 7499),
            (7500, 8999),
            (9000, 10000),
        ]

    def test_descriptions(self):
        bands = SeverityBands.generate_default(10000)

        assert bands[0].desc_end == "is recovered (< 0.5%)"
        assert bands[1].desc_end == "is recovering (< 1.0%)"
        assert bands[3].desc_start == "is skipping blocks (> 5.0%)"
        assert bands[8].desc_start == "is skipping blocks (> 90.0%)"

    def test_small_window_drops_empty_bands(self):
        bands = SeverityBands.generate_default(100)

        assert bands[0].start == 0
        assert bands[0].end == 0
        assert bands[1].start == 1
        assert bands[-1].end == 100
        assert bands[0].desc_end == "is recovered (< 1.0%)"
        bands.validate(100)

    def test_default_emoji_escalates(self):
        bands = SeverityBands.generate_default(10000)

        assert bands[0].emoji_end == "🟢"
        assert bands[-1].emoji_start == "🔴"

    @pytest.mark.parametrize("window", [5, 100, 198])
    def test_small_window_floor_recovers_green(self, window):
        bands = SeverityBands.generate_default(window)

        assert bands[0].emoji_end == "🟢"
        assert bands[0].desc_end.startswith("is recovered")
