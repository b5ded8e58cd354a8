"""
Severity bands over the missed-blocks counter.

A ladder of bands partitions [0, signed_blocks_window] into contiguous,
non-overlapping intervals. Alerts are only raised when a validator's
counter moves from one band into another, so fluctuation inside a band
stays silent.

Example (start - end), given window = 300:
  0 - 99, 100 - 199, 200 - 300   valid
  0 - 50                         not valid (does not cover the window)
"""

import logging
from typing import Iterable, Iterator, List

from pydantic import BaseModel, ConfigDict, Field, model_validator

from checker.errors import BandNotFoundError, SeverityBandsError

logger = logging.getLogger(__name__)


# Percentile breakpoints of (window + 1) for the default ladder
DEFAULT_PERCENTS = [0, 0.5, 1, 5, 10, 25, 50, 75, 90, 100]
DEFAULT_EMOJI_START = ["🟡", "🟡", "🟡", "🟠", "🟠", "🟠", "🔴", "🔴", "🔴"]
DEFAULT_EMOJI_END = ["🟢", "🟡", "🟡", "🟡", "🟡", "🟠", "🟠", "🟠", "🟠"]


class SeverityBand(BaseModel):
    """One inclusive interval of the missed-blocks counter."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    start: int = Field(ge=0)
    end: int = Field(ge=0)
    emoji_start: str = Field(alias="emoji-start")
    emoji_end: str = Field(alias="emoji-end")
    desc_start: str = Field(alias="desc-start")
    desc_end: str = Field(alias="desc-end")

    @model_validator(mode="after")
    def _check_bounds(self):
        if self.end < self.start:
            raise ValueError(f"band end {self.end} is below its start {self.start}")
        return self

    def contains(self, missed_blocks: int) -> bool:
        return self.start <= missed_blocks <= self.end


class SeverityBands:
    """Ordered, immutable ladder of severity bands."""

    def __init__(self, bands: Iterable[SeverityBand]):
        self._bands = tuple(bands)

    def __iter__(self) -> Iterator[SeverityBand]:
        return iter(self._bands)

    def __len__(self) -> int:
        return len(self._bands)

    def __getitem__(self, index: int) -> SeverityBand:
        return self._bands[index]

    def __repr__(self) -> str:
        ranges = ", ".join(f"{b.start}-{b.end}" for b in self._bands)
        return f"SeverityBands([{ranges}])"

    def validate(self, window: int) -> None:
        """
        Check the ladder covers [0, window] without gaps or overlaps.

        Args:
            window: Signed blocks window of the chain

        Raises:
            SeverityBandsError: naming the violated invariant and index
        """
        bands = self._bands
        if not bands:
            raise SeverityBandsError("Severity bands list is empty")

        if bands[0].start != 0:
            raise SeverityBandsError(
                f"First band's start should be 0, got {bands[0].start}", index=0
            )

        if bands[-1].end < window:
            raise SeverityBandsError(
                f"Last band's end should be >= {window}, got {bands[-1].end}",
                index=len(bands) - 1,
            )

        for i in range(len(bands) - 1):
            if bands[i + 1].start - bands[i].end != 1:
                raise SeverityBandsError(
                    f"Band at index {i} ends at {bands[i].end}, "
                    f"and the next one starts with {bands[i + 1].start}",
                    index=i,
                )

    def lookup(self, missed_blocks: int) -> SeverityBand:
        """
        Find the band containing the counter.

        Raises:
            BandNotFoundError: if no band matches
        """
        for band in self._bands:
            if band.contains(missed_blocks):
                return band
        raise BandNotFoundError(missed_blocks)

    @classmethod
    def generate_default(cls, window: int) -> "SeverityBands":
        """
        Build the default ladder from percentile breakpoints of (window + 1).

        Boundaries are floored; bands left empty by a small window are
        dropped, so the result always validates against `window`.
        """
        total_range = window + 1  # from 0 till max blocks allowed, inclusive
        boundaries = [int(total_range * p / 100) for p in DEFAULT_PERCENTS]
        boundaries[-1] = total_range

        bands: List[SeverityBand] = []
        for i in range(len(DEFAULT_PERCENTS) - 1):
            start, next_start = boundaries[i], boundaries[i + 1]
            if next_start <= start:
                logger.debug(
                    f"Skipping empty default band {DEFAULT_PERCENTS[i]}%-"
                    f"{DEFAULT_PERCENTS[i + 1]}% for window {window}"
                )
                continue

            bands.append(
                SeverityBand(
                    start=start,
                    end=next_start - 1,
                    emoji_start=DEFAULT_EMOJI_START[i],
                    emoji_end=DEFAULT_EMOJI_END[i],
                    desc_start=f"is skipping blocks (> {DEFAULT_PERCENTS[i]:.1f}%)",
                    desc_end=f"is recovering (< {DEFAULT_PERCENTS[i + 1]:.1f}%)",
                )
            )

        # The lowest band is the healthy floor
        lowest = bands[0]
        bands[0] = lowest.model_copy(
            update={
                "emoji_end": DEFAULT_EMOJI_END[0],
                "desc_end": lowest.desc_end.replace("is recovering", "is recovered"),
            }
        )

        return cls(bands)
