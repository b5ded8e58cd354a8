"""
Time-to-jail estimation for validators that are missing blocks.
"""

from datetime import timedelta


def estimate_time_to_jail(
    current_missed: int,
    missed_blocks_to_jail: int,
    avg_block_time: float,
) -> timedelta:
    """
    Estimate how long until the validator crosses the jail threshold.

    Negative results mean the validator is already eligible for jailing.

    Args:
        current_missed: Current missed blocks counter
        missed_blocks_to_jail: Counter value at which the chain jails
        avg_block_time: Average block time in seconds

    Returns:
        Estimate truncated to whole seconds
    """
    blocks_left = missed_blocks_to_jail - current_missed
    return timedelta(seconds=int(avg_block_time * blocks_left))


def format_duration(duration: timedelta) -> str:
    """Render a duration compactly, e.g. 1h2m3s, 45s or -5m0s."""
    total = int(duration.total_seconds())
    sign = "-" if total < 0 else ""
    total = abs(total)

    hours, rest = divmod(total, 3600)
    minutes, seconds = divmod(rest, 60)

    if hours:
        return f"{sign}{hours}h{minutes}m{seconds}s"
    if minutes:
        return f"{sign}{minutes}m{seconds}s"
    return f"{sign}{seconds}s"
