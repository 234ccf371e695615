import time

from lecturelog.models import PausedInterval


def now_ms() -> int:
    """Wall-clock time in integer epoch milliseconds."""
    return int(time.time() * 1000)


def format_time(milliseconds: int, include_hours: bool = False) -> str:
    """Render a duration as ``mm:ss`` (or ``hh:mm:ss``), flooring to whole seconds."""
    total_seconds = max(0, milliseconds) // 1000
    hours, rest = divmod(total_seconds, 3600)
    minutes, seconds = divmod(rest, 60)
    if include_hours or hours > 0:
        return f"{hours:02d}:{minutes:02d}:{seconds:02d}"
    return f"{minutes:02d}:{seconds:02d}"


def last_open_interval(intervals: list[PausedInterval]) -> PausedInterval | None:
    """The trailing interval if it is still open, else None."""
    if intervals and intervals[-1].is_open:
        return intervals[-1]
    return None


def close_interval(interval: PausedInterval, now: int) -> int:
    """Close *interval* at *now* and return the paused duration it adds."""
    interval.end = now
    return now - interval.start
