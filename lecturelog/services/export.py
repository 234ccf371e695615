"""Timecode list and ffmpeg trim script derived from a finished session."""

from lecturelog.config import settings
from lecturelog.models import LectureSession, Outline
from lecturelog.timer.time_utils import format_time, now_ms


def format_duration(milliseconds: int) -> str:
    return format_time(milliseconds)


def outline_item_titles(outline: Outline | None) -> dict[str, str]:
    """item id -> title with the nesting prefix removed."""
    if outline is None:
        return {}
    return {item.id: item.plain_title for item in outline.items}


def compute_paused_before(session: LectureSession, timestamp: int) -> int:
    """Paused milliseconds that elapsed before *timestamp*.

    An interval still open (``end == 0``) counts up to *timestamp*.
    """
    total = 0
    for p in session.paused_intervals:
        if p.start >= timestamp:
            continue
        end = min(p.end or timestamp, timestamp)
        total += max(0, end - p.start)
    return total


def format_youtube_timestamps(session: LectureSession, item_titles: dict[str, str] | None = None) -> str:
    """One ``mm:ss Title`` line per covered item, offsets net of pauses."""
    item_titles = item_titles or {}
    lines = []
    for entry in session.item_timestamps:
        offset = entry.timestamp - session.started_at - compute_paused_before(session, entry.timestamp)
        lines.append(f"{format_duration(offset)} {item_titles.get(entry.item_id, 'Item')}")
    return "\n".join(lines)


def compute_active_segments(session: LectureSession, now: int | None = None) -> list[tuple[int, int]]:
    """Absolute ``(start, end)`` spans during which the lecture was not paused."""
    start = session.started_at
    end = session.completed_at or (now if now is not None else now_ms())
    segments: list[tuple[int, int]] = []
    cursor = start
    for p in session.paused_intervals:
        if p.start > cursor:
            segments.append((cursor, p.start))
        cursor = max(cursor, p.end or p.start)
    if cursor < end:
        segments.append((cursor, end))
    return segments


def generate_ffmpeg_trim_command(
    session: LectureSession,
    input_file: str | None = None,
    output_file: str | None = None,
    now: int | None = None,
) -> str:
    input_file = input_file or settings.export_input_file
    output_file = output_file or settings.export_output_file
    cmds = []
    for i, (s, e) in enumerate(compute_active_segments(session, now)):
        s_sec = (s - session.started_at) / 1000
        e_sec = (e - session.started_at) / 1000
        cmds.append(f"ffmpeg -i {input_file} -ss {s_sec:.3f} -to {e_sec:.3f} -c copy part{i}.mp4")
    return "\n".join(cmds) + f"\n# Then concat parts into {output_file}"


def compute_total_and_edited(session: LectureSession, now: int | None = None) -> dict:
    """Wall-clock length and length net of closed pauses, in milliseconds."""
    end = session.completed_at or (now if now is not None else now_ms())
    total = end - session.started_at
    paused = sum(p.end - p.start for p in session.paused_intervals if p.end)
    return {"total": total, "edited": total - paused}
