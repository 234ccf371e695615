from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import PlainTextResponse

from lecturelog.dependencies import get_outline_storage, get_session_storage
from lecturelog.models import LectureSession
from lecturelog.services.export import (
    compute_total_and_edited,
    format_youtube_timestamps,
    generate_ffmpeg_trim_command,
    outline_item_titles,
)
from lecturelog.services.outline_storage import OutlineStorage
from lecturelog.services.session_storage import SessionStorage

router = APIRouter(prefix="/api", tags=["sessions"])


def _get_session_or_404(storage: SessionStorage, session_id: str) -> LectureSession:
    session = storage.get_session_by_id(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail=f"Session {session_id} not found")
    return session


@router.get("/sessions")
def list_sessions(
    outline_id: str | None = None, storage: SessionStorage = Depends(get_session_storage)
) -> list[dict]:
    if outline_id is not None:
        sessions = storage.get_sessions_for_outline(outline_id)
    else:
        sessions = storage.load_lecture_sessions()
    return [s.to_dict() for s in sessions]


@router.get("/sessions/{session_id}")
def get_session(
    session_id: str, storage: SessionStorage = Depends(get_session_storage)
) -> dict:
    session = _get_session_or_404(storage, session_id)
    return {**session.to_dict(), "durations": compute_total_and_edited(session)}


@router.get("/sessions/{session_id}/export/timestamps", response_class=PlainTextResponse)
def export_timestamps(
    session_id: str,
    storage: SessionStorage = Depends(get_session_storage),
    outlines: OutlineStorage = Depends(get_outline_storage),
) -> str:
    """YouTube-style chapter list, one ``mm:ss Title`` line per covered item."""
    session = _get_session_or_404(storage, session_id)
    titles = outline_item_titles(outlines.get_outline_by_id(session.outline_id))
    return format_youtube_timestamps(session, titles)


@router.get("/sessions/{session_id}/export/ffmpeg", response_class=PlainTextResponse)
def export_ffmpeg(
    session_id: str,
    input_file: str | None = None,
    output_file: str | None = None,
    storage: SessionStorage = Depends(get_session_storage),
) -> str:
    """Shell script cutting the paused spans out of the recording."""
    session = _get_session_or_404(storage, session_id)
    return generate_ffmpeg_trim_command(session, input_file, output_file)
