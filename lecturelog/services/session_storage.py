from loguru import logger

from lecturelog.models import LectureSession, PausedLectureState
from lecturelog.services.kv_store import LECTURE_SESSIONS_KEY, PAUSED_LECTURE_KEY, KeyValueStore


class SessionStorage:
    """Completed lecture sessions plus the single paused-lecture snapshot slot."""

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    # ------------------------------------------------------------------
    # Completed sessions
    # ------------------------------------------------------------------

    def load_lecture_sessions(self) -> list[LectureSession]:
        try:
            data = self.store.load(LECTURE_SESSIONS_KEY)
            return [LectureSession.from_dict(s) for s in data or []]
        except Exception as e:
            logger.error(f"Failed to load lecture sessions: {e}")
            return []

    def save_lecture_sessions(self, sessions: list[LectureSession]) -> bool:
        try:
            return self.store.save(LECTURE_SESSIONS_KEY, [s.to_dict() for s in sessions])
        except Exception as e:
            logger.error(f"Failed to save lecture sessions: {e}")
            return False

    def add_lecture_session(self, session: LectureSession) -> bool:
        sessions = self.load_lecture_sessions()
        sessions.append(session)
        return self.save_lecture_sessions(sessions)

    def get_sessions_for_outline(self, outline_id: str) -> list[LectureSession]:
        return [s for s in self.load_lecture_sessions() if s.outline_id == outline_id]

    def get_session_by_id(self, session_id: str) -> LectureSession | None:
        for session in self.load_lecture_sessions():
            if session.id == session_id:
                return session
        return None

    # ------------------------------------------------------------------
    # Paused snapshot
    # ------------------------------------------------------------------

    def save_paused_lecture_state(self, state: PausedLectureState) -> bool:
        try:
            return self.store.save(PAUSED_LECTURE_KEY, state.to_dict())
        except Exception as e:
            logger.error(f"Failed to save paused lecture state: {e}")
            return False

    def load_paused_lecture_state(self) -> PausedLectureState | None:
        try:
            data = self.store.load(PAUSED_LECTURE_KEY)
            return PausedLectureState.from_dict(data) if data else None
        except Exception as e:
            logger.error(f"Failed to load paused lecture state: {e}")
            return None

    def clear_paused_lecture_state(self) -> bool:
        try:
            return self.store.save(PAUSED_LECTURE_KEY, None)
        except Exception as e:
            logger.error(f"Failed to clear paused lecture state: {e}")
            return False
