import uuid
from typing import Callable

from loguru import logger

from lecturelog.models import (
    ItemTimestamp,
    LectureSession,
    Outline,
    PausedInterval,
    PausedLectureState,
    TimerState,
)
from lecturelog.services.session_storage import SessionStorage
from lecturelog.timer.events import EventChannel, Subscriber
from lecturelog.timer.time_utils import close_interval, last_open_interval, now_ms


class LectureTimer:
    """Timing state machine for one lecture recording at a time.

    States::

        idle --start--> running <--pause/resume--> paused --stop--> idle

    Every transition checks the current state first, so a repeated or
    out-of-order call (double-tapped pause, stop with nothing running) is a
    silent no-op. All calls are synchronous; there is no internal locking,
    callers are expected to drive the timer from one thread.

    Persistence goes through ``SessionStorage``, which never raises. While a
    lecture is in flight the paused snapshot is rewritten after every pause,
    resume and item change so the session survives a process restart.

    State changes are published on ``events`` as dicts::

        {"type": "timer_state", "event": "paused", "status": "paused",
         "session_id": str | None, "state": {...TimerState...}}
    """

    def __init__(self, storage: SessionStorage, clock: Callable[[], int] = now_ms) -> None:
        self.storage = storage
        self.clock = clock
        self.events = EventChannel()
        self._session: LectureSession | None = None
        self._timer = TimerState()
        self._checked: list[str] = []

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def status(self) -> str:
        if self._session is None:
            return "idle"
        return "running" if self._timer.is_running else "paused"

    def get_timer_state(self) -> TimerState:
        return self._timer.copy()

    def get_current_session(self) -> LectureSession | None:
        return self._session.copy() if self._session else None

    def get_checked_item_ids(self) -> list[str]:
        return list(self._checked)

    def get_elapsed_time(self) -> int:
        """Milliseconds since start, net of all paused time including an open pause."""
        if self._session is None or self._timer.start_time is None:
            return 0
        now = self.clock()
        paused = self._timer.paused_time
        if not self._timer.is_running:
            open_interval = last_open_interval(self._timer.paused_intervals)
            if open_interval:
                paused += now - open_interval.start
        return now - self._timer.start_time - paused

    def subscribe(self, fn: Subscriber) -> Callable[[], None]:
        return self.events.subscribe(fn)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def start_lecture(self, outline: Outline) -> LectureSession:
        """Begin a new session for *outline*. Replaces any session already in memory."""
        now = self.clock()
        if self._session is not None:
            logger.warning(f"Starting a new lecture over active session {self._session.id}")

        self._session = LectureSession(
            id=f"session_{uuid.uuid4().hex[:12]}",
            outline_id=outline.id,
            started_at=now,
        )
        self._timer = TimerState(is_running=True, start_time=now)
        self._checked = []

        # A fresh start makes any stale resume data meaningless
        self.storage.clear_paused_lecture_state()

        logger.info(f"Lecture started: session={self._session.id} outline={outline.id}")
        self._publish("started")
        return self._session.copy()

    def pause_lecture(self) -> None:
        if self._session is None or not self._timer.is_running:
            return
        self._pause_at(self.clock())
        self._persist_snapshot()
        logger.info(f"Lecture paused: session={self._session.id}")
        self._publish("paused")

    def resume_lecture(self) -> None:
        if self._session is None or self._timer.is_running:
            return
        now = self.clock()
        self._timer.is_running = True
        open_interval = last_open_interval(self._timer.paused_intervals)
        if open_interval:
            self._timer.paused_time += close_interval(open_interval, now)

        self._persist_snapshot()
        logger.info(f"Lecture resumed: session={self._session.id}")
        self._publish("resumed")

    def stop_lecture(self) -> LectureSession | None:
        """Finish the session, hand it to storage and return a detached copy."""
        if self._session is None:
            return None

        now = self.clock()
        if self._timer.is_running:
            self._pause_at(now)

        kept: list[PausedInterval] = []
        for interval in self._timer.paused_intervals:
            if interval.is_open:
                if interval.start == now:
                    # Opened by this stop; it holds no paused time
                    continue
                self._timer.paused_time += close_interval(interval, now)
            kept.append(interval)
        self._timer.paused_intervals = kept

        self._session.completed_at = now
        self._session.paused_intervals = [
            PausedInterval(start=p.start, end=p.end) for p in self._timer.paused_intervals
        ]
        completed = self._session.copy()

        for entry in completed.item_timestamps:
            logger.debug(f"  item={entry.item_id} timestamp={entry.timestamp}")
        if not self.storage.add_lecture_session(completed):
            logger.error(f"Completed session {completed.id} was not persisted")
        self.storage.clear_paused_lecture_state()

        self._session = None
        self._timer = TimerState()
        self._checked = []

        logger.info(f"Lecture stopped: session={completed.id} items={len(completed.item_timestamps)}")
        self._publish("stopped", session_id=completed.id)
        return completed

    # ------------------------------------------------------------------
    # Item coverage
    # ------------------------------------------------------------------

    def log_item_covered(self, item_id: str) -> None:
        if self._session is None:
            return
        timestamp = self.clock()
        self._session.item_timestamps = [
            t for t in self._session.item_timestamps if t.item_id != item_id
        ]
        self._session.item_timestamps.append(ItemTimestamp(item_id=item_id, timestamp=timestamp))
        if item_id not in self._checked:
            self._checked.append(item_id)

        self._persist_snapshot()
        self._publish("item_covered", item_id=item_id)

    def remove_item_timestamp(self, item_id: str) -> None:
        if self._session is None:
            return
        self._session.item_timestamps = [
            t for t in self._session.item_timestamps if t.item_id != item_id
        ]
        if item_id in self._checked:
            self._checked.remove(item_id)

        self._persist_snapshot()
        self._publish("item_uncovered", item_id=item_id)

    # ------------------------------------------------------------------
    # Paused snapshot
    # ------------------------------------------------------------------

    def restore_paused_lecture(self) -> bool:
        """Adopt the persisted snapshot. Only possible while idle."""
        if self._session is not None:
            return False
        snapshot = self.storage.load_paused_lecture_state()
        if snapshot is None:
            return False

        self._session = snapshot.session
        self._timer = snapshot.timer
        self._checked = list(snapshot.checked_item_ids)

        if self._timer.is_running:
            # Died while running: paused from now on, the downtime stays on the clock
            self._pause_at(self.clock())
            self._persist_snapshot()

        logger.info(f"Lecture restored: session={self._session.id} checked={len(self._checked)}")
        self._publish("restored")
        return True

    def has_paused_lecture(self) -> bool:
        return self.storage.load_paused_lecture_state() is not None

    def clear_paused_lecture(self) -> bool:
        return self.storage.clear_paused_lecture_state()

    def dispose(self) -> None:
        """Snapshot any in-flight session, then drop in-memory state and subscribers."""
        if self._session is not None:
            self._persist_snapshot()
        self._session = None
        self._timer = TimerState()
        self._checked = []
        self.events.clear()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _pause_at(self, now: int) -> None:
        self._timer.is_running = False
        self._timer.paused_intervals.append(PausedInterval(start=now))
        # Own copy on the session so the open pause is on record even if we die now
        self._session.paused_intervals.append(PausedInterval(start=now))

    def _persist_snapshot(self) -> None:
        if self._session is None:
            return
        state = PausedLectureState(
            session=self._session.copy(),
            timer=self._timer.copy(),
            checked_item_ids=list(self._checked),
        )
        if not self.storage.save_paused_lecture_state(state):
            logger.warning(f"Paused snapshot not persisted for session {self._session.id}")

    def _publish(self, event: str, **extra) -> None:
        payload = {
            "type": "timer_state",
            "event": event,
            "status": self.status,
            "session_id": self._session.id if self._session else None,
            "state": self._timer.to_dict(),
        }
        payload.update(extra)
        self.events.publish(payload)
