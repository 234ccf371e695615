"""Persisted shapes: outlines, lecture sessions and the paused-session snapshot.

All timestamps are integer epoch milliseconds. ``to_dict`` produces the JSON
stored under the key-value store keys; ``from_dict`` tolerates missing
optional fields.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class OutlineItem:
    id: str
    title: str  # nesting prefix ("  " per depth) baked in
    notes: str | None = None
    covered_at: int | None = None
    depth: int = 0

    @property
    def plain_title(self) -> str:
        return self.title.lstrip(" ")

    def to_dict(self) -> dict:
        d: dict = {"id": self.id, "title": self.title, "depth": self.depth}
        if self.notes:
            d["notes"] = self.notes
        if self.covered_at is not None:
            d["covered_at"] = self.covered_at
        return d

    @classmethod
    def from_dict(cls, data: dict) -> OutlineItem:
        title = data["title"]
        depth = data.get("depth")
        if depth is None:
            # Older records only carry the prefix
            depth = (len(title) - len(title.lstrip(" "))) // 2
        return cls(
            id=data["id"],
            title=title,
            notes=data.get("notes"),
            covered_at=data.get("covered_at"),
            depth=depth,
        )


@dataclass
class Outline:
    id: str
    title: str
    items: list[OutlineItem] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"id": self.id, "title": self.title, "items": [i.to_dict() for i in self.items]}

    @classmethod
    def from_dict(cls, data: dict) -> Outline:
        return cls(
            id=data["id"],
            title=data["title"],
            items=[OutlineItem.from_dict(i) for i in data.get("items", [])],
        )


@dataclass
class PausedInterval:
    start: int
    end: int = 0  # 0 = still open

    @property
    def is_open(self) -> bool:
        return self.end == 0

    def to_dict(self) -> dict:
        return {"start": self.start, "end": self.end}

    @classmethod
    def from_dict(cls, data: dict) -> PausedInterval:
        return cls(start=data["start"], end=data.get("end", 0))


@dataclass
class ItemTimestamp:
    item_id: str
    timestamp: int

    def to_dict(self) -> dict:
        return {"item_id": self.item_id, "timestamp": self.timestamp}

    @classmethod
    def from_dict(cls, data: dict) -> ItemTimestamp:
        return cls(item_id=data["item_id"], timestamp=data["timestamp"])


@dataclass
class LectureSession:
    id: str
    outline_id: str
    started_at: int
    paused_intervals: list[PausedInterval] = field(default_factory=list)
    item_timestamps: list[ItemTimestamp] = field(default_factory=list)
    completed_at: int | None = None

    def copy(self) -> LectureSession:
        """Value copy; mutating the result never touches this session."""
        return LectureSession.from_dict(self.to_dict())

    def to_dict(self) -> dict:
        d = {
            "id": self.id,
            "outline_id": self.outline_id,
            "started_at": self.started_at,
            "paused_intervals": [p.to_dict() for p in self.paused_intervals],
            "item_timestamps": [t.to_dict() for t in self.item_timestamps],
        }
        if self.completed_at is not None:
            d["completed_at"] = self.completed_at
        return d

    @classmethod
    def from_dict(cls, data: dict) -> LectureSession:
        return cls(
            id=data["id"],
            outline_id=data["outline_id"],
            started_at=data["started_at"],
            paused_intervals=[PausedInterval.from_dict(p) for p in data.get("paused_intervals", [])],
            item_timestamps=[ItemTimestamp.from_dict(t) for t in data.get("item_timestamps", [])],
            completed_at=data.get("completed_at"),
        )


@dataclass
class TimerState:
    is_running: bool = False
    start_time: int | None = None
    paused_time: int = 0
    paused_intervals: list[PausedInterval] = field(default_factory=list)

    def copy(self) -> TimerState:
        return TimerState.from_dict(self.to_dict())

    def to_dict(self) -> dict:
        return {
            "is_running": self.is_running,
            "start_time": self.start_time,
            "paused_time": self.paused_time,
            "paused_intervals": [p.to_dict() for p in self.paused_intervals],
        }

    @classmethod
    def from_dict(cls, data: dict) -> TimerState:
        return cls(
            is_running=data.get("is_running", False),
            start_time=data.get("start_time"),
            paused_time=data.get("paused_time", 0),
            paused_intervals=[PausedInterval.from_dict(p) for p in data.get("paused_intervals", [])],
        )


@dataclass
class PausedLectureState:
    session: LectureSession
    timer: TimerState
    checked_item_ids: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "session": self.session.to_dict(),
            "timer": self.timer.to_dict(),
            "checked_item_ids": list(self.checked_item_ids),
        }

    @classmethod
    def from_dict(cls, data: dict) -> PausedLectureState:
        return cls(
            session=LectureSession.from_dict(data["session"]),
            timer=TimerState.from_dict(data["timer"]),
            checked_item_ids=list(data.get("checked_item_ids", [])),
        )
