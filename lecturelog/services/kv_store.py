import json
from typing import Any, Protocol

from loguru import logger

from lecturelog.database import get_sync_conn

OUTLINES_KEY = "user_outlines"
LECTURE_SESSIONS_KEY = "lecture_sessions"
PAUSED_LECTURE_KEY = "lecture_current_session"


class KeyValueStore(Protocol):
    """Narrow load/save-by-key contract the services depend on.

    Values are plain JSON-compatible structures (dicts, lists, scalars).
    ``load`` returns ``None`` for a missing key; ``save`` returns ``False``
    when the write did not happen.
    """

    def load(self, key: str) -> Any | None: ...

    def save(self, key: str, value: Any) -> bool: ...


class SqliteKeyValueStore:
    """JSON values in the ``kv_store`` table. ``init_db`` must have created it."""

    def __init__(self, db_path: str | None = None) -> None:
        self.db_path = db_path

    def load(self, key: str) -> Any | None:
        conn = get_sync_conn(self.db_path)
        try:
            row = conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
        finally:
            conn.close()
        if row is None:
            return None
        return json.loads(row["value"])

    def save(self, key: str, value: Any) -> bool:
        conn = get_sync_conn(self.db_path)
        try:
            conn.execute(
                """INSERT INTO kv_store (key, value, updated_at)
                   VALUES (?, ?, CURRENT_TIMESTAMP)
                   ON CONFLICT(key) DO UPDATE SET
                       value = excluded.value,
                       updated_at = excluded.updated_at""",
                (key, json.dumps(value)),
            )
            conn.commit()
        finally:
            conn.close()
        logger.debug(f"Saved key {key!r}")
        return True


class MemoryKeyValueStore:
    """Process-local store. Values are JSON round-tripped so callers never share objects."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def load(self, key: str) -> Any | None:
        raw = self._data.get(key)
        return None if raw is None else json.loads(raw)

    def save(self, key: str, value: Any) -> bool:
        self._data[key] = json.dumps(value)
        return True
