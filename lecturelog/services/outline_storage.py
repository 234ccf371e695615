from loguru import logger

from lecturelog.models import Outline
from lecturelog.services.kv_store import OUTLINES_KEY, KeyValueStore


class OutlineStorage:
    """CRUD over the ``user_outlines`` array.

    Every method swallows store failures: reads fall back to ``[]`` / ``None``
    and writes report ``False``.
    """

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    def load_outlines(self) -> list[Outline]:
        try:
            data = self.store.load(OUTLINES_KEY)
            return [Outline.from_dict(o) for o in data or []]
        except Exception as e:
            logger.error(f"Failed to load outlines from storage: {e}")
            return []

    def save_outlines(self, outlines: list[Outline]) -> bool:
        try:
            return self.store.save(OUTLINES_KEY, [o.to_dict() for o in outlines])
        except Exception as e:
            logger.error(f"Failed to save outlines to storage: {e}")
            return False

    def add_outline(self, outline: Outline) -> bool:
        outlines = self.load_outlines()
        outlines.append(outline)
        ok = self.save_outlines(outlines)
        logger.info(f"Added outline {outline.title!r} ({outline.id}); total={len(outlines)} saved={ok}")
        return ok

    def update_outline(self, updated: Outline) -> bool:
        outlines = self.load_outlines()
        for i, outline in enumerate(outlines):
            if outline.id == updated.id:
                outlines[i] = updated
                return self.save_outlines(outlines)
        logger.warning(f"Outline not found for update: {updated.id}")
        return False

    def delete_outline(self, outline_id: str) -> bool:
        outlines = self.load_outlines()
        return self.save_outlines([o for o in outlines if o.id != outline_id])

    def get_outline_by_id(self, outline_id: str) -> Outline | None:
        for outline in self.load_outlines():
            if outline.id == outline_id:
                return outline
        return None

    def clear_all_outlines(self) -> bool:
        return self.save_outlines([])
