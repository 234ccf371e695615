import pytest
from fastapi.testclient import TestClient

from lecturelog.main import create_app
from lecturelog.models import Outline, OutlineItem
from lecturelog.services.kv_store import MemoryKeyValueStore
from lecturelog.services.outline_storage import OutlineStorage
from lecturelog.services.session_storage import SessionStorage
from lecturelog.timer import LectureTimer


class FakeClock:
    """Settable millisecond clock."""

    def __init__(self, start: int = 1_700_000_000_000) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> int:
        self.now += ms
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture
def session_storage(store) -> SessionStorage:
    return SessionStorage(store)


@pytest.fixture
def outline_storage(store) -> OutlineStorage:
    return OutlineStorage(store)


@pytest.fixture
def timer(session_storage, clock) -> LectureTimer:
    t = LectureTimer(session_storage, clock=clock)
    yield t
    t.dispose()


@pytest.fixture
def outline() -> Outline:
    return Outline(
        id="outline1",
        title="Test",
        items=[
            OutlineItem(id="i1", title="Item 1"),
            OutlineItem(id="i2", title="  Item 1.1", depth=1),
            OutlineItem(id="i3", title="Item 2"),
        ],
    )


@pytest.fixture
def client(store):
    with TestClient(create_app(store=store)) as c:
        yield c
