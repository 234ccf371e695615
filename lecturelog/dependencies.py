from fastapi import Request

from lecturelog.services.outline_storage import OutlineStorage
from lecturelog.services.session_storage import SessionStorage
from lecturelog.timer import LectureTimer


def get_outline_storage(request: Request) -> OutlineStorage:
    return OutlineStorage(request.app.state.store)


def get_session_storage(request: Request) -> SessionStorage:
    return SessionStorage(request.app.state.store)


def get_timer(request: Request) -> LectureTimer:
    return request.app.state.timer
