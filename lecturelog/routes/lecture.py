import threading

from fastapi import APIRouter, Depends, FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from pydantic import BaseModel

from lecturelog.dependencies import get_outline_storage, get_timer
from lecturelog.services.outline_storage import OutlineStorage
from lecturelog.timer import LectureTimer, format_time

router = APIRouter(tags=["lecture"])


class LectureStart(BaseModel):
    outline_id: str


def _snapshot(timer: LectureTimer) -> dict:
    session = timer.get_current_session()
    elapsed = timer.get_elapsed_time()
    return {
        "status": timer.status,
        "elapsed_ms": elapsed,
        "elapsed": format_time(elapsed),
        "session": session.to_dict() if session else None,
        "checked_item_ids": timer.get_checked_item_ids(),
        "timer": timer.get_timer_state().to_dict(),
    }


def _require_active(timer: LectureTimer) -> None:
    if timer.status == "idle":
        raise HTTPException(status_code=400, detail="No active lecture.")


# ==================================================================
# REST endpoints
# ==================================================================
# Sync handlers: the store does blocking sqlite3 I/O, so these run in
# FastAPI's threadpool. _timer_lock serializes timer access across workers.

_timer_lock = threading.Lock()


@router.get("/api/lecture/state")
def lecture_state(timer: LectureTimer = Depends(get_timer)) -> dict:
    with _timer_lock:
        state = _snapshot(timer)
        state["has_paused_snapshot"] = timer.has_paused_lecture()
    return state


@router.post("/api/lecture/start")
def start_lecture(
    body: LectureStart,
    timer: LectureTimer = Depends(get_timer),
    outlines: OutlineStorage = Depends(get_outline_storage),
) -> dict:
    outline = outlines.get_outline_by_id(body.outline_id)
    with _timer_lock:
        if timer.status != "idle":
            raise HTTPException(status_code=409, detail="A lecture is already active. Stop it first.")
        if outline is None:
            raise HTTPException(status_code=404, detail=f"Outline {body.outline_id} not found")
        timer.start_lecture(outline)
        return _snapshot(timer)


@router.post("/api/lecture/pause")
def pause_lecture(timer: LectureTimer = Depends(get_timer)) -> dict:
    with _timer_lock:
        _require_active(timer)
        timer.pause_lecture()
        return _snapshot(timer)


@router.post("/api/lecture/resume")
def resume_lecture(timer: LectureTimer = Depends(get_timer)) -> dict:
    with _timer_lock:
        _require_active(timer)
        timer.resume_lecture()
        return _snapshot(timer)


@router.post("/api/lecture/stop")
def stop_lecture(timer: LectureTimer = Depends(get_timer)) -> dict:
    with _timer_lock:
        _require_active(timer)
        session = timer.stop_lecture()
        return {"status": timer.status, "session": session.to_dict()}


@router.post("/api/lecture/items/{item_id}/cover")
def cover_item(item_id: str, timer: LectureTimer = Depends(get_timer)) -> dict:
    with _timer_lock:
        _require_active(timer)
        timer.log_item_covered(item_id)
        return _snapshot(timer)


@router.delete("/api/lecture/items/{item_id}/cover")
def uncover_item(item_id: str, timer: LectureTimer = Depends(get_timer)) -> dict:
    with _timer_lock:
        _require_active(timer)
        timer.remove_item_timestamp(item_id)
        return _snapshot(timer)


@router.post("/api/lecture/restore")
def restore_lecture(timer: LectureTimer = Depends(get_timer)) -> dict:
    with _timer_lock:
        if timer.status != "idle":
            raise HTTPException(status_code=409, detail="A lecture is already active.")
        if not timer.restore_paused_lecture():
            raise HTTPException(status_code=404, detail="No paused lecture to restore.")
        return _snapshot(timer)


@router.delete("/api/lecture/paused")
def clear_paused_lecture(timer: LectureTimer = Depends(get_timer)) -> dict:
    with _timer_lock:
        return {"cleared": timer.clear_paused_lecture()}


# ==================================================================
# WebSocket endpoint
# ==================================================================


@router.websocket("/ws/lecture")
async def lecture_websocket(websocket: WebSocket) -> None:
    """Live timer events; the current state is sent on connect."""
    await websocket.accept()
    clients: list[WebSocket] = websocket.app.state.websockets
    clients.append(websocket)

    timer: LectureTimer = websocket.app.state.timer
    await websocket.send_json({"type": "timer_state", "event": "snapshot", **_snapshot(timer)})

    try:
        while True:
            await websocket.receive_text()  # keep-alive; client sends pings
    except WebSocketDisconnect:
        if websocket in clients:
            clients.remove(websocket)


async def broadcast(app: FastAPI, message: dict) -> None:
    """Send a JSON message to every connected WebSocket client."""
    for ws in list(app.state.websockets):
        try:
            await ws.send_json(message)
        except Exception:
            # client went away between receive and send
            if ws in app.state.websockets:
                app.state.websockets.remove(ws)
