import asyncio
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from loguru import logger

from lecturelog.config import settings
from lecturelog.database import init_db
from lecturelog.logging_setup import configure_logging
from lecturelog.routes import lecture, outlines, sessions
from lecturelog.services.kv_store import KeyValueStore, SqliteKeyValueStore
from lecturelog.services.session_storage import SessionStorage
from lecturelog.timer import LectureTimer


def create_app(store: KeyValueStore | None = None, db_path: str | None = None) -> FastAPI:
    """Build the API. Pass *store* to bypass SQLite (tests, throwaway runs)."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Open storage and build the lecture timer; snapshot it on shutdown."""
        configure_logging()
        kv = store
        if kv is None:
            path = db_path or settings.db_path
            await init_db(path)
            kv = SqliteKeyValueStore(path)
        app.state.store = kv
        app.state.websockets = []

        timer = LectureTimer(SessionStorage(kv))
        loop = asyncio.get_running_loop()

        def _on_timer_event(event: dict) -> None:
            """Bridge engine events onto the event loop for WebSocket broadcast."""
            asyncio.run_coroutine_threadsafe(lecture.broadcast(app, event), loop)

        timer.subscribe(_on_timer_event)
        app.state.timer = timer
        if await asyncio.to_thread(timer.has_paused_lecture):
            logger.info("A paused lecture is available to restore")

        yield

        await asyncio.to_thread(timer.dispose)

    app = FastAPI(
        title="lecturelog",
        description="Markdown outlines turned into timed lecture checklists with chapter exports",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.include_router(outlines.router)
    app.include_router(lecture.router)
    app.include_router(sessions.router)
    return app


app = create_app()


def run() -> None:
    uvicorn.run("lecturelog.main:app", host=settings.host, port=settings.port)
