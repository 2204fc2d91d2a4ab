#!/usr/bin/env python3
"""
Session Lens Backend
Boolean search over AI coding-assistant session logs, event loading by
byte offset, and live change notifications for watched logs
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import Settings
from live_updates.broadcaster import EventBroadcaster
from live_updates.router import watch_router
from log_viewer.router import log_router
from session_locator import SessionLocator
from session_search.router import search_router
from session_search.search_engine import SessionSearchEngine
from watcher_registry import WatcherRegistry

VERSION = "1.0.0"

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        locator = SessionLocator(settings.get_projects_dir())
        broadcaster = EventBroadcaster()
        watchers = WatcherRegistry(
            locator,
            broadcaster.broadcast,
            session_debounce_ms=settings.watch_debounce_ms,
            telemetry_debounce_ms=settings.telemetry_debounce_ms,
            force_polling=settings.watch_force_polling,
        )

        app.state.settings = settings
        app.state.locator = locator
        app.state.broadcaster = broadcaster
        app.state.watchers = watchers
        app.state.search_engine = SessionSearchEngine(
            locator,
            context_chars=settings.snippet_context_chars,
            default_max_results=settings.search_max_results,
        )
        logger.info(f"Serving session logs from {locator.projects_dir}")

        yield

        await watchers.close()
        logger.info("Shutdown complete")

    app = FastAPI(title="Session Lens", version=VERSION, lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE"],
        allow_headers=["Content-Type", "Authorization"],
    )

    app.include_router(search_router)
    app.include_router(log_router)
    app.include_router(watch_router)

    @app.get("/health")
    async def health_check():
        return {
            "status": "healthy",
            "version": VERSION,
            "projects_dir": str(settings.get_projects_dir()),
            "watchers": len(app.state.watchers.active_keys()),
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = Settings.from_env()
    logging.basicConfig(level=settings.log_level)

    print("🚀 Starting Session Lens")
    print(f"📂 API at http://{settings.host}:{settings.port}")

    uvicorn.run(app, host=settings.host, port=settings.port)
