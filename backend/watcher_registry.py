"""
Watcher Registry for real-time session updates
Watches session / sub-agent JSONL files and project telemetry directories,
emitting one debounced change event per batch of filesystem changes
"""

import asyncio
import logging
import threading
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, List, Optional

from watchfiles import awatch

from session_locator import SessionLocator

logger = logging.getLogger(__name__)

SESSION_CHANGED = 'session-changed'
SUBAGENT_CHANGED = 'subagent-changed'
TELEMETRY_CHANGED = 'telemetry-changed'

EmitCallback = Callable[[str, Dict[str, Any]], Awaitable[None]]


class WatchError(Exception):
    """A watcher could not be started"""


def _only_json(change, path: str) -> bool:
    return path.endswith('.json')


class WatcherRegistry:
    """
    Map of "project_path:session_id" style keys -> running watch task

    Starting a key that is already watched and stopping one that is not are
    both no-ops. Created at application startup, closed at shutdown.
    """

    def __init__(self, locator: SessionLocator, emit: EmitCallback,
                 session_debounce_ms: int = 500, telemetry_debounce_ms: int = 300,
                 force_polling: bool = False, poll_delay_ms: int = 300):
        self.locator = locator
        self._emit = emit
        self.session_debounce_ms = session_debounce_ms
        self.telemetry_debounce_ms = telemetry_debounce_ms
        self.force_polling = force_polling
        self.poll_delay_ms = poll_delay_ms
        self._lock = threading.Lock()
        self._watchers: Dict[str, asyncio.Task] = {}

    @staticmethod
    def session_key(project_path: str, session_id: str) -> str:
        return f"{project_path}:{session_id}"

    @staticmethod
    def subagent_key(project_path: str, agent_id: str) -> str:
        return f"{project_path}:agent:{agent_id}"

    @staticmethod
    def telemetry_key(project_path: str) -> str:
        return f"{project_path}:telemetry"

    def active_keys(self) -> List[str]:
        with self._lock:
            return sorted(self._watchers)

    def is_watching(self, key: str) -> bool:
        with self._lock:
            return key in self._watchers

    def watch_session(self, project_path: str, session_id: str) -> None:
        """Start watching a session file for changes"""
        key = self.session_key(project_path, session_id)
        if self.is_watching(key):
            return

        session_file = self.locator.session_file(project_path, session_id)
        if session_file is None:
            raise WatchError(f"Session file not found for {session_id}")

        payload = {'projectPath': project_path, 'sessionId': session_id}
        self._start(key, session_file, SESSION_CHANGED, payload, self.session_debounce_ms)

    def watch_subagent(self, project_path: str, agent_id: str) -> None:
        """Start watching a sub-agent file for changes"""
        key = self.subagent_key(project_path, agent_id)
        if self.is_watching(key):
            return

        agent_file = self.locator.subagent_file(project_path, agent_id)
        if agent_file is None:
            raise WatchError(f"Sub-agent file not found for {agent_id}")

        payload = {'projectPath': project_path, 'agentId': agent_id}
        self._start(key, agent_file, SUBAGENT_CHANGED, payload, self.session_debounce_ms)

    def watch_telemetry(self, project_path: str) -> None:
        """Start watching a project's telemetry directory, creating it so it can be watched"""
        key = self.telemetry_key(project_path)
        if self.is_watching(key):
            return

        telemetry_dir = self.locator.telemetry_dir(project_path)
        try:
            telemetry_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise WatchError(f"Failed to create telemetry dir: {e}") from e

        payload = {'projectPath': project_path}
        self._start(key, telemetry_dir, TELEMETRY_CHANGED, payload,
                    self.telemetry_debounce_ms, watch_filter=_only_json)

    def unwatch_session(self, project_path: str, session_id: str) -> None:
        self._stop(self.session_key(project_path, session_id))

    def unwatch_subagent(self, project_path: str, agent_id: str) -> None:
        self._stop(self.subagent_key(project_path, agent_id))

    def unwatch_telemetry(self, project_path: str) -> None:
        self._stop(self.telemetry_key(project_path))

    async def close(self) -> None:
        """Stop every watcher and wait for the tasks to finish"""
        with self._lock:
            tasks = list(self._watchers.values())
            self._watchers.clear()
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        logger.info(f"Stopped {len(tasks)} watchers")

    def _start(self, key: str, path: Path, event: str, payload: Dict[str, Any],
               debounce_ms: int, watch_filter: Optional[Callable] = None) -> None:
        with self._lock:
            # Another caller may have won the race since the first check
            if key in self._watchers:
                return
            self._watchers[key] = asyncio.get_running_loop().create_task(
                self._watch_loop(key, path, event, payload, debounce_ms, watch_filter),
                name=f"watch:{key}",
            )
        logger.info(f"Watching {path} ({key})")

    def _stop(self, key: str) -> None:
        with self._lock:
            task = self._watchers.pop(key, None)
        if task is not None:
            task.cancel()
            logger.info(f"Stopped watching {key}")

    async def _watch_loop(self, key: str, path: Path, event: str, payload: Dict[str, Any],
                          debounce_ms: int, watch_filter: Optional[Callable]) -> None:
        kwargs = {}
        if watch_filter is not None:
            kwargs['watch_filter'] = watch_filter
        try:
            async for changes in awatch(
                path,
                debounce=debounce_ms,
                recursive=False,
                force_polling=self.force_polling,
                poll_delay_ms=self.poll_delay_ms,
                **kwargs,
            ):
                # Only emit once per batch
                logger.debug(f"{key}: {len(changes)} changes")
                await self._emit(event, dict(payload))
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Watcher for {key} failed: {e}")
        finally:
            with self._lock:
                if self._watchers.get(key) is asyncio.current_task():
                    del self._watchers[key]
