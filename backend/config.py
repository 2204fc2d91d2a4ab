"""
Settings loaded from LENS_* environment variables
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

TRUTHY = ('true', '1', 'yes')


@dataclass
class Settings:
    claude_dir: Path = field(default_factory=lambda: Path.home() / '.claude')
    projects_dir: Optional[Path] = None
    host: str = '127.0.0.1'
    port: int = 8000
    cors_origins: List[str] = field(default_factory=lambda: ['http://localhost:3000'])
    log_level: str = 'INFO'
    search_max_results: int = 10000
    snippet_context_chars: int = 60
    watch_debounce_ms: int = 500
    telemetry_debounce_ms: int = 300
    watch_force_polling: bool = False

    @staticmethod
    def from_env() -> 'Settings':
        s = Settings()
        if v := os.getenv('LENS_CLAUDE_DIR'):
            s.claude_dir = Path(v).expanduser()
        if v := os.getenv('LENS_PROJECTS_DIR'):
            s.projects_dir = Path(v).expanduser()
        if v := os.getenv('LENS_HOST'):
            s.host = v
        if v := os.getenv('LENS_PORT'):
            s.port = int(v)
        if v := os.getenv('LENS_CORS_ORIGINS'):
            s.cors_origins = [o.strip() for o in v.split(',') if o.strip()]
        if v := os.getenv('LENS_LOG_LEVEL'):
            s.log_level = v.upper()
        if v := os.getenv('LENS_SEARCH_MAX_RESULTS'):
            s.search_max_results = int(v)
        if v := os.getenv('LENS_SNIPPET_CONTEXT_CHARS'):
            s.snippet_context_chars = int(v)
        if v := os.getenv('LENS_WATCH_DEBOUNCE_MS'):
            s.watch_debounce_ms = int(v)
        if v := os.getenv('LENS_TELEMETRY_DEBOUNCE_MS'):
            s.telemetry_debounce_ms = int(v)
        if v := os.getenv('LENS_WATCH_FORCE_POLLING'):
            s.watch_force_polling = v.lower() in TRUTHY
        return s

    def get_projects_dir(self) -> Path:
        if self.projects_dir:
            return self.projects_dir
        return self.claude_dir / 'projects'
