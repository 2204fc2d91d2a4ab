"""
Session File Locator
Maps project paths and session / sub-agent ids to JSONL logs under
~/.claude/projects/<encoded project path>/
"""

from pathlib import Path
from typing import Optional
import logging

logger = logging.getLogger(__name__)

TELEMETRY_SUBDIR = Path('.cupcake') / 'telemetry'


def encode_project_path(project_path: str) -> str:
    """/home/me/app -> -home-me-app"""
    return project_path.replace('/', '-')


def _is_safe_id(log_id: str) -> bool:
    if not log_id or log_id in ('.', '..'):
        return False
    return '/' not in log_id and '\\' not in log_id and '..' not in log_id


class SessionLocator:
    """Resolves log identifiers to files, returning None for anything that does not exist"""

    def __init__(self, projects_dir: Path):
        self.projects_dir = Path(projects_dir)

    def project_dir(self, project_path: str) -> Path:
        return self.projects_dir / encode_project_path(project_path)

    def _existing(self, path: Path) -> Optional[Path]:
        if path.is_file():
            return path
        logger.debug(f"Log file not found: {path}")
        return None

    def session_file(self, project_path: str, session_id: str) -> Optional[Path]:
        if not project_path or not _is_safe_id(session_id):
            return None
        return self._existing(self.project_dir(project_path) / f"{session_id}.jsonl")

    def subagent_file(self, project_path: str, agent_id: str) -> Optional[Path]:
        if not project_path or not _is_safe_id(agent_id):
            return None
        return self._existing(self.project_dir(project_path) / f"agent-{agent_id}.jsonl")

    def telemetry_dir(self, project_path: str) -> Path:
        """Telemetry lives inside the project itself, not under the projects dir"""
        return Path(project_path) / TELEMETRY_SUBDIR
