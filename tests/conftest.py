"""Pytest configuration and fixtures for session lens.

Session logs are written into a temporary projects directory laid out the
same way as ~/.claude/projects.
"""

import json
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from config import Settings
from main import create_app
from session_locator import SessionLocator, encode_project_path

PROJECT_PATH = "/home/dev/app"

SCENARIO_EVENTS = [
    {"content": "all good"},
    {"content": "an error occurred"},
    {"content": "warning: low disk"},
]


def write_jsonl(path: Path, events) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        for event in events:
            f.write(json.dumps(event, ensure_ascii=False) + "\n")
    return path


@pytest.fixture
def projects_dir(tmp_path: Path) -> Path:
    path = tmp_path / "projects"
    path.mkdir()
    return path


@pytest.fixture
def locator(projects_dir: Path) -> SessionLocator:
    return SessionLocator(projects_dir)


@pytest.fixture
def project_dir(projects_dir: Path) -> Path:
    path = projects_dir / encode_project_path(PROJECT_PATH)
    path.mkdir()
    return path


@pytest.fixture
def scenario_file(project_dir: Path) -> Path:
    """Session "s1" with one clean line, one error and one warning."""
    return write_jsonl(project_dir / "s1.jsonl", SCENARIO_EVENTS)


@pytest.fixture
def settings(tmp_path: Path, projects_dir: Path) -> Settings:
    return Settings(
        claude_dir=tmp_path,
        projects_dir=projects_dir,
        watch_debounce_ms=50,
        telemetry_debounce_ms=50,
    )


@pytest.fixture
def client(settings: Settings):
    """HTTP client with the app lifespan running."""
    with TestClient(create_app(settings)) as test_client:
        yield test_client
