"""Tests for resolving session and sub-agent logs."""

from pathlib import Path

import pytest

from session_locator import SessionLocator, encode_project_path
from tests.conftest import PROJECT_PATH, write_jsonl


def test_encode_project_path() -> None:
    assert encode_project_path("/home/dev/app") == "-home-dev-app"


def test_session_file_resolves_existing_log(locator: SessionLocator, scenario_file: Path) -> None:
    assert locator.session_file(PROJECT_PATH, "s1") == scenario_file


def test_session_file_missing(locator: SessionLocator, project_dir: Path) -> None:
    assert locator.session_file(PROJECT_PATH, "s1") is None
    assert locator.session_file("/other/project", "s1") is None


def test_subagent_file(locator: SessionLocator, project_dir: Path) -> None:
    agent_file = write_jsonl(project_dir / "agent-abc.jsonl", [{"content": "hi"}])
    assert locator.subagent_file(PROJECT_PATH, "abc") == agent_file
    assert locator.subagent_file(PROJECT_PATH, "zzz") is None


@pytest.mark.parametrize("log_id", ["", ".", "..", "../s1", "a/b", "a\\b"])
def test_unsafe_ids_do_not_resolve(locator: SessionLocator, scenario_file: Path, log_id: str) -> None:
    assert locator.session_file(PROJECT_PATH, log_id) is None
    assert locator.subagent_file(PROJECT_PATH, log_id) is None


def test_directory_is_not_a_log(locator: SessionLocator, project_dir: Path) -> None:
    (project_dir / "s9.jsonl").mkdir()
    assert locator.session_file(PROJECT_PATH, "s9") is None


def test_telemetry_dir_lives_in_project(locator: SessionLocator) -> None:
    assert locator.telemetry_dir("/home/dev/app") == Path("/home/dev/app/.cupcake/telemetry")
