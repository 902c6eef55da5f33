from __future__ import annotations

import json
from pathlib import Path

import pytest

from alars.domain.errors import InvalidProjectsFile, ProjectsFileNotFound
from alars.domain.models import Project, ProjectConfiguration
from alars.persistence.project_store import ProjectStore


def test_load_missing_file_raises(tmp_path: Path) -> None:
    store = ProjectStore(tmp_path / "xprojects.json")

    assert not store.exists()
    with pytest.raises(ProjectsFileNotFound):
        store.load()


def test_save_then_load(tmp_path: Path) -> None:
    store = ProjectStore(tmp_path / "nested" / "xprojects.json")
    projects = [
        Project(name="One", working_directory="/tmp/one", configuration=ProjectConfiguration(default_branch="main")),
        Project(name="Two", working_directory="two", configuration=ProjectConfiguration(default_branch="develop")),
    ]

    store.save(projects)

    assert store.load() == projects
    raw = json.loads(store.path.read_text(encoding="utf-8"))
    assert raw["projects"][1]["workingDirectory"] == "two"


@pytest.mark.parametrize(
    "content",
    [
        "{not json",
        json.dumps([]),
        json.dumps({"projects": {}}),
        json.dumps({"projects": [{"name": "NoDir"}]}),
        json.dumps({"projects": [{"name": "A", "workingDirectory": "a", "configuration": {"defaultBranch": "main", "savePreference": "zip"}}]}),
    ],
)
def test_load_rejects_malformed_files(tmp_path: Path, content: str) -> None:
    path = tmp_path / "xprojects.json"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(InvalidProjectsFile):
        ProjectStore(path).load()


def test_load_rejects_non_utf8_file(tmp_path: Path) -> None:
    path = tmp_path / "xprojects.json"
    path.write_bytes(b'{"projects": [\xff]}')

    with pytest.raises(InvalidProjectsFile):
        ProjectStore(path).load()
