from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable, List

from ..domain.errors import InvalidProjectsFile, ProjectsFileNotFound
from ..domain.models import Project


class ProjectStore:
    """
    Reads and writes the ``xprojects.json`` file.

    The file is a user artifact; the engine never writes to it on its own.
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def exists(self) -> bool:
        return self.path.is_file()

    def load(self) -> List[Project]:
        if not self.exists():
            raise ProjectsFileNotFound(str(self.path))

        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise InvalidProjectsFile(str(self.path), str(exc)) from exc

        if not isinstance(raw, dict) or not isinstance(raw.get("projects"), list):
            raise InvalidProjectsFile(str(self.path), "expected an object with a 'projects' list")

        try:
            return [Project.from_dict(item) for item in raw["projects"]]
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise InvalidProjectsFile(str(self.path), f"{type(exc).__name__}: {exc}") from exc

    def save(self, projects: Iterable[Project]) -> None:
        payload = {"projects": [project.to_dict() for project in projects]}
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(payload, indent=2, sort_keys=True) + "\n", encoding="utf-8")
