from __future__ import annotations

from typing import Optional, Sequence


class AlarsError(RuntimeError):
    """Base class for every failure the engine distinguishes."""


class ProjectsFileNotFound(AlarsError):
    def __init__(self, path: str) -> None:
        super().__init__(f"Projects file not found: {path}")
        self.path = path


class InvalidProjectsFile(AlarsError):
    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Invalid projects file {path}: {reason}")
        self.path = path
        self.reason = reason


class ProjectNotFound(AlarsError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Project '{name}' not found")
        self.name = name


class InvalidWorkingDirectory(AlarsError):
    def __init__(self, path: str, reason: str = "directory does not exist") -> None:
        super().__init__(f"Invalid working directory: {path} ({reason})")
        self.path = path


class NoBuildUnitFound(AlarsError):
    def __init__(self, path: str) -> None:
        super().__init__(f"No Xcode project or workspace found in {path}")
        self.path = path


class NoSchemesFound(AlarsError):
    def __init__(self, path: str) -> None:
        super().__init__(f"No schemes found for {path}")
        self.path = path


class NoCandidatesAvailable(AlarsError):
    def __init__(self, parameter: str) -> None:
        super().__init__(f"No candidates available for '{parameter}'")
        self.parameter = parameter


class ChangesetNotFound(AlarsError):
    def __init__(self, branch: str) -> None:
        super().__init__(f"Changeset branch '{branch}' does not exist")
        self.branch = branch


class CustomCommandNotFound(AlarsError):
    def __init__(self, alias: str) -> None:
        super().__init__(f"Custom command '{alias}' not found")
        self.alias = alias


class ToolInvocationFailed(AlarsError):
    """
    Raised when an external command exits non-zero (or cannot be started).

    The captured output is kept verbatim so it can be shown to the operator and
    written into error reports.
    """

    def __init__(
        self,
        exit_code: int,
        captured_output: str = "",
        command: Optional[Sequence[str]] = None,
    ) -> None:
        self.exit_code = exit_code
        self.captured_output = captured_output
        self.command = list(command or [])
        rendered = " ".join(self.command) or "command"
        super().__init__(f"{rendered} failed with exit code {exit_code}")
