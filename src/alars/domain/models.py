from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from .errors import AlarsError


def resolve_working_directory(raw: str, home: Path, cwd: Path) -> Path:
    """
    Normalize a configured working directory to an absolute path.

    Absolute paths are kept, ``~`` is expanded against ``home`` and anything
    else is taken relative to ``cwd``.
    """
    if raw.startswith("/"):
        return Path(raw)
    if raw.startswith("~"):
        return home / raw[1:].lstrip("/")
    return cwd / raw


class SavePreference(str, Enum):
    STASH = "stash"
    BRANCH = "branch"


class OperationKind(str, Enum):
    CLEAN_SLATE = "clean_slate"
    SAVE = "save"
    UPDATE = "update"
    BUILD = "build"
    TEST = "test"
    RUN = "run"
    RESET = "reset"

    @property
    def letter(self) -> str:
        return _LETTERS[self]

    @property
    def label(self) -> str:
        return _LABELS[self]

    @classmethod
    def from_letter(cls, letter: str) -> Optional["OperationKind"]:
        for kind, value in _LETTERS.items():
            if value == letter.lower():
                return kind
        return None


_LETTERS: Dict[OperationKind, str] = {
    OperationKind.CLEAN_SLATE: "c",
    OperationKind.SAVE: "s",
    OperationKind.UPDATE: "u",
    OperationKind.BUILD: "b",
    OperationKind.TEST: "t",
    OperationKind.RUN: "r",
    OperationKind.RESET: "e",
}

_LABELS: Dict[OperationKind, str] = {
    OperationKind.CLEAN_SLATE: "Clean Slate",
    OperationKind.SAVE: "Save",
    OperationKind.UPDATE: "Update",
    OperationKind.BUILD: "Build",
    OperationKind.TEST: "Test",
    OperationKind.RUN: "Run",
    OperationKind.RESET: "Reset",
}


@dataclass(frozen=True)
class Operation:
    kind: OperationKind
    parameters: Optional[Dict[str, str]] = None

    def __post_init__(self) -> None:
        # An empty mapping means "no parameters".
        if not self.parameters:
            object.__setattr__(self, "parameters", None)
        else:
            object.__setattr__(self, "parameters", dict(self.parameters))

    def parameter(self, name: str) -> Optional[str]:
        return (self.parameters or {}).get(name)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"type": self.kind.value}
        if self.parameters:
            payload["parameters"] = dict(self.parameters)
        return payload

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Operation":
        parameters = raw.get("parameters")
        return cls(
            kind=OperationKind(raw["type"]),
            parameters={str(key): str(value) for key, value in parameters.items()} if parameters else None,
        )


@dataclass(frozen=True)
class CustomCommand:
    alias: str
    description: str
    operations: Tuple[Operation, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "operations", tuple(self.operations))
        if not self.operations:
            raise ValueError(f"Custom command '{self.alias}' must contain at least one operation")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "alias": self.alias,
            "description": self.description,
            "operations": [operation.to_dict() for operation in self.operations],
        }

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "CustomCommand":
        return cls(
            alias=raw["alias"],
            description=raw.get("description", ""),
            operations=tuple(Operation.from_dict(item) for item in raw.get("operations", [])),
        )


@dataclass(frozen=True)
class ProjectConfiguration:
    default_branch: str
    default_scheme: Optional[str] = None
    default_test_scheme: Optional[str] = None
    default_simulator: Optional[str] = None
    save_preference: Optional[SavePreference] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"defaultBranch": self.default_branch}
        if self.default_scheme:
            payload["defaultScheme"] = self.default_scheme
        if self.default_test_scheme:
            payload["defaultTestScheme"] = self.default_test_scheme
        if self.default_simulator:
            payload["defaultSimulator"] = self.default_simulator
        if self.save_preference:
            payload["savePreference"] = self.save_preference.value
        return payload

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "ProjectConfiguration":
        preference = raw.get("savePreference")
        return cls(
            default_branch=raw["defaultBranch"],
            default_scheme=raw.get("defaultScheme"),
            default_test_scheme=raw.get("defaultTestScheme"),
            default_simulator=raw.get("defaultSimulator"),
            save_preference=SavePreference(preference) if preference else None,
        )


@dataclass(frozen=True)
class Project:
    name: str
    working_directory: str
    configuration: ProjectConfiguration
    repository_url: Optional[str] = None
    custom_commands: Tuple[CustomCommand, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "custom_commands", tuple(self.custom_commands or ()))

    def absolute_working_directory(self, home: Optional[Path] = None, cwd: Optional[Path] = None) -> Path:
        return resolve_working_directory(
            self.working_directory,
            home=home if home is not None else Path.home(),
            cwd=cwd if cwd is not None else Path.cwd(),
        )

    def find_command(self, alias: str) -> Optional[CustomCommand]:
        for command in self.custom_commands:
            if command.alias == alias:
                return command
        return None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "name": self.name,
            "workingDirectory": self.working_directory,
            "configuration": self.configuration.to_dict(),
        }
        if self.repository_url:
            payload["repositoryURL"] = self.repository_url
        if self.custom_commands:
            payload["customCommands"] = [command.to_dict() for command in self.custom_commands]
        return payload

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Project":
        return cls(
            name=raw["name"],
            working_directory=raw["workingDirectory"],
            repository_url=raw.get("repositoryURL"),
            configuration=ProjectConfiguration.from_dict(raw["configuration"]),
            custom_commands=tuple(CustomCommand.from_dict(item) for item in raw.get("customCommands") or []),
        )


@dataclass(frozen=True)
class RunTarget:
    """A simulator the built app can be launched on."""

    name: str
    id: str
    state: str
    platform: str

    @property
    def display_name(self) -> str:
        return f"{self.name} ({self.platform}) - {self.state}"

    def __str__(self) -> str:
        return self.display_name


class BuildUnitKind(str, Enum):
    WORKSPACE = "workspace"
    PROJECT = "project"


@dataclass(frozen=True)
class BuildUnit:
    path: Path
    kind: BuildUnitKind

    def arguments(self) -> List[str]:
        return [f"-{self.kind.value}", self.path.name]


# --- Operation results ------------------------------------------------------
@dataclass(frozen=True)
class Success:
    message: str


@dataclass(frozen=True)
class Failure:
    error: AlarsError
    report_path: Optional[Path] = None

    @property
    def message(self) -> str:
        return str(self.error)


@dataclass(frozen=True)
class Cancelled:
    reason: str = "Operation cancelled by user"


OperationResult = Union[Success, Failure, Cancelled]


@dataclass
class ChainLog:
    """Ordered record of the steps a chain actually executed."""

    entries: List[Tuple[Operation, OperationResult]] = field(default_factory=list)

    def record(self, operation: Operation, result: OperationResult) -> None:
        self.entries.append((operation, result))

    @property
    def results(self) -> List[OperationResult]:
        return [result for _, result in self.entries]

    @property
    def succeeded(self) -> bool:
        return bool(self.entries) and all(isinstance(result, Success) for result in self.results)

    def __len__(self) -> int:
        return len(self.entries)

