from pathlib import Path

import pytest

from alars.domain.models import (
    BuildUnit,
    BuildUnitKind,
    ChainLog,
    Cancelled,
    CustomCommand,
    Failure,
    Operation,
    OperationKind,
    Project,
    ProjectConfiguration,
    RunTarget,
    SavePreference,
    Success,
    resolve_working_directory,
)
from alars.domain.errors import ToolInvocationFailed


def test_project_serialization_round_trip() -> None:
    project = Project(
        name="MyApp",
        working_directory="~/src/myapp",
        repository_url="git@example.com:me/myapp.git",
        configuration=ProjectConfiguration(
            default_branch="develop",
            default_scheme="MyApp",
            default_test_scheme="MyAppTests",
            default_simulator="iPhone 15",
            save_preference=SavePreference.BRANCH,
        ),
        custom_commands=(
            CustomCommand(
                alias="ci",
                description="Update and test",
                operations=(Operation(OperationKind.UPDATE), Operation(OperationKind.TEST, {"scheme": "MyAppTests"})),
            ),
        ),
    )

    restored = Project.from_dict(project.to_dict())

    assert restored == project


def test_project_dict_uses_projects_file_keys() -> None:
    raw = {
        "name": "MyApp",
        "workingDirectory": "apps/my",
        "repositoryURL": "https://example.com/my.git",
        "configuration": {"defaultBranch": "main", "savePreference": "stash"},
        "customCommands": [{"alias": "bt", "description": "Build+test", "operations": [{"type": "build"}, {"type": "test"}]}],
    }

    project = Project.from_dict(raw)

    assert project.repository_url == "https://example.com/my.git"
    assert project.configuration.save_preference is SavePreference.STASH
    assert project.configuration.default_scheme is None
    assert [op.kind for op in project.custom_commands[0].operations] == [OperationKind.BUILD, OperationKind.TEST]
    assert project.to_dict()["customCommands"][0]["operations"][0] == {"type": "build"}


def test_operation_empty_parameters_mean_none() -> None:
    operation = Operation(OperationKind.BUILD, {})

    assert operation.parameters is None
    assert operation.parameter("scheme") is None
    assert operation.to_dict() == {"type": "build"}


def test_custom_command_requires_operations() -> None:
    with pytest.raises(ValueError):
        CustomCommand(alias="empty", description="nothing", operations=())


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("/abs/app", Path("/abs/app")),
        ("~/src/app", Path("/home/me/src/app")),
        ("~", Path("/home/me")),
        ("apps/one", Path("/work/apps/one")),
    ],
)
def test_resolve_working_directory(raw: str, expected: Path) -> None:
    assert resolve_working_directory(raw, home=Path("/home/me"), cwd=Path("/work")) == expected


def test_operation_letters_are_unique_and_reversible() -> None:
    letters = [kind.letter for kind in OperationKind]

    assert letters == ["c", "s", "u", "b", "t", "r", "e"]
    for kind in OperationKind:
        assert OperationKind.from_letter(kind.letter) is kind
    assert OperationKind.from_letter("B") is OperationKind.BUILD
    assert OperationKind.from_letter("x") is None


def test_run_target_display_name() -> None:
    target = RunTarget(name="iPhone 15", id="ABC", state="Booted", platform="iOS-17-0")

    assert str(target) == "iPhone 15 (iOS-17-0) - Booted"


def test_build_unit_arguments() -> None:
    workspace = BuildUnit(path=Path("/p/App.xcworkspace"), kind=BuildUnitKind.WORKSPACE)
    project = BuildUnit(path=Path("/p/App.xcodeproj"), kind=BuildUnitKind.PROJECT)

    assert workspace.arguments() == ["-workspace", "App.xcworkspace"]
    assert project.arguments() == ["-project", "App.xcodeproj"]


def test_chain_log_succeeded_only_when_every_step_succeeded() -> None:
    log = ChainLog()
    assert not log.succeeded

    log.record(Operation(OperationKind.BUILD), Success("built"))
    assert log.succeeded

    log.record(Operation(OperationKind.RUN), Cancelled())
    assert not log.succeeded
    assert len(log) == 2


def test_failure_message_comes_from_error() -> None:
    failure = Failure(ToolInvocationFailed(65, "error: x", ["xcodebuild", "build"]))

    assert failure.message == "xcodebuild build failed with exit code 65"
    assert failure.report_path is None
