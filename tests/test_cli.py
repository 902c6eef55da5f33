from __future__ import annotations

from pathlib import Path
from typing import Any

from typer.testing import CliRunner

from mocks import FakeBuildClient, FakeGitClient, ScriptedInteraction

from alars.cli import app as cli_app
from alars.config.settings import AlarsSettings
from alars.domain.errors import ToolInvocationFailed
from alars.domain.models import Project, ProjectConfiguration
from alars.persistence.project_store import ProjectStore
from alars.workflow.orchestrator import ProjectOrchestrator

runner = CliRunner()


def _write_projects(tmp_path: Path) -> Path:
    app_dir = tmp_path / "MyApp"
    app_dir.mkdir()
    projects_file = tmp_path / "xprojects.json"
    ProjectStore(projects_file).save(
        [
            Project(
                name="MyApp",
                working_directory=str(app_dir),
                configuration=ProjectConfiguration(default_branch="main", default_scheme="App"),
            )
        ]
    )
    return projects_file


def _use_fakes(monkeypatch: Any, tmp_path: Path, projects_file: Path, build: FakeBuildClient) -> None:
    settings = AlarsSettings(projects_file=projects_file, report_dir=tmp_path / "reports")

    def _factory() -> ProjectOrchestrator:
        return ProjectOrchestrator(ScriptedInteraction(), settings=settings, vcs=FakeGitClient(), build_tool=build)

    monkeypatch.setattr(cli_app, "_get_orchestrator", _factory)


def test_list_shows_projects(tmp_path: Path) -> None:
    projects_file = _write_projects(tmp_path)

    result = runner.invoke(cli_app.app, ["list"], env={"ALARS_PROJECTS_FILE": str(projects_file)})

    assert result.exit_code == 0
    assert "MyApp" in result.output
    assert "Total: 1 project(s)" in result.output


def test_list_without_projects_file_can_decline_creation(tmp_path: Path) -> None:
    result = runner.invoke(
        cli_app.app,
        ["list"],
        input="n\n",
        env={"ALARS_PROJECTS_FILE": str(tmp_path / "missing.json")},
    )

    assert result.exit_code == 1
    assert "Projects file not found" in result.output
    assert "alars init" in result.output


def test_quick_runs_sequence_and_reports_skipped_letters(monkeypatch: Any, tmp_path: Path) -> None:
    projects_file = _write_projects(tmp_path)
    build = FakeBuildClient(targets=["App"])
    _use_fakes(monkeypatch, tmp_path, projects_file, build)

    result = runner.invoke(cli_app.app, ["quick", "bqx", "MyApp"])

    assert result.exit_code == 0
    assert "Skipping invalid operation letter: 'q'" in result.output
    assert "All operations completed successfully!" in result.output
    assert build.names().count("build") == 1


def test_quick_exits_non_zero_on_failure(monkeypatch: Any, tmp_path: Path) -> None:
    projects_file = _write_projects(tmp_path)
    build = FakeBuildClient(targets=["App"])
    build.errors["build"] = ToolInvocationFailed(65, "error: boom", ["xcodebuild", "build"])
    _use_fakes(monkeypatch, tmp_path, projects_file, build)

    result = runner.invoke(cli_app.app, ["quick", "bt", "MyApp"])

    assert result.exit_code == 1
    assert "test" not in build.names()
    assert list((tmp_path / "reports").glob("MyApp-report-*.log"))


def test_unknown_project_fails(monkeypatch: Any, tmp_path: Path) -> None:
    projects_file = _write_projects(tmp_path)
    _use_fakes(monkeypatch, tmp_path, projects_file, FakeBuildClient())

    result = runner.invoke(cli_app.app, ["build", "Nope"])

    assert result.exit_code == 1
    assert "Project 'Nope' not found" in result.output


def test_changeset_resume_missing_branch_hints_fresh(monkeypatch: Any, tmp_path: Path) -> None:
    projects_file = _write_projects(tmp_path)
    _use_fakes(monkeypatch, tmp_path, projects_file, FakeBuildClient())

    result = runner.invoke(cli_app.app, ["changeset", "resume", "T-9", "-p", "MyApp"])

    assert result.exit_code == 1
    assert "alars changeset fresh T-9 -p MyApp" in result.output
