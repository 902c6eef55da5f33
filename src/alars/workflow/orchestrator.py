from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Tuple

from ..config.settings import AlarsSettings, get_settings
from ..domain.errors import CustomCommandNotFound, InvalidWorkingDirectory, ProjectNotFound
from ..domain.models import ChainLog, OperationKind, OperationResult, Project
from ..persistence.project_store import ProjectStore
from ..services.build.base import BuildToolClient
from ..services.build.xcode_client import XcodeClient
from ..services.interaction.base import InteractionPort
from ..services.reports.error_report import ErrorReportService
from ..services.vcs.base import VersionControlClient
from ..services.vcs.git_client import GitClient
from .chain import ChainRunner, parse_sequence
from .changeset import ChangesetManager, ChangesetOutcome
from .executor import OperationExecutor


LOG = logging.getLogger(__name__)


class ProjectOrchestrator:
    """
    Entry point shared by the CLI and the interactive menu.

    Wires settings, the projects file and the tool clients into the executor,
    chain runner and changeset manager.
    """

    def __init__(
        self,
        interaction: InteractionPort,
        settings: Optional[AlarsSettings] = None,
        vcs: Optional[VersionControlClient] = None,
        build_tool: Optional[BuildToolClient] = None,
        reports: Optional[ErrorReportService] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.interaction = interaction
        self.store = ProjectStore(self.settings.projects_file)
        self.vcs = vcs or GitClient()
        self.build_tool = build_tool or XcodeClient(
            derived_data_dir=self.settings.derived_data_dir,
            fallback_device=self.settings.fallback_device,
        )
        self.reports = reports or ErrorReportService(self.settings.report_dir)

        self.executor = OperationExecutor(self.vcs, self.build_tool, interaction, reports=self.reports)
        self.chain_runner = ChainRunner(self.executor, interaction)
        self.changesets = ChangesetManager(self.vcs, interaction)

    # ------------------------------------------------------------------ Projects
    def load_projects(self) -> List[Project]:
        return self.store.load()

    def get_project(self, name: str, projects: Optional[List[Project]] = None) -> Project:
        for project in projects if projects is not None else self.load_projects():
            if project.name == name:
                return project
        raise ProjectNotFound(name)

    @staticmethod
    def validate_project(project: Project) -> Path:
        path = project.absolute_working_directory()
        if not path.exists():
            raise InvalidWorkingDirectory(str(path))
        if not path.is_dir():
            raise InvalidWorkingDirectory(str(path), "not a directory")
        return path

    # ------------------------------------------------------------------ Operations
    def run_operation(self, project: Project, kind: OperationKind) -> OperationResult:
        self.validate_project(project)
        return self.executor.execute(project, kind)

    def run_custom_command(self, project: Project, alias: str) -> ChainLog:
        command = project.find_command(alias)
        if command is None:
            raise CustomCommandNotFound(alias)
        self.validate_project(project)
        return self.chain_runner.run_custom_command(project, command)

    def run_sequence(self, project: Project, letters: str) -> Tuple[ChainLog, List[str]]:
        operations, skipped = parse_sequence(letters)
        for letter in skipped:
            LOG.warning("Skipping invalid operation letter: %r", letter)
        self.validate_project(project)
        if not operations:
            return ChainLog(), skipped
        return self.chain_runner.run(project, operations), skipped

    # ------------------------------------------------------------------ Changesets
    def start_changeset(self, project: Project, changeset_id: str) -> ChangesetOutcome:
        path = self.validate_project(project)
        return self.changesets.start_fresh(path, changeset_id)

    def resume_changeset(self, project: Project, changeset_id: str) -> ChangesetOutcome:
        path = self.validate_project(project)
        return self.changesets.resume(path, changeset_id)
