from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Callable, Dict, Mapping, Optional

from ..domain.errors import AlarsError, NoSchemesFound, ToolInvocationFailed
from ..domain.models import (
    Cancelled,
    Failure,
    OperationKind,
    OperationResult,
    Project,
    SavePreference,
    Success,
)
from ..services.build.base import BuildToolClient
from ..services.interaction.base import InteractionPort
from ..services.reports.error_report import ErrorReportService
from ..services.resolver import TargetResolver
from ..services.vcs.base import VersionControlClient


LOG = logging.getLogger(__name__)

Parameters = Optional[Mapping[str, str]]
Handler = Callable[[Project, Path, Parameters], OperationResult]


class OperationExecutor:
    """
    Runs one operation against one project and reports a uniform result.

    Each handler walks the same shape: inspect state, optionally ask for
    confirmation, execute. ``AlarsError`` raised along the way becomes a
    ``Failure``; nothing is retried.
    """

    def __init__(
        self,
        vcs: VersionControlClient,
        build_tool: BuildToolClient,
        interaction: InteractionPort,
        reports: Optional[ErrorReportService] = None,
        resolver: Optional[TargetResolver] = None,
        home: Optional[Path] = None,
        cwd: Optional[Path] = None,
    ) -> None:
        self.vcs = vcs
        self.build_tool = build_tool
        self.interaction = interaction
        self.reports = reports
        self.resolver = resolver or TargetResolver(interaction)
        self.home = home
        self.cwd = cwd
        self._handlers: Dict[OperationKind, Handler] = {
            OperationKind.CLEAN_SLATE: self._clean_slate,
            OperationKind.SAVE: self._save,
            OperationKind.UPDATE: self._update,
            OperationKind.BUILD: self._build,
            OperationKind.TEST: self._test,
            OperationKind.RUN: self._run,
            OperationKind.RESET: self._reset,
        }

    def execute(self, project: Project, kind: OperationKind, parameters: Parameters = None) -> OperationResult:
        path = project.absolute_working_directory(home=self.home, cwd=self.cwd)
        LOG.debug("Executing %s on %s (%s)", kind.value, project.name, path)
        try:
            return self._handlers[kind](project, path, parameters)
        except AlarsError as exc:
            LOG.debug("%s on %s failed: %s", kind.value, project.name, exc)
            return Failure(exc)

    # ------------------------------------------------------------------ Git hygiene
    def _clean_slate(self, project: Project, path: Path, parameters: Parameters) -> OperationResult:
        self.interaction.notify("Checking working directory status...")
        if self.vcs.is_clean(path):
            return Success("Working directory is already clean")

        if not self.interaction.confirm("This will discard all uncommitted changes. Are you sure?"):
            return Cancelled()

        self.interaction.notify("Discarding all changes...")
        self.vcs.discard_all(path)
        return Success("Successfully cleaned working directory")

    def _save(self, project: Project, path: Path, parameters: Parameters) -> OperationResult:
        self.interaction.notify("Checking working directory status...")
        if self.vcs.is_clean(path):
            return Success("Working directory is already clean")

        preference = project.configuration.save_preference or SavePreference.STASH
        original_branch = self.vcs.current_branch(path)

        if preference == SavePreference.STASH:
            message = self.interaction.ask_text("Enter stash message (optional):")
            self.interaction.notify("Stashing changes...")
            self.vcs.stash(path, message or None)
            return Success("Changes stashed successfully")

        branch_name = (self.interaction.ask_text("Enter branch name:") or "").strip()
        if not branch_name:
            branch_name = f"alars-backup-{int(time.time())}"
        self.interaction.notify("Creating branch and committing changes...")
        self.vcs.create_branch(path, branch_name, commit_first=True)
        self.vcs.switch_branch(path, original_branch)
        return Success(f"Changes saved to branch: {branch_name}")

    def _update(self, project: Project, path: Path, parameters: Parameters) -> OperationResult:
        branch = project.configuration.default_branch

        self.interaction.notify("Checking working directory status...")
        if not self.vcs.is_clean(path):
            if self.interaction.confirm("You have uncommitted changes. Do you want to save them first?"):
                self._save(project, path, parameters)

        self.interaction.notify(f"Pulling latest changes from {branch}...")
        self.vcs.pull(path, branch)
        return Success(f"Successfully updated from {branch}")

    # ------------------------------------------------------------------ Build toolchain
    def _list_targets(self, path: Path) -> list[str]:
        self.interaction.notify("Fetching available schemes...")
        self.build_tool.discover_build_unit(path)
        targets = self.build_tool.list_targets(path)
        if not targets:
            raise NoSchemesFound(str(path))
        return targets

    def _build(self, project: Project, path: Path, parameters: Parameters) -> OperationResult:
        targets = self._list_targets(path)
        scheme = self.resolver.resolve(
            "scheme",
            parameters,
            project.configuration.default_scheme,
            targets,
            prompt="Select scheme to build:",
        )
        verbose = self.interaction.confirm("Enable verbose output?")

        self.interaction.notify(f"Building scheme: {scheme}...")
        try:
            output = self.build_tool.build(path, scheme, verbose)
        except ToolInvocationFailed as exc:
            return self._report_failure("build", project, exc)

        if verbose and output:
            self.interaction.notify(output)
        return Success(f"Build completed successfully for scheme: {scheme}")

    def _test(self, project: Project, path: Path, parameters: Parameters) -> OperationResult:
        targets = self._list_targets(path)
        scheme = self.resolver.resolve_test_target(parameters, project.configuration.default_test_scheme, targets)

        self.interaction.notify(f"Running tests for scheme: {scheme}...")
        try:
            output = self.build_tool.test(path, scheme)
        except ToolInvocationFailed as exc:
            return self._report_failure("test", project, exc)

        if output:
            self.interaction.notify(output)
        return Success(f"Tests completed for scheme: {scheme}")

    def _run(self, project: Project, path: Path, parameters: Parameters) -> OperationResult:
        targets = self._list_targets(path)
        scheme = self.resolver.resolve(
            "scheme",
            parameters,
            project.configuration.default_scheme,
            targets,
            prompt="Select scheme to run:",
        )

        self.interaction.notify("Fetching available simulators...")
        run_target = self.resolver.resolve_run_target(
            parameters,
            project.configuration.default_simulator,
            self.build_tool.list_run_targets(),
        )

        if run_target is not None:
            self.interaction.notify(f"Running {scheme} on {run_target.display_name}...")
        else:
            self.interaction.notify(f"Running {scheme} on the default simulator...")
        self.build_tool.run(path, scheme, run_target.id if run_target else None)
        return Success(f"Successfully launched {scheme}")

    def _reset(self, project: Project, path: Path, parameters: Parameters) -> OperationResult:
        question = (
            "This will clean the build folder, delete all DerivedData on this machine "
            "and reinstall dependencies. Continue?"
        )
        if not self.interaction.confirm(question):
            return Cancelled()

        targets = self.build_tool.list_targets(path)
        default = project.configuration.default_scheme
        clean_target = default if default in targets else (targets[0] if targets else None)

        self.interaction.notify("Cleaning build folder...")
        self.build_tool.clean(path, clean_target)

        self.interaction.notify("Purging DerivedData...")
        self.build_tool.purge_caches()

        self.interaction.notify("Reinstalling dependencies...")
        handled = self.build_tool.reinstall_dependencies(path)
        if handled:
            return Success(f"Reset complete; reinstalled dependencies for {', '.join(handled)}")
        return Success("Reset complete; no dependency manifests found")

    # ------------------------------------------------------------------ Helpers
    def _report_failure(self, operation: str, project: Project, error: ToolInvocationFailed) -> Failure:
        report_path: Optional[Path] = None
        if self.reports is not None:
            try:
                report_path = self.reports.write_report(operation, project, error, error.captured_output)
            except OSError as exc:
                LOG.warning("Could not write %s error report for %s: %s", operation, project.name, exc)
        return Failure(error, report_path=report_path)
