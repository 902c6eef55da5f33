from __future__ import annotations

import getpass
import logging
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from ...domain.models import Project


LOG = logging.getLogger(__name__)

HEAVY_RULE = "═" * 63
LIGHT_RULE = "─" * 63


def _section(title: str) -> List[str]:
    return ["", LIGHT_RULE, title, LIGHT_RULE, ""]


class ErrorReportService:
    """
    Writes a plain-text diagnostic report when a build or test fails.

    Reports land in ``report_dir`` as ``<project>-report-<timestamp>.log``.
    """

    def __init__(self, report_dir: Path) -> None:
        self.report_dir = report_dir

    def write_report(
        self,
        operation: str,
        project: Project,
        error: BaseException,
        captured_output: Optional[str] = None,
    ) -> Path:
        now = datetime.now()
        filename = f"{project.name}-report-{now.strftime('%Y-%m-%d-%H%M%S')}.log"
        self.report_dir.mkdir(parents=True, exist_ok=True)
        report_path = self.report_dir / filename
        report_path.write_text(self.render(operation, project, error, captured_output, now), encoding="utf-8")
        LOG.info("Wrote error report to %s", report_path)
        return report_path

    def render(
        self,
        operation: str,
        project: Project,
        error: BaseException,
        captured_output: Optional[str],
        generated_at: datetime,
    ) -> str:
        config = project.configuration
        lines: List[str] = [
            HEAVY_RULE,
            "ALARS ERROR REPORT",
            HEAVY_RULE,
            "",
            f"Generated: {generated_at.isoformat(timespec='seconds')}",
            f"Operation: {operation}",
            f"Project: {project.name}",
            f"Working Directory: {project.working_directory}",
            f"Absolute Path: {project.absolute_working_directory()}",
        ]

        lines += _section("ERROR DETAILS")
        lines.append(f"Error Type: {type(error).__name__}")
        lines.append(f"Error Description: {error}")

        if captured_output:
            lines += _section("OPERATION OUTPUT")
            lines.append(captured_output.rstrip())

        lines += _section("SYSTEM INFORMATION")
        lines.append(f"Current Directory: {Path.cwd()}")
        lines.append(f"User: {_current_user()}")
        lines.append(f"Home Directory: {Path.home()}")

        lines += _section("PROJECT CONFIGURATION")
        lines.append(f"Default Branch: {config.default_branch}")
        lines.append(f"Default Scheme: {config.default_scheme or 'None'}")
        lines.append(f"Default Test Scheme: {config.default_test_scheme or 'None'}")
        lines.append(f"Default Simulator: {config.default_simulator or 'None'}")
        lines.append(f"Save Preference: {config.save_preference.value if config.save_preference else 'None'}")

        if project.custom_commands:
            lines += _section("CUSTOM COMMANDS")
            for command in project.custom_commands:
                lines.append(f"- {command.alias}: {command.description}")
                lines.append(f"  Operations: {', '.join(op.kind.value for op in command.operations)}")

        lines += ["", HEAVY_RULE, "END OF REPORT", HEAVY_RULE, ""]
        return "\n".join(lines)


def _current_user() -> str:
    try:
        return getpass.getuser()
    except (KeyError, OSError):  # pragma: no cover - no passwd entry in some containers
        return "unknown"
