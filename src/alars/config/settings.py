from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path


def _default_derived_data() -> Path:
    return Path.home() / "Library" / "Developer" / "Xcode" / "DerivedData"


@dataclass
class AlarsSettings:
    """
    Runtime configuration for a single invocation.

    Everything is derived from the process environment; nothing here is
    written back to disk.
    """

    projects_file: Path = field(default_factory=lambda: Path.cwd() / "xprojects.json")
    report_dir: Path = field(default_factory=Path.cwd)
    derived_data_dir: Path = field(default_factory=_default_derived_data)
    fallback_device: str = "iPhone 15"
    log_level: str = "WARNING"

    @property
    def log_level_value(self) -> int:
        level = logging.getLevelName(self.log_level.upper())
        return level if isinstance(level, int) else logging.WARNING


def get_settings() -> AlarsSettings:
    settings = AlarsSettings()

    projects_file = os.getenv("ALARS_PROJECTS_FILE")
    if projects_file:
        settings.projects_file = Path(projects_file).expanduser()

    report_dir = os.getenv("ALARS_REPORT_DIR")
    if report_dir:
        settings.report_dir = Path(report_dir).expanduser()

    derived_data = os.getenv("ALARS_DERIVED_DATA")
    if derived_data:
        settings.derived_data_dir = Path(derived_data).expanduser()

    fallback_device = os.getenv("ALARS_FALLBACK_DEVICE")
    if fallback_device:
        settings.fallback_device = fallback_device

    log_level = os.getenv("ALARS_LOG_LEVEL")
    if log_level:
        settings.log_level = log_level

    return settings
