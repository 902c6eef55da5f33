from __future__ import annotations

import json
import logging
import shutil
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from ...domain.errors import NoBuildUnitFound, ToolInvocationFailed
from ...domain.models import BuildUnit, BuildUnitKind, RunTarget
from ..process import run_command


LOG = logging.getLogger(__name__)

RUNTIME_PREFIX = "com.apple.CoreSimulator.SimRuntime."

# Manifest file -> command that reinstalls its dependencies.
DEPENDENCY_MANAGERS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("Podfile", ("pod", "install")),
    ("Cartfile", ("carthage", "bootstrap")),
    ("Package.swift", ("swift", "package", "resolve")),
    ("Gemfile", ("bundle", "install")),
)


def parse_scheme_list(output: str) -> List[str]:
    """Extract scheme names from ``xcodebuild -list`` output."""
    schemes: List[str] = []
    in_schemes = False
    for line in output.splitlines():
        stripped = line.strip()
        if stripped == "Schemes:":
            in_schemes = True
            continue
        if in_schemes:
            if not stripped:
                break
            schemes.append(stripped)
    return schemes


def parse_simulators(output: str) -> List[RunTarget]:
    try:
        payload = json.loads(output or "{}")
    except json.JSONDecodeError:
        LOG.warning("simctl returned invalid JSON; treating as no simulators")
        return []

    devices = payload.get("devices") if isinstance(payload, dict) else None
    if not isinstance(devices, dict):
        return []

    targets: List[RunTarget] = []
    for runtime, device_list in devices.items():
        platform = runtime.replace(RUNTIME_PREFIX, "")
        for device in device_list or []:
            name = device.get("name")
            udid = device.get("udid")
            state = device.get("state")
            if name and udid and state:
                targets.append(RunTarget(name=name, id=udid, state=state, platform=platform))
    return sorted(targets, key=lambda target: target.name)


class XcodeClient:
    """
    Drives ``xcodebuild`` and ``xcrun simctl`` for one machine.

    Build, test and run output is returned as captured text; failures surface
    as ``ToolInvocationFailed`` with the tool's output attached.
    """

    def __init__(
        self,
        derived_data_dir: Optional[Path] = None,
        fallback_device: str = "iPhone 15",
        sdk: str = "iphonesimulator",
        configuration: str = "Debug",
    ) -> None:
        self.derived_data_dir = derived_data_dir or Path.home() / "Library" / "Developer" / "Xcode" / "DerivedData"
        self.fallback_device = fallback_device
        self.sdk = sdk
        self.configuration = configuration

    # ------------------------------------------------------------------ Discovery
    def discover_build_unit(self, path: Path) -> BuildUnit:
        try:
            entries = sorted(path.iterdir())
        except OSError as exc:
            raise NoBuildUnitFound(str(path)) from exc

        workspace = next((entry for entry in entries if entry.suffix == ".xcworkspace"), None)
        if workspace is not None:
            return BuildUnit(path=workspace, kind=BuildUnitKind.WORKSPACE)
        project = next((entry for entry in entries if entry.suffix == ".xcodeproj"), None)
        if project is not None:
            return BuildUnit(path=project, kind=BuildUnitKind.PROJECT)
        raise NoBuildUnitFound(str(path))

    def list_targets(self, path: Path) -> List[str]:
        unit = self.discover_build_unit(path)
        output = run_command(["xcodebuild", *unit.arguments(), "-list"], cwd=path)
        return parse_scheme_list(output)

    # ------------------------------------------------------------------ Actions
    def build(self, path: Path, target: str, verbose: bool) -> str:
        unit = self.discover_build_unit(path)
        args = [
            "xcodebuild",
            *unit.arguments(),
            "-scheme",
            target,
            "-configuration",
            self.configuration,
            "-sdk",
            self.sdk,
            "build",
        ]
        if not verbose:
            args.append("-quiet")
        return run_command(args, cwd=path)

    def test(self, path: Path, target: str) -> str:
        unit = self.discover_build_unit(path)
        return run_command(
            ["xcodebuild", *unit.arguments(), "-scheme", target, "-sdk", self.sdk, "test"],
            cwd=path,
        )

    def run(self, path: Path, target: str, run_target_id: Optional[str] = None) -> str:
        unit = self.discover_build_unit(path)
        if run_target_id:
            destination = f"platform=iOS Simulator,id={run_target_id}"
        else:
            destination = f"platform=iOS Simulator,name={self.fallback_device}"
        return run_command(
            [
                "xcodebuild",
                *unit.arguments(),
                "-scheme",
                target,
                "-configuration",
                self.configuration,
                "-destination",
                destination,
                "run",
            ],
            cwd=path,
        )

    def clean(self, path: Path, target: Optional[str] = None) -> None:
        unit = self.discover_build_unit(path)
        args = ["xcodebuild", *unit.arguments()]
        if target:
            args.extend(["-scheme", target])
        args.append("clean")
        run_command(args, cwd=path)

    def purge_caches(self) -> None:
        """Delete the machine-wide DerivedData directory. There is no undo."""
        if not self.derived_data_dir.exists():
            LOG.debug("DerivedData directory %s does not exist; nothing to purge", self.derived_data_dir)
            return
        LOG.info("Purging %s", self.derived_data_dir)
        try:
            shutil.rmtree(self.derived_data_dir)
        except OSError as exc:
            raise ToolInvocationFailed(1, str(exc), ["rm", "-rf", str(self.derived_data_dir)]) from exc

    def list_run_targets(self) -> List[RunTarget]:
        output = run_command(["xcrun", "simctl", "list", "devices", "available", "-j"])
        return parse_simulators(output)

    def reinstall_dependencies(self, path: Path) -> List[str]:
        handled: List[str] = []
        for manifest, command in DEPENDENCY_MANAGERS:
            if (path / manifest).exists():
                LOG.info("Reinstalling dependencies for %s", manifest)
                self._run_manager(command, path)
                handled.append(manifest)
        return handled

    @staticmethod
    def _run_manager(command: Sequence[str], path: Path) -> None:
        try:
            run_command(command, cwd=path)
        except ToolInvocationFailed:
            LOG.error("%s failed in %s", " ".join(command), path)
            raise
