from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from mocks import RecordingRun

from alars.domain.errors import NoBuildUnitFound, ToolInvocationFailed
from alars.domain.models import BuildUnitKind
from alars.services.build.xcode_client import XcodeClient, parse_scheme_list, parse_simulators

LIST_OUTPUT = """Information about project "App":
    Targets:
        App
        AppTests

    Build Configurations:
        Debug
        Release

    Schemes:
        App
        AppTests
        App-Staging

"""


def _project_dir(tmp_path: Path, *entries: str) -> Path:
    for entry in entries:
        (tmp_path / entry).mkdir()
    return tmp_path


def test_parse_scheme_list_reads_only_schemes_section() -> None:
    assert parse_scheme_list(LIST_OUTPUT) == ["App", "AppTests", "App-Staging"]
    assert parse_scheme_list("Targets:\n  App\n") == []


def test_parse_simulators_flattens_runtimes() -> None:
    payload = {
        "devices": {
            "com.apple.CoreSimulator.SimRuntime.iOS-17-0": [
                {"name": "iPhone 15", "udid": "B", "state": "Shutdown"},
                {"name": "iPad Air", "udid": "A", "state": "Booted"},
            ],
            "com.apple.CoreSimulator.SimRuntime.watchOS-10-0": [{"name": "Apple Watch", "udid": "W"}],
        }
    }

    targets = parse_simulators(json.dumps(payload))

    assert [target.name for target in targets] == ["iPad Air", "iPhone 15"]
    assert targets[1].platform == "iOS-17-0"


def test_parse_simulators_tolerates_bad_json() -> None:
    assert parse_simulators("not json") == []
    assert parse_simulators(json.dumps({"devices": []})) == []


def test_discover_prefers_workspace(tmp_path: Path) -> None:
    path = _project_dir(tmp_path, "App.xcodeproj", "App.xcworkspace")

    unit = XcodeClient().discover_build_unit(path)

    assert unit.kind is BuildUnitKind.WORKSPACE
    assert unit.path.name == "App.xcworkspace"


def test_discover_without_build_unit_raises(tmp_path: Path) -> None:
    (tmp_path / "README.md").write_text("hi", encoding="utf-8")

    with pytest.raises(NoBuildUnitFound):
        XcodeClient().discover_build_unit(tmp_path)


def test_list_targets_and_build(monkeypatch: Any, tmp_path: Path) -> None:
    path = _project_dir(tmp_path, "App.xcodeproj")
    fake = RecordingRun({"xcodebuild -project App.xcodeproj -list": (0, LIST_OUTPUT), "xcodebuild -project App.xcodeproj -scheme": (0, "")})
    monkeypatch.setattr("alars.services.process.subprocess.run", fake)

    client = XcodeClient()
    assert client.list_targets(path) == ["App", "AppTests", "App-Staging"]
    client.build(path, "App", verbose=False)
    client.build(path, "App", verbose=True)

    assert fake.commands[1] == (
        "xcodebuild -project App.xcodeproj -scheme App -configuration Debug -sdk iphonesimulator build -quiet"
    )
    assert fake.commands[2].endswith("build")


def test_run_uses_id_or_fallback_device(monkeypatch: Any, tmp_path: Path) -> None:
    path = _project_dir(tmp_path, "App.xcworkspace")
    fake = RecordingRun({"xcodebuild": (0, "")})
    monkeypatch.setattr("alars.services.process.subprocess.run", fake)

    client = XcodeClient(fallback_device="iPhone SE")
    client.run(path, "App", "UDID-1")
    client.run(path, "App")

    assert "-destination platform=iOS Simulator,id=UDID-1 run" in fake.commands[0]
    assert "-destination platform=iOS Simulator,name=iPhone SE run" in fake.commands[1]


def test_build_failure_keeps_output(monkeypatch: Any, tmp_path: Path) -> None:
    path = _project_dir(tmp_path, "App.xcodeproj")
    fake = RecordingRun({"xcodebuild": (65, "error: Cannot find 'Foo' in scope")})
    monkeypatch.setattr("alars.services.process.subprocess.run", fake)

    with pytest.raises(ToolInvocationFailed) as excinfo:
        XcodeClient().build(path, "App", verbose=False)

    assert excinfo.value.exit_code == 65
    assert "Cannot find 'Foo'" in excinfo.value.captured_output


def test_clean_passes_scheme_when_given(monkeypatch: Any, tmp_path: Path) -> None:
    path = _project_dir(tmp_path, "App.xcodeproj")
    fake = RecordingRun({"xcodebuild": (0, "")})
    monkeypatch.setattr("alars.services.process.subprocess.run", fake)

    XcodeClient().clean(path, "App")
    XcodeClient().clean(path)

    assert fake.commands == [
        "xcodebuild -project App.xcodeproj -scheme App clean",
        "xcodebuild -project App.xcodeproj clean",
    ]


def test_purge_caches_removes_derived_data(tmp_path: Path) -> None:
    derived = tmp_path / "DerivedData"
    (derived / "App-abc").mkdir(parents=True)

    client = XcodeClient(derived_data_dir=derived)
    client.purge_caches()
    client.purge_caches()

    assert not derived.exists()


def test_reinstall_dependencies_runs_present_managers(monkeypatch: Any, tmp_path: Path) -> None:
    (tmp_path / "Podfile").write_text("platform :ios", encoding="utf-8")
    (tmp_path / "Package.swift").write_text("// swift-tools-version:5.9", encoding="utf-8")
    fake = RecordingRun({"pod install": (0, ""), "swift package resolve": (0, "")})
    monkeypatch.setattr("alars.services.process.subprocess.run", fake)

    handled = XcodeClient().reinstall_dependencies(tmp_path)

    assert handled == ["Podfile", "Package.swift"]
    assert fake.commands == ["pod install", "swift package resolve"]


def test_list_run_targets_queries_simctl(monkeypatch: Any) -> None:
    payload = {"devices": {"com.apple.CoreSimulator.SimRuntime.iOS-17-0": [{"name": "iPhone 15", "udid": "X", "state": "Booted"}]}}
    fake = RecordingRun({"xcrun simctl list devices available -j": (0, json.dumps(payload))})
    monkeypatch.setattr("alars.services.process.subprocess.run", fake)

    targets = XcodeClient().list_run_targets()

    assert [target.id for target in targets] == ["X"]


def test_purge_caches_failure_surfaces_as_tool_failure(monkeypatch: Any, tmp_path: Path) -> None:
    derived = tmp_path / "DerivedData"
    derived.mkdir()

    def _denied(path: Any) -> None:
        raise PermissionError(13, "Permission denied", str(path))

    monkeypatch.setattr("alars.services.build.xcode_client.shutil.rmtree", _denied)

    with pytest.raises(ToolInvocationFailed) as excinfo:
        XcodeClient(derived_data_dir=derived).purge_caches()

    assert excinfo.value.command == ["rm", "-rf", str(derived)]
    assert "Permission denied" in excinfo.value.captured_output
