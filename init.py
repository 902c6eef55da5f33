#!/usr/bin/env python3
"""
Alars Initialization Script
Creates a virtual environment, installs alars into it and checks that the
external tools it drives are on PATH.
"""

import shutil
import subprocess
import sys
from pathlib import Path
from typing import Dict


REQUIRED_TOOLS: Dict[str, str] = {
    "git": "version control (clean, save, update, changesets)",
    "xcodebuild": "build, test, run and reset",
    "xcrun": "simulator discovery for run",
}

OPTIONAL_TOOLS: Dict[str, str] = {
    "pod": "CocoaPods reinstall during reset",
    "carthage": "Carthage reinstall during reset",
    "swift": "Swift Package Manager resolve during reset",
    "bundle": "Bundler reinstall during reset",
}


def report_tools() -> None:
    print("Checking external tools...")
    for tool, purpose in REQUIRED_TOOLS.items():
        marker = "✓" if shutil.which(tool) else "✗"
        print(f"  {marker} {tool:<11} {purpose}")
    for tool, purpose in OPTIONAL_TOOLS.items():
        marker = "✓" if shutil.which(tool) else "-"
        print(f"  {marker} {tool:<11} {purpose} (optional)")
    print()


def main():
    project_root = Path(__file__).parent.resolve()
    venv_path = project_root / ".venv"

    print("Initializing Alars...")
    print()

    print("Checking Python version...")
    if sys.version_info < (3, 9):
        print(f"Error: Python 3.9+ is required. Found Python {sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}")
        sys.exit(1)
    print(f"Found Python {sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}")
    print()

    if venv_path.exists():
        print("Virtual environment already exists, skipping creation...")
    else:
        print("Creating virtual environment...")
        try:
            subprocess.run([sys.executable, "-m", "venv", str(venv_path)], check=True)
            print("Virtual environment created")
        except subprocess.CalledProcessError as e:
            print(f"Error creating virtual environment: {e}")
            sys.exit(1)
    print()

    if sys.platform == "win32":
        pip_path = venv_path / "Scripts" / "pip"
        activate_cmd = ".venv\\Scripts\\activate"
    else:
        pip_path = venv_path / "bin" / "pip"
        activate_cmd = "source .venv/bin/activate"

    print("Installing alars with dev dependencies...")
    try:
        subprocess.run([str(pip_path), "install", "-e", f"{project_root}[dev]"], check=True, cwd=project_root)
        print("Installation complete")
    except subprocess.CalledProcessError as e:
        print(f"Error installing package: {e}")
        sys.exit(1)
    print()

    report_tools()

    alars_path = venv_path / ("Scripts" if sys.platform == "win32" else "bin") / "alars"
    if alars_path.exists():
        print("Setup complete! You can now use alars.")
        print()
        print("To activate the virtual environment in your current shell, run:")
        print(f"  {activate_cmd}")
        print()
        print("Example usage:")
        print("  alars init            # describe your projects in xprojects.json")
        print("  alars list")
        print("  alars quick cbtr MyApp")
    else:
        print("Warning: alars command not found. You may need to activate the venv:")
        print(f"  {activate_cmd}")


if __name__ == "__main__":
    main()
