from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Tuple

from ...domain.errors import ToolInvocationFailed
from ..process import run_command


LOG = logging.getLogger(__name__)

STASH_NAMESPACE = "alars"
AUTO_COMMIT_MESSAGE = "WIP: Auto-commit by Alars"

_STASH_LINE = re.compile(r"^stash@\{(\d+)\}:\s?(.*)$")


def stash_tag(name: str) -> str:
    return f"{STASH_NAMESPACE}: {name}"


class GitClient:
    """
    Thin adapter over the ``git`` binary.

    Every method except ``branch_exists`` and ``pop_stash_named`` lets
    ``ToolInvocationFailed`` propagate untouched.
    """

    def __init__(self, executable: str = "git") -> None:
        self.executable = executable

    def _git(self, path: Path, *args: str) -> str:
        return run_command([self.executable, *args], cwd=path)

    def is_clean(self, path: Path) -> bool:
        return not self._git(path, "status", "--porcelain").strip()

    def discard_all(self, path: Path) -> None:
        self._git(path, "reset", "--hard", "HEAD")
        self._git(path, "clean", "-fd")

    def stash(self, path: Path, message: Optional[str] = None) -> None:
        if not message:
            message = f"Alars auto-stash: {datetime.now(timezone.utc).isoformat(timespec='seconds')}"
        self._git(path, "stash", "push", "-m", message)

    def stash_named(self, path: Path, name: str) -> None:
        self._git(path, "stash", "push", "-m", stash_tag(name))

    def _stash_entries(self, path: Path) -> List[Tuple[str, str]]:
        entries: List[Tuple[str, str]] = []
        for line in self._git(path, "stash", "list").splitlines():
            match = _STASH_LINE.match(line.strip())
            if match:
                entries.append((match.group(1), match.group(2)))
        return entries

    def list_stashes(self, path: Path) -> List[str]:
        return [description for _, description in self._stash_entries(path)]

    def pop_stash_named(self, path: Path, name: str) -> bool:
        tag = stash_tag(name)
        # Pop by the index git printed, not the position in the parsed list.
        for index, description in self._stash_entries(path):
            if tag in description:
                LOG.debug("Popping stash@{%s} (%s)", index, description)
                self._git(path, "stash", "pop", f"stash@{{{index}}}")
                return True
        return False

    def create_branch(self, path: Path, name: str, commit_first: bool) -> None:
        if commit_first:
            self._git(path, "add", ".")
            self._git(path, "commit", "-m", AUTO_COMMIT_MESSAGE)
        self._git(path, "checkout", "-b", name)

    def branch_exists(self, path: Path, name: str) -> bool:
        try:
            self._git(path, "rev-parse", "--verify", "--quiet", f"refs/heads/{name}")
        except ToolInvocationFailed:
            return False
        return True

    def current_branch(self, path: Path) -> str:
        return self._git(path, "rev-parse", "--abbrev-ref", "HEAD").strip()

    def switch_branch(self, path: Path, name: str) -> None:
        self._git(path, "checkout", name)

    def pull(self, path: Path, branch: str) -> None:
        if self.current_branch(path) != branch:
            self.switch_branch(path, branch)
        self._git(path, "pull", "origin", branch)
