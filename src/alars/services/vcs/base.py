from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Protocol


class VersionControlClient(Protocol):
    """Repository hygiene commands used by the executor and changesets."""

    def is_clean(self, path: Path) -> bool:  # pragma: no cover
        ...

    def discard_all(self, path: Path) -> None:  # pragma: no cover
        ...

    def stash(self, path: Path, message: Optional[str] = None) -> None:  # pragma: no cover
        ...

    def stash_named(self, path: Path, name: str) -> None:  # pragma: no cover
        ...

    def list_stashes(self, path: Path) -> List[str]:  # pragma: no cover
        ...

    def pop_stash_named(self, path: Path, name: str) -> bool:  # pragma: no cover
        ...

    def create_branch(self, path: Path, name: str, commit_first: bool) -> None:  # pragma: no cover
        ...

    def branch_exists(self, path: Path, name: str) -> bool:  # pragma: no cover
        ...

    def current_branch(self, path: Path) -> str:  # pragma: no cover
        ...

    def switch_branch(self, path: Path, name: str) -> None:  # pragma: no cover
        ...

    def pull(self, path: Path, branch: str) -> None:  # pragma: no cover
        ...
