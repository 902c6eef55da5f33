from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Protocol

from ...domain.models import BuildUnit, RunTarget


class BuildToolClient(Protocol):
    """Build toolchain operations the executor relies on."""

    def discover_build_unit(self, path: Path) -> BuildUnit:  # pragma: no cover
        ...

    def list_targets(self, path: Path) -> List[str]:  # pragma: no cover
        ...

    def build(self, path: Path, target: str, verbose: bool) -> str:  # pragma: no cover
        ...

    def test(self, path: Path, target: str) -> str:  # pragma: no cover
        ...

    def run(self, path: Path, target: str, run_target_id: Optional[str] = None) -> str:  # pragma: no cover
        ...

    def clean(self, path: Path, target: Optional[str] = None) -> None:  # pragma: no cover
        ...

    def purge_caches(self) -> None:  # pragma: no cover
        ...

    def list_run_targets(self) -> List[RunTarget]:  # pragma: no cover
        ...

    def reinstall_dependencies(self, path: Path) -> List[str]:  # pragma: no cover
        ...
