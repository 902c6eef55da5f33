from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Optional, Sequence

from ..domain.errors import ToolInvocationFailed


LOG = logging.getLogger(__name__)


def run_command(args: Sequence[str], cwd: Optional[Path] = None) -> str:
    """
    Run an external tool and return its stdout.

    Non-zero exits (and executables that cannot be started) raise
    ``ToolInvocationFailed`` carrying everything the tool printed.
    """
    LOG.debug("Running %s (cwd=%s)", " ".join(args), cwd)
    try:
        result = subprocess.run(
            list(args),
            capture_output=True,
            encoding="utf-8",
            errors="replace",
            check=True,
            cwd=cwd,
        )
    except FileNotFoundError as exc:
        raise ToolInvocationFailed(127, str(exc), args) from exc
    except subprocess.CalledProcessError as exc:
        captured = "\n".join(part for part in (exc.stdout, exc.stderr) if part)
        LOG.debug("%s exited with %s: %s", args[0], exc.returncode, exc.stderr)
        raise ToolInvocationFailed(exc.returncode, captured, args) from exc
    return result.stdout or ""
