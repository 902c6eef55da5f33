from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..domain.errors import ChangesetNotFound
from ..services.interaction.base import InteractionPort
from ..services.vcs.base import VersionControlClient


LOG = logging.getLogger(__name__)

BRANCH_PREFIX = "changeset/"


def changeset_branch(changeset_id: str) -> str:
    return f"{BRANCH_PREFIX}{changeset_id}"


@dataclass
class ChangesetOutcome:
    branch: str
    stashed_as: Optional[str] = None
    created_branch: bool = False
    restored_stash: bool = False


class ChangesetManager:
    """
    Parks and resumes independent units of work.

    A changeset is the branch ``changeset/<id>``. Dirty work found when leaving
    a branch is stashed under that branch's name; resuming looks for a stash
    tagged with the changeset branch.
    """

    def __init__(self, vcs: VersionControlClient, interaction: InteractionPort) -> None:
        self.vcs = vcs
        self.interaction = interaction

    def start_fresh(self, path: Path, changeset_id: str) -> ChangesetOutcome:
        branch = changeset_branch(changeset_id)
        outcome = ChangesetOutcome(branch=branch, stashed_as=self._stash_dirty_work(path))

        if self.vcs.branch_exists(path, branch):
            self.interaction.notify(f"Branch '{branch}' already exists. Switching to it...")
            self.vcs.switch_branch(path, branch)
        else:
            self.interaction.notify(f"Creating new branch: {branch}")
            self.vcs.create_branch(path, branch, commit_first=False)
            outcome.created_branch = True
        return outcome

    def resume(self, path: Path, changeset_id: str) -> ChangesetOutcome:
        branch = changeset_branch(changeset_id)
        # Dirty work is stashed before the branch is known to exist.
        outcome = ChangesetOutcome(branch=branch, stashed_as=self._stash_dirty_work(path))

        if not self.vcs.branch_exists(path, branch):
            raise ChangesetNotFound(branch)

        self.interaction.notify(f"Switching to branch: {branch}")
        self.vcs.switch_branch(path, branch)

        self.interaction.notify("Looking for stashed changes for this changeset...")
        outcome.restored_stash = self.vcs.pop_stash_named(path, branch)
        if not outcome.restored_stash:
            LOG.debug("No stash tagged for %s", branch)
        return outcome

    def _stash_dirty_work(self, path: Path) -> Optional[str]:
        if self.vcs.is_clean(path):
            return None
        tag = self.vcs.current_branch(path)
        self.interaction.notify(f"Stashing uncommitted changes as '{tag}'...")
        self.vcs.stash_named(path, tag)
        return tag
