#!/usr/bin/env python3
"""Clone-or-pull of a single repository into its local working copy."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from config import FALLBACK_BRANCH
from git_ops import GitClient, GitCommandError, is_working_copy
from logging_utils import Logger


class SyncOutcome(Enum):
    """What happened to one repository."""
    CLONED = "cloned"
    CLONE_FAILED = "clone_failed"
    PULLED = "pulled"
    PULL_FAILED = "pull_failed"


class RepoSyncError(Exception):
    """Raised when a working copy cannot be brought to a pullable state."""


class RepositorySync:
    """Brings one local path in line with its remote.

    A path without git metadata is cloned. An existing working copy is pulled,
    after switching to the fallback branch when its current branch no longer
    exists on the remote.
    """

    def __init__(
        self, git: Optional[GitClient] = None, fallback_branch: str = FALLBACK_BRANCH
    ) -> None:
        self.git = git or GitClient()
        self.fallback_branch = fallback_branch

    def sync(self, clone_url: str, local_path: str, label: str) -> SyncOutcome:
        Logger.success(f"******Project: {label} start fetching******")
        if not is_working_copy(local_path):
            Logger.success(
                f"{local_path} does not exist locally, cloning from {clone_url}"
            )
            if self.git.clone(clone_url, local_path):
                outcome = SyncOutcome.CLONED
            else:
                outcome = SyncOutcome.CLONE_FAILED
        else:
            self._ensure_branch_on_remote(local_path, label)
            Logger.info(f"{local_path} already exists, pulling the latest changes")
            if self.git.pull(local_path):
                outcome = SyncOutcome.PULLED
            else:
                outcome = SyncOutcome.PULL_FAILED
        Logger.success(f"******Project: {label} fetch complete******")
        return outcome

    def _ensure_branch_on_remote(self, local_path: str, label: str) -> None:
        try:
            branch = self.git.current_branch(local_path)
            exists = self.git.remote_has_branch(branch, local_path)
        except GitCommandError as e:
            Logger.error(
                f"{label}: could not check whether the local branch exists "
                f"on the remote: {e}"
            )
            raise RepoSyncError(str(e)) from e

        if exists:
            return

        Logger.warn(
            f"{label}: branch {branch} does not exist on the remote, "
            f"switching to {self.fallback_branch}"
        )
        try:
            self.git.checkout(local_path, self.fallback_branch)
        except GitCommandError as e:
            Logger.error(
                f"{label}: could not switch the branch to {self.fallback_branch}"
            )
            raise RepoSyncError(str(e)) from e
