#!/usr/bin/env python3
"""Thin wrapper around the git executable."""

from __future__ import annotations

import os
import subprocess
from typing import List, Optional, Sequence

from logging_utils import Logger

DEFAULT_REMOTE = "origin"


class GitCommandError(Exception):
    """Raised when a git invocation cannot be started or exits non-zero."""

    def __init__(
        self, args: Sequence[str], cwd: Optional[str], detail: str,
        returncode: Optional[int] = None,
    ) -> None:
        self.args_list = list(args)
        self.cwd = cwd
        self.returncode = returncode
        command = " ".join(self.args_list)
        where = f" in {cwd}" if cwd else ""
        super().__init__(f"'{command}'{where} failed: {detail}")


def is_working_copy(path: str) -> bool:
    """Return True when ``path`` holds git metadata."""
    return os.path.exists(os.path.join(path, ".git"))


class GitClient:
    """Runs git commands one at a time, blocking until each finishes."""

    def __init__(self, executable: str = "git", remote: str = DEFAULT_REMOTE) -> None:
        self.executable = executable
        self.remote = remote

    def current_branch(self, path: str) -> str:
        return self._output(["rev-parse", "--abbrev-ref", "HEAD"], cwd=path)

    def remote_has_branch(self, branch: str, path: str) -> bool:
        """Check whether ``branch`` exists as a head on the remote.

        ``git ls-remote --heads`` matches patterns against trailing path
        components, so ``x`` also lists ``refs/heads/feature/x``. Only an
        exact ``refs/heads/<branch>`` entry counts.
        """
        output = self._output(
            ["ls-remote", "--heads", self.remote, branch], cwd=path
        )
        wanted = f"refs/heads/{branch}"
        for line in output.splitlines():
            parts = line.split()
            if parts and parts[-1] == wanted:
                return True
        return False

    def clone(self, url: str, path: str) -> bool:
        try:
            self._run(["clone", "--progress", url, path])
        except GitCommandError as e:
            Logger.error(f"{path} clone failed: {e}")
            return False
        return True

    def pull(self, path: str) -> bool:
        try:
            self._run(["pull"], cwd=path)
        except GitCommandError as e:
            Logger.error(f"{path} pull failed: {e}")
            return False
        return True

    def checkout(self, path: str, branch: str) -> None:
        try:
            self._run(["checkout", branch], cwd=path)
        except GitCommandError as e:
            Logger.error(f"{path} checkout {branch} failed: {e}")
            raise

    def _command(self, args: List[str]) -> List[str]:
        return [self.executable, *args]

    def _run(self, args: List[str], cwd: Optional[str] = None) -> None:
        """Run git with stdout/stderr inherited from this process."""
        command = self._command(args)
        try:
            subprocess.run(command, cwd=cwd, check=True)
        except subprocess.CalledProcessError as e:
            raise GitCommandError(
                command, cwd, f"exit status {e.returncode}", e.returncode
            ) from e
        except OSError as e:
            raise GitCommandError(command, cwd, str(e)) from e

    def _output(self, args: List[str], cwd: Optional[str] = None) -> str:
        """Run git and return its stripped stdout."""
        command = self._command(args)
        try:
            result = subprocess.run(
                command,
                cwd=cwd,
                check=True,
                capture_output=True,
                text=True,
            )
        except subprocess.CalledProcessError as e:
            detail = (e.stderr or "").strip() or f"exit status {e.returncode}"
            raise GitCommandError(command, cwd, detail, e.returncode) from e
        except OSError as e:
            raise GitCommandError(command, cwd, str(e)) from e
        return result.stdout.strip()
