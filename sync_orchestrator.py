#!/usr/bin/env python3
"""Main orchestrator for syncing configured repositories and GitLab groups."""

from __future__ import annotations

import os
from collections import Counter
from typing import Optional

from config import Config
from gitlab_source import GitLabSource
from logging_utils import Logger
from models import Group
from repo_sync import RepoSyncError, RepositorySync, SyncOutcome
from security import SecurityValidator
from url_parser import NotAGitUrlError, parse_git_url

# Exit codes
EXIT_SUCCESS = 0
EXIT_EXECUTION_ERROR = 1


class SyncOrchestrator:
    def __init__(
        self,
        cfg: Config,
        source: Optional[GitLabSource] = None,
        syncer: Optional[RepositorySync] = None,
    ) -> None:
        self.cfg = cfg
        self.gl = source or GitLabSource(cfg.gitlab, cfg.selection)
        self.syncer = syncer or RepositorySync()
        self.stats: Counter = Counter()

    def run(self) -> int:
        try:
            if not self._sync_configured_repos():
                return EXIT_EXECUTION_ERROR

            if self.gl.connect():
                self._sync_groups()

            Logger.banner("******** all executed ********")
            self._report()
            return EXIT_SUCCESS
        except Exception as e:
            Logger.error(f"unexpected error: {e}")
            return EXIT_EXECUTION_ERROR

    def _sync_configured_repos(self) -> bool:
        """Sync the explicit ``repos`` list; the first failure stops the run."""
        repos = self.cfg.selection.repos
        total = len(repos)
        for idx, url in enumerate(repos, start=1):
            try:
                repo = parse_git_url(url)
            except NotAGitUrlError as e:
                Logger.error(f"[{idx}/{total}] {e}")
                return False

            local_path = os.path.join(self.cfg.path, repo.group_path, repo.repo_name)
            Logger.info(f"[{idx}/{total}] sync: {repo.url} -> {local_path}")
            try:
                outcome = self.syncer.sync(repo.url, local_path, repo.url)
            except RepoSyncError as e:
                self.stats["failed"] += 1
                Logger.error(f"stopping: {repo.url} could not be synced: {e}")
                return False
            self._record(outcome)
        return True

    def _sync_groups(self) -> None:
        groups = self.gl.list_groups()
        Logger.info(f"found {len(groups)} groups to process")
        for group in groups:
            self._sync_group(group)

    def _sync_group(self, group: Group) -> None:
        Logger.success(f"******Group: {group.full_path} start fetching******")
        projects = self.gl.list_projects(group)
        if not projects:
            Logger.error(f"******Group: {group.full_path} does not exist, skipped******")

        for project in projects:
            try:
                relative = SecurityValidator.validate_relative_path(
                    project.path_with_namespace
                )
            except ValueError as e:
                Logger.error(f"skipping {project.path_with_namespace!r}: {e}")
                self.stats["failed"] += 1
                continue
            local_path = os.path.join(self.cfg.path, relative)
            try:
                outcome = self.syncer.sync(project.clone_url, local_path, project.path)
            except RepoSyncError:
                self.stats["failed"] += 1
                continue
            self._record(outcome)

        Logger.success(f"******Group: {group.full_path} fetch complete******")

    def _record(self, outcome: SyncOutcome) -> None:
        self.stats[outcome.value] += 1

    def _report(self) -> None:
        summary = ", ".join(
            f"{outcome.value}={self.stats[outcome.value]}" for outcome in SyncOutcome
        )
        Logger.info(f"summary: {summary}, failed={self.stats['failed']}")
