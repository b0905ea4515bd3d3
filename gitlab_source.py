#!/usr/bin/env python3
"""GitLab API wrapper for discovering groups and projects."""

from __future__ import annotations

from typing import Callable, List, Optional

import gitlab
import requests

from config import (MIN_ACCESS_LEVEL, PAGE_CONTINUE_THRESHOLD, PER_PAGE,
                    GitLabConfig, SelectionConfig)
from logging_utils import Logger
from models import Group, Project
from security import SecurityValidator

LISTING_ERRORS = (gitlab.exceptions.GitlabError, requests.RequestException)


class GitLabSource:
    """Wrapper around the GitLab API to enumerate groups and their projects."""

    def __init__(self, gitlab_config: GitLabConfig, selection: SelectionConfig) -> None:
        self.config = gitlab_config
        self.selection = selection
        self.api: Optional[gitlab.Gitlab] = None

    def connect(self) -> bool:
        """Build and authenticate the API client.

        Returns False, leaving group sync disabled, when the URL or token is
        blank or the client cannot be built.
        """
        if not self.config.enabled:
            Logger.debug("group sync disabled, no gitlab url/token")
            return False

        try:
            url = SecurityValidator.validate_url(self.config.url)
        except ValueError as e:
            Logger.security_event("URL_VALIDATION_FAILED", str(e))
            Logger.error(f"client initialization failed: {e}")
            return False

        Logger.info(f"init gitlab API: {url}")
        try:
            api = gitlab.Gitlab(url=url, private_token=self.config.token.strip())
            api.auth()
        except gitlab.exceptions.GitlabAuthenticationError as e:
            Logger.error(f"authentication error (gitlab): {e}")
            return False
        except LISTING_ERRORS as e:
            Logger.error(f"client initialization failed: {e}")
            return False

        self.api = api
        Logger.info(f"client initialization succeeded: {url}")
        return True

    def list_groups(self) -> List[Group]:
        """Return every group to sync, subgroups included, ignore list applied."""
        self._require_api()
        groups: List[Group] = []

        if self.selection.groups:
            for full_path in self.selection.groups:
                root = Group.placeholder(full_path)
                groups.append(root)
                groups.extend(self._collect_subgroups(root))
        else:
            try:
                top_level = self._paginate(self.api.groups.list)
            except LISTING_ERRORS as e:
                Logger.error(f"list groups failed: {e}")
                top_level = []
            for obj in top_level:
                group = Group.from_api(obj)
                groups.append(group)
                groups.extend(self._collect_subgroups(group))

        return self._dedupe(self._filter_groups(groups))

    def list_projects(self, group: Group) -> List[Project]:
        """Return the projects of ``group``, or nothing when listing fails."""
        self._require_api()
        try:
            manager = self.api.groups.get(group.identifier, lazy=True).projects
            objs = self._paginate(manager.list)
        except LISTING_ERRORS as e:
            Logger.error(f"list projects failed: {group.full_path} {e}")
            return []

        projects = [Project.from_api(obj, self.config.clone_method) for obj in objs]
        ignored = set(self.selection.repo_ignore)
        if ignored:
            kept = []
            for project in projects:
                if project.clone_url in ignored:
                    Logger.warn(f"ignoring: {project.clone_url}")
                    continue
                kept.append(project)
            projects = kept
        return projects

    def _collect_subgroups(self, root: Group) -> List[Group]:
        """Walk the subgroup tree below ``root`` depth-first with a worklist.

        A failed listing drops only the subtree below that group. Ignored
        subgroups are neither kept nor expanded.
        """
        found: List[Group] = []
        stack = [root]
        while stack:
            parent = stack.pop()
            try:
                manager = self.api.groups.get(parent.identifier, lazy=True).subgroups
                objs = self._paginate(manager.list)
            except LISTING_ERRORS as e:
                Logger.error(f"list sub group failed: {parent.full_path} {e}")
                continue
            children = self._filter_groups([Group.from_api(obj) for obj in objs])
            found.extend(children)
            stack.extend(reversed(children))
        return found

    def _paginate(self, list_page: Callable[..., list]) -> list:
        """Fetch pages until one comes back shorter than the threshold."""
        items: list = []
        page = 1
        while True:
            batch = list_page(
                page=page,
                per_page=PER_PAGE,
                min_access_level=MIN_ACCESS_LEVEL,
                get_all=False,
            )
            items.extend(batch)
            if len(batch) < PAGE_CONTINUE_THRESHOLD:
                return items
            page += 1

    def _filter_groups(self, groups: List[Group]) -> List[Group]:
        ignored = set(self.selection.group_ignore)
        if not ignored:
            return groups
        return [group for group in groups if group.full_path not in ignored]

    @staticmethod
    def _dedupe(groups: List[Group]) -> List[Group]:
        seen = set()
        unique: List[Group] = []
        for group in groups:
            if group.full_path in seen:
                continue
            seen.add(group.full_path)
            unique.append(group)
        return unique

    def _require_api(self) -> None:
        if self.api is None:
            raise RuntimeError("gitlab API not initialized")
