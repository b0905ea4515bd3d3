#!/usr/bin/env python3
"""Classification and decomposition of git remote URLs."""

from __future__ import annotations

import re
from dataclasses import dataclass

from security import SecurityValidator

SSH_URL_PATTERN = re.compile(r"^git@(.*):(.*)/(.*)\.git$")
HTTP_URL_PATTERN = re.compile(r"^(https?://.*?)/(.*)/(.*)\.git$")

GIT_URL_PREFIXES = ("git@", "http://", "https://")
GIT_URL_SUFFIX = ".git"


class NotAGitUrlError(ValueError):
    """Raised when a string cannot be used as a git remote URL."""

    def __init__(self, url: str, reason: str = "is not a git url") -> None:
        super().__init__(f"{url} {reason}")
        self.url = url


@dataclass(frozen=True)
class GitUrl:
    """A remote URL split into the pieces that decide its local location."""
    url: str
    domain: str
    group_path: str
    repo_name: str


def is_git_url(url: str) -> bool:
    """Loose check: any accepted prefix or the .git suffix is enough."""
    lowered = url.lower()
    return lowered.startswith(GIT_URL_PREFIXES) or lowered.endswith(GIT_URL_SUFFIX)


def parse_git_url(url: str) -> GitUrl:
    """Split ``url`` into domain, group path and repository name.

    SSH form ``git@host:group/sub/repo.git`` gives domain ``host``; HTTP(S)
    form ``https://host/group/sub/repo.git`` gives domain ``https://host``.
    Both give group path ``group/sub`` and repository name ``repo``.

    Raises NotAGitUrlError both for strings that fail the loose check and for
    strings that pass it but do not fit either layout.
    """
    url = url.strip()
    if not is_git_url(url):
        raise NotAGitUrlError(url)

    if url.lower().startswith("git@"):
        pattern = SSH_URL_PATTERN
    else:
        pattern = HTTP_URL_PATTERN

    match = pattern.match(url)
    if match is None:
        raise NotAGitUrlError(url, "does not match a known git url layout")

    domain, group_path, repo_name = match.groups()
    group_path = group_path.strip("/")
    if not domain or not group_path or not repo_name:
        raise NotAGitUrlError(url, "is missing a host, group or repository name")

    try:
        SecurityValidator.validate_relative_path(group_path)
        SecurityValidator.validate_relative_path(repo_name)
    except ValueError as e:
        raise NotAGitUrlError(url, f"does not map to a local path: {e}") from e

    return GitUrl(url=url, domain=domain, group_path=group_path, repo_name=repo_name)
