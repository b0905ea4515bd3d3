#!/usr/bin/env python3
"""Configuration dataclasses and constants for gitlab-sync."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Tuple

VERSION = "1.0.0"

DEFAULT_CONFIG_FILE = "config.yml"

# Branch a working copy is switched to when its branch is gone upstream
FALLBACK_BRANCH = "master"

# GitLab "Developer" access level
MIN_ACCESS_LEVEL = 30
PER_PAGE = 100
# Paging stops at the first page shorter than this, not shorter than PER_PAGE
PAGE_CONTINUE_THRESHOLD = 50


class ConfigError(Exception):
    """Raised when the configuration file cannot be read or is malformed."""


class CloneMethod(Enum):
    """Enumeration for git clone methods."""
    HTTPS = "https"
    SSH = "ssh"


@dataclass(frozen=True)
class GitLabConfig:
    """GitLab-specific configuration."""
    url: str
    token: str
    clone_method: CloneMethod = CloneMethod.SSH

    @property
    def enabled(self) -> bool:
        return bool(self.url.strip()) and bool(self.token.strip())


@dataclass(frozen=True)
class SelectionConfig:
    """Which groups and repositories to sync, and which to skip."""
    groups: Tuple[str, ...] = field(default_factory=tuple)
    repos: Tuple[str, ...] = field(default_factory=tuple)
    repo_ignore: Tuple[str, ...] = field(default_factory=tuple)
    group_ignore: Tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class Config:
    """Main configuration for a sync run."""
    gitlab: GitLabConfig
    path: str
    selection: SelectionConfig
    config_file: str = DEFAULT_CONFIG_FILE
