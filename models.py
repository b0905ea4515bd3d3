#!/usr/bin/env python3
"""Plain records for groups and projects fetched from GitLab."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from config import CloneMethod


@dataclass(frozen=True)
class Group:
    """A GitLab group, either fetched or named in configuration."""
    id: Optional[int]
    full_path: str

    @property
    def identifier(self) -> Union[int, str]:
        """Value accepted by the groups API: the id, or the full path."""
        return self.id if self.id is not None else self.full_path

    @classmethod
    def from_api(cls, obj: object) -> "Group":
        return cls(id=getattr(obj, "id", None), full_path=getattr(obj, "full_path", ""))

    @classmethod
    def placeholder(cls, full_path: str) -> "Group":
        return cls(id=None, full_path=full_path)


@dataclass(frozen=True)
class Project:
    """A GitLab project reduced to what a local sync needs."""
    id: Optional[int]
    path: str
    path_with_namespace: str
    clone_url: str

    @classmethod
    def from_api(cls, obj: object, clone_method: CloneMethod) -> "Project":
        if clone_method == CloneMethod.SSH:
            clone_url = getattr(obj, "ssh_url_to_repo", "")
        else:
            clone_url = getattr(obj, "http_url_to_repo", "")
        return cls(
            id=getattr(obj, "id", None),
            path=getattr(obj, "path", ""),
            path_with_namespace=getattr(obj, "path_with_namespace", ""),
            clone_url=clone_url or "",
        )
