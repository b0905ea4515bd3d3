#!/usr/bin/env python3
"""Input validation and log redaction for gitlab-sync."""

import re
from typing import List, Optional


class SecurityValidator:
    """Validation of configuration inputs and sanitization of log output."""

    MAX_URL_LENGTH = 2048
    MAX_GROUP_PATH_LENGTH = 255

    SAFE_GROUP_PATH_PATTERN = re.compile(r"^[A-Za-z0-9._/-]+$")

    @classmethod
    def validate_url(cls, url: str, allowed_schemes: Optional[List[str]] = None) -> str:
        """Validate a hosting base URL."""
        if not url or not isinstance(url, str):
            raise ValueError("URL must be a non-empty string")

        url = url.strip()
        if len(url) > cls.MAX_URL_LENGTH:
            raise ValueError(f"URL exceeds maximum length of {cls.MAX_URL_LENGTH}")

        if "\x00" in url or any(ord(c) < 32 for c in url):
            raise ValueError("URL contains null bytes or control characters")

        if "://" not in url:
            raise ValueError("URL must include a scheme (http or https)")

        scheme, _, rest = url.partition("://")
        if not rest or rest.startswith("/"):
            raise ValueError("URL has no host")

        schemes = allowed_schemes or ["https", "http"]
        if scheme.lower() not in schemes:
            raise ValueError(
                f"URL scheme '{scheme}' not in allowed schemes: {schemes}"
            )

        return url

    @classmethod
    def validate_group_path(cls, group_path: str) -> str:
        """Validate a group full path such as 'team/backend'."""
        if not group_path or not isinstance(group_path, str):
            raise ValueError("Group path must be a non-empty string")

        if len(group_path) > cls.MAX_GROUP_PATH_LENGTH:
            raise ValueError(
                f"Group path exceeds maximum length of {cls.MAX_GROUP_PATH_LENGTH}"
            )

        if ".." in group_path:
            raise ValueError("Group path contains path traversal sequences")

        if not cls.SAFE_GROUP_PATH_PATTERN.match(group_path):
            raise ValueError("Group path contains invalid characters")

        return group_path.strip("/")

    @classmethod
    def validate_relative_path(cls, path: str) -> str:
        """Validate a slash-separated path that must stay below a local root."""
        if not path or not isinstance(path, str):
            raise ValueError("Path must be a non-empty string")

        if "\x00" in path or any(ord(c) < 32 for c in path):
            raise ValueError("Path contains null bytes or control characters")

        if path.startswith("/") or "\\" in path:
            raise ValueError("Path must be relative and use forward slashes")

        if any(segment in ("", ".", "..") for segment in path.split("/")):
            raise ValueError("Path contains empty or traversal segments")

        return path

    @classmethod
    def sanitize_for_logging(cls, message: str) -> str:
        """Sanitize message for safe logging by removing potential credentials."""
        if not message:
            return message

        patterns = [
            (r"(https?)://[^:/@\s]+:[^@\s]+@", r"\1://[REDACTED]@"),
            (r"(https?)://[^/@\s]+@", r"\1://[REDACTED]@"),
            (r"token[=:\s]+[^\s]+", "token=[REDACTED]"),
            (r"password[=:\s]+[^\s]+", "password=[REDACTED]"),
            (r"glpat-[A-Za-z0-9_-]+", "[GITLAB_TOKEN_REDACTED]"),
        ]

        sanitized = message
        for pattern, replacement in patterns:
            sanitized = re.sub(pattern, replacement, sanitized, flags=re.IGNORECASE)

        return sanitized
