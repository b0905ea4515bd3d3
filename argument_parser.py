#!/usr/bin/env python3
"""Command line argument parsing and configuration loading."""

from __future__ import annotations

import argparse
import os
import sys
from typing import Any, Dict, List, Optional, Sequence, Tuple

import yaml

from config import (DEFAULT_CONFIG_FILE, VERSION, CloneMethod, Config,
                    ConfigError, GitLabConfig, SelectionConfig)
from logging_utils import Logger
from security import SecurityValidator

# Exit codes
EXIT_CONFIG_ERROR = 2


def _create_argument_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser."""
    parser = argparse.ArgumentParser(
        description="Clone or pull every GitLab repository listed in a config file",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s
  %(prog)s -c team.yml
  GITLAB_TOKEN=glpat-... %(prog)s -c team.yml
        """,
    )
    parser.add_argument(
        "-c",
        "--config",
        dest="config_file",
        default=DEFAULT_CONFIG_FILE,
        help=f"Configuration file name (default: {DEFAULT_CONFIG_FILE})",
    )
    parser.add_argument(
        "-version",
        "--version",
        action="version",
        version=f"Version: {VERSION}",
        help="Print the version number and exit",
    )
    return parser


def _read_config_file(config_file: str) -> Dict[str, Any]:
    """Read the YAML document, an empty file being an empty mapping."""
    try:
        with open(config_file, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except OSError as e:
        raise ConfigError(f"cannot read {config_file}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"cannot parse {config_file}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{config_file} must contain a mapping at the top level")
    return data


def _string_field(data: Dict[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, (str, int, float)):
        raise ConfigError(f"'{key}' must be a string")
    return str(value)


def _list_field(data: Dict[str, Any], key: str) -> Tuple[str, ...]:
    value = data.get(key)
    if value is None:
        return ()
    if not isinstance(value, list) or not all(
        isinstance(v, (str, int, float)) for v in value
    ):
        raise ConfigError(f"'{key}' must be a list of strings")
    entries = (str(v).strip() for v in value)
    return tuple(entry for entry in entries if entry)


def _clone_method(data: Dict[str, Any]) -> CloneMethod:
    raw = _string_field(data, "cloneMethod").strip().lower() or CloneMethod.SSH.value
    try:
        return CloneMethod(raw)
    except ValueError as e:
        choices = ", ".join(method.value for method in CloneMethod)
        raise ConfigError(f"'cloneMethod' must be one of: {choices}") from e


def _validate_groups(groups: Sequence[str]) -> Tuple[str, ...]:
    validated: List[str] = []
    for group in groups:
        try:
            validated.append(SecurityValidator.validate_group_path(group))
        except ValueError as e:
            Logger.security_event(
                "CONFIG_VALIDATION_FAILED", f"group '{group}' rejected: {e}"
            )
            raise ConfigError(f"invalid group '{group}': {e}") from e
    return tuple(validated)


def _resolve_root(path: str) -> str:
    """Blank means the current working directory."""
    if not path.strip():
        return os.getcwd()
    return os.path.abspath(os.path.expanduser(path.strip()))


def load_config(config_file: str) -> Config:
    """Build a Config from a YAML file, raising ConfigError on bad input."""
    data = _read_config_file(config_file)

    token = _string_field(data, "token").strip() or os.getenv("GITLAB_TOKEN", "")

    return Config(
        gitlab=GitLabConfig(
            url=_string_field(data, "url").strip(),
            token=token,
            clone_method=_clone_method(data),
        ),
        path=_resolve_root(_string_field(data, "path")),
        selection=SelectionConfig(
            groups=_validate_groups(_list_field(data, "groups")),
            repos=_list_field(data, "repos"),
            repo_ignore=_list_field(data, "repoIgnore"),
            group_ignore=_list_field(data, "groupIgnore"),
        ),
        config_file=config_file,
    )


def parse_arguments(argv: Optional[Sequence[str]] = None) -> Config:
    """Parse command line arguments and return the loaded configuration."""
    parser = _create_argument_parser()
    args = parser.parse_args(argv)

    config_file = args.config_file.strip() or DEFAULT_CONFIG_FILE
    try:
        cfg = load_config(config_file)
    except ConfigError as e:
        Logger.error(f"configuration initialization failed: {e}")
        sys.exit(EXIT_CONFIG_ERROR)

    Logger.info(f"configuration initialized successfully: {config_file}")
    return cfg
