#!/usr/bin/env python3
"""Logging utilities for gitlab-sync."""

import os
import sys
import time

import colorama

from security import SecurityValidator

# Initialize colorama for cross-platform colored output
colorama.init(autoreset=True)


class Logger:
    """Colored console output with credentials stripped from every line."""

    PROCESS_NAME = "gitlab-sync"

    @classmethod
    def debug(cls, *messages: str) -> None:
        cls._write_stdout(colorama.Fore.LIGHTBLACK_EX, *cls._sanitize(messages))

    @classmethod
    def info(cls, *messages: str) -> None:
        cls._write_stdout(colorama.Fore.CYAN, *cls._sanitize(messages))

    @classmethod
    def success(cls, *messages: str) -> None:
        cls._write_stdout(colorama.Fore.GREEN, *cls._sanitize(messages))

    @classmethod
    def banner(cls, *messages: str) -> None:
        cls._write_stdout(colorama.Fore.LIGHTGREEN_EX, *cls._sanitize(messages))

    @classmethod
    def warn(cls, *messages: str) -> None:
        cls._write_stdout(colorama.Fore.YELLOW, *cls._sanitize(messages))

    @classmethod
    def error(cls, *messages: str) -> None:
        cls._write_stderr(colorama.Fore.RED, *cls._sanitize(messages))

    @classmethod
    def security_event(cls, event_type: str, details: str) -> None:
        """Log security-relevant events such as rejected configuration."""
        sanitized_details = SecurityValidator.sanitize_for_logging(details)
        timestamp = time.strftime("%Y-%m-%d %H:%M:%S")
        cls._write_stderr(
            colorama.Fore.MAGENTA,
            f"[SECURITY:{event_type}] {timestamp}: {sanitized_details}",
        )

    @staticmethod
    def _sanitize(messages) -> list:
        return [SecurityValidator.sanitize_for_logging(str(m)) for m in messages]

    @classmethod
    def _write_stdout(cls, color: str, *messages: str) -> None:
        sys.stdout.write(cls._format_line(color, *messages) + "\n")
        sys.stdout.flush()

    @classmethod
    def _write_stderr(cls, color: str, *messages: str) -> None:
        sys.stderr.write(cls._format_line(color, *messages) + "\n")
        sys.stderr.flush()

    @classmethod
    def _get_header(cls) -> str:
        return f"[{cls.PROCESS_NAME}:{os.getpid()}]"

    @classmethod
    def _format_line(cls, color: str, *messages: str) -> str:
        header = cls._get_header()
        message = " ".join(str(m) for m in messages)
        return f"{color}{header}{colorama.Style.RESET_ALL} {message}"
