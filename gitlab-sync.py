#!/usr/bin/env python3
"""
gitlab-sync - Clone or pull every repository of a set of GitLab groups.

This tool mirrors GitLab groups and subgroups, plus individually listed
repository URLs, into a local directory tree. Repositories missing locally
are cloned and existing working copies are pulled.

Licensed under the MIT License.

License: MIT
"""

from __future__ import annotations

import sys
from typing import NoReturn

from argument_parser import parse_arguments
from sync_orchestrator import SyncOrchestrator

# Exit codes
EXIT_EXECUTION_ERROR = 1


def main() -> NoReturn:
    if __name__ != "__main__":
        sys.exit(EXIT_EXECUTION_ERROR)

    cfg = parse_arguments()
    orchestrator = SyncOrchestrator(cfg)
    sys.exit(orchestrator.run())


if __name__ == "__main__":
    main()
