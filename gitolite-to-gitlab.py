#!/usr/bin/env python3
"""
gitolite-to-gitlab - Migrate gitolite repositories to GitLab.

Downloads the repository list from the `gitolite-admin` repository and
mirrors all repositories to a GitLab host under a given user as private
projects. Runs are resumable: migrated repositories are remembered in the
working directory and skipped on the next run.
"""

from __future__ import annotations

import sys
from typing import NoReturn

from argument_parser import parse_arguments
from migration_orchestrator import MigrationOrchestrator

# Exit codes
EXIT_SUCCESS = 0
EXIT_EXECUTION_ERROR = 1


def main() -> NoReturn:
    if __name__ != "__main__":
        sys.exit(EXIT_EXECUTION_ERROR)

    cfg = parse_arguments()
    orchestrator = MigrationOrchestrator(cfg)
    sys.exit(orchestrator.run())


if __name__ == "__main__":
    main()
