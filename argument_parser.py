#!/usr/bin/env python3
"""Command line argument parsing and configuration building."""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path
from typing import List, Optional

from config import Config, GitLabConfig, GitoliteConfig, MigrationConfig, PushMethod
from logging_utils import Logger
from security import SecurityValidator

# Exit codes
EXIT_EXECUTION_ERROR = 1

BASE_URI_ENV = "GITOLITE_BASE_URI"


def _default_work_dir() -> Path:
    """tmp/ next to the program being run."""
    return Path(sys.argv[0]).resolve().parent / "tmp"


def _create_argument_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser."""
    parser = argparse.ArgumentParser(
        description=(
            "Mirror all repositories listed in a gitolite-admin repository to a "
            "GitLab host as private projects of a given user"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Examples:
  %(prog)s gitolite@example.com:gitolite-admin.git https://gitlab.com jdoe glpat-...
  %(prog)s -i gitolite@example.com:gitolite-admin.git https://gitlab.example.com jdoe glpat-...
  %(prog)s --dry-run gitolite@example.com:gitolite-admin.git https://gitlab.com jdoe glpat-...

Set {BASE_URI_ENV} to override the gitolite base URI, which otherwise is the
part of <gitolite-admin-uri> before the first ':'.

Exit status:
  0    success, or help shown with -h
  1    operational error (clone, API or push failure)
  2    usage error (arguments, <gitlab-url> without protocol)
  130  interrupted; re-run to resume
        """,
    )
    return parser


def _add_positional_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "gitolite_admin_uri",
        metavar="gitolite-admin-uri",
        help="Repository URI for the gitolite-admin repo "
        "(e.g., gitolite@example.com:gitolite-admin.git)",
    )
    parser.add_argument(
        "gitlab_url",
        metavar="gitlab-url",
        help="Where your GitLab is hosted (e.g., https://gitlab.com)",
    )
    parser.add_argument(
        "gitlab_user",
        metavar="gitlab-user",
        help="Username for which the projects should be created",
    )
    parser.add_argument(
        "gitlab_token",
        metavar="gitlab-token",
        help="Private token for the API to create the projects",
    )


def _add_behavior_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-i",
        "--interactive",
        action="store_true",
        dest="interactive",
        help="Confirm each repository to migrate",
    )
    parser.add_argument(
        "-n",
        "--dry-run",
        action="store_true",
        dest="dry_run",
        help="List the migration plan without doing it",
    )
    parser.add_argument(
        "-w",
        "--work-dir",
        dest="work_dir",
        default=None,
        help="Directory for cached clones and migration markers "
        "(default: tmp/ next to this program)",
    )
    parser.add_argument(
        "--push-method",
        dest="push_method",
        choices=[method.value for method in PushMethod],
        default=PushMethod.SSH.value,
        help="Push to GitLab over ssh (git@host:user/repo.git) or https "
        "(default: ssh)",
    )


def _resolve_base_uri(admin_uri: str) -> str:
    """Gitolite base URI from the environment or the admin repo URI."""
    base_uri = os.getenv(BASE_URI_ENV)
    if not base_uri:
        base_uri = admin_uri.split(":", 1)[0]
    if not base_uri:
        Logger.error("cannot figure out gitolite base uri")
        sys.exit(EXIT_EXECUTION_ERROR)
    return base_uri


def parse_arguments(argv: Optional[List[str]] = None) -> Config:
    """Parse command line arguments and return configuration object."""
    parser = _create_argument_parser()
    _add_behavior_arguments(parser)
    _add_positional_arguments(parser)

    args = parser.parse_args(argv)

    try:
        gitlab_url = SecurityValidator.validate_url(args.gitlab_url, ["http", "https"])
    except ValueError as e:
        parser.error(f"<gitlab-url>: {e}")
    try:
        gitlab_user = SecurityValidator.validate_username(args.gitlab_user)
    except ValueError as e:
        parser.error(f"<gitlab-user>: {e}")
    if not args.gitlab_token:
        parser.error("<gitlab-token> must not be empty")

    work_dir = args.work_dir or str(_default_work_dir())
    try:
        work_dir = SecurityValidator.validate_file_path(work_dir)
    except ValueError as e:
        parser.error(f"--work-dir: {e}")

    SecurityValidator.register_secret(args.gitlab_token)

    return Config(
        gitolite=GitoliteConfig(
            admin_uri=args.gitolite_admin_uri,
            base_uri=_resolve_base_uri(args.gitolite_admin_uri),
        ),
        gitlab=GitLabConfig(
            url=gitlab_url,
            username=gitlab_user,
            token=args.gitlab_token,
        ),
        migration=MigrationConfig(
            interactive=args.interactive,
            dry_run=args.dry_run,
            work_dir=Path(work_dir),
            push_method=PushMethod(args.push_method),
        ),
    )
