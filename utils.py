#!/usr/bin/env python3
"""Utility functions for gitolite-to-gitlab."""

import re
from typing import Dict, Iterable, List, Tuple

from logging_utils import Logger

ADMIN_REPO_NAME = "gitolite-admin"
MARKER_SUFFIX = "-migrated"

# Characters GitLab accepts in a project path
ALLOWED_NAME_PATTERN = re.compile(r"[A-Za-z0-9_.-]+")
DISALLOWED_CHAR_PATTERN = re.compile(r"[^A-Za-z0-9_.-]")

REPO_LINE_PATTERN = re.compile(r"^repo\s+(.+)$")


def normalize_project_name(name: str) -> str:
    """Map a gitolite repository name to a GitLab project path.

    Names made only of letters, digits, '_', '.' and '-' are kept as is,
    every other character becomes '-'.
    Example: 'bar/baz' -> 'bar-baz'
    """
    if ALLOWED_NAME_PATTERN.fullmatch(name):
        return name
    return DISALLOWED_CHAR_PATTERN.sub("-", name)


def parse_repo_list(
    conf_text: str, exclude: Iterable[str] = (ADMIN_REPO_NAME,)
) -> List[str]:
    """Extract repository names from gitolite.conf content.

    A line may declare several repositories (``repo foo bar``); each of them
    is returned once, in order of first appearance.
    """
    excluded = set(exclude)
    repos: List[str] = []
    seen = set()
    for line in conf_text.splitlines():
        match = REPO_LINE_PATTERN.match(line.split("#", 1)[0].rstrip())
        if not match:
            continue
        for name in match.group(1).split():
            if name in excluded or name in seen:
                continue
            if name.startswith("@"):
                Logger.warn(f"skipping group reference: {name}")
                continue
            seen.add(name)
            repos.append(name)
    return repos


def plan_project_names(repos: Iterable[str]) -> List[Tuple[str, str]]:
    """Return (gitolite_name, gitlab_name) pairs preserving order."""
    return [(repo, normalize_project_name(repo)) for repo in repos]


def find_name_collisions(plan: Iterable[Tuple[str, str]]) -> Dict[str, List[str]]:
    """Return GitLab names that more than one gitolite repository maps to."""
    sources: Dict[str, List[str]] = {}
    for lite_repo, lab_repo in plan:
        sources.setdefault(lab_repo, []).append(lite_repo)
    return {lab: lites for lab, lites in sources.items() if len(lites) > 1}


def find_reserved_name_clashes(plan: Iterable[Tuple[str, str]]) -> List[Tuple[str, str]]:
    """Return (gitolite_name, gitlab_name) pairs whose working directory entry
    is already taken by the admin clone or by another repository's marker.

    Example: 'gitolite/admin' -> 'gitolite-admin', or 'foo-migrated' next to 'foo'.
    """
    plan = list(plan)
    lab_names = {lab_repo for _, lab_repo in plan}
    clashes: List[Tuple[str, str]] = []
    for lite_repo, lab_repo in plan:
        if lab_repo == ADMIN_REPO_NAME:
            clashes.append((lite_repo, lab_repo))
        elif (
            lab_repo.endswith(MARKER_SUFFIX)
            and lab_repo[: -len(MARKER_SUFFIX)] in lab_names
        ):
            clashes.append((lite_repo, lab_repo))
    return clashes
