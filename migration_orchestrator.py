#!/usr/bin/env python3
"""Main orchestrator for migrating gitolite repositories to GitLab."""

from __future__ import annotations

import re
import shutil
import subprocess
import sys
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from config import Config
from git_mirror import GitMirror
from gitlab_target import GitLabTarget
from gitolite_source import GitoliteSource
from logging_utils import Logger
from utils import (
    find_name_collisions,
    find_reserved_name_clashes,
    plan_project_names,
)
from work_dir import WorkDirStore

# Exit codes
EXIT_SUCCESS = 0
EXIT_EXECUTION_ERROR = 1
EXIT_INTERRUPTED = 130

CONFIRM_PATTERN = re.compile(r"[Yy]")


class MigrationOrchestrator:
    def __init__(
        self,
        cfg: Config,
        *,
        store: Optional[WorkDirStore] = None,
        git: Optional[GitMirror] = None,
        target: Optional[GitLabTarget] = None,
        prompt: Callable[[str], str] = input,
    ) -> None:
        self.cfg = cfg
        self.store = store or WorkDirStore(cfg.migration.work_dir)
        self.git = git or GitMirror()
        self.source = GitoliteSource(cfg.gitolite, self.store, self.git)
        self.target = target or GitLabTarget(cfg.gitlab, cfg.migration.push_method)
        self.prompt = prompt
        self.migrated = 0
        self.already_migrated = 0
        self.skipped = 0

    def run(self) -> int:
        try:
            if shutil.which(self.git.git) is None:
                Logger.error(f"'{self.git.git}' executable not found in PATH")
                return EXIT_EXECUTION_ERROR

            self.store.ensure()
            repos = self.source.fetch_repo_list()
            plan = self._plan_names(repos)

            if self.cfg.migration.dry_run:
                self._show_plan(plan)
                Logger.info("dry-run completed")
                return EXIT_SUCCESS

            self.target.connect()

            total = len(plan)
            for idx, (lite_repo, lab_repo) in enumerate(plan, start=1):
                self._process_single_repo(lite_repo, lab_repo, idx, total)

            Logger.success(
                f"done: {self.migrated} migrated, "
                f"{self.already_migrated} already migrated, {self.skipped} skipped"
            )
            return EXIT_SUCCESS
        except SystemExit as e:
            return int(e.code) if isinstance(e.code, int) else EXIT_EXECUTION_ERROR
        except KeyboardInterrupt:
            Logger.warn("interrupted; re-run to resume")
            return EXIT_INTERRUPTED
        except Exception as e:
            Logger.error(f"unexpected error: {e}")
            return EXIT_EXECUTION_ERROR

    def _plan_names(self, repos: List[str]) -> List[Tuple[str, str]]:
        """Return (gitolite_name, gitlab_name) pairs, refusing ambiguous names."""
        plan = plan_project_names(repos)
        collisions = find_name_collisions(plan)
        clashes = find_reserved_name_clashes(plan)
        if collisions or clashes:
            for lab_repo, lite_repos in collisions.items():
                Logger.error(
                    f"{', '.join(lite_repos)} would all be migrated to '{lab_repo}'"
                )
            for lite_repo, lab_repo in clashes:
                Logger.error(
                    f"{lite_repo} would be migrated to '{lab_repo}', which is "
                    "reserved in the working directory"
                )
            Logger.error("rename the colliding repositories and try again")
            sys.exit(EXIT_EXECUTION_ERROR)
        return plan

    def _show_plan(self, plan: List[Tuple[str, str]]) -> None:
        total = len(plan)
        for idx, (lite_repo, lab_repo) in enumerate(plan, start=1):
            status = "migrated" if self.store.has_record(lab_repo) else "pending"
            Logger.info(
                f"({idx}/{total}) {lite_repo} -> "
                f"{self.cfg.gitlab.username}/{lab_repo} [{status}]"
            )

    def _confirm(self, lite_repo: str) -> bool:
        try:
            reply = self.prompt(f"Do you want to migrate repo '{lite_repo}'? [y/N] ")
        except EOFError:
            return False
        return CONFIRM_PATTERN.fullmatch(reply.strip()) is not None

    def _process_single_repo(
        self, lite_repo: str, lab_repo: str, idx: int, total: int
    ) -> None:
        if self.cfg.migration.interactive and not self._confirm(lite_repo):
            self.skipped += 1
            return

        Logger.info(f"({idx}/{total}) {lite_repo}")

        if lab_repo != lite_repo:
            Logger.info(
                f"{lite_repo}: invalid characters in gitolite name, "
                f"replacing them with dash for gitlab ({lab_repo})"
            )

        if self.store.has_record(lab_repo):
            Logger.success(f"{lite_repo}: already migrated")
            self.already_migrated += 1
            return

        self._migrate_single_repo(lite_repo, lab_repo)
        self.migrated += 1

    def _migrate_single_repo(self, lite_repo: str, lab_repo: str) -> None:
        mirror_dir = self._fetch_mirror(lite_repo, lab_repo)
        self._create_project(lite_repo, lab_repo)
        self._push_mirror(lite_repo, lab_repo, mirror_dir)
        self._record_and_clean(lab_repo)
        Logger.success(f"{lite_repo}: migrated")

    def _fetch_mirror(self, lite_repo: str, lab_repo: str) -> Path:
        repo_uri = self.source.repo_url(lite_repo)

        def fetch(dest: Path) -> None:
            Logger.info(f"{lite_repo}@gitolite: download from {repo_uri}")
            self.git.clone_mirror(repo_uri, dest)

        try:
            return self.store.get_or_create_mirror(lab_repo, fetch)
        except subprocess.CalledProcessError as e:
            Logger.error(
                f"{lite_repo}@gitolite: clone failed "
                f"(exit {e.returncode}) {(e.stderr or '').strip()}"
            )
            sys.exit(EXIT_EXECUTION_ERROR)

    def _create_project(self, lite_repo: str, lab_repo: str) -> None:
        Logger.info(
            f"{lite_repo}@gitlab: create project "
            f"{self.cfg.gitlab.url}/{self.cfg.gitlab.username}/{lab_repo}"
        )
        if not self.target.create_project(lab_repo):
            Logger.info(f"{lite_repo}@gitlab: already exists")

    def _push_mirror(self, lite_repo: str, lab_repo: str, mirror_dir: Path) -> None:
        push_uri = self.target.push_url(lab_repo)
        Logger.info(f"{lite_repo}@gitlab: upload to {push_uri}")
        try:
            self.git.push_mirror(
                mirror_dir, push_uri, self.target.push_credentials()
            )
        except subprocess.CalledProcessError as e:
            Logger.error(
                f"{lite_repo}@gitlab: push failed "
                f"(exit {e.returncode}) {(e.stderr or '').strip()}"
            )
            sys.exit(EXIT_EXECUTION_ERROR)

    def _record_and_clean(self, lab_repo: str) -> None:
        if not lab_repo:
            Logger.error("this doesn't seem right, repo is empty; bailing")
            sys.exit(EXIT_EXECUTION_ERROR)
        self.store.remove_mirror(lab_repo)
        self.store.mark_record(lab_repo)
