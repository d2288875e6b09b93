#!/usr/bin/env python3
"""Gitolite side: repository list discovery and source addresses."""

from __future__ import annotations

import shutil
import subprocess
import sys
from typing import List, Optional

from config import GitoliteConfig
from git_mirror import GitMirror
from logging_utils import Logger
from utils import parse_repo_list
from work_dir import WorkDirStore

# Exit codes
EXIT_EXECUTION_ERROR = 1

GITOLITE_CONF = "conf/gitolite.conf"


class GitoliteSource:
    """Reads the managed repositories out of the gitolite-admin repository."""

    def __init__(
        self,
        config: GitoliteConfig,
        store: WorkDirStore,
        git: Optional[GitMirror] = None,
    ) -> None:
        self.config = config
        self.store = store
        self.git = git or GitMirror()

    def repo_url(self, name: str) -> str:
        return f"{self.config.base_uri}:{name}.git"

    def fetch_repo_list(self) -> List[str]:
        Logger.info("gitolite-admin: retrieving repo list")
        admin_dir = self.store.config_repo_path
        if admin_dir.is_dir():
            Logger.info("gitolite-admin: found")
        else:
            Logger.info(
                f"gitolite-admin@gitolite: download from {self.config.admin_uri}"
            )
            try:
                self.git.clone(self.config.admin_uri, admin_dir)
            except subprocess.CalledProcessError as e:
                if admin_dir.exists():
                    shutil.rmtree(admin_dir)
                Logger.error(
                    f"failed to clone {self.config.admin_uri} "
                    f"(exit {e.returncode}) {(e.stderr or '').strip()}"
                )
                sys.exit(EXIT_EXECUTION_ERROR)

        conf_path = admin_dir / GITOLITE_CONF
        try:
            conf_text = conf_path.read_text(encoding="utf-8")
        except OSError as e:
            Logger.error(f"cannot read {conf_path}: {e}")
            sys.exit(EXIT_EXECUTION_ERROR)

        repos = parse_repo_list(conf_text)
        Logger.info(f"found {len(repos)} repositories to process")
        return repos
