#!/usr/bin/env python3
"""Working directory state store: cached clones and migration markers.

Layout::

    <root>/gitolite-admin/     cached clone of the admin repository
    <root>/<name>/             working mirror, removed once migrated
    <root>/<name>-migrated     empty marker, never removed
"""

from __future__ import annotations

import os
import shutil
from pathlib import Path
from typing import Callable

from logging_utils import Logger
from utils import ADMIN_REPO_NAME, MARKER_SUFFIX



class WorkDirStore:
    """Explicit interface over the on-disk progress ledger."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def ensure(self) -> None:
        self.root.mkdir(parents=True, exist_ok=True)

    @property
    def config_repo_path(self) -> Path:
        return self.root / ADMIN_REPO_NAME

    def _entry(self, name: str) -> Path:
        # Names become direct children of root, nothing else
        if not name or name in (".", "..") or "/" in name or os.sep in name:
            raise ValueError(f"invalid working directory entry name: {name!r}")
        return self.root / name

    def record_path(self, name: str) -> Path:
        return self._entry(name).with_name(f"{name}{MARKER_SUFFIX}")

    def mirror_path(self, name: str) -> Path:
        return self._entry(name)

    def has_record(self, name: str) -> bool:
        return self.record_path(name).is_file()

    def mark_record(self, name: str) -> None:
        self.record_path(name).touch()

    def has_mirror(self, name: str) -> bool:
        return self.mirror_path(name).is_dir()

    def get_or_create_mirror(self, name: str, fetch: Callable[[Path], None]) -> Path:
        """Return the working mirror for name, calling fetch(path) if absent.

        A failing fetch leaves no partial directory behind; the error is
        re-raised to the caller.
        """
        path = self.mirror_path(name)
        if path.is_dir():
            Logger.info(f"{name}: found")
            return path
        try:
            fetch(path)
        except BaseException:
            self.remove_mirror(name)
            raise
        return path

    def remove_mirror(self, name: str) -> None:
        path = self.mirror_path(name)
        if path.exists():
            shutil.rmtree(path)
