#!/usr/bin/env python3
"""Thin wrapper around the git binary for clone and mirror operations."""

from __future__ import annotations

import os
import subprocess
import tempfile
from pathlib import Path
from typing import List, Optional, Tuple

from logging_utils import Logger
from security import SecurityValidator

# Environment variables read by the askpass helper
ASKPASS_USER_VAR = "GITOLITE_TO_GITLAB_USER"
ASKPASS_PASSWORD_VAR = "GITOLITE_TO_GITLAB_PASSWORD"


class GitMirror:
    """Runs git clone/push; failures raise subprocess.CalledProcessError."""

    def __init__(self, git_executable: str = "git") -> None:
        self.git = git_executable

    def clone(self, uri: str, dest: Path) -> None:
        """Plain clone (working tree), used for the admin repository."""
        Logger.debug(f"git clone {uri}")
        self._run(["clone", uri, str(dest)])

    def clone_mirror(self, uri: str, dest: Path) -> None:
        """Bare clone of every ref."""
        Logger.debug(f"git clone --mirror {uri}")
        self._run(["clone", "--mirror", uri, str(dest)])

    def push_mirror(
        self,
        mirror_dir: Path,
        uri: str,
        credentials: Optional[Tuple[str, str]] = None,
    ) -> None:
        """Push every ref of mirror_dir to uri."""
        Logger.debug(f"git push --mirror {uri}")
        self._run(["push", "--mirror", uri], cwd=mirror_dir, credentials=credentials)

    def _run(
        self,
        args: List[str],
        cwd: Optional[Path] = None,
        credentials: Optional[Tuple[str, str]] = None,
    ) -> None:
        env = os.environ.copy()
        askpass_script: Optional[str] = None
        try:
            if credentials:
                username, password = credentials
                askpass_script = self._create_askpass_script()
                env.update(
                    {
                        "GIT_ASKPASS": askpass_script,
                        "GIT_TERMINAL_PROMPT": "0",
                        ASKPASS_USER_VAR: username,
                        ASKPASS_PASSWORD_VAR: password,
                    }
                )
            # git's progress goes straight to the terminal unless it may echo credentials
            subprocess.run(
                [self.git, *args],
                cwd=str(cwd) if cwd else None,
                check=True,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE if credentials else None,
                text=True,
                env=env,
            )
        except subprocess.CalledProcessError as e:
            safe_stderr = SecurityValidator.sanitize_for_logging(e.stderr or "")
            safe_stdout = SecurityValidator.sanitize_for_logging(e.stdout or "")
            raise subprocess.CalledProcessError(
                e.returncode, e.cmd, safe_stdout, safe_stderr
            ) from None
        finally:
            self._cleanup_askpass_script(askpass_script)

    @staticmethod
    def _create_askpass_script() -> str:
        """Create a helper that answers git prompts from the environment."""
        fd, path = tempfile.mkstemp(prefix="g2g_askpass_", text=True)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as script:
                script.write("#!/bin/sh\n")
                script.write("case \"$1\" in\n")
                script.write(f"  *Username*) printf '%s\\n' \"${ASKPASS_USER_VAR}\" ;;\n")
                script.write(f"  *Password*) printf '%s\\n' \"${ASKPASS_PASSWORD_VAR}\" ;;\n")
                script.write("  *) exit 1 ;;\n")
                script.write("esac\n")
            os.chmod(path, 0o700)
        except OSError:
            os.unlink(path)
            raise
        return path

    @staticmethod
    def _cleanup_askpass_script(path: Optional[str]) -> None:
        if not path:
            return
        try:
            if os.path.exists(path):
                os.remove(path)
        except OSError as error:
            Logger.warn(f"failed to clean up temporary credential helper: {error}")
