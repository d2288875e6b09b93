#!/usr/bin/env python3
"""Configuration dataclasses for gitolite-to-gitlab."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class PushMethod(Enum):
    """Enumeration for git push methods towards GitLab."""
    SSH = "ssh"
    HTTPS = "https"


@dataclass
class GitoliteConfig:
    """Gitolite (source) configuration."""
    admin_uri: str
    base_uri: str


@dataclass
class GitLabConfig:
    """GitLab (destination) configuration."""
    url: str
    username: str
    token: str


@dataclass
class MigrationConfig:
    """Migration behavior configuration."""
    interactive: bool
    dry_run: bool
    work_dir: Path
    push_method: PushMethod = PushMethod.SSH


@dataclass
class Config:
    """Main configuration for gitolite-to-GitLab migration."""
    gitolite: GitoliteConfig
    gitlab: GitLabConfig
    migration: MigrationConfig
