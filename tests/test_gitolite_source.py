"""Tests for GitoliteSource repository discovery."""

from __future__ import annotations

import subprocess
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from config import GitoliteConfig
from gitolite_source import GitoliteSource
from work_dir import WorkDirStore

CONF = 'repo foo\n    RW+ = alice\nrepo bar/baz\nrepo gitolite-admin\n    RW+ = admin\n'


def _make_source(tmp_path: Path, git: MagicMock) -> GitoliteSource:
    store = WorkDirStore(tmp_path / 'tmp')
    store.ensure()
    config = GitoliteConfig(
        admin_uri='gitolite@example.com:gitolite-admin.git',
        base_uri='gitolite@example.com',
    )
    return GitoliteSource(config, store, git)


def _write_conf(path: Path) -> None:
    (path / 'conf').mkdir(parents=True)
    (path / 'conf' / 'gitolite.conf').write_text(CONF)


def test_repo_url() -> None:
    source = GitoliteSource(
        GitoliteConfig('gitolite@example.com:gitolite-admin.git', 'gitolite@example.com'),
        WorkDirStore(Path('/nonexistent')),
        MagicMock(),
    )
    assert source.repo_url('bar/baz') == 'gitolite@example.com:bar/baz.git'


def test_fetch_repo_list_clones_admin_repo(tmp_path: Path) -> None:
    git = MagicMock()
    git.clone.side_effect = lambda _uri, dest: _write_conf(dest)
    source = _make_source(tmp_path, git)

    assert source.fetch_repo_list() == ['foo', 'bar/baz']
    git.clone.assert_called_once_with(
        'gitolite@example.com:gitolite-admin.git', tmp_path / 'tmp' / 'gitolite-admin'
    )


def test_fetch_repo_list_reuses_existing_clone(tmp_path: Path) -> None:
    git = MagicMock()
    source = _make_source(tmp_path, git)
    _write_conf(source.store.config_repo_path)

    assert source.fetch_repo_list() == ['foo', 'bar/baz']
    git.clone.assert_not_called()


def test_fetch_repo_list_clone_failure_is_fatal(tmp_path: Path) -> None:
    git = MagicMock()

    def failing_clone(_uri, dest):
        dest.mkdir()
        raise subprocess.CalledProcessError(128, ['git', 'clone'], '', 'unreachable')

    git.clone.side_effect = failing_clone
    source = _make_source(tmp_path, git)

    with pytest.raises(SystemExit) as excinfo:
        source.fetch_repo_list()
    assert excinfo.value.code == 1
    assert not source.store.config_repo_path.exists()


def test_fetch_repo_list_missing_conf_is_fatal(tmp_path: Path) -> None:
    source = _make_source(tmp_path, MagicMock())
    source.store.config_repo_path.mkdir()

    with pytest.raises(SystemExit) as excinfo:
        source.fetch_repo_list()
    assert excinfo.value.code == 1
