"""Tests for the working directory state store."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from work_dir import WorkDirStore


def _store(tmp_path: Path) -> WorkDirStore:
    store = WorkDirStore(tmp_path / 'tmp')
    store.ensure()
    return store


def test_layout(tmp_path: Path) -> None:
    store = _store(tmp_path)
    assert store.config_repo_path == tmp_path / 'tmp' / 'gitolite-admin'
    assert store.mirror_path('foo') == tmp_path / 'tmp' / 'foo'
    assert store.record_path('foo') == tmp_path / 'tmp' / 'foo-migrated'


def test_mark_record(tmp_path: Path) -> None:
    store = _store(tmp_path)
    assert not store.has_record('foo')
    store.mark_record('foo')
    assert store.has_record('foo')
    assert store.record_path('foo').stat().st_size == 0


def test_get_or_create_mirror_fetches_once(tmp_path: Path) -> None:
    store = _store(tmp_path)
    fetch = MagicMock(side_effect=lambda path: path.mkdir())

    first = store.get_or_create_mirror('foo', fetch)
    second = store.get_or_create_mirror('foo', fetch)

    assert first == second == store.mirror_path('foo')
    fetch.assert_called_once_with(store.mirror_path('foo'))


def test_failed_fetch_removes_partial_mirror(tmp_path: Path) -> None:
    store = _store(tmp_path)

    def fetch(path: Path) -> None:
        path.mkdir()
        (path / 'HEAD').write_text('ref: refs/heads/master\n')
        raise RuntimeError('network down')

    with pytest.raises(RuntimeError):
        store.get_or_create_mirror('foo', fetch)
    assert not store.has_mirror('foo')


def test_remove_mirror_is_noop_when_absent(tmp_path: Path) -> None:
    store = _store(tmp_path)
    store.remove_mirror('missing')
    assert not store.has_mirror('missing')


@pytest.mark.parametrize('name', ['', '.', '..', 'a/b'])
def test_rejects_names_escaping_root(tmp_path: Path, name: str) -> None:
    store = _store(tmp_path)
    with pytest.raises(ValueError):
        store.mirror_path(name)
