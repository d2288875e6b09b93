"""Tests for GitMirror subprocess handling."""

from __future__ import annotations

import os
import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from git_mirror import ASKPASS_PASSWORD_VAR, ASKPASS_USER_VAR, GitMirror
from security import SecurityValidator


@patch('git_mirror.subprocess.run')
def test_clone_mirror_command(mock_run: MagicMock, tmp_path: Path) -> None:
    GitMirror().clone_mirror('gitolite@example.com:foo.git', tmp_path / 'foo')

    args = mock_run.call_args.args[0]
    assert args == ['git', 'clone', '--mirror', 'gitolite@example.com:foo.git', str(tmp_path / 'foo')]
    assert mock_run.call_args.kwargs['check'] is True


@patch('git_mirror.subprocess.run')
def test_push_mirror_over_ssh_has_no_askpass(mock_run: MagicMock, tmp_path: Path) -> None:
    GitMirror().push_mirror(tmp_path, 'git@gitlab.example.com:jdoe/foo.git')

    assert mock_run.call_args.args[0] == ['git', 'push', '--mirror', 'git@gitlab.example.com:jdoe/foo.git']
    assert mock_run.call_args.kwargs['cwd'] == str(tmp_path)
    assert ASKPASS_PASSWORD_VAR not in mock_run.call_args.kwargs['env']


@patch('git_mirror.subprocess.run')
def test_push_mirror_with_credentials_uses_askpass(mock_run: MagicMock, tmp_path: Path) -> None:
    seen = {}

    def run(*_args, **kwargs):
        env = kwargs['env']
        seen['script'] = env['GIT_ASKPASS']
        seen['exists'] = os.path.exists(env['GIT_ASKPASS'])
        with open(env['GIT_ASKPASS'], encoding='utf-8') as script:
            seen['content'] = script.read()
        seen['user'] = env[ASKPASS_USER_VAR]
        seen['password'] = env[ASKPASS_PASSWORD_VAR]

    mock_run.side_effect = run
    GitMirror().push_mirror(tmp_path, 'https://gitlab.example.com/jdoe/foo.git', ('jdoe', 'glpat-token'))

    assert seen['exists'] is True
    assert 'glpat-token' not in seen['content']
    assert seen['user'] == 'jdoe'
    assert seen['password'] == 'glpat-token'
    assert not os.path.exists(seen['script'])


@patch('git_mirror.subprocess.run')
def test_failure_output_is_sanitized(mock_run: MagicMock, tmp_path: Path) -> None:
    SecurityValidator.register_secret('glpat-token')
    mock_run.side_effect = subprocess.CalledProcessError(
        128, ['git', 'push'], '', 'fatal: auth failed for glpat-token'
    )
    try:
        with pytest.raises(subprocess.CalledProcessError) as excinfo:
            GitMirror().push_mirror(tmp_path, 'https://gitlab.example.com/jdoe/foo.git')
        assert 'glpat-token' not in excinfo.value.stderr
        assert excinfo.value.returncode == 128
    finally:
        SecurityValidator.clear_secrets()


@patch('git_mirror.subprocess.run')
def test_progress_streams_without_credentials(mock_run: MagicMock, tmp_path: Path) -> None:
    GitMirror().clone_mirror('gitolite@example.com:foo.git', tmp_path / 'foo')
    assert mock_run.call_args.kwargs['stderr'] is None


@patch('git_mirror.subprocess.run')
def test_output_captured_with_credentials(mock_run: MagicMock, tmp_path: Path) -> None:
    GitMirror().push_mirror(tmp_path, 'https://gitlab.example.com/jdoe/foo.git', ('jdoe', 'glpat-token'))
    assert mock_run.call_args.kwargs['stderr'] == subprocess.PIPE
