# Copyright 2026 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
# SPDX-License-Identifier: Apache-2.0

"""Tests for the git backend.

Mocks ``_git`` to avoid real git calls.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest
from bumpkit.backends._run import CommandResult
from bumpkit.backends.git import RAW_COMMIT_FORMAT, GitCLIBackend
from bumpkit.errors import BumpKitError, E
from bumpkit.logging import configure_logging

configure_logging(quiet=True)


def _ok(stdout: str = '', **kw: Any) -> CommandResult:  # noqa: ANN401
    return CommandResult(command=['git'], return_code=0, stdout=stdout, **kw)


def _fail(stderr: str = '', **kw: Any) -> CommandResult:  # noqa: ANN401
    return CommandResult(command=['git'], return_code=1, stderr=stderr, **kw)


@pytest.fixture()
def git() -> GitCLIBackend:
    """Git."""
    return GitCLIBackend(repo_root=Path('/fake/repo'))


class TestCommit:
    """Tests for commit."""

    @pytest.mark.asyncio()
    async def test_default_flags(self, git: GitCLIBackend) -> None:
        """Hooks are skipped unless verify is set."""
        with patch.object(git, '_git', return_value=_ok()) as m:
            await git.commit('chore(release): 1.0.0', paths=['CHANGELOG.md', 'package.json'])
            m.assert_called_once_with(
                'commit',
                '--no-verify',
                'CHANGELOG.md',
                'package.json',
                '-m',
                'chore(release): 1.0.0',
                dry_run=False,
            )

    @pytest.mark.asyncio()
    async def test_verify_and_sign(self, git: GitCLIBackend) -> None:
        """Test verify and sign."""
        with patch.object(git, '_git', return_value=_ok()) as m:
            await git.commit('msg', verify=True, sign=True)
            m.assert_called_once_with('commit', '-S', '-m', 'msg', dry_run=False)

    @pytest.mark.asyncio()
    async def test_failure_raises(self, git: GitCLIBackend) -> None:
        """Test failure raises."""
        with patch.object(git, '_git', return_value=_fail(stderr='hook failed')):
            with pytest.raises(BumpKitError) as exc_info:
                await git.commit('msg')
        assert exc_info.value.code == E.GIT_COMMIT_FAILED
        assert 'hook failed' in str(exc_info.value)

    @pytest.mark.asyncio()
    async def test_dry_run_passed_through(self) -> None:
        """Test dry run passed through."""
        git = GitCLIBackend(Path('/fake/repo'), dry_run=True)
        with patch.object(git, '_git', return_value=_ok(dry_run=True)) as m:
            await git.commit('msg')
            assert m.call_args.kwargs == {'dry_run': True}


class TestTag:
    """Tests for tag."""

    @pytest.mark.asyncio()
    async def test_annotated(self, git: GitCLIBackend) -> None:
        """Test annotated."""
        with patch.object(git, '_git', return_value=_ok()) as m:
            await git.tag('v1.0.0', 'chore(release): 1.0.0')
            m.assert_called_once_with('tag', '-a', 'v1.0.0', '-m', 'chore(release): 1.0.0', dry_run=False)

    @pytest.mark.asyncio()
    async def test_signed(self, git: GitCLIBackend) -> None:
        """Test signed."""
        with patch.object(git, '_git', return_value=_ok()) as m:
            await git.tag('v1.0.0', 'msg', sign=True)
            assert m.call_args.args[:2] == ('tag', '-s')

    @pytest.mark.asyncio()
    async def test_failure_raises(self, git: GitCLIBackend) -> None:
        """Test failure raises."""
        with patch.object(git, '_git', return_value=_fail(stderr='already exists')):
            with pytest.raises(BumpKitError) as exc_info:
                await git.tag('v1.0.0', 'msg')
        assert exc_info.value.code == E.GIT_TAG_FAILED


class TestQueries:
    """Tests for read-only queries."""

    @pytest.mark.asyncio()
    async def test_add(self, git: GitCLIBackend) -> None:
        """Test add."""
        with patch.object(git, '_git', return_value=_ok()) as m:
            await git.add('a.txt', 'b.txt')
            m.assert_called_once_with('add', 'a.txt', 'b.txt', dry_run=False)

    @pytest.mark.asyncio()
    async def test_is_ignored(self, git: GitCLIBackend) -> None:
        """Test is ignored."""
        with patch.object(git, '_git', return_value=_ok(stdout='dist/\n')) as m:
            assert await git.is_ignored('dist/') is True
            m.assert_called_once_with('check-ignore', '--no-index', 'dist/')
        with patch.object(git, '_git', return_value=_fail()):
            assert await git.is_ignored('src/') is False

    @pytest.mark.asyncio()
    async def test_current_branch(self, git: GitCLIBackend) -> None:
        """Test current branch."""
        with patch.object(git, '_git', return_value=_ok(stdout='main\n')):
            assert await git.current_branch() == 'main'

    @pytest.mark.asyncio()
    async def test_remote_url(self, git: GitCLIBackend) -> None:
        """Test remote url."""
        with patch.object(git, '_git', return_value=_ok(stdout='git@github.com:o/r.git\n')):
            assert await git.remote_url() == 'git@github.com:o/r.git'
        with patch.object(git, '_git', return_value=_fail()):
            assert await git.remote_url() == ''


_DECORATED_LOG = """\
commit 3841b1d (HEAD -> main, tag: v1.2.0)
Author: Jane

commit 1a2b3c4 (tag: v1.10.0-rc.0, origin/main)
commit 5d6e7f8 (tag: v1.0.0)
commit 9a8b7c6 (tag: other-tag)
commit 0f0f0f0 (tag: 0.9.0)
"""


class TestTags:
    """Tests for get_tags and latest_tag_version."""

    @pytest.mark.asyncio()
    async def test_prefixed_tags(self, git: GitCLIBackend) -> None:
        """Only prefixed semver tags are kept, in log order."""
        with patch.object(git, '_git', return_value=_ok(stdout=_DECORATED_LOG)):
            assert await git.get_tags('v') == ['v1.2.0', 'v1.10.0-rc.0', 'v1.0.0']

    @pytest.mark.asyncio()
    async def test_unprefixed_tags(self, git: GitCLIBackend) -> None:
        """Without a prefix every tag that parses as a version is kept."""
        with patch.object(git, '_git', return_value=_ok(stdout=_DECORATED_LOG)):
            assert await git.get_tags() == ['v1.2.0', 'v1.10.0-rc.0', 'v1.0.0', '0.9.0']

    @pytest.mark.asyncio()
    async def test_latest_tag_version(self, git: GitCLIBackend) -> None:
        """Test latest tag version."""
        with patch.object(git, '_git', return_value=_ok(stdout=_DECORATED_LOG)):
            assert await git.latest_tag_version('v') == '1.10.0-rc.0'

    @pytest.mark.asyncio()
    async def test_no_tags(self, git: GitCLIBackend) -> None:
        """Test no tags."""
        with patch.object(git, '_git', return_value=_ok(stdout='commit abc (HEAD -> main)\n')):
            assert await git.latest_tag_version('v') == ''


class TestRawCommits:
    """Tests for raw_commits."""

    @pytest.mark.asyncio()
    async def test_splits_records(self, git: GitCLIBackend) -> None:
        """Records are split on the record separator."""
        stdout = '\x1efeat: a\n\nabc\n2024-01-01T00:00:00Z\nJ\nj@x\n\x1efix: b\n\ndef\n2024-01-01T00:00:00Z\nJ\nj@x\n'
        with patch.object(git, '_git', return_value=_ok(stdout=stdout)) as m:
            records = await git.raw_commits(since='v1.0.0')
            m.assert_called_once_with('log', f'--format={RAW_COMMIT_FORMAT}', 'v1.0.0..HEAD')
        assert len(records) == 2
        assert records[0].startswith('feat: a')

    @pytest.mark.asyncio()
    async def test_full_history(self, git: GitCLIBackend) -> None:
        """Without since the whole history is read."""
        with patch.object(git, '_git', return_value=_ok(stdout='')) as m:
            assert await git.raw_commits() == []
            m.assert_called_once_with('log', f'--format={RAW_COMMIT_FORMAT}')

    @pytest.mark.asyncio()
    async def test_failure_returns_empty(self, git: GitCLIBackend) -> None:
        """A repository without commits yields no records."""
        with patch.object(git, '_git', return_value=_fail(stderr='does not have any commits')):
            assert await git.raw_commits() == []
