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

"""Tests for the release pipeline."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest
from bumpkit.commit_parsing import Commit, CommitParser, parse_commit
from bumpkit.config import BumpKitConfig
from bumpkit.errors import BumpKitError, E
from bumpkit.files import FileManager, FileState
from bumpkit.logging import configure_logging
from bumpkit.release import (
    CurrentVersion,
    NextVersion,
    collect_commits,
    commit_changes,
    get_current_version,
    get_next_version,
    run_release,
    tag_changes,
)

configure_logging(quiet=True)

DATE = '2026-10-01T00:00:00Z'


def _record(message: str, commit_hash: str) -> str:
    """Build a record the way ``git log`` with the raw format prints it."""
    return f'{message}\n\n{commit_hash}\n{DATE}\nJane\njane@example.com\n'


def _c(message: str, commit_hash: str = 'abc1234') -> Commit:
    commit = parse_commit(_record(message, commit_hash))
    assert commit is not None
    return commit


# -- Test doubles ----------------------------------------------------------


class FakeGit:
    """Minimal git double for pipeline tests.

    Records add/commit/tag calls for assertions.
    """

    def __init__(
        self,
        *,
        latest_tag: str = '',
        records: list[str] | None = None,
        ignored: set[str] | None = None,
        branch: str = 'main',
        remote: str = 'git@github.com:o/r.git',
    ) -> None:
        """Initialize with canned repository state."""
        self.latest_tag = latest_tag
        self.records = records or []
        self.ignored = ignored or set()
        self.branch = branch
        self.remote = remote
        self.added: list[str] = []
        self.commits: list[dict[str, Any]] = []
        self.tags: list[tuple[str, str, bool]] = []
        self.log_since: list[str | None] = []

    async def latest_tag_version(self, tag_prefix: str = '') -> str:
        """Return the canned latest version."""
        return self.latest_tag

    async def raw_commits(self, *, since: str | None = None) -> list[str]:
        """Return the canned records."""
        self.log_since.append(since)
        return list(self.records)

    async def remote_url(self, remote: str = 'origin') -> str:
        """Return the canned remote."""
        return self.remote

    async def is_ignored(self, path: str) -> bool:
        """Check the canned ignore list."""
        return path in self.ignored

    async def add(self, *paths: str) -> None:
        """Record staged paths."""
        self.added.extend(paths)

    async def commit(
        self,
        message: str,
        *,
        paths: list[str] | None = None,
        verify: bool = False,
        sign: bool = False,
    ) -> None:
        """Record a commit."""
        self.commits.append({'message': message, 'paths': paths, 'verify': verify, 'sign': sign})

    async def tag(self, tag_name: str, message: str, *, sign: bool = False) -> None:
        """Record a tag."""
        self.tags.append((tag_name, message, sign))

    async def current_branch(self) -> str:
        """Return the canned branch."""
        return self.branch


def _package_json(root: Path, version: str = '1.2.0', *, private: bool = False) -> Path:
    path = root / 'package.json'
    path.write_text(json.dumps({'name': 'demo', 'version': version, 'private': private}, indent=2) + '\n')
    return path


# ---------------------------------------------------------------------------
# get_current_version
# ---------------------------------------------------------------------------


class TestGetCurrentVersion:
    """Tests for get_current_version."""

    @pytest.mark.asyncio()
    async def test_single_version(self, tmp_path: Path) -> None:
        """Missing files are skipped."""
        _package_json(tmp_path)
        config = BumpKitConfig(path=tmp_path, files=('package.json', 'version.txt'))
        current = await get_current_version(config, FileManager(tmp_path), FakeGit())  # type: ignore[arg-type]
        assert current.version == '1.2.0'
        assert [state.name for state in current.files] == ['package.json']

    @pytest.mark.asyncio()
    async def test_conflicting_versions(self, tmp_path: Path) -> None:
        """Test conflicting versions."""
        _package_json(tmp_path)
        (tmp_path / 'version.txt').write_text('1.3.0\n')
        config = BumpKitConfig(path=tmp_path, files=('package.json', 'version.txt'))
        with pytest.raises(BumpKitError) as exc_info:
            await get_current_version(config, FileManager(tmp_path), FakeGit())  # type: ignore[arg-type]
        assert exc_info.value.code == E.VERSION_MULTIPLE
        assert 'package.json=1.2.0' in str(exc_info.value)

    @pytest.mark.asyncio()
    async def test_override_wins(self, tmp_path: Path) -> None:
        """An explicit current version ignores what the files say."""
        _package_json(tmp_path)
        (tmp_path / 'version.txt').write_text('1.3.0\n')
        config = BumpKitConfig(path=tmp_path, files=('package.json', 'version.txt'), current_version='2.0.0')
        current = await get_current_version(config, FileManager(tmp_path), FakeGit())  # type: ignore[arg-type]
        assert current.version == '2.0.0'
        assert len(current.files) == 2

    @pytest.mark.asyncio()
    async def test_git_tag_fallback(self, tmp_path: Path) -> None:
        """An empty version file falls back to the tag and is still bumped."""
        (tmp_path / 'version.txt').write_text('')
        config = BumpKitConfig(path=tmp_path, files=('version.txt',))
        git = FakeGit(latest_tag='0.4.0')
        current = await get_current_version(config, FileManager(tmp_path), git)  # type: ignore[arg-type]
        assert current.version == '0.4.0'
        assert [state.name for state in current.files] == ['version.txt']

    @pytest.mark.asyncio()
    async def test_not_found(self, tmp_path: Path) -> None:
        """Test not found."""
        config = BumpKitConfig(path=tmp_path, files=('package.json',), git_tag_fallback=False)
        with pytest.raises(BumpKitError) as exc_info:
            await get_current_version(config, FileManager(tmp_path), FakeGit(latest_tag='1.0.0'))  # type: ignore[arg-type]
        assert exc_info.value.code == E.VERSION_NOT_FOUND


# ---------------------------------------------------------------------------
# collect_commits and get_next_version
# ---------------------------------------------------------------------------


class TestCollectCommits:
    """Tests for collect_commits."""

    @pytest.mark.asyncio()
    async def test_since_previous_tag(self, tmp_path: Path) -> None:
        """Reverted pairs and malformed records are dropped."""
        git = FakeGit(
            latest_tag='1.2.0',
            records=[
                _record('Revert "feat: oops"\n\nThis reverts commit 1111111.', '2222222'),
                _record('feat: oops', '1111111'),
                _record('fix: keep me', '3333333'),
                'not a record',
            ],
        )
        config = BumpKitConfig(path=tmp_path)
        previous_tag, commits = await collect_commits(config, git, CommitParser())  # type: ignore[arg-type]
        assert previous_tag == 'v1.2.0'
        assert git.log_since == ['v1.2.0']
        assert [c.subject for c in commits] == ['fix: keep me']

    @pytest.mark.asyncio()
    async def test_first_release(self, tmp_path: Path) -> None:
        """Test first release."""
        git = FakeGit(records=[_record('feat: initial', 'aaaaaaa')])
        previous_tag, commits = await collect_commits(BumpKitConfig(path=tmp_path), git, CommitParser())  # type: ignore[arg-type]
        assert previous_tag == ''
        assert git.log_since == [None]
        assert len(commits) == 1


class TestGetNextVersion:
    """Tests for get_next_version."""

    def test_recommended(self, tmp_path: Path) -> None:
        """Test recommended."""
        result = get_next_version(BumpKitConfig(path=tmp_path), '1.2.0', [_c('feat: a'), _c('fix: b')])
        assert result == NextVersion(
            version='1.3.0',
            release_type='minor',
            pre_major=False,
            reason='There are 0 BREAKING CHANGES and 1 feature',
        )

    def test_pre_major(self, tmp_path: Path) -> None:
        """Below 1.0.0 a breaking change only bumps minor."""
        result = get_next_version(BumpKitConfig(path=tmp_path), '0.4.2', [_c('feat!: a')])
        assert result.version == '0.5.0'
        assert result.pre_major is True

    def test_pre_release(self, tmp_path: Path) -> None:
        """Test pre release."""
        result = get_next_version(BumpKitConfig(path=tmp_path, pre_release='beta'), '1.2.0', [_c('feat: a')])
        assert result.version == '1.3.0-beta.0'
        assert result.is_prerelease is True

    def test_explicit_next_version(self, tmp_path: Path) -> None:
        """Test explicit next version."""
        result = get_next_version(BumpKitConfig(path=tmp_path, next_version='3.0.0'), '1.2.0', [])
        assert result == NextVersion(version='3.0.0')

    def test_invalid_next_version_is_ignored(self, tmp_path: Path) -> None:
        """Test invalid next version is ignored."""
        result = get_next_version(BumpKitConfig(path=tmp_path, next_version='three'), '1.2.0', [])
        assert result.version == '1.2.1'


# ---------------------------------------------------------------------------
# commit_changes and tag_changes
# ---------------------------------------------------------------------------


def _state(root: Path, name: str, *, is_private: bool | None = None) -> FileState:
    return FileState(name=name, path=root / name, version='1.0.0', is_private=is_private)


class TestCommitChanges:
    """Tests for commit_changes."""

    @pytest.mark.asyncio()
    async def test_commits_changelog_and_files(self, tmp_path: Path) -> None:
        """Test commits changelog and files."""
        git = FakeGit(ignored={'dist/version.txt'})
        config = BumpKitConfig(path=tmp_path, sign=True)
        files = [_state(tmp_path, 'package.json'), _state(tmp_path, 'dist/version.txt')]
        committed = await commit_changes(config, git, files, '1.1.0')  # type: ignore[arg-type]
        assert committed == ('CHANGELOG.md', 'package.json')
        assert git.added == ['CHANGELOG.md', 'package.json']
        assert git.commits == [
            {
                'message': 'chore(release): 1.1.0',
                'paths': ['CHANGELOG.md', 'package.json'],
                'verify': False,
                'sign': True,
            },
        ]

    @pytest.mark.asyncio()
    async def test_commit_all(self, tmp_path: Path) -> None:
        """Test commit all."""
        git = FakeGit()
        config = BumpKitConfig(path=tmp_path, commit_all=True, skip_changelog=True, release_message_suffix='[skip ci]')
        await commit_changes(config, git, [_state(tmp_path, 'package.json')], '1.1.0')  # type: ignore[arg-type]
        assert git.commits[0]['paths'] is None
        assert git.commits[0]['message'] == 'chore(release): 1.1.0 [skip ci]'

    @pytest.mark.asyncio()
    async def test_skip_and_nothing_to_commit(self, tmp_path: Path) -> None:
        """Test skip and nothing to commit."""
        git = FakeGit(ignored={'CHANGELOG.md'})
        assert await commit_changes(BumpKitConfig(path=tmp_path, skip_commit=True), git, [], '1.1.0') == ()  # type: ignore[arg-type]
        assert await commit_changes(BumpKitConfig(path=tmp_path), git, [], '1.1.0') == ()  # type: ignore[arg-type]
        assert git.commits == []


class TestTagChanges:
    """Tests for tag_changes."""

    @pytest.mark.asyncio()
    async def test_public_package(self, tmp_path: Path) -> None:
        """Test public package."""
        git = FakeGit(branch='release')
        files = [_state(tmp_path, 'package.json', is_private=False)]
        result = await tag_changes(BumpKitConfig(path=tmp_path), git, files, NextVersion('1.1.0', 'minor'))  # type: ignore[arg-type]
        assert result is not None
        assert result.tag == 'v1.1.0'
        assert git.tags == [('v1.1.0', 'chore(release): 1.1.0', False)]
        assert result.push_message == 'Run `git push --follow-tags origin release` to push the changes and the tag.'
        assert result.publish_message == 'Run `npm publish` to publish the package.'

    @pytest.mark.asyncio()
    async def test_prerelease_publish_tag(self, tmp_path: Path) -> None:
        """Test prerelease publish tag."""
        files = [_state(tmp_path, 'package.json', is_private=False)]
        config = BumpKitConfig(path=tmp_path, pre_release='beta')
        result = await tag_changes(config, FakeGit(), files, NextVersion('1.1.0-beta.0', 'preminor'))  # type: ignore[arg-type]
        assert result is not None
        assert result.publish_message == 'Run `npm publish --tag beta` to publish the package.'

    @pytest.mark.asyncio()
    async def test_private_package(self, tmp_path: Path) -> None:
        """Test private package."""
        files = [_state(tmp_path, 'package.json', is_private=True)]
        result = await tag_changes(BumpKitConfig(path=tmp_path), FakeGit(), files, NextVersion('1.1.0'))  # type: ignore[arg-type]
        assert result is not None
        assert result.publish_message == ''

    @pytest.mark.asyncio()
    async def test_skip_tag(self, tmp_path: Path) -> None:
        """Test skip tag."""
        git = FakeGit()
        assert await tag_changes(BumpKitConfig(path=tmp_path, skip_tag=True), git, [], NextVersion('1.1.0')) is None  # type: ignore[arg-type]
        assert git.tags == []


# ---------------------------------------------------------------------------
# run_release
# ---------------------------------------------------------------------------


class TestRunRelease:
    """End-to-end tests for run_release."""

    @pytest.mark.asyncio()
    async def test_full_release(self, tmp_path: Path) -> None:
        """Test full release."""
        package = _package_json(tmp_path)
        git = FakeGit(
            latest_tag='1.2.0',
            records=[_record('feat: add thing', 'abc1234def'), _record('fix: bug', 'def5678abc')],
        )
        config = BumpKitConfig(path=tmp_path, files=('package.json',))

        result = await run_release(config, git=git)  # type: ignore[arg-type]

        assert result.current == CurrentVersion(version='1.2.0', files=result.files)
        assert result.next.version == '1.3.0'
        assert result.previous_tag == 'v1.2.0'
        assert json.loads(package.read_text())['version'] == '1.3.0'

        changelog = (tmp_path / 'CHANGELOG.md').read_text(encoding='utf-8')
        assert changelog.startswith(config.header)
        assert '## [1.3.0](https://github.com/o/r/compare/v1.2.0...v1.3.0)' in changelog
        assert '* add thing ([abc1234](https://github.com/o/r/commit/abc1234def))' in changelog

        assert result.committed_files == ('CHANGELOG.md', 'package.json')
        assert result.tag is not None
        assert result.tag.tag == 'v1.3.0'
        assert result.tag.publish_message == 'Run `npm publish` to publish the package.'

    @pytest.mark.asyncio()
    async def test_dry_run_touches_nothing(self, tmp_path: Path) -> None:
        """Test dry run touches nothing."""
        package = _package_json(tmp_path)
        before = package.read_text()
        git = FakeGit(latest_tag='1.2.0', records=[_record('fix: bug', 'def5678abc')])
        config = BumpKitConfig(path=tmp_path, files=('package.json',), dry_run=True)

        result = await run_release(config, git=git)  # type: ignore[arg-type]

        assert result.next.version == '1.2.1'
        assert package.read_text() == before
        assert not (tmp_path / 'CHANGELOG.md').exists()
        assert result.changelog is not None
        assert '* bug' in result.changelog.new_content

    @pytest.mark.asyncio()
    async def test_skip_everything_after_version(self, tmp_path: Path) -> None:
        """Test skip everything after version."""
        package = _package_json(tmp_path)
        before = package.read_text()
        config = BumpKitConfig(
            path=tmp_path,
            files=('package.json',),
            skip_bump=True,
            skip_changelog=True,
            skip_commit=True,
            skip_tag=True,
        )
        git = FakeGit(latest_tag='1.2.0')
        result = await run_release(config, git=git)  # type: ignore[arg-type]
        assert result.files == ()
        assert result.changelog is None
        assert result.tag is None
        assert package.read_text() == before
        assert git.commits == []
