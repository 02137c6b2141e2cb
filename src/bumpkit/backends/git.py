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

"""Git backend for bumpkit.

:class:`GitCLIBackend` delegates to ``git`` via :func:`run_command`. All
methods are async; blocking subprocess calls run in
``asyncio.to_thread()``.

Mutating calls (``add``, ``commit``, ``tag``) are logged but not executed
in dry-run mode.
"""

from __future__ import annotations

import asyncio
import re
from pathlib import Path

from bumpkit.backends._run import CommandResult, run_command
from bumpkit.errors import BumpKitError, E
from bumpkit.logging import get_logger
from bumpkit.versions import is_valid, latest_version

log = get_logger('bumpkit.backends.git')

# Matches "tag: 1.2.3," or "tag: 1.2.3)" in `git log --decorate` output.
TAG_RE = re.compile(r'tag:\s*(.+?)[,)]')

RECORD_SEPARATOR = '\x1e'

# One commit per record, in the line layout CommitParser expects.
RAW_COMMIT_FORMAT = '%x1e%s%n%b%n%H%n%aI%n%an%n%ae'

# Fail instead of prompting for credentials or a passphrase on a TTY.
GIT_ENV = {'GIT_TERMINAL_PROMPT': '0'}


class GitCLIBackend:
    """Run git commands against one repository.

    Args:
        repo_root: Path to the git repository root.
        dry_run: Skip mutating commands.
    """

    def __init__(self, repo_root: Path, *, dry_run: bool = False) -> None:
        """Initialize with the repository root and dry-run flag."""
        self._root = repo_root
        self._dry_run = dry_run

    def _git(self, *args: str, dry_run: bool = False) -> CommandResult:
        """Run a git command synchronously (called via to_thread)."""
        return run_command(['git', *args], cwd=self._root, env=GIT_ENV, dry_run=dry_run)

    async def add(self, *paths: str) -> CommandResult:
        """Stage ``paths``."""
        return await asyncio.to_thread(self._git, 'add', *paths, dry_run=self._dry_run)

    async def commit(
        self,
        message: str,
        *,
        paths: list[str] | None = None,
        verify: bool = False,
        sign: bool = False,
    ) -> CommandResult:
        """Create a commit.

        Args:
            message: Commit message.
            paths: Limit the commit to these paths; ``None`` commits
                everything that is staged.
            verify: Run commit hooks. Hooks are skipped by default.
            sign: GPG-sign the commit.

        Raises:
            BumpKitError: If git exits with an error.
        """
        args = ['commit']
        if not verify:
            args.append('--no-verify')
        if sign:
            args.append('-S')
        args.extend(paths or [])
        args.extend(['-m', message])

        log.info('commit', message=message[:80])
        result = await asyncio.to_thread(self._git, *args, dry_run=self._dry_run)
        if not result.ok:
            raise BumpKitError(
                code=E.GIT_COMMIT_FAILED,
                message=f'git commit failed: {result.error}',
                hint="Fix the failing hook or check 'git status', then retry.",
            )
        return result

    async def tag(self, tag_name: str, message: str, *, sign: bool = False) -> CommandResult:
        """Create an annotated (or signed) tag.

        Raises:
            BumpKitError: If git exits with an error.
        """
        log.info('tag', tag=tag_name)
        result = await asyncio.to_thread(
            self._git,
            'tag',
            '-s' if sign else '-a',
            tag_name,
            '-m',
            message,
            dry_run=self._dry_run,
        )
        if not result.ok:
            raise BumpKitError(
                code=E.GIT_TAG_FAILED,
                message=f'git tag {tag_name} failed: {result.error}',
                hint=f"Check whether '{tag_name}' already exists with 'git tag -l {tag_name}'.",
            )
        return result

    async def is_ignored(self, path: str) -> bool:
        """Return ``True`` if git ignores ``path``."""
        result = await asyncio.to_thread(self._git, 'check-ignore', '--no-index', path)
        return result.ok

    async def current_branch(self) -> str:
        """Return the checked-out branch name."""
        result = await asyncio.to_thread(self._git, 'rev-parse', '--abbrev-ref', 'HEAD')
        return result.stdout.strip()

    async def remote_url(self, remote: str = 'origin') -> str:
        """Return the fetch URL of ``remote``, or ``''`` if it is not set."""
        result = await asyncio.to_thread(self._git, 'config', '--get', f'remote.{remote}.url')
        return result.stdout.strip() if result.ok else ''

    async def get_tags(self, tag_prefix: str = '') -> list[str]:
        """Return semver tags in commit-history order, newest first.

        Tags are read from ``git log --decorate`` lines such as::

            commit 3841b1d (HEAD -> main, tag: v1.0.2)

        Only tags starting with ``tag_prefix`` whose remainder is a valid
        version are kept.
        """
        result = await asyncio.to_thread(self._git, 'log', '--decorate', '--no-color', '--date-order')
        tags: list[str] = []
        for line in result.stdout.splitlines():
            for match in TAG_RE.finditer(line):
                tag = match.group(1)
                if tag_prefix:
                    if tag.startswith(tag_prefix) and is_valid(tag[len(tag_prefix) :]):
                        tags.append(tag)
                elif is_valid(tag):
                    tags.append(tag)
        return tags

    async def latest_tag_version(self, tag_prefix: str = '') -> str:
        """Return the highest tagged version without its prefix, or ``''``."""
        return latest_version(await self.get_tags(tag_prefix), tag_prefix)

    async def raw_commits(self, *, since: str | None = None) -> list[str]:
        """Return raw commit records, newest first.

        Args:
            since: Only list commits after this ref (usually the last
                release tag).

        Returns:
            One string per commit, laid out as ``subject, body, hash,
            date, name, email`` lines.
        """
        args = ['log', f'--format={RAW_COMMIT_FORMAT}']
        if since:
            args.append(f'{since}..HEAD')
        result = await asyncio.to_thread(self._git, *args)
        if not result.ok:
            log.warning('git_log_failed', since=since, error=result.error)
            return []
        return [record for record in result.stdout.split(RECORD_SEPARATOR) if record.strip()]


__all__ = [
    'GitCLIBackend',
    'RAW_COMMIT_FORMAT',
    'RECORD_SEPARATOR',
    'TAG_RE',
]
