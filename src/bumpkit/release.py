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

"""Release pipeline: version, changelog, commit and tag.

Pipeline::

    ┌────────────────────┐   files (or the latest git tag)
    │ get_current_version│──────────────────────────────┐
    └─────────┬──────────┘                              │
              ▼                                          │
    ┌────────────────────┐   git log since last tag      │
    │ collect_commits    │── parse ─→ drop reverted pairs│
    └─────────┬──────────┘                              │
              ▼                                          │
    ┌────────────────────┐   recommend_bump + increment  │
    │ get_next_version   │◄─────────────────────────────┘
    └─────────┬──────────┘
              ▼
    bump_files → update_release_changelog → commit_changes → tag_changes

Each step after ``get_next_version`` can be skipped via config, and in
dry-run mode every step logs instead of writing.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from bumpkit.backends import GitCLIBackend
from bumpkit.bump import recommend_bump
from bumpkit.changelog import (
    ChangelogUpdate,
    format_commit_message,
    parse_remote_url,
    render_release,
    update_changelog,
)
from bumpkit.commit_parsing import Commit, CommitParser, filter_reverted_commits
from bumpkit.config import BumpKitConfig
from bumpkit.errors import BumpKitError, E
from bumpkit.files import FileManager, FileState
from bumpkit.logging import get_logger
from bumpkit.versions import get_release_type, increment, is_pre_major, is_valid

logger = get_logger(__name__)


@dataclass(frozen=True)
class CurrentVersion:
    """The version the release starts from and the files that carry it."""

    version: str
    files: tuple[FileState, ...] = ()


@dataclass(frozen=True)
class NextVersion:
    """The version to release.

    Attributes:
        version: The new version.
        release_type: The increment applied (``minor``, ``prepatch``, ...),
            or ``None`` when the version was given explicitly.
        pre_major: Whether the current version was below 1.0.0.
        reason: Why this bump was recommended.
    """

    version: str
    release_type: str | None = None
    pre_major: bool = False
    reason: str = ''

    @property
    def is_prerelease(self) -> bool:
        """Whether the applied increment starts or continues a prerelease."""
        return (self.release_type or '').startswith('pre')


@dataclass(frozen=True)
class TagResult:
    """The created tag and follow-up instructions."""

    tag: str
    branch: str
    push_message: str
    publish_message: str = ''


@dataclass(frozen=True)
class ReleaseResult:
    """Everything a release run did."""

    current: CurrentVersion
    next: NextVersion
    previous_tag: str
    commits: tuple[Commit, ...]
    files: tuple[FileState, ...]
    changelog: ChangelogUpdate | None = None
    committed_files: tuple[str, ...] = ()
    tag: TagResult | None = None


async def get_current_version(
    config: BumpKitConfig,
    file_manager: FileManager,
    git: GitCLIBackend,
) -> CurrentVersion:
    """Find the single current version across the configured files.

    ``config.current_version`` wins over whatever the files say. With no
    version anywhere, the latest git tag is used when
    ``git_tag_fallback`` is on. A file with an empty version, such as an
    empty ``version.txt``, is still bumped but does not count as a version.

    Raises:
        BumpKitError: If no version is found or the files disagree.
    """
    files: list[FileState] = []
    versions: dict[str, None] = {}
    for name in config.files:
        state = file_manager.read(name)
        if state is None:
            continue
        files.append(state)
        if not config.current_version and state.version:
            versions.setdefault(state.version)
    if config.current_version:
        versions.setdefault(config.current_version)

    if not versions:
        if config.git_tag_fallback:
            version = await git.latest_tag_version(config.tag_prefix)
            if version:
                logger.info('version_from_git_tag', version=version)
                return CurrentVersion(version=version, files=tuple(files))
        raise BumpKitError(
            code=E.VERSION_NOT_FOUND,
            message='Unable to find current version',
            hint='Add a version to one of the configured files or pass --current-version.',
        )
    if len(versions) > 1:
        found = ', '.join(f'{state.name}={state.version}' for state in files)
        raise BumpKitError(
            code=E.VERSION_MULTIPLE,
            message=f'Found multiple versions: {found}',
            hint='Make every configured file carry the same version, or pass --current-version.',
        )

    version = next(iter(versions))
    logger.info('current_version', version=version, files=[state.name for state in files])
    return CurrentVersion(version=version, files=tuple(files))


async def collect_commits(
    config: BumpKitConfig,
    git: GitCLIBackend,
    parser: CommitParser,
) -> tuple[str, tuple[Commit, ...]]:
    """Parse the commits since the last release tag.

    Returns:
        The previous tag (``''`` for the first release) and the parsed
        commits with reverted pairs removed.
    """
    previous_version = await git.latest_tag_version(config.tag_prefix)
    previous_tag = f'{config.tag_prefix}{previous_version}' if previous_version else ''
    raw = await git.raw_commits(since=previous_tag or None)
    commits = filter_reverted_commits(parser.parse_many(raw))
    logger.info('commits_collected', since=previous_tag or None, raw=len(raw), kept=len(commits))
    return previous_tag, tuple(commits)


def get_next_version(
    config: BumpKitConfig,
    current_version: str,
    commits: Sequence[Commit],
) -> NextVersion:
    """Work out the version to release.

    A valid ``config.next_version`` is used as is. Otherwise the commits
    decide the bump, shifted down one level below 1.0.0.

    Raises:
        BumpKitError: If the current version is not valid semver.
    """
    if config.next_version and is_valid(config.next_version):
        return NextVersion(version=config.next_version)
    if config.next_version:
        logger.warning('next_version_invalid', next_version=config.next_version)

    pre_major = is_pre_major(current_version)
    recommended = recommend_bump(commits, pre_major=pre_major)
    release_type = get_release_type(recommended.release_type.value, current_version, config.pre_release)
    preid = config.pre_release if isinstance(config.pre_release, str) else None
    version = increment(current_version, release_type, preid)
    logger.info(
        'next_version',
        version=version,
        release_type=release_type,
        reason=recommended.reason,
    )
    return NextVersion(
        version=version,
        release_type=release_type,
        pre_major=pre_major,
        reason=recommended.reason,
    )


def bump_files(
    config: BumpKitConfig,
    file_manager: FileManager,
    current: CurrentVersion,
    next_version: str,
) -> tuple[FileState, ...]:
    """Write ``next_version`` into every file that carried the current version."""
    if config.skip_bump:
        logger.info('skip_bump')
        return ()
    for state in current.files:
        file_manager.write(state, next_version)
    return current.files


async def update_release_changelog(
    config: BumpKitConfig,
    git: GitCLIBackend,
    commits: Sequence[Commit],
    next_version: str,
    previous_tag: str,
) -> ChangelogUpdate | None:
    """Render the release section and prepend it to the changelog."""
    if config.skip_changelog:
        logger.info('skip_changelog')
        return None
    context = parse_remote_url(await git.remote_url())
    new_content = render_release(
        commits,
        version=next_version,
        current_tag=f'{config.tag_prefix}{next_version}',
        previous_tag=previous_tag,
        preset=config.changelog_preset,
        context=context,
    )
    return update_changelog(
        config.changelog_path,
        new_content,
        header=config.header,
        dry_run=config.dry_run,
    )


async def commit_changes(
    config: BumpKitConfig,
    git: GitCLIBackend,
    files: Sequence[FileState],
    next_version: str,
) -> tuple[str, ...]:
    """Stage and commit the changelog and bumped files.

    Files that git ignores are left out. With ``commit_all`` the commit
    also takes everything else that is staged.

    Returns:
        The file names that were committed.
    """
    if config.skip_commit:
        logger.info('skip_commit')
        return ()

    candidates = [] if config.skip_changelog else [config.changelog]
    candidates.extend(state.name for state in files)
    to_commit: list[str] = []
    for name in dict.fromkeys(candidates):
        if await git.is_ignored(name):
            logger.info('skip_ignored_file', file=name)
            continue
        to_commit.append(name)
    if not to_commit:
        logger.info('nothing_to_commit')
        return ()

    await git.add(*to_commit)
    await git.commit(
        format_commit_message(config.release_commit_message_format, next_version),
        paths=None if config.commit_all else to_commit,
        verify=config.verify,
        sign=config.sign,
    )
    return tuple(to_commit)


async def tag_changes(
    config: BumpKitConfig,
    git: GitCLIBackend,
    files: Sequence[FileState],
    next_version: NextVersion,
) -> TagResult | None:
    """Tag the release and build the push and publish hints."""
    if config.skip_tag:
        logger.info('skip_tag')
        return None

    tag = f'{config.tag_prefix}{next_version.version}'
    await git.tag(
        tag,
        format_commit_message(config.release_commit_message_format, next_version.version),
        sign=config.sign,
    )
    branch = await git.current_branch()
    push_message = f'Run `git push --follow-tags origin {branch}` to push the changes and the tag.'

    publish_message = ''
    if any(state.name == 'package.json' and state.is_private is False for state in files):
        if next_version.is_prerelease:
            npm_tag = config.pre_release if isinstance(config.pre_release, str) else 'prerelease'
            publish_message = f'Run `npm publish --tag {npm_tag}` to publish the package.'
        else:
            publish_message = 'Run `npm publish` to publish the package.'

    return TagResult(tag=tag, branch=branch, push_message=push_message, publish_message=publish_message)


async def run_release(
    config: BumpKitConfig,
    *,
    git: GitCLIBackend | None = None,
    file_manager: FileManager | None = None,
) -> ReleaseResult:
    """Run the whole release pipeline.

    Args:
        config: Settings for this run.
        git: Git backend; defaults to one rooted at ``config.path``.
        file_manager: File strategies; defaults to ones rooted at
            ``config.path``.

    Returns:
        A :class:`ReleaseResult` describing each step.

    Raises:
        BumpKitError: On missing or conflicting versions, bad
            configuration, or git failures.
    """
    git = git or GitCLIBackend(config.path, dry_run=config.dry_run)
    file_manager = file_manager or FileManager(config.path, dry_run=config.dry_run)
    parser = CommitParser(config.parser_options(), logger=logger)

    current = await get_current_version(config, file_manager, git)
    previous_tag, commits = await collect_commits(config, git, parser)
    next_version = get_next_version(config, current.version, commits)

    files = bump_files(config, file_manager, current, next_version.version)
    changelog = await update_release_changelog(config, git, commits, next_version.version, previous_tag)
    committed = await commit_changes(config, git, files, next_version.version)
    tag = await tag_changes(config, git, files, next_version)

    return ReleaseResult(
        current=current,
        next=next_version,
        previous_tag=previous_tag,
        commits=commits,
        files=files,
        changelog=changelog,
        committed_files=committed,
        tag=tag,
    )


__all__ = [
    'CurrentVersion',
    'NextVersion',
    'ReleaseResult',
    'TagResult',
    'bump_files',
    'collect_commits',
    'commit_changes',
    'get_current_version',
    'get_next_version',
    'run_release',
    'tag_changes',
    'update_release_changelog',
]
