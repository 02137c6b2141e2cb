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

"""Changelog generation from parsed conventional commits.

Renders one markdown section per release and prepends it to the
changelog file below the configured header.

Key Concepts (ELI5)::

    ┌─────────────────────┬────────────────────────────────────────────────┐
    │ Concept             │ ELI5 Explanation                               │
    ├─────────────────────┼────────────────────────────────────────────────┤
    │ Release section     │ The block for one version: a heading, then    │
    │                     │ breaking changes, then one list per type.     │
    ├─────────────────────┼────────────────────────────────────────────────┤
    │ Hidden type         │ A commit type (chore, docs, ...) that never   │
    │                     │ appears in its own list.                      │
    ├─────────────────────┼────────────────────────────────────────────────┤
    │ RepoContext         │ Host, owner and repository from the git       │
    │                     │ remote. Without it, nothing is linked.        │
    ├─────────────────────┼────────────────────────────────────────────────┤
    │ Release pattern     │ ``## 1.2.3`` or ``<a name=``: where the       │
    │                     │ previous releases start in the file.          │
    └─────────────────────┴────────────────────────────────────────────────┘

Rendered section::

    ## [1.3.0](https://github.com/o/r/compare/v1.2.0...v1.3.0) (2026-10-19)

    ### ⚠ BREAKING CHANGES

    * **api:** drop the v1 endpoints

    ### Features

    * **api:** add pagination ([#12](https://github.com/o/r/issues/12)) ([1a2b3c4](...))
"""

from __future__ import annotations

import datetime
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

from bumpkit.commit_parsing import BREAKING_CHANGE_TITLES, Commit, SubjectKind
from bumpkit.config import DEFAULT_RELEASE_COMMIT_MESSAGE_FORMAT, ChangelogPresetConfig
from bumpkit.errors import BumpKitError, E
from bumpkit.logging import get_logger

logger = get_logger(__name__)

# Matches ``## [0.0.0]``, ``# 0.0.0`` or ``<a name="0.0.0"></a>``.
RELEASE_PATTERN = re.compile(r'(^#+ \[?[0-9]+\.[0-9]+\.[0-9]+|<a name=)', re.MULTILINE)

BREAKING_CHANGES_HEADING = '⚠ BREAKING CHANGES'

_PLACEHOLDER_RE = re.compile(r'\{\{(\w+)\}\}')

# git@host:owner/repo.git
_SCP_REMOTE_RE = re.compile(r'^(?:[\w.-]+@)?(?P<host>[\w.-]+):(?P<path>[^/].*)$')

# Azure DevOps keeps the project between the organization and the repo.
_AZURE_HTTPS_RE = re.compile(r'^https://(?:[^@/]+@)?dev\.azure\.com/(?P<org>[^/]+)/(?P<project>[^/]+)/_git/(?P<repo>[^/]+)$')
_AZURE_SSH_RE = re.compile(r'^(?:[\w.-]+@)?ssh\.dev\.azure\.com:v3/(?P<org>[^/]+)/(?P<project>[^/]+)/(?P<repo>[^/]+)$')


@dataclass(frozen=True)
class RepoContext:
    """Where the repository is hosted, for building links.

    Attributes:
        host: Scheme and host, e.g. ``https://github.com``.
        owner: Owner or organization path.
        repository: Repository path under the owner.
    """

    host: str
    owner: str
    repository: str

    def values(self) -> dict[str, str]:
        """Placeholder values for URL templates."""
        return {'host': self.host, 'owner': self.owner, 'repository': self.repository}


def parse_remote_url(url: str) -> RepoContext | None:
    """Work out the host, owner and repository from a git remote URL.

    >>> parse_remote_url('git@github.com:octo/hello.git')
    RepoContext(host='https://github.com', owner='octo', repository='hello')
    >>> parse_remote_url('https://dev.azure.com/org/proj/_git/repo')
    RepoContext(host='https://dev.azure.com', owner='org/proj', repository='_git/repo')
    >>> parse_remote_url('') is None
    True
    """
    url = url.strip()
    if not url:
        return None
    if url.endswith('.git'):
        url = url[: -len('.git')]

    azure = _AZURE_HTTPS_RE.match(url) or _AZURE_SSH_RE.match(url)
    if azure:
        return RepoContext(
            host='https://dev.azure.com',
            owner=f'{azure["org"]}/{azure["project"]}',
            repository=f'_git/{azure["repo"]}',
        )

    if '://' in url:
        scheme, rest = url.split('://', 1)
        host, _, path = rest.partition('/')
        host = host.rsplit('@', 1)[-1].split(':', 1)[0]
        if scheme not in ('http', 'https'):
            scheme = 'https'
    else:
        match = _SCP_REMOTE_RE.match(url)
        if not match:
            return None
        scheme, host, path = 'https', match['host'], match['path']

    owner, _, repository = path.strip('/').rpartition('/')
    if not host or not owner or not repository:
        return None
    return RepoContext(host=f'{scheme}://{host}', owner=owner, repository=repository)


def render_template(template: str, values: Mapping[str, str]) -> str:
    """Replace every ``{{name}}`` in ``template`` with ``values[name]``.

    Unknown placeholders are left as they are.

    >>> render_template('{{host}}/{{user}}', {'host': 'https://github.com', 'user': 'octo'})
    'https://github.com/octo'
    """
    return _PLACEHOLDER_RE.sub(lambda m: values.get(m.group(1), m.group(0)), template)


def format_commit_message(template: str | None, version: str) -> str:
    """Build the release commit (and tag) message for ``version``.

    An empty template falls back to ``chore(release): {{currentTag}}``.

    >>> format_commit_message(None, '1.2.3')
    'chore(release): 1.2.3'
    """
    return (template or DEFAULT_RELEASE_COMMIT_MESSAGE_FORMAT).replace('{{currentTag}}', version)


class _Linker:
    """Build markdown links, or plain text when there is no repo context."""

    def __init__(self, preset: ChangelogPresetConfig, context: RepoContext | None) -> None:
        self._preset = preset
        self._context = context

    def _url(self, template: str, **values: str) -> str:
        assert self._context is not None  # noqa: S101 - callers check
        return render_template(template, {**self._context.values(), **values})

    def commit(self, commit: Commit) -> str:
        if not commit.hash:
            return ''
        if self._context is None:
            return commit.short_hash
        return f'[{commit.short_hash}]({self._url(self._preset.commit_url_format, hash=commit.hash)})'

    def issue(self, text: str, owner: str | None, repository: str | None, issue: str) -> str:
        if self._context is None:
            return text
        overrides = {'id': issue}
        if owner and repository:
            overrides.update(owner=owner, repository=repository)
        return f'[{text}]({self._url(self._preset.issue_url_format, **overrides)})'

    def user(self, username: str) -> str:
        if self._context is None:
            return f'@{username}'
        return f'[@{username}]({self._url(self._preset.user_url_format, user=username)})'

    def compare(self, previous_tag: str, current_tag: str) -> str | None:
        if self._context is None or not previous_tag:
            return None
        return self._url(self._preset.compare_url_format, previousTag=previous_tag, currentTag=current_tag)


def _reference_text(prefix: str, issue: str, owner: str | None, repository: str | None) -> str:
    if owner and repository:
        return f'{owner}/{repository}{prefix}{issue}'
    return f'{prefix}{issue}'


def _link_title(commit: Commit, text: str, linker: _Linker) -> tuple[str, set[str]]:
    """Link issue references and mentions that appear in ``text``.

    Returns:
        The linked text and the reference strings it already contains.
    """
    linked: set[str] = set()
    for reference in commit.references:
        ref_text = _reference_text(reference.prefix, reference.issue, reference.owner, reference.repository)
        if ref_text in linked:
            continue
        pattern = re.compile(rf'(?<![\w/\[]){re.escape(ref_text)}(?!\w)')
        if pattern.search(text):
            replacement = linker.issue(ref_text, reference.owner, reference.repository, reference.issue)
            text = pattern.sub(lambda _m, r=replacement: r, text)
            linked.add(ref_text)
    for username in commit.mentions:
        pattern = re.compile(rf'(?<![\w\[])@{re.escape(username)}(?![\w-])')
        text = pattern.sub(lambda _m, u=username: linker.user(u), text)
    return text, linked


def _commit_line(commit: Commit, text: str, linker: _Linker) -> str:
    title, in_title = _link_title(commit, text, linker)
    line = f'* **{commit.scope}:** {title}' if commit.scope else f'* {title}'

    hash_link = linker.commit(commit)
    if hash_link:
        line += f' ({hash_link})'

    closes: list[str] = []
    for reference in commit.references:
        ref_text = _reference_text(reference.prefix, reference.issue, reference.owner, reference.repository)
        if reference.action is None or ref_text in in_title:
            continue
        link = linker.issue(ref_text, reference.owner, reference.repository, reference.issue)
        if link not in closes:
            closes.append(link)
    if closes:
        line += ', closes ' + ' '.join(closes)
    return line


def _display_type(commit: Commit) -> str:
    return 'revert' if commit.kind is SubjectKind.REVERT else commit.type


def _display_text(commit: Commit) -> str:
    return commit.subject if commit.kind is SubjectKind.REVERT else commit.title


def _breaking_lines(commits: Sequence[Commit], linker: _Linker) -> list[str]:
    lines: list[str] = []
    for commit in commits:
        if not commit.is_breaking_change:
            continue
        notes = [note.text for note in commit.notes if note.title in BREAKING_CHANGE_TITLES and note.text.strip()]
        for text in notes or [commit.title]:
            title, _ = _link_title(commit, text.strip(), linker)
            lines.append(f'* **{commit.scope}:** {title}' if commit.scope else f'* {title}')
    return lines


def render_release(
    commits: Sequence[Commit],
    *,
    version: str,
    current_tag: str,
    previous_tag: str = '',
    preset: ChangelogPresetConfig | None = None,
    context: RepoContext | None = None,
    date: str | None = None,
) -> str:
    """Render the changelog section for one release.

    Args:
        commits: Parsed commits in the release, newest first, with
            reverted pairs already removed.
        version: The new version.
        current_tag: The tag the release will get.
        previous_tag: The previous release tag; enables the compare link.
        preset: Types, sections and URL formats.
        context: Repository host details; ``None`` renders without links.
        date: Release date; defaults to today in ISO format.

    Returns:
        The markdown section, ending with a newline.
    """
    preset = preset or ChangelogPresetConfig()
    linker = _Linker(preset, context)
    date = date or datetime.date.today().isoformat()

    compare_url = linker.compare(previous_tag, current_tag)
    heading = f'[{version}]({compare_url})' if compare_url else version
    blocks: list[str] = [f'## {heading} ({date})']

    breaking = _breaking_lines(commits, linker)
    if breaking:
        blocks.append(f'### {BREAKING_CHANGES_HEADING}\n\n' + '\n'.join(breaking))

    sections: dict[str, list[Commit]] = {}
    type_to_section: dict[str, str] = {}
    for changelog_type in preset.types:
        if changelog_type.hidden or changelog_type.type in type_to_section:
            continue
        type_to_section[changelog_type.type] = changelog_type.section
        sections.setdefault(changelog_type.section, [])

    for commit in commits:
        section = type_to_section.get(_display_type(commit))
        if section is not None:
            sections[section].append(commit)

    for section, section_commits in sections.items():
        if not section_commits:
            continue
        ordered = sorted(section_commits, key=lambda c: (c.scope, _display_text(c)))
        lines = [_commit_line(commit, _display_text(commit), linker) for commit in ordered]
        blocks.append(f'### {section}\n\n' + '\n'.join(lines))

    return '\n\n'.join(blocks) + '\n'


@dataclass(frozen=True)
class ChangelogUpdate:
    """What :func:`update_changelog` did.

    Attributes:
        path: The changelog file.
        exists: Whether the file exists after the call.
        old_content: Previous releases kept below the new section.
        new_content: The newly rendered section.
    """

    path: Path
    exists: bool
    old_content: str
    new_content: str


def old_release_content(path: Path) -> str:
    """Return the changelog from the newest release heading onward."""
    if not path.is_file():
        return ''
    text = path.read_text(encoding='utf-8')
    match = RELEASE_PATTERN.search(text)
    return text[match.start() :] if match else ''


def update_changelog(
    path: Path,
    new_content: str,
    *,
    header: str,
    dry_run: bool = False,
) -> ChangelogUpdate:
    """Prepend ``new_content`` to the changelog at ``path``.

    The file is rewritten as the header, the new section, then the
    previous releases. Anything between the old header and the first
    release heading is dropped. A missing file is created first.

    Raises:
        BumpKitError: If ``header`` itself looks like a release heading,
            which would make the next run lose content.
    """
    if RELEASE_PATTERN.search(header):
        raise BumpKitError(
            code=E.CHANGELOG_INVALID_HEADER,
            message='Changelog header cannot contain a release heading',
            hint="Remove lines like '## 1.0.0' or '<a name=' from the header.",
        )

    if not path.exists() and not dry_run:
        logger.info('changelog_created', path=str(path))
        path.write_text('\n', encoding='utf-8')

    old_content = old_release_content(path)
    logger.info('changelog_updating', path=str(path), dry_run=dry_run)
    if not dry_run and new_content:
        path.write_text(f'{header}\n{new_content}\n{old_content}', encoding='utf-8')

    return ChangelogUpdate(
        path=path,
        exists=path.exists(),
        old_content=old_content,
        new_content=new_content,
    )


__all__ = [
    'BREAKING_CHANGES_HEADING',
    'ChangelogUpdate',
    'RELEASE_PATTERN',
    'RepoContext',
    'format_commit_message',
    'old_release_content',
    'parse_remote_url',
    'render_release',
    'render_template',
    'update_changelog',
]
