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

"""Semantic Versioning 2.0.0 helpers.

Key Concepts (ELI5)::

    ┌─────────────────────┬────────────────────────────────────────────────┐
    │ Concept             │ ELI5 Explanation                               │
    ├─────────────────────┼────────────────────────────────────────────────┤
    │ SemVer              │ ``MAJOR.MINOR.PATCH[-pre][+build]`` split into │
    │                     │ parts so versions can be sorted and bumped.   │
    ├─────────────────────┼────────────────────────────────────────────────┤
    │ Release type        │ Which part to bump: major, minor, patch, or a │
    │                     │ ``pre*`` variant that adds a prerelease tag.  │
    ├─────────────────────┼────────────────────────────────────────────────┤
    │ Prerelease          │ ``1.2.4-beta.0`` → ``1.2.4-beta.1``: keep     │
    │                     │ counting until the real release.              │
    └─────────────────────┴────────────────────────────────────────────────┘

Increment rules::

    1.2.3         major       → 2.0.0
    2.0.0-rc.1    major       → 2.0.0
    1.2.3         premajor    → 2.0.0-0        (preid=beta: 2.0.0-beta.0)
    1.2.3         prerelease  → 1.2.4-0
    1.2.4-beta.0  prerelease  → 1.2.4-beta.1
    1.2.4-alpha.3 prerelease  → 1.2.4-beta.0   (preid=beta)
"""

from __future__ import annotations

import functools
import re
from collections.abc import Iterable
from dataclasses import dataclass, replace

from bumpkit.errors import BumpKitError, E

_SEMVER_RE = re.compile(
    r'^(?P<major>0|[1-9]\d*)\.(?P<minor>0|[1-9]\d*)\.(?P<patch>0|[1-9]\d*)'
    r'(?:-(?P<prerelease>(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)'
    r'(?:\.(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*))*))?'
    r'(?:\+(?P<build>[0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?$',
)

RELEASE_TYPES: frozenset[str] = frozenset({
    'major',
    'minor',
    'patch',
    'premajor',
    'preminor',
    'prepatch',
    'prerelease',
})

# Lowest to highest.
_PRIORITY: tuple[str, ...] = ('patch', 'minor', 'major')

PrereleaseId = int | str


def _parse_identifier(part: str) -> PrereleaseId:
    return int(part) if part.isdigit() else part


def _compare_identifiers(a: PrereleaseId, b: PrereleaseId) -> int:
    # Numeric identifiers sort before alphanumeric ones.
    if isinstance(a, int) and isinstance(b, int):
        return (a > b) - (a < b)
    if isinstance(a, int):
        return -1
    if isinstance(b, int):
        return 1
    return (a > b) - (a < b)


@functools.total_ordering
@dataclass(frozen=True)
class SemVer:
    """A parsed semantic version.

    Ordering follows semver precedence: build metadata is ignored and a
    prerelease sorts before its release.
    """

    major: int
    minor: int
    patch: int
    prerelease: tuple[PrereleaseId, ...] = ()
    build: tuple[str, ...] = ()

    def __str__(self) -> str:
        """Render as ``MAJOR.MINOR.PATCH[-pre][+build]``."""
        text = f'{self.major}.{self.minor}.{self.patch}'
        if self.prerelease:
            text += '-' + '.'.join(str(part) for part in self.prerelease)
        if self.build:
            text += '+' + '.'.join(self.build)
        return text

    def __eq__(self, other: object) -> bool:
        """Compare by precedence, ignoring build metadata."""
        if not isinstance(other, SemVer):
            return NotImplemented
        return compare(self, other) == 0

    def __lt__(self, other: SemVer) -> bool:
        """Return ``True`` when this version has lower precedence."""
        return compare(self, other) < 0

    def __hash__(self) -> int:
        """Hash on the precedence-relevant parts."""
        return hash((self.major, self.minor, self.patch, self.prerelease))

    @property
    def is_prerelease(self) -> bool:
        """Whether the version carries a prerelease tag."""
        return bool(self.prerelease)


def compare(a: SemVer, b: SemVer) -> int:
    """Return -1, 0 or 1 by semver precedence."""
    core_a = (a.major, a.minor, a.patch)
    core_b = (b.major, b.minor, b.patch)
    if core_a != core_b:
        return -1 if core_a < core_b else 1
    if not a.prerelease and not b.prerelease:
        return 0
    if not a.prerelease:
        return 1
    if not b.prerelease:
        return -1
    for left, right in zip(a.prerelease, b.prerelease):
        result = _compare_identifiers(left, right)
        if result:
            return result
    return (len(a.prerelease) > len(b.prerelease)) - (len(a.prerelease) < len(b.prerelease))


def parse_version(text: str) -> SemVer | None:
    """Parse a version, tolerating surrounding whitespace and a ``v``/``=`` prefix.

    >>> str(parse_version('v1.2.3-beta.1'))
    '1.2.3-beta.1'
    >>> parse_version('1.2') is None
    True
    """
    candidate = text.strip().lstrip('=v').strip()
    match = _SEMVER_RE.match(candidate)
    if not match:
        return None
    prerelease = match.group('prerelease')
    build = match.group('build')
    return SemVer(
        major=int(match.group('major')),
        minor=int(match.group('minor')),
        patch=int(match.group('patch')),
        prerelease=tuple(_parse_identifier(p) for p in prerelease.split('.')) if prerelease else (),
        build=tuple(build.split('.')) if build else (),
    )


def clean(text: str) -> str | None:
    """Return the normalized version string, or ``None`` if ``text`` is not a version."""
    version = parse_version(text)
    return str(version) if version else None


def is_valid(text: str) -> bool:
    """Whether ``text`` parses as a semantic version."""
    return parse_version(text) is not None


def _require(text: str) -> SemVer:
    version = parse_version(text)
    if version is None:
        raise BumpKitError(
            code=E.VERSION_INVALID,
            message=f"'{text}' is not a valid semantic version",
            hint='Versions look like 1.2.3 or 1.2.3-beta.0.',
        )
    return version


def is_pre_major(text: str) -> bool:
    """Whether the version is below 1.0.0."""
    return _require(text) < SemVer(1, 0, 0)


def _bump_prerelease(version: SemVer, preid: str | None) -> SemVer:
    prerelease = list(version.prerelease)
    if not prerelease:
        prerelease = [0]
    else:
        for index in range(len(prerelease) - 1, -1, -1):
            part = prerelease[index]
            if isinstance(part, int):
                prerelease[index] = part + 1
                break
        else:
            prerelease.append(0)

    if preid:
        same_id = _compare_identifiers(prerelease[0], preid) == 0
        if not same_id or len(prerelease) < 2 or not isinstance(prerelease[1], int):
            prerelease = [preid, 0]

    return replace(version, prerelease=tuple(prerelease), build=())


def increment(text: str, release_type: str, preid: str | None = None) -> str:
    """Return ``text`` bumped by ``release_type``.

    Args:
        text: The current version.
        release_type: One of :data:`RELEASE_TYPES`.
        preid: Prerelease identifier (e.g. ``"beta"``) for ``pre*`` types.

    Returns:
        The incremented version string.

    Raises:
        BumpKitError: If ``text`` is not a version or ``release_type`` is
            unknown.
    """
    version = _require(text)
    if release_type not in RELEASE_TYPES:
        raise BumpKitError(
            code=E.VERSION_INVALID,
            message=f"Unknown release type '{release_type}'",
            hint=f'Use one of: {", ".join(sorted(RELEASE_TYPES))}.',
        )

    def release(v: SemVer) -> SemVer:
        return replace(v, prerelease=(), build=())

    if release_type == 'major':
        # 2.0.0-rc.1 → 2.0.0
        if version.minor or version.patch or not version.prerelease:
            version = replace(version, major=version.major + 1, minor=0, patch=0)
        return str(release(version))
    if release_type == 'minor':
        if version.patch or not version.prerelease:
            version = replace(version, minor=version.minor + 1, patch=0)
        return str(release(version))
    if release_type == 'patch':
        if not version.prerelease:
            version = replace(version, patch=version.patch + 1)
        return str(release(version))
    if release_type == 'premajor':
        base = SemVer(version.major + 1, 0, 0)
        return str(_bump_prerelease(base, preid))
    if release_type == 'preminor':
        base = SemVer(version.major, version.minor + 1, 0)
        return str(_bump_prerelease(base, preid))
    if release_type == 'prepatch':
        base = SemVer(version.major, version.minor, version.patch + 1)
        return str(_bump_prerelease(base, preid))

    # prerelease
    if not version.prerelease:
        version = SemVer(version.major, version.minor, version.patch + 1)
    return str(_bump_prerelease(version, preid))


def _version_type(version: SemVer) -> str | None:
    """Return the most significant non-zero component name."""
    if version.major:
        return 'major'
    if version.minor:
        return 'minor'
    if version.patch:
        return 'patch'
    return None


def _priority(release_type: str | None) -> int:
    return _PRIORITY.index(release_type) if release_type in _PRIORITY else -1


def get_release_type(
    release_type: str,
    current_version: str,
    prerelease_tag: str | bool | None = None,
) -> str:
    """Return the release type to pass to :func:`increment`.

    Without a prerelease tag this is ``release_type`` itself. With one,
    a version that is already a prerelease keeps counting (``prerelease``)
    unless the bump needs a more significant component; otherwise the
    ``pre`` variant of ``release_type`` starts a new prerelease line.

    >>> get_release_type('patch', '1.0.0')
    'patch'
    >>> get_release_type('major', '0.0.0-beta', 'beta')
    'premajor'
    >>> get_release_type('patch', '1.0.1-beta.0', 'beta')
    'prerelease'
    """
    if not prerelease_tag:
        return release_type

    current = _require(current_version)
    if current.is_prerelease:
        current_type = _version_type(current)
        if current_type == release_type or _priority(current_type) > _priority(release_type):
            return 'prerelease'

    return f'pre{release_type}'


def strip_tag_prefix(tag: str, tag_prefix: str) -> str:
    """Remove ``tag_prefix`` from the start of ``tag`` when present."""
    if tag_prefix and tag.startswith(tag_prefix):
        return tag[len(tag_prefix) :]
    return tag


def latest_version(tags: Iterable[str], tag_prefix: str = '') -> str:
    """Return the highest version found in ``tags``, or ``''``.

    >>> latest_version(['v1.0.0', 'v1.2.0', 'v1.10.0-rc.0'], 'v')
    '1.10.0-rc.0'
    """
    versions = [parse_version(strip_tag_prefix(tag, tag_prefix)) for tag in tags]
    valid = [v for v in versions if v is not None]
    if not valid:
        return ''
    return str(replace(max(valid), build=()))


__all__ = [
    'RELEASE_TYPES',
    'SemVer',
    'clean',
    'compare',
    'get_release_type',
    'increment',
    'is_pre_major',
    'is_valid',
    'latest_version',
    'parse_version',
    'strip_tag_prefix',
]
