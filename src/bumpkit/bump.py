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

"""Recommend a semver bump from parsed commits.

Commit → bump mapping::

    breaking change or any footer note   →  major
    feat: / feature:                     →  minor
    everything else                      →  patch

Before 1.0.0 (``pre_major``) a breaking change only bumps ``minor`` and a
feature only bumps ``patch``; going to 1.0.0 is left to the maintainer.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from bumpkit.commit_parsing import Commit

MINOR_TYPES: frozenset[str] = frozenset({'feat', 'feature'})


class BumpType(Enum):
    """Semver bump types, ordered by precedence (highest first)."""

    MAJOR = 'major'
    MINOR = 'minor'
    PATCH = 'patch'


# Lower index = higher precedence.
BUMP_PRECEDENCE: list[BumpType] = [
    BumpType.MAJOR,
    BumpType.MINOR,
    BumpType.PATCH,
]


def max_bump(a: BumpType, b: BumpType) -> BumpType:
    """Return the higher-precedence bump type.

    >>> max_bump(BumpType.MINOR, BumpType.PATCH)
    <BumpType.MINOR: 'minor'>
    """
    return BUMP_PRECEDENCE[min(BUMP_PRECEDENCE.index(a), BUMP_PRECEDENCE.index(b))]


@dataclass(frozen=True)
class BumpChanges:
    """How many commits fell into each bump category.

    Attributes:
        major: Breaking commits (bang or footer notes).
        minor: Feature commits.
        patch: All other commits.
        notes: Total footer notes across breaking commits.
    """

    major: int = 0
    minor: int = 0
    patch: int = 0
    notes: int = 0


@dataclass(frozen=True)
class RecommendedBump:
    """The recommended release type and the counts behind it."""

    release_type: BumpType
    changes: BumpChanges
    pre_major: bool = False

    @property
    def reason(self) -> str:
        """Human-readable summary of the counts."""
        c = self.changes
        breaking = 'BREAKING CHANGE' if c.major == 1 else 'BREAKING CHANGES'
        features = 'feature' if c.minor == 1 else 'features'
        return f'There are {c.major} {breaking} and {c.minor} {features}'


def classify_commit(commit: Commit) -> BumpType:
    """Return the bump a single commit asks for."""
    if commit.is_breaking_change or commit.notes:
        return BumpType.MAJOR
    if commit.type in MINOR_TYPES:
        return BumpType.MINOR
    return BumpType.PATCH


def recommend_bump(commits: Iterable[Commit], *, pre_major: bool = False) -> RecommendedBump:
    """Recommend a release type for a batch of commits.

    Args:
        commits: Parsed commits since the last release.
        pre_major: Whether the current version is below 1.0.0.

    Returns:
        A :class:`RecommendedBump`. An empty batch recommends ``patch``.
    """
    major = minor = patch = notes = 0
    for commit in commits:
        bump = classify_commit(commit)
        if bump is BumpType.MAJOR:
            major += 1
            notes += len(commit.notes)
        elif bump is BumpType.MINOR:
            minor += 1
        else:
            patch += 1

    release_type = BumpType.PATCH
    if pre_major:
        if major:
            release_type = BumpType.MINOR
    elif major:
        release_type = BumpType.MAJOR
    elif minor:
        release_type = BumpType.MINOR

    return RecommendedBump(
        release_type=release_type,
        changes=BumpChanges(major=major, minor=minor, patch=patch, notes=notes),
        pre_major=pre_major,
    )


__all__ = [
    'BUMP_PRECEDENCE',
    'BumpChanges',
    'BumpType',
    'MINOR_TYPES',
    'RecommendedBump',
    'classify_commit',
    'max_bump',
    'recommend_bump',
]
