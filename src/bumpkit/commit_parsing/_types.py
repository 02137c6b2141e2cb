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

"""Pure types for commit message parsing.

This module has **zero** runtime dependencies beyond the standard library.
Everything here is a frozen dataclass or enum. No I/O, no logging, no
side effects.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from enum import Enum
from typing import Any


class SubjectKind(Enum):
    """How a commit subject was classified.

    Exactly one kind applies to every parsed commit. The parser checks
    ``MERGE`` first, then ``REVERT``, then ``CONVENTIONAL``.
    """

    CONVENTIONAL = 'conventional'
    MERGE = 'merge'
    REVERT = 'revert'
    UNRECOGNIZED = 'unrecognized'


@dataclass(frozen=True)
class CommitMerge:
    """A GitHub-style ``Merge pull request #<id> from <source>`` subject."""

    id: str
    source: str


@dataclass(frozen=True)
class CommitRevert:
    """A ``Revert "<subject>"`` commit and the commit it undoes.

    Attributes:
        hash: The reverted commit hash, or ``''`` when the message has no
            ``This reverts commit <hash>.`` line.
        subject: The quoted subject of the reverted commit, possibly ``''``.
    """

    hash: str
    subject: str


@dataclass(frozen=True)
class CommitReference:
    """An issue reference such as ``closes owner/repo#123``.

    Attributes:
        prefix: The issue prefix that matched (e.g. ``"#"`` or ``"gh-"``).
        issue: The issue id without its prefix.
        action: The action keyword as written (e.g. ``"Closes"``), or
            ``None`` for a bare reference.
        owner: Repository owner when the reference is ``owner/repo#id``.
        repository: Repository name, or ``None`` for a local reference.
    """

    prefix: str
    issue: str
    action: str | None = None
    owner: str | None = None
    repository: str | None = None


@dataclass(frozen=True)
class CommitNote:
    """A footer note such as ``BREAKING CHANGE: <text>``."""

    title: str
    text: str


@dataclass(frozen=True)
class Commit:
    """A parsed commit record.

    Attributes:
        raw: The subject followed by the rest of the message (comment lines
            included), with surrounding whitespace removed.
        subject: The first line with leading whitespace removed.
        body: The remaining lines without comment lines, stripped of
            surrounding whitespace. Internal indentation is kept.
        hash: Commit hash, copied verbatim from the trailer.
        date: ISO-8601 commit date, copied verbatim from the trailer.
        name: Author name, copied verbatim from the trailer.
        email: Author email, copied verbatim from the trailer.
        type: Conventional type, ``''`` for merge, revert and
            unrecognized subjects.
        scope: Conventional scope, ``''`` when absent or empty.
        title: Conventional description after ``type(scope):``.
        is_breaking_change: ``!`` in the subject or a breaking-change note.
        merge: Merge details for merge subjects, else ``None``.
        revert: Revert details for revert subjects, else ``None``.
        notes: Footer notes in order of appearance.
        mentions: ``@username`` mentions in order of first appearance.
        references: Issue references in order of appearance.
    """

    raw: str
    subject: str
    body: str
    hash: str
    date: str
    name: str
    email: str
    type: str = ''
    scope: str = ''
    title: str = ''
    is_breaking_change: bool = False
    merge: CommitMerge | None = None
    revert: CommitRevert | None = None
    notes: tuple[CommitNote, ...] = ()
    mentions: tuple[str, ...] = ()
    references: tuple[CommitReference, ...] = ()

    @property
    def kind(self) -> SubjectKind:
        """The subject classification for this commit."""
        if self.merge is not None:
            return SubjectKind.MERGE
        if self.revert is not None:
            return SubjectKind.REVERT
        if self.type:
            return SubjectKind.CONVENTIONAL
        return SubjectKind.UNRECOGNIZED

    @property
    def short_hash(self) -> str:
        """The first seven characters of the commit hash."""
        return self.hash[:7]

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable mapping of this commit."""
        data = dataclasses.asdict(self)
        for key in ('notes', 'mentions', 'references'):
            data[key] = list(data[key])
        return data


__all__ = [
    'Commit',
    'CommitMerge',
    'CommitNote',
    'CommitReference',
    'CommitRevert',
    'SubjectKind',
]
