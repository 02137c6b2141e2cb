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

r"""Conventional commit record parser.

A raw record is produced by ``git log`` with one field per line::

    <subject>
    <body, any number of lines>
    <hash>
    <date, ISO-8601>
    <author name>
    <author email>
    [blank]

The last four lines are the trailer. A record with fewer than six lines,
or whose trailer does not look like ``hash / date / name / email``, is
structurally malformed: :meth:`CommitParser.parse` logs it at debug level
and returns ``None`` so the rest of the batch is still usable.

Extraction order::

    split + validate trailer
        │
        ▼
    strip comment lines from the body
        │
        ▼
    classify subject: merge ─▶ revert ─▶ conventional ─▶ unrecognized
        │
        ▼
    notes ─▶ breaking flag ─▶ mentions ─▶ references

A subject that does not follow the convention is not an error; its
``type``, ``scope`` and ``title`` are simply empty.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from typing import Any

from bumpkit.commit_parsing._options import (
    BREAKING_CHANGE_TITLES,
    DEFAULT_PARSER_OPTIONS,
    ParserOptions,
)
from bumpkit.commit_parsing._types import (
    Commit,
    CommitMerge,
    CommitNote,
    CommitReference,
    CommitRevert,
)

_LINE_SPLIT = re.compile(r'\r?\n')

# YYYY-MM-DD with optional time, fraction and offset.
_ISO_DATE = re.compile(
    r'^\d{4}-\d{2}-\d{2}'
    r'(?:[T ]\d{2}:\d{2}(?::\d{2}(?:\.\d+)?)?'
    r'(?:Z|[+-]\d{2}:?\d{2})?)?$',
)

_NO_WHITESPACE = re.compile(r'^\S*$')

# subject + at least one body line + hash, date, name, email
_MIN_SEGMENTS = 6


class CommitParseError(ValueError):
    """A raw commit record whose trailer is malformed.

    Raised inside the parser and caught by :meth:`CommitParser.parse`;
    it never escapes the public API.
    """

    def __init__(self, message: str, raw: str) -> None:
        """Initialize with a reason and the offending record."""
        super().__init__(message)
        self.raw = raw


def _split_trailer(raw: str) -> tuple[list[str], str, str, str, str]:
    """Split a record into message lines and the four trailer fields."""
    segments = _LINE_SPLIT.split(raw)
    if len(segments) < _MIN_SEGMENTS:
        raise CommitParseError(
            f'expected at least {_MIN_SEGMENTS} lines, got {len(segments)}',
            raw,
        )
    try:
        return _validate_trailer(segments, raw)
    except CommitParseError:
        # A single trailing blank segment is tolerated.
        if len(segments) > _MIN_SEGMENTS and segments[-1].strip() == '':
            return _validate_trailer(segments[:-1], raw)
        raise


def _validate_trailer(segments: list[str], raw: str) -> tuple[list[str], str, str, str, str]:
    message_lines = segments[:-4]
    commit_hash, date, name, email = segments[-4:]

    if not commit_hash or not _NO_WHITESPACE.match(commit_hash):
        raise CommitParseError(f'invalid hash {commit_hash!r}', raw)
    if not _ISO_DATE.match(date):
        raise CommitParseError(f'invalid date {date!r}', raw)
    if not _NO_WHITESPACE.match(email):
        raise CommitParseError(f'invalid email {email!r}', raw)

    return message_lines, commit_hash, date, name, email


class CommitParser:
    r"""Parse raw ``git log`` records into :class:`Commit` values.

    The parser holds no per-call state; one instance can be shared across
    threads and tasks.

    Args:
        options: Compiled grammar, see
            :func:`~bumpkit.commit_parsing.create_parser_options`.
        logger: Optional structlog (or stdlib-compatible) logger. Malformed
            records are reported through ``logger.debug``; without a logger
            they are dropped silently.

    Example::

        parser = CommitParser()
        commit = parser.parse('feat(api)!: drop v1\n\nabc123\n2024-12-22T17:36:50Z\nJane\njane@example.com')
        assert commit.type == 'feat'
        assert commit.is_breaking_change
    """

    def __init__(
        self,
        options: ParserOptions | None = None,
        *,
        logger: Any = None,  # noqa: ANN401 - any object with .debug()
    ) -> None:
        """Initialize with a grammar and an optional logger."""
        self.options = options or DEFAULT_PARSER_OPTIONS
        self.logger = logger

    def parse(self, raw: str) -> Commit | None:
        """Parse one raw commit record.

        Args:
            raw: Newline-joined ``subject, body..., hash, date, name, email``.

        Returns:
            The parsed :class:`Commit`, or ``None`` when the trailer is
            malformed.
        """
        try:
            return self._parse(raw)
        except CommitParseError as exc:
            if self.logger is not None:
                self.logger.debug('commit_parse_failed', reason=str(exc), raw=exc.raw)
            return None

    def parse_many(self, raws: Iterable[str]) -> list[Commit]:
        """Parse a batch of records, dropping malformed ones and keeping order."""
        commits: list[Commit] = []
        for raw in raws:
            commit = self.parse(raw)
            if commit is not None:
                commits.append(commit)
        return commits

    def _parse(self, raw: str) -> Commit:
        message_lines, commit_hash, date, name, email = _split_trailer(raw)

        subject = message_lines[0].lstrip()
        rest = message_lines[1:]

        rest_text = '\n'.join(rest).strip()
        full_message = f'{subject}\n{rest_text}' if rest_text else subject

        body = '\n'.join(line for line in rest if not self._is_comment(line)).strip()
        body_lines = body.split('\n') if body else []

        commit_type = scope = title = ''
        bang = False
        merge: CommitMerge | None = None
        revert: CommitRevert | None = None

        merge_match = self.options.merge_pattern.search(subject)
        if merge_match:
            groups = merge_match.groupdict()
            merge = CommitMerge(id=groups.get('id') or '', source=groups.get('source') or '')
        else:
            revert_match = self.options.revert_pattern.search(full_message)
            if revert_match:
                groups = revert_match.groupdict()
                revert = CommitRevert(hash=groups.get('hash') or '', subject=groups.get('subject') or '')
            else:
                subject_match = self.options.subject_pattern.search(subject)
                if subject_match:
                    groups = subject_match.groupdict()
                    commit_type = groups.get('type') or ''
                    scope = groups.get('scope') or ''
                    title = groups.get('title') or ''
                    bang = bool(groups.get('breaking_change'))

        notes = self._parse_notes(body_lines)
        # Merge and revert records never carry a conventional type.
        is_breaking_change = merge is None and revert is None and (
            bang or any(note.title in BREAKING_CHANGE_TITLES for note in notes)
        )

        return Commit(
            raw=full_message,
            subject=subject,
            body=body,
            hash=commit_hash,
            date=date,
            name=name,
            email=email,
            type=commit_type,
            scope=scope,
            title=title,
            is_breaking_change=is_breaking_change,
            merge=merge,
            revert=revert,
            notes=notes,
            mentions=self._parse_mentions(subject, body),
            references=self._parse_references([subject, *body_lines]),
        )

    def _is_comment(self, line: str) -> bool:
        pattern = self.options.comment_pattern
        return pattern is not None and pattern.search(line.strip()) is not None

    def _parse_notes(self, lines: list[str]) -> tuple[CommitNote, ...]:
        """Collect footer notes; continuation lines extend the open note."""
        notes: list[tuple[str, str]] = []
        open_note: int | None = None

        for line in lines:
            match = self.options.note_pattern.search(line)
            if match:
                groups = match.groupdict()
                notes.append((groups.get('title') or '', groups.get('text') or ''))
                open_note = len(notes) - 1
            elif open_note is not None:
                title, text = notes[open_note]
                text += f'\n{line}' if line.strip() else '\n'
                notes[open_note] = (title, text)

        return tuple(CommitNote(title=title, text=text) for title, text in notes)

    def _parse_mentions(self, subject: str, body: str) -> tuple[str, ...]:
        seen: dict[str, None] = {}
        for text in (subject, body):
            for match in self.options.mention_pattern.finditer(text):
                username = match.group('username')
                if username:
                    seen.setdefault(username, None)
        return tuple(seen)

    def _parse_references(self, lines: list[str]) -> tuple[CommitReference, ...]:
        references: list[CommitReference] = []
        for line in lines:
            actions = list(self.options.reference_action_pattern.finditer(line))
            bare_end = actions[0].start() if actions else len(line)
            references.extend(self._parse_issues(line[:bare_end], action=None))
            for match in actions:
                references.extend(
                    self._parse_issues(match.group('reference') or '', action=match.group('action')),
                )
        return tuple(references)

    def _parse_issues(self, text: str, *, action: str | None) -> list[CommitReference]:
        references: list[CommitReference] = []
        for match in self.options.issue_pattern.finditer(text):
            groups = match.groupdict()
            repository = groups.get('repository') or None
            owner = None
            if repository and '/' in repository:
                owner, _, repository = repository.partition('/')
            references.append(
                CommitReference(
                    prefix=groups.get('prefix') or '',
                    issue=groups.get('issue') or '',
                    action=action,
                    owner=owner or None,
                    repository=repository or None,
                ),
            )
        return references


__all__ = [
    'CommitParseError',
    'CommitParser',
]
