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

r"""Regex grammar used by the commit parser.

Every grammar rule is a compiled :class:`re.Pattern` held by a frozen
:class:`ParserOptions`. The bundle is built once by
:func:`create_parser_options` and shared by every parse call.

Patterns and their named groups::

    ┌──────────────────────────┬──────────────────────────────────────────┐
    │ Field                    │ Named groups                             │
    ├──────────────────────────┼──────────────────────────────────────────┤
    │ subject_pattern          │ type, scope?, breaking_change?, title    │
    │ merge_pattern            │ id, source                               │
    │ revert_pattern           │ subject, hash                            │
    │ comment_pattern          │ (none; None or '' disables stripping)    │
    │ mention_pattern          │ username                                 │
    │ reference_action_pattern │ action, reference                        │
    │ issue_pattern            │ repository?, prefix, issue               │
    │ note_pattern             │ title, text?                             │
    └──────────────────────────┴──────────────────────────────────────────┘

The last three are derived from keyword lists (``reference_actions``,
``issue_prefixes``, ``note_keywords``). List values are trimmed, empty
values are dropped and the default list is used when nothing remains.
An explicit pattern override wins over its list.

The default ``comment_pattern`` drops body lines starting with ``#``
unless the ``#`` is followed by digits and whitespace. A line that is only
a bare issue such as ``#42`` therefore counts as a comment and its
reference is lost; write ``Refs #42`` or ``#42 fixed`` to keep it.

Usage::

    options = create_parser_options(issue_prefixes=['#', 'gh-'])
    parser = CommitParser(options)
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from bumpkit.errors import BumpKitError, E

DEFAULT_REFERENCE_ACTIONS: tuple[str, ...] = (
    'close',
    'closes',
    'closed',
    'fix',
    'fixes',
    'fixed',
    'resolve',
    'resolves',
    'resolved',
)
DEFAULT_ISSUE_PREFIXES: tuple[str, ...] = ('#',)
DEFAULT_NOTE_KEYWORDS: tuple[str, ...] = ('BREAKING CHANGE', 'BREAKING-CHANGE')

# Note titles that mark a commit as breaking.
BREAKING_CHANGE_TITLES: frozenset[str] = frozenset(DEFAULT_NOTE_KEYWORDS)

SUBJECT_PATTERN = r'^(?P<type>\w+)(?:\((?P<scope>.*)\))?(?P<breaking_change>!)?:\s+(?P<title>.*)'
MERGE_PATTERN = r'^Merge pull request #(?P<id>\d*) from (?P<source>.*)'
REVERT_PATTERN = r'^Revert "(?P<subject>.*)"(?:\s*This reverts commit (?P<hash>[a-zA-Z0-9]*)\.)?'
COMMENT_PATTERN = r'^#(?!\d+\s)'
MENTION_PATTERN = r'(?<!\w)@(?P<username>[\w-]+)'

_PATTERN_FIELDS: tuple[str, ...] = (
    'subject_pattern',
    'merge_pattern',
    'revert_pattern',
    'comment_pattern',
    'mention_pattern',
    'reference_action_pattern',
    'issue_pattern',
    'note_pattern',
)
_LIST_FIELDS: tuple[str, ...] = ('reference_actions', 'issue_prefixes', 'note_keywords')

# Groups a pattern override must define for the parser to read it.
_REQUIRED_GROUPS: dict[str, frozenset[str]] = {
    'subject_pattern': frozenset({'type', 'title'}),
    'merge_pattern': frozenset({'id', 'source'}),
    'revert_pattern': frozenset({'subject', 'hash'}),
    'comment_pattern': frozenset(),
    'mention_pattern': frozenset({'username'}),
    'reference_action_pattern': frozenset({'action', 'reference'}),
    'issue_pattern': frozenset({'prefix', 'issue'}),
    'note_pattern': frozenset({'title'}),
}


@dataclass(frozen=True)
class ParserOptions:
    """Compiled grammar for :class:`~bumpkit.commit_parsing.CommitParser`.

    Build instances with :func:`create_parser_options`; the defaults of
    this dataclass are not meant to be constructed by hand.
    """

    subject_pattern: re.Pattern[str]
    merge_pattern: re.Pattern[str]
    revert_pattern: re.Pattern[str]
    comment_pattern: re.Pattern[str] | None
    mention_pattern: re.Pattern[str]
    reference_action_pattern: re.Pattern[str]
    issue_pattern: re.Pattern[str]
    note_pattern: re.Pattern[str]


def trim_string_list(values: Iterable[str] | None) -> list[str]:
    """Return the non-empty, whitespace-trimmed values of ``values``."""
    if values is None:
        return []
    return [item.strip() for item in values if item.strip()]


def _alternation(values: Iterable[str]) -> str:
    return '|'.join(re.escape(value) for value in values)


def build_reference_action_pattern(actions: Iterable[str] | None = None) -> re.Pattern[str]:
    """Compile the action pattern: an action keyword and the text up to the next one.

    >>> m = build_reference_action_pattern().search('Closes #1')
    >>> m.group('action'), m.group('reference')
    ('Closes', '#1')
    """
    words = _alternation(trim_string_list(actions) or DEFAULT_REFERENCE_ACTIONS)
    return re.compile(
        rf'\b(?P<action>{words})(?:\s+(?P<reference>.*?))(?=\b(?:{words})\b|$)',
        re.IGNORECASE,
    )


def build_issue_pattern(prefixes: Iterable[str] | None = None) -> re.Pattern[str]:
    """Compile the issue pattern: optional ``owner/repo``, a prefix and an id containing a digit."""
    words = _alternation(trim_string_list(prefixes) or DEFAULT_ISSUE_PREFIXES)
    return re.compile(
        rf'(?:.*?)??\s*(?P<repository>[\w\-./]*?)??(?P<prefix>{words})(?P<issue>[\w-]*\d+)',
    )


def build_note_pattern(keywords: Iterable[str] | None = None) -> re.Pattern[str]:
    """Compile the note pattern: ``<KEYWORD>: <text>`` at the start of a line."""
    words = _alternation(trim_string_list(keywords) or DEFAULT_NOTE_KEYWORDS)
    return re.compile(rf'^(?P<title>{words}):(?:\s*(?P<text>.*))')


def _invalid(message: str, hint: str = '') -> BumpKitError:
    return BumpKitError(code=E.PARSER_INVALID_OPTION, message=message, hint=hint)


def _check_list(name: str, value: Any) -> list[str] | None:  # noqa: ANN401 - user-supplied config
    if value is None:
        return None
    if isinstance(value, str) or not isinstance(value, Iterable):
        raise _invalid(
            f"'{name}' must be a list of strings, got {type(value).__name__}",
            hint=f'Write {name} = ["..."] instead of a single value.',
        )
    items = list(value)
    for item in items:
        if not isinstance(item, str):
            raise _invalid(f"'{name}' items must be strings, got {type(item).__name__}")
    return items


def _check_pattern(name: str, value: Any) -> re.Pattern[str] | None:  # noqa: ANN401 - user-supplied config
    # TOML has no null, so an empty string also turns comment stripping off.
    if value is None or (name == 'comment_pattern' and value == ''):
        if name == 'comment_pattern':
            return None
        raise _invalid(f"'{name}' cannot be disabled", hint='Only comment_pattern accepts null or "".')
    if isinstance(value, re.Pattern):
        pattern = value
    elif isinstance(value, str):
        try:
            pattern = re.compile(value)
        except re.error as exc:
            raise _invalid(
                f"'{name}' is not a valid regular expression: {exc}",
                hint=f'Check the value of {name}.',
            ) from exc
    else:
        raise _invalid(f"'{name}' must be a string or compiled pattern, got {type(value).__name__}")

    missing = _REQUIRED_GROUPS[name] - set(pattern.groupindex)
    if missing:
        raise _invalid(
            f"'{name}' is missing named group(s): {', '.join(sorted(missing))}",
            hint='Use (?P<name>...) groups for every field the parser reads.',
        )
    return pattern


def create_parser_options(
    overrides: Mapping[str, Any] | None = None,  # noqa: ANN401 - user-supplied config
    **kwargs: Any,  # noqa: ANN401 - user-supplied config
) -> ParserOptions:
    """Build a :class:`ParserOptions` bundle.

    Args:
        overrides: Option overrides, typically the ``[parser]`` table of
            the bumpkit configuration.
        **kwargs: More overrides; these win over ``overrides``.

    Returns:
        A frozen options bundle.

    Raises:
        BumpKitError: If an option name is unknown, a keyword list is not a
            list of strings, or a pattern does not compile or lacks the
            named groups the parser reads.
    """
    merged: dict[str, Any] = {**(overrides or {}), **kwargs}

    for name in merged:
        if name not in _PATTERN_FIELDS and name not in _LIST_FIELDS:
            raise _invalid(f"Unknown parser option '{name}'")

    actions = _check_list('reference_actions', merged.get('reference_actions'))
    prefixes = _check_list('issue_prefixes', merged.get('issue_prefixes'))
    keywords = _check_list('note_keywords', merged.get('note_keywords'))

    compiled: dict[str, re.Pattern[str] | None] = {
        'subject_pattern': re.compile(SUBJECT_PATTERN),
        'merge_pattern': re.compile(MERGE_PATTERN),
        'revert_pattern': re.compile(REVERT_PATTERN),
        'comment_pattern': re.compile(COMMENT_PATTERN),
        'mention_pattern': re.compile(MENTION_PATTERN),
        'reference_action_pattern': build_reference_action_pattern(actions),
        'issue_pattern': build_issue_pattern(prefixes),
        'note_pattern': build_note_pattern(keywords),
    }
    for name in _PATTERN_FIELDS:
        if name in merged:
            compiled[name] = _check_pattern(name, merged[name])

    return ParserOptions(**compiled)  # type: ignore[arg-type]


DEFAULT_PARSER_OPTIONS: ParserOptions = create_parser_options()


__all__ = [
    'BREAKING_CHANGE_TITLES',
    'DEFAULT_ISSUE_PREFIXES',
    'DEFAULT_NOTE_KEYWORDS',
    'DEFAULT_PARSER_OPTIONS',
    'DEFAULT_REFERENCE_ACTIONS',
    'ParserOptions',
    'build_issue_pattern',
    'build_note_pattern',
    'build_reference_action_pattern',
    'create_parser_options',
    'trim_string_list',
]
