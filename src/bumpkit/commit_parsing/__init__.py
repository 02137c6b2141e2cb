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

r"""Commit record parsing.

Turns raw ``git log`` records into :class:`Commit` values and removes
reverted work from a batch.

Usage::

    from bumpkit.commit_parsing import (
        CommitParser,
        create_parser_options,
        filter_reverted_commits,
    )

    parser = CommitParser(create_parser_options(issue_prefixes=['#', 'gh-']))
    commits = filter_reverted_commits(parser.parse_many(raw_records))

    # Or with the default grammar:
    commit = parse_commit('fix: typo\n\nabc123\n2024-12-22T17:36:50Z\nJane\njane@example.com')
    assert commit.type == 'fix'
"""

from bumpkit.commit_parsing._options import (
    BREAKING_CHANGE_TITLES,
    DEFAULT_ISSUE_PREFIXES,
    DEFAULT_NOTE_KEYWORDS,
    DEFAULT_PARSER_OPTIONS,
    DEFAULT_REFERENCE_ACTIONS,
    ParserOptions,
    create_parser_options,
)
from bumpkit.commit_parsing._parser import CommitParseError, CommitParser
from bumpkit.commit_parsing._revert import filter_reverted_commits
from bumpkit.commit_parsing._types import (
    Commit,
    CommitMerge,
    CommitNote,
    CommitReference,
    CommitRevert,
    SubjectKind,
)

# Module-level singleton for convenience.
_DEFAULT_PARSER = CommitParser()


def parse_commit(raw: str) -> Commit | None:
    """Parse one raw record with the default grammar.

    Convenience wrapper around :meth:`CommitParser.parse`.
    """
    return _DEFAULT_PARSER.parse(raw)


__all__ = [
    'BREAKING_CHANGE_TITLES',
    'Commit',
    'CommitMerge',
    'CommitNote',
    'CommitParseError',
    'CommitParser',
    'CommitReference',
    'CommitRevert',
    'DEFAULT_ISSUE_PREFIXES',
    'DEFAULT_NOTE_KEYWORDS',
    'DEFAULT_PARSER_OPTIONS',
    'DEFAULT_REFERENCE_ACTIONS',
    'ParserOptions',
    'SubjectKind',
    'create_parser_options',
    'filter_reverted_commits',
    'parse_commit',
]
