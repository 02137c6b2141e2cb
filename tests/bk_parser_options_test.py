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

"""Tests for parser option building and validation."""

from __future__ import annotations

import re

import pytest
from bumpkit.commit_parsing import DEFAULT_PARSER_OPTIONS, create_parser_options
from bumpkit.commit_parsing._options import (
    build_issue_pattern,
    build_note_pattern,
    build_reference_action_pattern,
    trim_string_list,
)
from bumpkit.errors import BumpKitError, E


class TestTrimStringList:
    """Tests for trim_string_list."""

    def test_trims_and_drops_blanks(self) -> None:
        """Test trims and drops blanks."""
        assert trim_string_list([' a ', '', '  ', 'b']) == ['a', 'b']

    def test_none(self) -> None:
        """Test none."""
        assert trim_string_list(None) == []


class TestBuilders:
    """Tests for the keyword pattern builders."""

    def test_reference_action_pattern_case_insensitive(self) -> None:
        """Test reference action pattern case insensitive."""
        match = build_reference_action_pattern().search('RESOLVES #12')
        assert match is not None
        assert match.group('action') == 'RESOLVES'
        assert match.group('reference') == '#12'

    def test_reference_action_keywords_escaped(self) -> None:
        """Regex metacharacters in keywords are literal."""
        pattern = build_reference_action_pattern(['c++'])
        match = pattern.search('c++ #1')
        assert match is not None
        assert match.group('action') == 'c++'

    def test_issue_pattern_custom_prefix(self) -> None:
        """Test issue pattern custom prefix."""
        match = build_issue_pattern(['JIRA-']).search('see JIRA-42')
        assert match is not None
        assert (match.group('prefix'), match.group('issue')) == ('JIRA-', '42')

    def test_issue_requires_digit(self) -> None:
        """Test issue requires digit."""
        assert build_issue_pattern().search('#abc') is None

    def test_note_pattern(self) -> None:
        """Test note pattern."""
        match = build_note_pattern().search('BREAKING CHANGE: gone')
        assert match is not None
        assert (match.group('title'), match.group('text')) == ('BREAKING CHANGE', 'gone')

    def test_blank_keywords_fall_back_to_defaults(self) -> None:
        """An all-blank list uses the default keywords."""
        assert build_note_pattern(['  ']).search('BREAKING-CHANGE: x') is not None


class TestCreateParserOptions:
    """Tests for create_parser_options."""

    def test_defaults(self) -> None:
        """Test defaults."""
        options = create_parser_options()
        assert options.comment_pattern is not None
        assert options.subject_pattern.pattern == DEFAULT_PARSER_OPTIONS.subject_pattern.pattern

    def test_mapping_and_kwargs_merge(self) -> None:
        """Keyword overrides win over the mapping."""
        options = create_parser_options({'issue_prefixes': ['gh-']}, issue_prefixes=['PROJ-'])
        assert options.issue_pattern.search('PROJ-1') is not None
        assert options.issue_pattern.search('gh-1') is None

    def test_compiled_pattern_accepted(self) -> None:
        """Test compiled pattern accepted."""
        pattern = re.compile(r'^(?P<type>\w+): (?P<title>.*)')
        assert create_parser_options(subject_pattern=pattern).subject_pattern is pattern

    def test_explicit_pattern_wins_over_list(self) -> None:
        """An explicit issue pattern ignores issue_prefixes."""
        options = create_parser_options(
            issue_prefixes=['gh-'],
            issue_pattern=r'(?P<prefix>!)(?P<issue>\d+)',
        )
        assert options.issue_pattern.search('!5') is not None

    def test_comment_pattern_can_be_disabled(self) -> None:
        """Test comment pattern can be disabled."""
        assert create_parser_options(comment_pattern=None).comment_pattern is None

    def test_other_patterns_cannot_be_disabled(self) -> None:
        """Test other patterns cannot be disabled."""
        with pytest.raises(BumpKitError) as exc_info:
            create_parser_options(subject_pattern=None)
        assert exc_info.value.code == E.PARSER_INVALID_OPTION

    def test_unknown_option(self) -> None:
        """Test unknown option."""
        with pytest.raises(BumpKitError, match='Unknown parser option'):
            create_parser_options(header_pattern='x')

    def test_invalid_regex(self) -> None:
        """Test invalid regex."""
        with pytest.raises(BumpKitError, match='not a valid regular expression'):
            create_parser_options(merge_pattern='(')

    def test_missing_named_groups(self) -> None:
        """Test missing named groups."""
        with pytest.raises(BumpKitError, match='missing named group'):
            create_parser_options(subject_pattern=r'^(\w+): (.*)')

    def test_string_instead_of_list(self) -> None:
        """A bare string is not a keyword list."""
        with pytest.raises(BumpKitError, match='must be a list of strings'):
            create_parser_options(issue_prefixes='#')

    def test_non_string_items(self) -> None:
        """Test non string items."""
        with pytest.raises(BumpKitError, match='items must be strings'):
            create_parser_options(note_keywords=['BREAKING CHANGE', 1])
