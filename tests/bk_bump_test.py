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

"""Tests for the release-type recommender."""

from __future__ import annotations

from bumpkit.bump import (
    BUMP_PRECEDENCE,
    BumpChanges,
    BumpType,
    classify_commit,
    max_bump,
    recommend_bump,
)
from bumpkit.commit_parsing import Commit, parse_commit


def _c(message: str) -> Commit:
    commit = parse_commit('\n'.join([message, '', 'abc123', '2024-12-22T17:36:50Z', 'Jane', 'jane@example.com']))
    assert commit is not None
    return commit


class TestBumpType:
    """Tests for BumpType and precedence."""

    def test_values(self) -> None:
        """Test values."""
        assert [b.value for b in BUMP_PRECEDENCE] == ['major', 'minor', 'patch']

    def test_max_bump(self) -> None:
        """Test max bump."""
        assert max_bump(BumpType.PATCH, BumpType.MINOR) is BumpType.MINOR
        assert max_bump(BumpType.MAJOR, BumpType.MINOR) is BumpType.MAJOR
        assert max_bump(BumpType.PATCH, BumpType.PATCH) is BumpType.PATCH


class TestClassifyCommit:
    """Tests for classify_commit."""

    def test_feat(self) -> None:
        """Test feat."""
        assert classify_commit(_c('feat: x')) is BumpType.MINOR
        assert classify_commit(_c('feature: x')) is BumpType.MINOR

    def test_fix_and_others(self) -> None:
        """Test fix and others."""
        assert classify_commit(_c('fix: x')) is BumpType.PATCH
        assert classify_commit(_c('chore: x')) is BumpType.PATCH
        assert classify_commit(_c('Update README')) is BumpType.PATCH

    def test_breaking(self) -> None:
        """Test breaking."""
        assert classify_commit(_c('fix!: x')) is BumpType.MAJOR
        assert classify_commit(_c('fix: x\n\nBREAKING CHANGE: y')) is BumpType.MAJOR


class TestRecommendBump:
    """Tests for recommend_bump."""

    def test_empty_is_patch(self) -> None:
        """Test empty is patch."""
        result = recommend_bump([])
        assert result.release_type is BumpType.PATCH
        assert result.changes == BumpChanges()

    def test_feature_is_minor(self) -> None:
        """Test feature is minor."""
        result = recommend_bump([_c('fix: a'), _c('feat: b')])
        assert result.release_type is BumpType.MINOR
        assert result.changes == BumpChanges(major=0, minor=1, patch=1, notes=0)

    def test_breaking_is_major(self) -> None:
        """Test breaking is major."""
        result = recommend_bump([_c('feat: a'), _c('fix: b\n\nBREAKING CHANGE: c')])
        assert result.release_type is BumpType.MAJOR
        assert result.changes.notes == 1
        assert result.reason == 'There are 1 BREAKING CHANGE and 1 feature'

    def test_pre_major_shifts_down(self) -> None:
        """Below 1.0.0 breaking changes bump minor and features bump patch."""
        assert recommend_bump([_c('feat!: a')], pre_major=True).release_type is BumpType.MINOR
        assert recommend_bump([_c('feat: a')], pre_major=True).release_type is BumpType.PATCH

    def test_reason_plural(self) -> None:
        """Test reason plural."""
        result = recommend_bump([_c('feat: a'), _c('feat: b')])
        assert result.reason == 'There are 0 BREAKING CHANGES and 2 features'
