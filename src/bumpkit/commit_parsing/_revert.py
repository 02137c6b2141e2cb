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

"""Drop revert commits and the commits they revert.

The input must be ordered newest first, as ``git log`` prints it. A
revert that is itself reverted later is not "live": it is dropped, and the
commit it targeted is kept::

    C  Revert "Revert "feat: x""   ─┐ live revert, targets B
    B  Revert "feat: x"            ─┘ not live, dropped as a revert record
    A  feat: x                        kept

A revert targets a commit when its ``revert.hash`` equals the commit hash
or its ``revert.subject`` equals the commit subject. The subject match is
the fallback for revert messages whose ``This reverts commit`` line is
empty; two unrelated commits with the same subject are both treated as
reverted.
"""

from __future__ import annotations

from collections.abc import Sequence

from bumpkit.commit_parsing._types import Commit


def _targets(revert_commit: Commit, commit: Commit) -> bool:
    revert = revert_commit.revert
    if revert is None:
        return False
    return revert.hash == commit.hash or revert.subject == commit.subject


def filter_reverted_commits(commits: Sequence[Commit]) -> Sequence[Commit]:
    """Remove revert commits and the commits they revert.

    Args:
        commits: Parsed commits, newest first.

    Returns:
        ``commits`` itself when it holds no revert commit, otherwise a new
        list in the same order without revert records and without the
        commits targeted by a live revert.
    """
    live_reverts: list[Commit] = []
    for commit in commits:
        if commit.revert is None:
            continue
        # A newer revert already undid this one.
        if any(_targets(live, commit) for live in live_reverts):
            continue
        live_reverts.append(commit)

    if not live_reverts:
        return commits

    return [
        commit
        for commit in commits
        if commit.revert is None and not any(_targets(live, commit) for live in live_reverts)
    ]


__all__ = [
    'filter_reverted_commits',
]
