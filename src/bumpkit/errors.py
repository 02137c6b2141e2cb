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

"""Error codes and the one exception type bumpkit raises.

Key Concepts (ELI5)::

    ┌─────────────────────┬────────────────────────────────────────────────┐
    │ Concept             │ ELI5 Explanation                               │
    ├─────────────────────┼────────────────────────────────────────────────┤
    │ ErrorCode           │ A stable name like ``BK-VERSION-MULTIPLE``     │
    │                     │ you can search for or pass to ``explain``.     │
    ├─────────────────────┼────────────────────────────────────────────────┤
    │ BumpKitError        │ What bumpkit raises. Code, message, an         │
    │                     │ optional fix hint and the file it is about.    │
    ├─────────────────────┼────────────────────────────────────────────────┤
    │ ERRORS              │ Longer write-ups for the codes users hit most. │
    ├─────────────────────┼────────────────────────────────────────────────┤
    │ render_error()      │ Prints the error the way rustc does, with a    │
    │                     │ ``-->`` line pointing at the file.             │
    └─────────────────────┴────────────────────────────────────────────────┘

Codes are grouped by the word after ``BK-``::

    BK-CONFIG-*       bumpkit.toml / [tool.bumpkit] problems
    BK-PARSER-*       commit parser options that do not compile
    BK-VERSION-*      finding or incrementing the current version
    BK-FILE-*         reading or rewriting a version file
    BK-CHANGELOG-*    changelog header and template problems
    BK-GIT-*          git commit and tag failures

Usage::

    from bumpkit.errors import BumpKitError, E

    raise BumpKitError(
        code=E.FILE_PARSE_ERROR,
        message='Cannot parse: Expecting value',
        path='package.json',
    )
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from enum import Enum
from typing import TextIO

from rich.console import Console
from rich.markup import escape


class ErrorCode(str, Enum):
    """Every diagnostic code bumpkit can report."""

    CONFIG_NOT_FOUND = 'BK-CONFIG-NOT-FOUND'
    CONFIG_INVALID_KEY = 'BK-CONFIG-INVALID-KEY'
    CONFIG_INVALID_VALUE = 'BK-CONFIG-INVALID-VALUE'

    PARSER_INVALID_OPTION = 'BK-PARSER-INVALID-OPTION'

    VERSION_NOT_FOUND = 'BK-VERSION-NOT-FOUND'
    VERSION_MULTIPLE = 'BK-VERSION-MULTIPLE'
    VERSION_INVALID = 'BK-VERSION-INVALID'

    FILE_UNSUPPORTED = 'BK-FILE-UNSUPPORTED'
    FILE_PARSE_ERROR = 'BK-FILE-PARSE-ERROR'

    CHANGELOG_INVALID_HEADER = 'BK-CHANGELOG-INVALID-HEADER'

    GIT_COMMIT_FAILED = 'BK-GIT-COMMIT-FAILED'
    GIT_TAG_FAILED = 'BK-GIT-TAG-FAILED'

    @property
    def category(self) -> str:
        """The group word, e.g. ``'version'`` for ``BK-VERSION-MULTIPLE``."""
        return self.value.split('-')[1].lower()


E = ErrorCode


@dataclass(frozen=True)
class ErrorInfo:
    """A code with its message and optional fix hint."""

    code: ErrorCode
    message: str
    hint: str = ''


class BumpKitError(Exception):
    """Raised for every failure bumpkit reports to the user.

    Args:
        code: What kind of failure this is.
        message: What went wrong, in one line.
        hint: How to fix it, if there is an obvious fix.
        path: The file the error is about, if any.
    """

    def __init__(self, code: ErrorCode, message: str, hint: str = '', *, path: str = '') -> None:
        """Bundle the code, message and hint into :attr:`info`."""
        super().__init__(message)
        self.info = ErrorInfo(code=code, message=message, hint=hint)
        self.path = path

    def __str__(self) -> str:
        where = f' ({self.path})' if self.path else ''
        return f'[{self.code.value}] {self.info.message}{where}'

    @property
    def code(self) -> ErrorCode:
        """Shortcut for ``info.code``."""
        return self.info.code

    @property
    def hint(self) -> str:
        """Shortcut for ``info.hint``; empty when there is none."""
        return self.info.hint


def _catalog(*entries: tuple[ErrorCode, str, str]) -> dict[ErrorCode, ErrorInfo]:
    return {code: ErrorInfo(code=code, message=message, hint=hint) for code, message, hint in entries}


ERRORS: dict[ErrorCode, ErrorInfo] = _catalog(
    (
        E.CONFIG_INVALID_KEY,
        'The configuration contains a key bumpkit does not know.',
        'Check the spelling against the keys listed in the README.',
    ),
    (
        E.PARSER_INVALID_OPTION,
        'A commit parser option could not be compiled.',
        'Check the [parser] section of the bumpkit configuration.',
    ),
    (
        E.VERSION_NOT_FOUND,
        'Unable to find the current version in any configured file or git tag.',
        'Add a version to one of the configured files, tag a release, or pass --current-version.',
    ),
    (
        E.VERSION_MULTIPLE,
        'The configured files disagree on the current version.',
        'Align the versions by hand or pass --current-version.',
    ),
    (
        E.FILE_PARSE_ERROR,
        'A version file could not be read or has no version to update.',
        'Fix the syntax of the file, or drop it from the files list.',
    ),
    (
        E.CHANGELOG_INVALID_HEADER,
        'The changelog header contains a release heading.',
        'Remove any "## [x.y.z]" or "<a name=" line from the header.',
    ),
)


def explain(code: str) -> str | None:
    """Describe ``code`` for ``bumpkit explain``.

    Returns:
        The write-up, a short fallback for codes without one, or ``None``
        when ``code`` is not a bumpkit code at all.
    """
    try:
        error_code = ErrorCode(code)
    except ValueError:
        return None
    info = ERRORS.get(error_code)
    if info is None:
        return f'{code}: No detailed explanation available.'
    text = f'{code}: {info.message}\n  Category: {error_code.category}'
    if info.hint:
        text += f'\n  Hint: {info.hint}'
    return text


def render_error(exc: BumpKitError, *, file: TextIO | None = None) -> None:
    """Print ``exc`` to ``file`` (stderr by default)::

        error[BK-FILE-PARSE-ERROR]: Cannot parse: Expecting value
          --> package.json
          |
          = hint: Check that package.json contains valid JSON.

    Colors are used only when ``file`` is a terminal.
    """
    out = file or sys.stderr
    console = Console(file=out, highlight=False, no_color=not out.isatty(), soft_wrap=True)
    console.print(f'[bold red]error\\[{exc.code.value}][/bold red][bold]: {escape(exc.info.message)}[/bold]')
    if exc.path:
        console.print(f'  [blue]-->[/blue] {escape(exc.path)}')
    if exc.hint:
        console.print('  [blue]|[/blue]')
        console.print(f'  [blue]=[/blue] [cyan]hint[/cyan]: {escape(exc.hint)}')
    console.print()


__all__ = [
    'E',
    'ERRORS',
    'BumpKitError',
    'ErrorCode',
    'ErrorInfo',
    'explain',
    'render_error',
]
