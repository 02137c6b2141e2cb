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

"""JSON manifests with a top-level ``version`` (``package.json``, ``deno.json``, ...).

Lockfiles (``package-lock.json`` v2+) also store the root package version
under ``packages[""].version``; both are rewritten.

``.jsonc`` files may contain comments and trailing commas. They are read
with ``json5``, which accepts both, and written by replacing the version
string in place so the comments survive.
"""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any

import json5

from bumpkit.errors import BumpKitError, E
from bumpkit.files._types import FileState
from bumpkit.logging import get_logger

logger = get_logger(__name__)

_INDENT_RE = re.compile(r'^([ \t]+)\S', re.MULTILINE)


def detect_indent(text: str, default: str = '  ') -> str:
    """Return the first indentation used in ``text``."""
    match = _INDENT_RE.search(text)
    return match.group(1) if match else default


def detect_newline(text: str) -> str:
    """Return ``'\\r\\n'`` if ``text`` uses Windows line endings, else ``'\\n'``."""
    return '\r\n' if '\r\n' in text else '\n'


def _is_jsonc(path: Path) -> bool:
    return path.suffix.lower() == '.jsonc'


def _load(path: Path) -> dict[str, Any]:
    text = path.read_text(encoding='utf-8')
    loads = json5.loads if _is_jsonc(path) else json.loads
    try:
        data = loads(text)
    except ValueError as exc:
        raise BumpKitError(
            code=E.FILE_PARSE_ERROR,
            message=f'Cannot parse: {exc}',
            path=str(path),
            hint=f'Check that {path.name} contains valid JSON.',
        ) from exc
    return data if isinstance(data, dict) else {}


class JSONPackage:
    """Read and write the ``version`` of a JSON manifest."""

    def __init__(self, root: Path) -> None:
        """Initialize with the project root."""
        self._root = root

    def is_supported(self, name: str) -> bool:
        """Return ``True`` for ``*.json`` and ``*.jsonc`` files."""
        return name.lower().endswith(('.json', '.jsonc'))

    def read(self, name: str) -> FileState | None:
        """Read the version and ``private`` flag."""
        path = self._root / name
        if not path.is_file():
            return None

        data = _load(path)
        version = data.get('version')
        if not version:
            logger.warning('json_version_missing', file=name)
            return None

        private = data.get('private')
        return FileState(
            name=name,
            path=path,
            version=str(version),
            is_private=private if isinstance(private, bool) else True,
        )

    def write(self, state: FileState, new_version: str) -> None:
        """Rewrite the version, keeping indentation and line endings."""
        # Raw bytes: read_text() would normalize line endings.
        text = state.path.read_bytes().decode('utf-8')
        if _is_jsonc(state.path):
            state.path.write_text(_replace_jsonc_version(text, state, new_version), encoding='utf-8', newline='')
            return

        data = _load(state.path)
        data['version'] = new_version

        packages = data.get('packages')
        if isinstance(packages, dict) and isinstance(packages.get(''), dict):
            packages['']['version'] = new_version

        newline = detect_newline(text)
        rendered = json.dumps(data, indent=detect_indent(text), ensure_ascii=False)
        if text.endswith('\n'):
            rendered += '\n'
        state.path.write_text(rendered.replace('\n', newline), encoding='utf-8', newline='')


def _replace_jsonc_version(text: str, state: FileState, new_version: str) -> str:
    pattern = re.compile(rf'("version"\s*:\s*"){re.escape(state.version)}"')
    updated, count = pattern.subn(lambda m: f'{m.group(1)}{new_version}"', text, count=1)
    if not count:
        raise BumpKitError(
            code=E.FILE_PARSE_ERROR,
            message=f'No "version": "{state.version}" entry',
            path=str(state.path),
        )
    return updated


__all__ = [
    'JSONPackage',
    'detect_indent',
    'detect_newline',
]
