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

"""YAML manifests with a top-level ``version`` (e.g. Flutter ``pubspec.yaml``).

Flutter versions may carry a build number (``1.2.3+42``). A numeric build
number is split off on read and re-attached on write.
"""

from __future__ import annotations

import re
from pathlib import Path

import yaml

from bumpkit.errors import BumpKitError, E
from bumpkit.files._types import FileState
from bumpkit.logging import get_logger

logger = get_logger(__name__)

# Top-level `version:` line, optionally quoted.
_VERSION_LINE_RE = re.compile(r'^(version:[ \t]*)([\'"]?)([^\s\'"#]+)\2', re.MULTILINE)


def split_build_number(value: str) -> tuple[str, str | None]:
    """Split ``1.2.3+42`` into ``('1.2.3', '42')``; non-numeric suffixes stay put.

    >>> split_build_number('1.2.3+42')
    ('1.2.3', '42')
    >>> split_build_number('1.2.3+exp.sha')
    ('1.2.3+exp.sha', None)
    """
    version, sep, build = value.partition('+')
    if sep and build.isdigit():
        return version, build
    return value, None


class YAMLPackage:
    """Read and write the ``version`` of a YAML manifest."""

    def __init__(self, root: Path) -> None:
        """Initialize with the project root."""
        self._root = root

    def is_supported(self, name: str) -> bool:
        """Return ``True`` for ``*.yaml`` and ``*.yml`` files."""
        return name.lower().endswith(('.yaml', '.yml'))

    def read(self, name: str) -> FileState | None:
        """Read the version and any build number."""
        path = self._root / name
        if not path.is_file():
            return None

        try:
            data = yaml.safe_load(path.read_text(encoding='utf-8'))
        except yaml.YAMLError as exc:
            raise BumpKitError(
                code=E.FILE_PARSE_ERROR,
                message=f'Cannot parse: {exc}',
                path=str(path),
                hint=f'Check that {name} contains valid YAML.',
            ) from exc

        value = data.get('version') if isinstance(data, dict) else None
        if not value:
            logger.warning('yaml_version_missing', file=name)
            return None

        version, build_number = split_build_number(str(value))
        return FileState(name=name, path=path, version=version, build_number=build_number)

    def write(self, state: FileState, new_version: str) -> None:
        """Rewrite the ``version:`` line in place, keeping comments and quoting."""
        text = state.path.read_bytes().decode('utf-8')
        value = new_version if state.build_number is None else f'{new_version}+{state.build_number}'

        updated, count = _VERSION_LINE_RE.subn(
            lambda m: f'{m.group(1)}{m.group(2)}{value}{m.group(2)}',
            text,
            count=1,
        )
        if not count:
            raise BumpKitError(
                code=E.FILE_PARSE_ERROR,
                message='No top-level version line',
                path=str(state.path),
            )
        state.path.write_text(updated, encoding='utf-8', newline='')


__all__ = [
    'YAMLPackage',
    'split_build_number',
]
