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

"""MSBuild project files (``.csproj``, ``.props``, ...).

The version lives at ``Project > PropertyGroup > Version``::

    <Project Sdk="Microsoft.NET.Sdk">
      <PropertyGroup>
        <Version>1.2.3</Version>
      </PropertyGroup>
    </Project>

The element is located with :mod:`xml.etree.ElementTree`, then the file is
edited with a targeted string replacement so formatting and attribute
order are preserved.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET  # noqa: N817, S405
from pathlib import Path

from bumpkit.errors import BumpKitError, E
from bumpkit.files._types import FileState
from bumpkit.logging import get_logger

logger = get_logger(__name__)

MS_BUILD_EXTENSIONS: tuple[str, ...] = (
    '.csproj',
    '.dbproj',
    '.esproj',
    '.fsproj',
    '.props',
    '.vbproj',
    '.vcxproj',
)


def _find_version(text: str, path: Path) -> str:
    try:
        root = ET.fromstring(text)  # noqa: S314
    except ET.ParseError as exc:
        raise BumpKitError(
            code=E.FILE_PARSE_ERROR,
            message=f'Cannot parse: {exc}',
            path=str(path),
            hint=f'Check that {path.name} is well-formed XML.',
        ) from exc
    if root.tag != 'Project':
        return ''
    element = root.find('PropertyGroup/Version')
    return (element.text or '').strip() if element is not None else ''


class MSBuildProject:
    """Read and write ``<Version>`` in an MSBuild project."""

    def __init__(self, root: Path) -> None:
        """Initialize with the project root."""
        self._root = root

    def is_supported(self, name: str) -> bool:
        """Return ``True`` for known MSBuild extensions."""
        return name.lower().endswith(MS_BUILD_EXTENSIONS)

    def read(self, name: str) -> FileState | None:
        """Read ``Project/PropertyGroup/Version``."""
        path = self._root / name
        if not path.is_file():
            return None

        version = _find_version(path.read_text(encoding='utf-8'), path)
        if not version:
            logger.warning('ms_build_version_missing', file=name)
            return None
        return FileState(name=name, path=path, version=version)

    def write(self, state: FileState, new_version: str) -> None:
        """Replace the first ``<Version>`` element matching the current version."""
        text = state.path.read_bytes().decode('utf-8')
        old_version = _find_version(text, state.path)
        old_tag = f'<Version>{old_version}</Version>'
        if not old_version or old_tag not in text:
            raise BumpKitError(
                code=E.FILE_PARSE_ERROR,
                message='No <Version> element',
                path=str(state.path),
            )
        updated = text.replace(old_tag, f'<Version>{new_version}</Version>', 1)
        state.path.write_text(updated, encoding='utf-8', newline='')


__all__ = [
    'MS_BUILD_EXTENSIONS',
    'MSBuildProject',
]
