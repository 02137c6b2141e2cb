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

"""``pyproject.toml``: ``[project].version``, edited with tomlkit.

tomlkit keeps comments, ordering and formatting intact. Projects that
declare ``version`` in ``[project].dynamic`` are skipped.
"""

from __future__ import annotations

from pathlib import Path

import tomlkit
import tomlkit.exceptions

from bumpkit.errors import BumpKitError, E
from bumpkit.files._types import FileState
from bumpkit.logging import get_logger

logger = get_logger(__name__)


def _parse(path: Path) -> tomlkit.TOMLDocument:
    try:
        return tomlkit.parse(path.read_text(encoding='utf-8'))
    except tomlkit.exceptions.TOMLKitError as exc:
        raise BumpKitError(
            code=E.FILE_PARSE_ERROR,
            message=f'Cannot parse: {exc}',
            path=str(path),
            hint=f'Check that {path.name} contains valid TOML.',
        ) from exc


class PyProject:
    """Read and write ``[project].version``."""

    def __init__(self, root: Path) -> None:
        """Initialize with the project root."""
        self._root = root

    def is_supported(self, name: str) -> bool:
        """Return ``True`` for files named ``pyproject.toml``."""
        return Path(name).name == 'pyproject.toml'

    def read(self, name: str) -> FileState | None:
        """Read the static project version."""
        path = self._root / name
        if not path.is_file():
            return None

        project = _parse(path).get('project')
        version = project.get('version') if isinstance(project, dict) else None
        if not version:
            logger.warning('pyproject_version_missing', file=name)
            return None
        return FileState(name=name, path=path, version=str(version))

    def write(self, state: FileState, new_version: str) -> None:
        """Set ``[project].version`` to ``new_version``."""
        doc = _parse(state.path)
        project = doc.get('project')
        if not isinstance(project, dict) or 'version' not in project:
            raise BumpKitError(
                code=E.FILE_PARSE_ERROR,
                message='No [project].version key',
                path=str(state.path),
                hint='Add a version field to [project] in pyproject.toml.',
            )
        project['version'] = new_version
        state.path.write_text(tomlkit.dumps(doc), encoding='utf-8')


__all__ = [
    'PyProject',
]
