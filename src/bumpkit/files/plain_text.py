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

"""``version.txt``: the whole file is the version."""

from __future__ import annotations

from pathlib import Path

from bumpkit.files._types import FileState


class PlainText:
    """Read and write a plain-text version file."""

    def __init__(self, root: Path) -> None:
        """Initialize with the project root."""
        self._root = root

    def is_supported(self, name: str) -> bool:
        """Return ``True`` for files named ``version.txt``."""
        return name.lower().endswith('version.txt')

    def read(self, name: str) -> FileState | None:
        """Read the file contents, without surrounding whitespace, as the version."""
        path = self._root / name
        if not path.is_file():
            return None
        return FileState(name=name, path=path, version=path.read_text(encoding='utf-8').strip())

    def write(self, state: FileState, new_version: str) -> None:
        """Replace the file contents with ``new_version``."""
        state.path.write_text(new_version, encoding='utf-8')


__all__ = [
    'PlainText',
]
