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

"""Shared types for version file strategies."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class FileState:
    """The version found in one file.

    Attributes:
        name: The configured file name, relative to the project root.
        path: Absolute path to the file.
        version: The version string read from the file.
        is_private: For JSON manifests, the ``private`` flag (``True``
            when absent); ``None`` for other formats.
        build_number: For YAML manifests, a numeric ``+build`` suffix that
            is kept when the version is rewritten.
    """

    name: str
    path: Path
    version: str
    is_private: bool | None = None
    build_number: str | None = None


@runtime_checkable
class VersionFile(Protocol):
    """Protocol for a file format that carries a version.

    Implementations resolve names against their project root, return
    ``None`` from :meth:`read` when the file is missing or has no
    version, and rewrite only the version on :meth:`write`.
    """

    def is_supported(self, name: str) -> bool:
        """Return ``True`` if this strategy handles ``name``."""
        ...

    def read(self, name: str) -> FileState | None:
        """Read the version from ``name``."""
        ...

    def write(self, state: FileState, new_version: str) -> None:
        """Replace the version in ``state.path`` with ``new_version``."""
        ...


__all__ = [
    'FileState',
    'VersionFile',
]
