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

"""Dispatch version reads and writes to the strategy for each file name."""

from __future__ import annotations

from pathlib import Path

from bumpkit.files._types import FileState, VersionFile
from bumpkit.files.json_package import JSONPackage
from bumpkit.files.ms_build import MSBuildProject
from bumpkit.files.plain_text import PlainText
from bumpkit.files.pyproject import PyProject
from bumpkit.files.yaml_package import YAMLPackage
from bumpkit.logging import get_logger

logger = get_logger(__name__)


class FileManager:
    """Read and write versions across supported file formats.

    Args:
        root: Project root that configured file names are relative to.
        dry_run: Log writes instead of performing them.
    """

    def __init__(self, root: Path, *, dry_run: bool = False) -> None:
        """Initialize the strategies for ``root``."""
        self._root = root
        self._dry_run = dry_run
        self._strategies: list[VersionFile] = [
            PyProject(root),
            JSONPackage(root),
            YAMLPackage(root),
            PlainText(root),
            MSBuildProject(root),
        ]

    def strategy_for(self, name: str) -> VersionFile | None:
        """Return the strategy handling ``name``, or ``None``."""
        for strategy in self._strategies:
            if strategy.is_supported(name):
                return strategy
        return None

    def read(self, name: str) -> FileState | None:
        """Read the version from ``name``.

        Returns:
            The file state, or ``None`` if the file is missing, has no
            version, or is of an unsupported type.
        """
        strategy = self.strategy_for(name)
        if strategy is None:
            logger.error('unsupported_file', file=name)
            return None
        return strategy.read(name)

    def write(self, state: FileState, new_version: str) -> None:
        """Write ``new_version`` into the file described by ``state``."""
        if self._dry_run:
            logger.info('dry_run_skip_write', file=state.name, version=new_version)
            return

        strategy = self.strategy_for(state.name)
        if strategy is None:
            logger.error('unsupported_file', file=state.name)
            return
        strategy.write(state, new_version)
        logger.info('version_written', file=state.name, version=new_version)


__all__ = [
    'FileManager',
]
