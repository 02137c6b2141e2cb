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

"""Version-bearing file formats.

Supported formats::

    ┌──────────────────┬───────────────────────────────┬─────────────────┐
    │ Strategy         │ Files                         │ Version at      │
    ├──────────────────┼───────────────────────────────┼─────────────────┤
    │ PyProject        │ pyproject.toml                │ [project]       │
    │ JSONPackage      │ *.json, *.jsonc               │ "version"       │
    │ YAMLPackage      │ *.yaml, *.yml                 │ version:        │
    │ PlainText        │ version.txt                   │ whole file      │
    │ MSBuildProject   │ .csproj .fsproj .props ...    │ <Version>       │
    └──────────────────┴───────────────────────────────┴─────────────────┘
"""

from bumpkit.files._types import FileState, VersionFile
from bumpkit.files.json_package import JSONPackage
from bumpkit.files.manager import FileManager
from bumpkit.files.ms_build import MSBuildProject
from bumpkit.files.plain_text import PlainText
from bumpkit.files.pyproject import PyProject
from bumpkit.files.yaml_package import YAMLPackage

__all__ = [
    'FileManager',
    'FileState',
    'JSONPackage',
    'MSBuildProject',
    'PlainText',
    'PyProject',
    'VersionFile',
    'YAMLPackage',
]
