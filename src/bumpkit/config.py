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

"""Configuration reader for bumpkit.

Reads ``bumpkit.toml`` (flat top-level keys) or, when that file does not
exist, the ``[tool.bumpkit]`` table of ``pyproject.toml``, and returns a
validated :class:`BumpKitConfig`. CLI flags are layered on top with
:func:`merge_cli_overrides`.

Validation Pipeline::

    bumpkit.toml
    ┌──────────────────┐
    │ tag_prefx = "v"  │  ← typo!
    └────────┬─────────┘
             │
             ▼
    ┌──────────────────┐     ┌──────────────────────────────┐
    │ 1. Unknown key   │────→│ BK-CONFIG-INVALID-KEY:       │
    │    detection     │     │ hint: "Did you mean          │
    └────────┬─────────┘     │       'tag_prefix'?"         │
             │               └──────────────────────────────┘
             ▼
    ┌──────────────────┐     ┌──────────────────────────────┐
    │ 2. Type check    │────→│ BK-CONFIG-INVALID-VALUE:     │
    │    each value    │     │ 'sign' must be bool, got str │
    └────────┬─────────┘     └──────────────────────────────┘
             │
             ▼
    ┌──────────────────┐
    │ BumpKitConfig()  │  ← frozen dataclass, ready to use
    └──────────────────┘

Example ``bumpkit.toml``::

    files = ["pyproject.toml", "package.json"]
    tag_prefix = "v"
    sign = true

    [changelog_preset]
    release_commit_message_format = "chore(release): {{currentTag}} [skip ci]"
    types = [
      { type = "feat", section = "Features" },
      { type = "chore", section = "Chores", hidden = true },
    ]

    [parser]
    issue_prefixes = ["#", "gh-"]
"""

from __future__ import annotations

import dataclasses
import difflib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import tomlkit
import tomlkit.exceptions

from bumpkit.commit_parsing import ParserOptions, create_parser_options
from bumpkit.errors import BumpKitError, E
from bumpkit.logging import get_logger

logger = get_logger(__name__)

CONFIG_FILENAME = 'bumpkit.toml'
PYPROJECT_FILENAME = 'pyproject.toml'

DEFAULT_FILES: tuple[str, ...] = (
    'pyproject.toml',
    'package.json',
    'package-lock.json',
    'npm-shrinkwrap.json',
    'jsr.json',
    'deno.json',
    'manifest.json',
    'bower.json',
)

DEFAULT_HEADER = """# Changelog

All notable changes to this project will be documented in this file. See [Conventional Commits](https://conventionalcommits.org) for commit guidelines.
"""

DEFAULT_RELEASE_COMMIT_MESSAGE_FORMAT = 'chore(release): {{currentTag}}'


@dataclass(frozen=True)
class ChangelogType:
    """How commits of one type appear in the changelog.

    Attributes:
        type: The conventional commit type, e.g. ``"feat"``.
        section: The changelog heading for this type.
        hidden: Leave these commits out of the changelog.
    """

    type: str
    section: str
    hidden: bool = False


DEFAULT_CHANGELOG_TYPES: tuple[ChangelogType, ...] = (
    ChangelogType('feat', 'Features'),
    ChangelogType('feature', 'Features'),
    ChangelogType('fix', 'Bug Fixes'),
    ChangelogType('perf', 'Performance Improvements'),
    ChangelogType('revert', 'Reverts'),
    ChangelogType('docs', 'Documentation', hidden=True),
    ChangelogType('style', 'Styles', hidden=True),
    ChangelogType('chore', 'Miscellaneous Chores', hidden=True),
    ChangelogType('refactor', 'Code Refactoring', hidden=True),
    ChangelogType('test', 'Tests', hidden=True),
    ChangelogType('build', 'Build System', hidden=True),
    ChangelogType('ci', 'Continuous Integration', hidden=True),
)


@dataclass(frozen=True)
class ChangelogPresetConfig:
    """Changelog rendering and release message settings.

    URL formats use ``{{placeholder}}`` substitution; see
    :func:`bumpkit.changelog.render_template`.
    """

    types: tuple[ChangelogType, ...] = DEFAULT_CHANGELOG_TYPES
    commit_url_format: str = '{{host}}/{{owner}}/{{repository}}/commit/{{hash}}'
    compare_url_format: str = '{{host}}/{{owner}}/{{repository}}/compare/{{previousTag}}...{{currentTag}}'
    issue_url_format: str = '{{host}}/{{owner}}/{{repository}}/issues/{{id}}'
    user_url_format: str = '{{host}}/{{user}}'
    release_commit_message_format: str = DEFAULT_RELEASE_COMMIT_MESSAGE_FORMAT
    issue_prefixes: tuple[str, ...] = ('#',)


@dataclass(frozen=True)
class BumpKitConfig:
    """Settings for one bumpkit run.

    Attributes:
        path: Project root; file names are relative to it.
        files: Files to read the current version from and bump.
        changelog: Changelog file name.
        header: Text kept above the newest release in the changelog.
        tag_prefix: Prefix for release tags (``v`` gives ``v1.2.3``).
        pre_release: ``True`` or a prerelease identifier such as
            ``"beta"`` to cut a prerelease.
        current_version: Use this instead of reading files.
        next_version: Use this instead of recommending a bump.
        release_message_suffix: Appended to the release commit message.
        commit_all: Commit all staged changes, not only bumped files.
        debug: Log at debug level.
        dry_run: Print what would happen without touching files or git.
        silent: Only log warnings and errors.
        git_tag_fallback: Use the latest git tag when no file has a version.
        sign: GPG-sign the release commit and tag.
        verify: Run git hooks on the release commit.
        skip_bump: Skip writing versions.
        skip_changelog: Skip the changelog.
        skip_commit: Skip the release commit.
        skip_tag: Skip the release tag.
        inspect_version: Print the current version and stop.
        changelog_preset: Changelog and release message settings.
        parser: Commit parser option overrides.
        config_path: The file the settings came from, if any.
    """

    path: Path = field(default_factory=Path.cwd)
    files: tuple[str, ...] = DEFAULT_FILES
    changelog: str = 'CHANGELOG.md'
    header: str = DEFAULT_HEADER
    tag_prefix: str = 'v'
    pre_release: str | bool | None = None
    current_version: str | None = None
    next_version: str | None = None
    release_message_suffix: str | None = None
    commit_all: bool = False
    debug: bool = False
    dry_run: bool = False
    silent: bool = False
    git_tag_fallback: bool = True
    sign: bool = False
    verify: bool = False
    skip_bump: bool = False
    skip_changelog: bool = False
    skip_commit: bool = False
    skip_tag: bool = False
    inspect_version: bool = False
    changelog_preset: ChangelogPresetConfig = field(default_factory=ChangelogPresetConfig)
    parser: dict[str, Any] = field(default_factory=dict)
    config_path: Path | None = None

    @property
    def changelog_path(self) -> Path:
        """Absolute path of the changelog."""
        return self.path / self.changelog

    @property
    def release_commit_message_format(self) -> str:
        """The release message template, with the configured suffix."""
        message = self.changelog_preset.release_commit_message_format or DEFAULT_RELEASE_COMMIT_MESSAGE_FORMAT
        if self.release_message_suffix:
            message = f'{message} {self.release_message_suffix}'
        return message

    def parser_options(self) -> ParserOptions:
        """Compile the commit parser grammar for this configuration.

        Issue prefixes come from the changelog preset unless the parser
        overrides name their own.

        Raises:
            BumpKitError: If a parser override is invalid.
        """
        overrides = dict(self.parser)
        overrides.setdefault('issue_prefixes', list(self.changelog_preset.issue_prefixes))
        return create_parser_options(overrides)


# All recognized top-level keys.
VALID_KEYS: frozenset[str] = frozenset({
    'files',
    'changelog',
    'header',
    'tag_prefix',
    'pre_release',
    'current_version',
    'next_version',
    'release_message_suffix',
    'commit_all',
    'debug',
    'dry_run',
    'silent',
    'git_tag_fallback',
    'sign',
    'verify',
    'skip_bump',
    'skip_changelog',
    'skip_commit',
    'skip_tag',
    'changelog_preset',
    'parser',
})

VALID_PRESET_KEYS: frozenset[str] = frozenset({
    'types',
    'commit_url_format',
    'compare_url_format',
    'issue_url_format',
    'user_url_format',
    'release_commit_message_format',
    'issue_prefixes',
})

_GLOBAL_TYPE_MAP: dict[str, type | tuple[type, ...]] = {
    'files': list,
    'changelog': str,
    'header': str,
    'tag_prefix': str,
    'pre_release': (str, bool),
    'current_version': str,
    'next_version': str,
    'release_message_suffix': str,
    'commit_all': bool,
    'debug': bool,
    'dry_run': bool,
    'silent': bool,
    'git_tag_fallback': bool,
    'sign': bool,
    'verify': bool,
    'skip_bump': bool,
    'skip_changelog': bool,
    'skip_commit': bool,
    'skip_tag': bool,
    'changelog_preset': dict,
    'parser': dict,
}

_PRESET_TYPE_MAP: dict[str, type | tuple[type, ...]] = {
    'types': list,
    'commit_url_format': str,
    'compare_url_format': str,
    'issue_url_format': str,
    'user_url_format': str,
    'release_commit_message_format': str,
    'issue_prefixes': list,
}


def _suggest_key(unknown: str, valid: frozenset[str]) -> str:
    matches = difflib.get_close_matches(unknown, valid, n=1, cutoff=0.6)
    return f"Did you mean '{matches[0]}'?" if matches else 'Check the bumpkit docs for valid keys.'


def _validate_keys(raw: dict[str, Any], valid: frozenset[str], context: str) -> None:  # noqa: ANN401 - dynamic config
    for key in raw:
        if key not in valid:
            raise BumpKitError(
                code=E.CONFIG_INVALID_KEY,
                message=f"Unknown key '{key}' in {context}",
                hint=_suggest_key(key, valid),
            )


def _validate_value_type(
    key: str,
    value: Any,  # noqa: ANN401 - dynamic config values
    type_map: dict[str, type | tuple[type, ...]],
    *,
    context: str,
) -> None:
    """Raise if a config value has the wrong type."""
    expected = type_map.get(key)
    if expected is None:
        return
    if not isinstance(value, expected):
        type_name = expected.__name__ if isinstance(expected, type) else ' or '.join(t.__name__ for t in expected)
        raise BumpKitError(
            code=E.CONFIG_INVALID_VALUE,
            message=f"'{key}' must be {type_name}, got {type(value).__name__}",
            hint=f'Check the value of {key} in {context}.',
        )


def _validate_string_list(key: str, items: list[Any], context: str) -> tuple[str, ...]:  # noqa: ANN401 - dynamic config
    for item in items:
        if not isinstance(item, str):
            raise BumpKitError(
                code=E.CONFIG_INVALID_VALUE,
                message=f"'{key}' items must be strings, got {type(item).__name__}",
                hint=f'Check the value of {key} in {context}.',
            )
    return tuple(str(item) for item in items)


def _parse_changelog_types(items: list[Any], context: str) -> tuple[ChangelogType, ...]:  # noqa: ANN401 - dynamic config
    types: list[ChangelogType] = []
    for item in items:
        if not isinstance(item, dict) or not isinstance(item.get('type'), str):
            raise BumpKitError(
                code=E.CONFIG_INVALID_VALUE,
                message='changelog_preset.types entries must be tables with a "type" string',
                hint=f'Write {{ type = "feat", section = "Features" }} in {context}.',
            )
        commit_type = str(item['type'])
        section = item.get('section', commit_type)
        hidden = item.get('hidden', False)
        if not isinstance(section, str) or not isinstance(hidden, bool):
            raise BumpKitError(
                code=E.CONFIG_INVALID_VALUE,
                message=f"changelog_preset.types entry '{commit_type}' has an invalid section or hidden value",
                hint='section must be a string and hidden a boolean.',
            )
        types.append(ChangelogType(type=commit_type, section=str(section), hidden=hidden))
    return tuple(types)


def parse_changelog_preset(raw: dict[str, Any], *, context: str = CONFIG_FILENAME) -> ChangelogPresetConfig:  # noqa: ANN401 - dynamic config
    """Validate a ``[changelog_preset]`` table.

    Raises:
        BumpKitError: On unknown keys or wrongly typed values.
    """
    section_context = f'[changelog_preset] of {context}'
    _validate_keys(raw, VALID_PRESET_KEYS, section_context)
    for key, value in raw.items():
        _validate_value_type(key, value, _PRESET_TYPE_MAP, context=section_context)

    kwargs: dict[str, Any] = {key: str(value) for key, value in raw.items() if isinstance(value, str)}
    if 'types' in raw:
        kwargs['types'] = _parse_changelog_types(list(raw['types']), section_context)
    if 'issue_prefixes' in raw:
        kwargs['issue_prefixes'] = _validate_string_list('issue_prefixes', list(raw['issue_prefixes']), section_context)
    return ChangelogPresetConfig(**kwargs)


def _unwrap(value: Any) -> Any:  # noqa: ANN401 - tomlkit items
    """Convert tomlkit containers into plain Python values."""
    return value.unwrap() if hasattr(value, 'unwrap') else value


def config_from_mapping(
    raw: dict[str, Any],  # noqa: ANN401 - dynamic config
    *,
    root: Path,
    context: str = CONFIG_FILENAME,
    config_path: Path | None = None,
) -> BumpKitConfig:
    """Validate a mapping of settings and build a :class:`BumpKitConfig`.

    Raises:
        BumpKitError: On unknown keys, wrongly typed values or invalid
            parser overrides.
    """
    _validate_keys(raw, VALID_KEYS, context)
    for key, value in raw.items():
        _validate_value_type(key, value, _GLOBAL_TYPE_MAP, context=context)

    kwargs: dict[str, Any] = dict(raw)
    if 'files' in raw:
        kwargs['files'] = _validate_string_list('files', list(raw['files']), context)
    if 'changelog_preset' in raw:
        kwargs['changelog_preset'] = parse_changelog_preset(dict(raw['changelog_preset']), context=context)
    if 'parser' in raw:
        kwargs['parser'] = dict(raw['parser'])

    config = BumpKitConfig(path=root, config_path=config_path, **kwargs)
    # Surface bad patterns before any git or file work starts.
    config.parser_options()
    return config


def _read_toml(path: Path) -> dict[str, Any]:  # noqa: ANN401 - dynamic config
    try:
        text = path.read_text(encoding='utf-8')
    except OSError as exc:
        raise BumpKitError(
            code=E.CONFIG_NOT_FOUND,
            message=f'Failed to read: {exc}',
            path=str(path),
        ) from exc
    try:
        doc = tomlkit.parse(text)
    except tomlkit.exceptions.TOMLKitError as exc:
        raise BumpKitError(
            code=E.CONFIG_INVALID_VALUE,
            message=f'Failed to parse: {exc}',
            path=str(path),
            hint=f'Check that {path.name} contains valid TOML.',
        ) from exc
    return _unwrap(doc)


def load_config(root: Path) -> BumpKitConfig:
    """Load and validate configuration for the project at ``root``.

    ``bumpkit.toml`` wins over ``[tool.bumpkit]`` in ``pyproject.toml``.
    Without either, the defaults are returned.

    Args:
        root: The project root.

    Returns:
        A validated :class:`BumpKitConfig`.

    Raises:
        BumpKitError: If the configuration is unreadable or invalid.
    """
    config_path = root / CONFIG_FILENAME
    if config_path.is_file():
        raw = _read_toml(config_path)
        logger.debug('config_loaded', path=str(config_path), keys=sorted(raw))
        return config_from_mapping(raw, root=root, context=CONFIG_FILENAME, config_path=config_path)

    pyproject_path = root / PYPROJECT_FILENAME
    if pyproject_path.is_file():
        tool = _read_toml(pyproject_path).get('tool', {})
        section = tool.get('bumpkit') if isinstance(tool, dict) else None
        if isinstance(section, dict):
            logger.debug('config_loaded', path=str(pyproject_path), keys=sorted(section))
            return config_from_mapping(
                section,
                root=root,
                context='[tool.bumpkit] in pyproject.toml',
                config_path=pyproject_path,
            )

    logger.debug('no_bumpkit_config', root=str(root))
    return BumpKitConfig(path=root)


def merge_cli_overrides(config: BumpKitConfig, **overrides: Any) -> BumpKitConfig:  # noqa: ANN401 - CLI values
    """Return ``config`` with every non-``None`` override applied.

    Empty sequences are treated as "not given" so an unused repeatable
    flag does not clear the configured list.

    Raises:
        BumpKitError: If an override names an unknown setting.
    """
    names = {f.name for f in dataclasses.fields(BumpKitConfig)}
    changes: dict[str, Any] = {}
    for key, value in overrides.items():
        if key not in names:
            raise BumpKitError(
                code=E.CONFIG_INVALID_KEY,
                message=f"Unknown setting '{key}'",
                hint=_suggest_key(key, frozenset(names)),
            )
        if value is None or (isinstance(value, (list, tuple)) and not value):
            continue
        changes[key] = tuple(value) if isinstance(value, list) else value
    return dataclasses.replace(config, **changes) if changes else config


__all__ = [
    'BumpKitConfig',
    'CONFIG_FILENAME',
    'ChangelogPresetConfig',
    'ChangelogType',
    'DEFAULT_CHANGELOG_TYPES',
    'DEFAULT_FILES',
    'DEFAULT_HEADER',
    'DEFAULT_RELEASE_COMMIT_MESSAGE_FORMAT',
    'VALID_KEYS',
    'VALID_PRESET_KEYS',
    'config_from_mapping',
    'load_config',
    'merge_cli_overrides',
    'parse_changelog_preset',
]
