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

"""Command-line interface for bumpkit.

Usage::

    bumpkit                      # bump, changelog, commit, tag
    bumpkit --dry-run            # show what would happen
    bumpkit --pre-release beta   # 1.2.3 → 1.3.0-beta.0
    bumpkit --inspect-version    # print the current version
    git log --format=%x1e%s%n%b%n%H%n%aI%n%an%n%ae | bumpkit parse
    bumpkit explain BK-VERSION-MULTIPLE

Settings come from ``bumpkit.toml`` (or ``[tool.bumpkit]`` in
``pyproject.toml``); flags override them.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import TextIO

from rich_argparse import RichHelpFormatter

from bumpkit import __version__
from bumpkit.backends import GitCLIBackend
from bumpkit.backends.git import RECORD_SEPARATOR
from bumpkit.commit_parsing import CommitParser, filter_reverted_commits
from bumpkit.config import BumpKitConfig, load_config, merge_cli_overrides
from bumpkit.errors import BumpKitError, explain, render_error
from bumpkit.files import FileManager
from bumpkit.logging import configure_logging, get_logger
from bumpkit.release import get_current_version, run_release

logger = get_logger(__name__)


def _config_from_args(args: argparse.Namespace) -> BumpKitConfig:
    root = Path(args.path).resolve() if args.path else Path.cwd()
    config = load_config(root)
    return merge_cli_overrides(
        config,
        files=args.file,
        changelog=args.changelog,
        header=args.header,
        tag_prefix=args.tag_prefix,
        pre_release=args.pre_release,
        current_version=args.current_version,
        next_version=args.next_version,
        release_message_suffix=args.release_message_suffix,
        commit_all=args.commit_all or None,
        debug=args.debug or None,
        dry_run=args.dry_run or None,
        silent=args.silent or None,
        git_tag_fallback=False if args.no_git_tag_fallback else None,
        sign=args.sign or None,
        verify=args.verify or None,
        skip_bump=args.skip_bump or None,
        skip_changelog=args.skip_changelog or None,
        skip_commit=args.skip_commit or None,
        skip_tag=args.skip_tag or None,
        inspect_version=args.inspect_version or None,
    )


async def _cmd_inspect_version(config: BumpKitConfig) -> int:
    """Print the current version and stop."""
    git = GitCLIBackend(config.path, dry_run=True)
    current = await get_current_version(config, FileManager(config.path, dry_run=True), git)
    print(current.version)  # noqa: T201 - CLI output
    return 0


async def _cmd_release(config: BumpKitConfig) -> int:
    """Handle the default release command."""
    result = await run_release(config)

    release_type = result.next.release_type or 'explicit'
    print(f'  ✅ {result.current.version} → {result.next.version} ({release_type})')  # noqa: T201 - CLI output
    if result.next.reason:
        print(f'     {result.next.reason}')  # noqa: T201 - CLI output
    for state in result.files:
        print(f'  📦 {state.name}')  # noqa: T201 - CLI output
    if result.changelog is not None:
        print(f'  📝 {result.changelog.path}')  # noqa: T201 - CLI output
        if config.dry_run:
            print()  # noqa: T201 - CLI output
            print(result.changelog.new_content)  # noqa: T201 - CLI output
    if result.tag is not None:
        print(f'  🏷️  {result.tag.tag}')  # noqa: T201 - CLI output
        print()  # noqa: T201 - CLI output
        print(result.tag.push_message)  # noqa: T201 - CLI output
        if result.tag.publish_message:
            print(result.tag.publish_message)  # noqa: T201 - CLI output
    return 0


def _cmd_parse(args: argparse.Namespace, config: BumpKitConfig, stdin: TextIO) -> int:
    """Handle the ``parse`` subcommand."""
    parser = CommitParser(config.parser_options(), logger=logger)
    records = [record for record in stdin.read().split(RECORD_SEPARATOR) if record.strip()]
    commits = parser.parse_many(records)
    if args.filter_reverted:
        commits = list(filter_reverted_commits(commits))
    print(json.dumps([commit.to_dict() for commit in commits], indent=2))  # noqa: T201 - CLI output
    return 0


def _cmd_explain(args: argparse.Namespace) -> int:
    """Handle the ``explain`` subcommand."""
    result = explain(args.code)
    if result is None:
        print(f'Unknown error code: {args.code}')  # noqa: T201 - CLI output
        return 1
    print(result)  # noqa: T201 - CLI output
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser.

    Returns:
        Configured :class:`argparse.ArgumentParser`.
    """
    RichHelpFormatter.styles['argparse.groups'] = 'bold yellow'
    parser = argparse.ArgumentParser(
        prog='bumpkit',
        description='Bump versions, write the changelog and tag releases from conventional commits.',
        formatter_class=RichHelpFormatter,
    )
    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}',
    )

    general = parser.add_argument_group('general')
    general.add_argument(
        '--path',
        metavar='DIR',
        default=None,
        help='Project root (default: the current directory).',
    )
    general.add_argument(
        '--file',
        '-f',
        action='append',
        default=[],
        metavar='NAME',
        help='File to read and bump the version in. Repeat for more files.',
    )
    general.add_argument(
        '--changelog',
        metavar='NAME',
        default=None,
        help='Changelog file name (default: CHANGELOG.md).',
    )
    general.add_argument(
        '--header',
        default=None,
        help='Text kept at the top of the changelog.',
    )
    general.add_argument(
        '--tag-prefix',
        default=None,
        help='Prefix for release tags (default: v).',
    )
    general.add_argument(
        '--pre-release',
        nargs='?',
        const=True,
        default=None,
        metavar='TAG',
        help='Cut a prerelease, optionally with an identifier such as "beta".',
    )
    general.add_argument(
        '--current-version',
        default=None,
        help='Use this version instead of reading files.',
    )
    general.add_argument(
        '--next-version',
        default=None,
        help='Release this version instead of the recommended one.',
    )
    general.add_argument(
        '--release-message-suffix',
        default=None,
        help='Text appended to the release commit message, e.g. "[skip ci]".',
    )
    general.add_argument(
        '--inspect-version',
        action='store_true',
        help='Print the current version and exit.',
    )

    flags = parser.add_argument_group('flags')
    flags.add_argument('--commit-all', action='store_true', help='Commit all staged changes, not only bumped files.')
    flags.add_argument('--debug', action='store_true', help='Log at debug level.')
    flags.add_argument('--dry-run', action='store_true', help='Log what would happen without changing anything.')
    flags.add_argument('--silent', action='store_true', help='Only log warnings and errors.')
    flags.add_argument('--json-log', action='store_true', help='Log as JSON lines.')
    flags.add_argument(
        '--no-git-tag-fallback',
        action='store_true',
        help='Do not fall back to the latest git tag when no file has a version.',
    )
    flags.add_argument('--sign', action='store_true', help='GPG-sign the release commit and tag.')
    flags.add_argument('--verify', action='store_true', help='Run git hooks on the release commit.')

    skip = parser.add_argument_group('skip steps')
    skip.add_argument('--skip-bump', action='store_true', help='Do not write new versions.')
    skip.add_argument('--skip-changelog', action='store_true', help='Do not update the changelog.')
    skip.add_argument('--skip-commit', action='store_true', help='Do not commit.')
    skip.add_argument('--skip-tag', action='store_true', help='Do not tag.')

    subparsers = parser.add_subparsers(dest='command')

    parse_parser = subparsers.add_parser(
        'parse',
        help='Parse raw commit records from stdin and print them as JSON.',
        formatter_class=RichHelpFormatter,
    )
    parse_parser.add_argument(
        '--filter-reverted',
        action='store_true',
        help='Drop reverted commits and the reverts themselves.',
    )

    explain_parser = subparsers.add_parser(
        'explain',
        help='Explain an error code.',
        formatter_class=RichHelpFormatter,
    )
    explain_parser.add_argument('code', help='Error code, e.g. BK-VERSION-MULTIPLE.')

    return parser


def main(argv: Sequence[str] | None = None, *, stdin: TextIO | None = None) -> int:
    """CLI entry point.

    Args:
        argv: Arguments without the program name; defaults to
            ``sys.argv[1:]``.
        stdin: Input for the ``parse`` subcommand; defaults to
            ``sys.stdin``.

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(verbose=args.debug, quiet=args.silent, json_log=args.json_log)

    try:
        if args.command == 'explain':
            return _cmd_explain(args)

        config = _config_from_args(args)
        configure_logging(
            verbose=config.debug,
            quiet=config.silent,
            json_log=args.json_log,
            dry_run=config.dry_run,
        )
        if args.command == 'parse':
            return _cmd_parse(args, config, stdin or sys.stdin)
        if config.inspect_version:
            return asyncio.run(_cmd_inspect_version(config))
        return asyncio.run(_cmd_release(config))

    except BumpKitError as exc:
        render_error(exc)
        return 1
    except KeyboardInterrupt:
        logger.info('interrupted')
        return 130


def _main() -> None:
    """Wrapper for pyproject.toml [project.scripts] entry point."""
    sys.exit(main())


__all__ = [
    'build_parser',
    'main',
]
