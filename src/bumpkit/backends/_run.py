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

"""Subprocess runner behind every ``git`` call bumpkit makes.

Commands never go through a shell. Output is decoded as UTF-8 because
commit messages and author names are UTF-8 regardless of the user's
locale. In dry-run mode the command is only logged.
"""

from __future__ import annotations

import os
import shlex
import subprocess  # noqa: S404 - running git is what this module is for
import time
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

from bumpkit.logging import get_logger

log = get_logger('bumpkit.backends.run')

DEFAULT_TIMEOUT_SECONDS = 120

TimeoutExpired = subprocess.TimeoutExpired


@dataclass(frozen=True)
class CommandResult:
    """What a finished (or skipped) command produced.

    ``duration`` is in milliseconds and stays ``0.0`` for skipped
    commands.
    """

    command: list[str]
    return_code: int
    stdout: str = ''
    stderr: str = ''
    duration: float = 0.0
    dry_run: bool = False

    @property
    def ok(self) -> bool:
        """Whether the command exited with status 0."""
        return self.return_code == 0

    @property
    def command_str(self) -> str:
        """The command quoted so it can be pasted into a shell."""
        return shlex.join(self.command)

    @property
    def error(self) -> str:
        """Last non-blank stderr line, or the exit status when stderr is empty."""
        for line in reversed(self.stderr.splitlines()):
            if line.strip():
                return line.strip()
        return f'exit status {self.return_code}'


def run_command(
    cmd: Sequence[str],
    *,
    cwd: Path | str | None = None,
    env: Mapping[str, str] | None = None,
    timeout: int = DEFAULT_TIMEOUT_SECONDS,
    dry_run: bool = False,
) -> CommandResult:
    """Run ``cmd`` and capture its output.

    Args:
        cmd: Program and arguments.
        cwd: Directory to run in; defaults to the current one.
        env: Variables layered over ``os.environ`` for this call only.
        timeout: Seconds before the process is killed.
        dry_run: Only log the command and report success.

    Returns:
        The :class:`CommandResult`. Non-zero exits are returned for the
        caller to judge, not raised.

    Raises:
        TimeoutExpired: If the command outlives ``timeout``.
    """
    argv = list(cmd)
    if dry_run:
        log.info('would_run', cmd=shlex.join(argv))
        return CommandResult(command=argv, return_code=0, dry_run=True)

    log.debug('run', cmd=shlex.join(argv), cwd=str(cwd or '.'))
    started = time.monotonic()
    try:
        proc = subprocess.run(  # noqa: S603 - argv is built by bumpkit, no shell
            argv,
            cwd=cwd,
            env={**os.environ, **env} if env else None,
            capture_output=True,
            encoding='utf-8',
            errors='replace',
            timeout=timeout,
            check=False,
        )
    except TimeoutExpired:
        log.error('timed_out', cmd=shlex.join(argv), timeout=timeout)
        raise
    elapsed_ms = (time.monotonic() - started) * 1000

    result = CommandResult(
        command=argv,
        return_code=proc.returncode,
        stdout=proc.stdout,
        stderr=proc.stderr,
        duration=elapsed_ms,
    )
    if result.ok:
        log.debug('ran', cmd=result.command_str, ms=round(elapsed_ms))
    else:
        log.warning('run_failed', cmd=result.command_str, status=result.return_code, error=result.error)
    return result


__all__ = [
    'CommandResult',
    'DEFAULT_TIMEOUT_SECONDS',
    'TimeoutExpired',
    'run_command',
]
