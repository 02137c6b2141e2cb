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

"""Structured logging for bumpkit.

All output goes through `structlog <https://www.structlog.org/>`_ into the
stdlib root logger on stderr, so stdout only ever carries command output
(``--inspect-version``, ``bumpkit parse``).

Key Concepts (ELI5)::

    ┌─────────────────────┬────────────────────────────────────────────┐
    │ Concept             │ ELI5 Explanation                           │
    ├─────────────────────┼────────────────────────────────────────────┤
    │ Console mode        │ Colored key=value lines for humans.        │
    │                     │ Colors only when stderr is a terminal.     │
    ├─────────────────────┼────────────────────────────────────────────┤
    │ JSON mode           │ One JSON object per line (``--json-log``). │
    ├─────────────────────┼────────────────────────────────────────────┤
    │ Dry-run tag         │ In a dry run every event carries           │
    │                     │ ``dry_run=True``, so "would write" lines   │
    │                     │ can't be mistaken for real writes.         │
    └─────────────────────┴────────────────────────────────────────────┘

Usage::

    from bumpkit.logging import configure_logging, get_logger

    configure_logging(verbose=True, dry_run=True)
    log = get_logger(__name__)
    log.info('files_updated', count=2)
"""

from __future__ import annotations

import logging
import sys

import structlog

_LEVELS: dict[tuple[bool, bool], int] = {
    # (verbose, quiet) -> level; quiet wins.
    (False, False): logging.INFO,
    (True, False): logging.DEBUG,
    (False, True): logging.WARNING,
    (True, True): logging.WARNING,
}


def _renderer(*, json_log: bool) -> structlog.types.Processor:
    if json_log:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def configure_logging(
    *,
    verbose: bool = False,
    quiet: bool = False,
    json_log: bool = False,
    dry_run: bool = False,
) -> None:
    """Route structlog events to stderr at the level the flags ask for.

    Safe to call more than once: the CLI configures logging from its flags
    first and again once the config file has been merged in.

    Args:
        verbose: Enable debug-level output (``--debug``).
        quiet: Only show warnings and errors (``--silent``).
        json_log: Emit JSON lines instead of console output.
        dry_run: Tag every event with ``dry_run=True``.
    """
    logging.basicConfig(
        format='%(message)s',
        stream=sys.stderr,
        level=_LEVELS[verbose, quiet],
        force=True,
    )

    if dry_run:
        structlog.contextvars.bind_contextvars(dry_run=True)
    else:
        structlog.contextvars.unbind_contextvars('dry_run')

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt='iso'),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.UnicodeDecoder(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            _renderer(json_log=json_log),
        ],
    )
    for handler in logging.root.handlers:
        handler.setFormatter(formatter)


def get_logger(name: str = 'bumpkit') -> structlog.stdlib.BoundLogger:
    """Return a structlog logger named ``name``."""
    return structlog.get_logger(name)


__all__ = [
    'configure_logging',
    'get_logger',
]
