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

"""Structured logging for noticekit.

Configures `structlog <https://www.structlog.org/>`_ on top of the
standard library so that every module logs through one pipeline:

- **Console** (default): human-readable, colored when stderr is a TTY.
- **JSON** (``--json-log``): one JSON object per line for CI ingestion.

Output always goes to stderr; stdout is reserved for a NOTICE rendered
with ``--notice-out -``.

Dependency URLs come from overrides and may embed credentials for
private module hosts, so a processor strips ``user:password@`` from any
URL before an event is rendered.

Usage::

    from noticekit.logging import configure_logging, get_logger

    configure_logging(verbose=True)
    log = get_logger('noticekit.detector')
    log.info('licences_detected', direct=12, indirect=40)
"""

from __future__ import annotations

import logging
import re
import sys
from typing import Any

import structlog

# scheme://userinfo@; userinfo may hold a token or a user:password pair.
_URL_USERINFO_RE = re.compile(r'(?P<scheme>[a-zA-Z][a-zA-Z0-9+.-]*://)[^/\s@]+@')

_MASK = '***@'


def configure_logging(
    *,
    verbose: bool = False,
    quiet: bool = False,
    json_log: bool = False,
) -> None:
    """Configure structlog for noticekit.

    Call once at startup, before any logging calls. Calling it again
    reconfigures the level and renderer.

    Args:
        verbose: Enable debug-level output (one line per dependency).
        quiet: Only warnings and errors.
        json_log: Render events as JSON instead of console lines.
    """
    if quiet:
        level = logging.WARNING
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO

    logging.basicConfig(
        format='%(message)s',
        stream=sys.stderr,
        level=level,
        force=True,
    )

    shared_processors: list[structlog.types.Processor] = [  # type: ignore[assignment]
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt='iso'),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        mask_url_credentials,
    ]

    if json_log:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )
    for handler in logging.root.handlers:
        handler.setFormatter(formatter)


def get_logger(name: str = 'noticekit') -> structlog.stdlib.BoundLogger:
    """Return a bound structlog logger.

    Args:
        name: Logger name, conventionally ``noticekit.<module>``.

    Returns:
        A :class:`structlog.stdlib.BoundLogger` instance.
    """
    return structlog.get_logger(name)


def mask_credentials(value: object) -> object:
    """Replace the userinfo part of every URL in a string value."""
    if not isinstance(value, str) or '@' not in value:
        return value
    return _URL_USERINFO_RE.sub(lambda m: m.group('scheme') + _MASK, value)


def mask_url_credentials(
    logger: Any,  # noqa: ANN401
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Structlog processor: mask URL credentials in all event fields."""
    return {k: mask_credentials(v) for k, v in event_dict.items()}


__all__ = [
    'configure_logging',
    'get_logger',
    'mask_credentials',
    'mask_url_credentials',
]
