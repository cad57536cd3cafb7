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

r"""Parse the output of ``go list -m -json all``.

``go list -json`` writes one JSON object per module, back to back, with
no enclosing array::

    {
        "Path": "example.com/app",
        "Main": true,
        "Dir": "/src/app"
    }
    {
        "Path": "github.com/pkg/errors",
        "Version": "v0.9.1",
        "Time": "2020-01-14T19:47:44Z",
        "Dir": "/go/pkg/mod/github.com/pkg/errors@v0.9.1"
    }

:func:`iter_json_objects` decodes such a stream incrementally and is
also used for override documents, which share the format.

Filtering rules applied by :func:`parse_manifest`:

- the main module is dropped;
- modules without a ``Dir`` are dropped (nothing on disk to inspect);
- indirect modules are dropped unless ``include_indirect`` is set.
"""

from __future__ import annotations

import datetime
import json
import re
from collections.abc import Iterator
from typing import IO, Any

from noticekit.dependency import DependencyRecord, ParsedManifest
from noticekit.errors import ManifestError
from noticekit.logging import get_logger

__all__ = [
    'iter_json_objects',
    'parse_manifest',
    'parse_time',
]

log = get_logger('noticekit.manifest')

_WS_RE = re.compile(r'\s*')

# Go emits nanosecond precision; datetime accepts at most microseconds.
_FRACTION_RE = re.compile(r'\.(\d{6})\d+')

_STRING_FIELDS = ('Path', 'Version', 'Time', 'Dir')
_BOOL_FIELDS = ('Main', 'Indirect')


def iter_json_objects(text: str, source: str = '<stream>') -> Iterator[tuple[int, dict[str, Any]]]:
    """Yield ``(offset, object)`` for each JSON object in *text*.

    Objects may be separated by any amount of whitespace. Decoding stops
    cleanly at the end of the input.

    Raises:
        ManifestError: A value is not valid JSON or is not an object.
    """
    decoder = json.JSONDecoder()
    pos = _WS_RE.match(text, 0).end()  # type: ignore[union-attr]  # \s* always matches
    while pos < len(text):
        try:
            obj, end = decoder.raw_decode(text, pos)
        except json.JSONDecodeError as exc:
            raise ManifestError(source, exc.pos, exc.msg) from exc
        if not isinstance(obj, dict):
            raise ManifestError(source, pos, f'expected a JSON object, got {type(obj).__name__}')
        yield pos, obj
        pos = _WS_RE.match(text, end).end()  # type: ignore[union-attr]


def parse_time(value: str) -> datetime.datetime:
    """Parse an RFC 3339 timestamp as written by the go tool.

    Raises:
        ValueError: *value* is not a valid timestamp.
    """
    value = _FRACTION_RE.sub(r'.\1', value.strip())
    if value.endswith(('Z', 'z')):
        value = value[:-1] + '+00:00'
    return datetime.datetime.fromisoformat(value)


def _decode_record(obj: dict[str, Any], source: str, offset: int) -> DependencyRecord:
    """Convert one decoded JSON object into a :class:`DependencyRecord`."""
    for key in _STRING_FIELDS:
        if key in obj and not isinstance(obj[key], str):
            raise ManifestError(source, offset, f'field {key!r} must be a string')
    for key in _BOOL_FIELDS:
        if key in obj and not isinstance(obj[key], bool):
            raise ManifestError(source, offset, f'field {key!r} must be a boolean')

    path = obj.get('Path', '')
    if not path:
        raise ManifestError(source, offset, 'record has no "Path"')

    time = None
    if obj.get('Time'):
        try:
            time = parse_time(obj['Time'])
        except ValueError as exc:
            raise ManifestError(source, offset, f'invalid "Time" of {path}: {exc}') from exc

    replace = None
    raw_replace = obj.get('Replace')
    if raw_replace is not None:
        if not isinstance(raw_replace, dict):
            raise ManifestError(source, offset, f'"Replace" of {path} must be an object')
        replace = _decode_record(raw_replace, source, offset)

    return DependencyRecord(
        path=path,
        version=obj.get('Version', ''),
        time=time,
        main=obj.get('Main', False),
        indirect=obj.get('Indirect', False),
        dir=obj.get('Dir', ''),
        replace=replace,
    )


def parse_manifest(
    data: IO[str] | IO[bytes] | str | bytes,
    *,
    include_indirect: bool = False,
    source: str = '<stream>',
) -> ParsedManifest:
    """Parse a ``go list -m -json`` stream into direct and indirect records.

    Args:
        data: The stream, or its full contents.
        include_indirect: Keep indirect dependencies instead of dropping
            them.
        source: Name used in error messages.

    Returns:
        A :class:`ParsedManifest` preserving manifest order.

    Raises:
        ManifestError: Any record is malformed.
    """
    if not isinstance(data, (str, bytes)):
        data = data.read()
    if isinstance(data, bytes):
        try:
            text = data.decode('utf-8')
        except UnicodeDecodeError as exc:
            raise ManifestError(source, exc.start, 'input is not valid UTF-8') from exc
    else:
        text = data

    direct: list[DependencyRecord] = []
    indirect: list[DependencyRecord] = []
    for offset, obj in iter_json_objects(text, source):
        record = _decode_record(obj, source, offset)
        if record.main or not record.dir:
            continue
        if record.indirect:
            if include_indirect:
                indirect.append(record)
            continue
        direct.append(record)

    log.debug('manifest_parsed', source=source, direct=len(direct), indirect=len(indirect))
    return ParsedManifest(direct=tuple(direct), indirect=tuple(indirect))
