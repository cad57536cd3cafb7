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

r"""Load manual overrides for dependency metadata.

An override document is a stream of JSON objects, one per dependency,
in the same back-to-back format as ``go list -json``::

    {"name": "github.com/foo/bar", "licenceType": "MIT"}
    {"name": "github.com/baz/qux", "url": "https://qux.example.com"}
    {"name": "example.com/vendored", "licenceTextOverrideFile": "licences/vendored.txt"}

Recognised keys:

    ┌──────────────────────────┬──────────────────────────────────────────┐
    │ Key                      │ Effect                                   │
    ├──────────────────────────┼──────────────────────────────────────────┤
    │ name (required)          │ Module path the entry applies to.        │
    │ dir                      │ Directory to inspect.                    │
    │ version / versionTime    │ Reported version and version time.       │
    │ url                      │ Reported project URL.                    │
    │ licenceFile              │ Licence file inside the dependency dir.  │
    │ licenceType              │ Licence identifier; skips classifying.   │
    │ licenceTextOverrideFile  │ Licence text next to this document.      │
    └──────────────────────────┴──────────────────────────────────────────┘

``licenceTextOverrideFile`` is resolved against the override document's
directory (an absolute reference is re-rooted there, as with
``secure_join``) and stored as the absolute ``licence_file``. By default the
result must stay inside that directory (or an explicit ``root``); pass
``trust_paths=True`` to treat the document as trusted configuration that
may point anywhere on the filesystem.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Any

from noticekit.dependency import Override
from noticekit.errors import NotFoundError, ParseError, UnsafePathError
from noticekit.logging import get_logger
from noticekit.manifest import iter_json_objects

__all__ = [
    'Overrides',
    'load_overrides',
]

log = get_logger('noticekit.overrides')

#: Read-only mapping from module path to its override.
Overrides = Mapping[str, Override]

# Document key → Override field.
_FIELDS: dict[str, str] = {
    'name': 'name',
    'dir': 'dir',
    'version': 'version',
    'versionTime': 'version_time',
    'url': 'url',
    'licenceFile': 'licence_file',
    'licenceType': 'licence_type',
    'licenceTextOverrideFile': 'licence_text_override_file',
}


def _decode_override(obj: dict[str, Any], source: str, offset: int) -> Override:
    """Validate one decoded object and build an :class:`Override`."""
    kwargs: dict[str, str] = {}
    for key, field_name in _FIELDS.items():
        value = obj.get(key)
        if value is None:
            continue
        if not isinstance(value, str):
            raise ParseError(source, f'entry at offset {offset}: {key!r} must be a string')
        kwargs[field_name] = value
    if not kwargs.get('name'):
        raise ParseError(source, f'entry at offset {offset} has no "name"')
    return Override(**kwargs)


def _resolve_text_file(reference: str, base: Path, root: Path | None, name: str) -> str:
    """Return the absolute path of a licence text override file.

    An absolute *reference* is re-rooted under *base*.
    """
    resolved = (base / reference.lstrip('/\\')).resolve()
    if root is not None and not resolved.is_relative_to(root):
        raise UnsafePathError(reference, str(root), dependency=name)
    return str(resolved)


def load_overrides(
    path: str | Path | None,
    *,
    root: str | Path | None = None,
    trust_paths: bool = False,
) -> Overrides:
    """Load an override document.

    Args:
        path: Path to the document. ``None`` or ``""`` yields an empty
            mapping.
        root: Directory that licence text references must stay within.
            Defaults to the document's own directory.
        trust_paths: Allow licence text references to point anywhere.

    Returns:
        A read-only mapping from module path to :class:`Override`.

    Raises:
        NotFoundError: *path* is given but does not exist.
        ParseError: The document is malformed.
        UnsafePathError: A licence text reference escapes *root*.
    """
    if not path:
        return MappingProxyType({})

    doc_path = Path(path).absolute()
    try:
        text = doc_path.read_text(encoding='utf-8')
    except FileNotFoundError as exc:
        raise NotFoundError(f'override file {doc_path} does not exist') from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise ParseError(str(doc_path), f'failed to read overrides: {exc}') from exc

    base = doc_path.parent
    containment = None if trust_paths else Path(root or base).resolve()

    overrides: dict[str, Override] = {}
    for offset, obj in iter_json_objects(text, str(doc_path)):
        override = _decode_override(obj, str(doc_path), offset)
        if override.licence_text_override_file:
            licence_file = _resolve_text_file(
                override.licence_text_override_file,
                base,
                containment,
                override.name,
            )
            override = dataclasses.replace(override, licence_file=licence_file)
        if override.name in overrides:
            log.warning('duplicate_override', name=override.name, path=str(doc_path))
        overrides[override.name] = override

    log.debug('overrides_loaded', path=str(doc_path), count=len(overrides))
    return MappingProxyType(overrides)
