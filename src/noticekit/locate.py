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

r"""Find the most probable licence file of a dependency.

The module directory is walked depth-first in lexical order and the
first entry whose name looks like a licence file wins::

    mod@v1.0.0/
    ├── LICENSE          ← returned (matches, and "L" sorts before "d")
    ├── doc/
    │   └── COPYING
    └── licenses/        ← matches but is a directory: skipped, not entered
        └── MIT.txt

Name patterns (case-insensitive, optional ``.txt``/``.md``/``.rst``):

    ┌─────────────────────────────┬─────────────────────────────────────┐
    │ Pattern                     │ Examples                            │
    ├─────────────────────────────┼─────────────────────────────────────┤
    │ li[cs]en[cs]es?             │ LICENSE, licence.md, LICENSES       │
    │ license.(mit|apache)        │ LICENSE-MIT, license.apache         │
    │ legal                       │ LEGAL                               │
    │ copy(left|right|ing)        │ COPYING, COPYRIGHT.txt              │
    │ unlicense                   │ UNLICENSE                           │
    │ l?gpl([-_ v]?)(\d\.?\d)?    │ GPL, LGPL-2.1, gplv3.0              │
    │ bsd / mit / apache          │ BSD, MIT.md, APACHE                 │
    └─────────────────────────────┴─────────────────────────────────────┘

The patterns follow the ones used by src-d's go-license-detector.
"""

from __future__ import annotations

import os
import re
from pathlib import Path

from noticekit.errors import LicenceNotFoundError, ScanError, UnsafePathError

__all__ = [
    'LICENCE_FILE_RE',
    'find_licence_file',
    'is_licence_file_name',
    'secure_join',
]

_LICENCE_FILE_NAMES = (
    r'li[cs]en[cs]es?',
    r'license.(mit|apache)',
    r'legal',
    r'copy(left|right|ing)',
    r'unlicense',
    r'l?gpl([-_ v]?)(\d\.?\d)?',
    r'bsd',
    r'mit',
    r'apache',
)

#: Full-name pattern for licence-like file names.
LICENCE_FILE_RE: re.Pattern[str] = re.compile(
    rf'({"|".join(_LICENCE_FILE_NAMES)})(\.(txt|md|rst))?',
    re.IGNORECASE,
)


def is_licence_file_name(name: str) -> bool:
    """Return ``True`` if *name* looks like a licence file name."""
    return LICENCE_FILE_RE.fullmatch(name) is not None


def _walk(directory: str) -> str | None:
    """Return the first licence-like file under *directory*, depth-first."""
    with os.scandir(directory) as it:
        entries = sorted(it, key=lambda e: e.name)
    for entry in entries:
        is_dir = entry.is_dir(follow_symlinks=False)
        if is_licence_file_name(entry.name):
            if is_dir:
                continue
            return entry.path
        if is_dir:
            found = _walk(entry.path)
            if found is not None:
                return found
    return None


def find_licence_file(directory: str | Path) -> str:
    """Find the first licence-like file in a dependency directory.

    Args:
        directory: Root of the dependency's files.

    Returns:
        Absolute path of the licence file.

    Raises:
        LicenceNotFoundError: No entry in the tree has a licence-like name,
            or *directory* is empty or does not exist.
        ScanError: The tree could not be read.
    """
    if not directory:
        raise LicenceNotFoundError('no dependency directory to search')
    root = os.path.abspath(directory)
    if not os.path.lexists(root):
        raise LicenceNotFoundError(f'{root} does not exist')
    try:
        found = _walk(root)
    except OSError as exc:
        raise ScanError(f'failed to search {root} for a licence file: {exc}') from exc
    if found is None:
        raise LicenceNotFoundError(f'no licence file found in {root}')
    return found


def secure_join(root: str | Path, unsafe: str) -> str:
    """Join *unsafe* under *root*, refusing to leave *root*.

    ``..`` components and symlinks are resolved before the check, so a
    link inside the dependency pointing at ``/etc`` is rejected too. An
    absolute *unsafe* path is interpreted relative to *root*.

    Raises:
        UnsafePathError: The joined path resolves outside *root*.
    """
    base = Path(root).resolve()
    joined = (base / unsafe.lstrip('/\\')).resolve()
    if not joined.is_relative_to(base):
        raise UnsafePathError(unsafe, str(base))
    return str(joined)
