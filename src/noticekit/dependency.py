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

"""Shared leaf-level types used across noticekit.

This module must have **zero** imports from other ``noticekit``
modules so that every stage of the pipeline can depend on it.

Types, in pipeline order::

    DependencyRecord ──(+ Override)──→ ResolvedDependency ──→ DependencyList
      (go list -m -json)                 (one per record)       (direct, indirect)
"""

from __future__ import annotations

import datetime
from collections.abc import Iterator
from dataclasses import dataclass

__all__ = [
    'UNKNOWN_VERSION_TIME',
    'DependencyList',
    'DependencyRecord',
    'Override',
    'ParsedManifest',
    'ResolvedDependency',
]

#: Version time reported when the manifest carries no timestamp.
UNKNOWN_VERSION_TIME = 'unknown'


@dataclass(frozen=True)
class DependencyRecord:
    """One module as reported by ``go list -m -json all``.

    Attributes:
        path: Module path (e.g. ``"github.com/pkg/errors"``).
        version: Module version (e.g. ``"v0.9.1"``).
        time: Time the version was created, if known.
        main: Whether this is the main module.
        indirect: Whether the module is only an indirect dependency.
        dir: Directory holding the module's files, ``""`` if the module
            is not materialised locally.
        replace: The replace directive applied to this module, if any.
    """

    path: str
    version: str = ''
    time: datetime.datetime | None = None
    main: bool = False
    indirect: bool = False
    dir: str = ''
    replace: DependencyRecord | None = None


@dataclass(frozen=True)
class ParsedManifest:
    """Manifest records split by dependency kind, in manifest order."""

    direct: tuple[DependencyRecord, ...] = ()
    indirect: tuple[DependencyRecord, ...] = ()


@dataclass(frozen=True)
class Override:
    """A manual correction for one dependency.

    Every field is optional; an empty string means "use whatever
    discovery finds".

    Attributes:
        name: Module path the override applies to.
        dir: Directory to inspect instead of the module cache entry.
        version: Version to report.
        version_time: Version time to report.
        url: Project URL to report.
        licence_file: Licence file, relative to the dependency directory,
            or an absolute path when it came from
            ``licence_text_override_file``.
        licence_type: Licence identifier; skips classification.
        licence_text_override_file: Licence text supplied alongside the
            override document instead of a file inside the dependency.
    """

    name: str
    dir: str = ''
    version: str = ''
    version_time: str = ''
    url: str = ''
    licence_file: str = ''
    licence_type: str = ''
    licence_text_override_file: str = ''


@dataclass(frozen=True)
class ResolvedDependency:
    """A dependency with its effective metadata and licence.

    Attributes:
        name: Module path reported to the user.
        version: Effective version.
        version_time: RFC 3339 time, or :data:`UNKNOWN_VERSION_TIME`.
        dir: Directory inspected for a licence file.
        url: Project URL.
        licence_file: Absolute path of the licence file, ``""`` if none.
        licence_type: Licence identifier, ``""`` until classified.
        licence_text_override_file: Non-empty when the licence text was
            supplied by an override.
        local_replacement: Whether a ``replace`` pointed at a local
            directory.
        indirect: Whether this is an indirect dependency.
    """

    name: str
    version: str
    version_time: str = UNKNOWN_VERSION_TIME
    dir: str = ''
    url: str = ''
    licence_file: str = ''
    licence_type: str = ''
    licence_text_override_file: str = ''
    local_replacement: bool = False
    indirect: bool = False


@dataclass(frozen=True)
class DependencyList:
    """Direct and indirect dependencies, each in manifest order."""

    direct: tuple[ResolvedDependency, ...] = ()
    indirect: tuple[ResolvedDependency, ...] = ()

    def all(self) -> Iterator[ResolvedDependency]:
        """Iterate over direct dependencies, then indirect ones."""
        yield from self.direct
        yield from self.indirect

    def __len__(self) -> int:
        """Return the total number of dependencies."""
        return len(self.direct) + len(self.indirect)
