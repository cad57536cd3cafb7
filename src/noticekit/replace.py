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

r"""Reconcile ``replace`` directives and overrides into one record.

A ``go.mod`` replace directive points a module either at a local
directory or at another published module::

    replace example.com/lib => ../lib-fork               (local)
    replace example.com/lib => github.com/me/lib v1.2.0  (published)

The two are reported differently:

    ┌───────────────┬───────────────────────┬────────────────────────┐
    │ Replacement   │ Reported name/version │ Directory inspected    │
    ├───────────────┼───────────────────────┼────────────────────────┤
    │ none          │ record                │ record                 │
    │ local (./ ../)│ original record       │ replacement            │
    │ published     │ replacement           │ replacement            │
    └───────────────┴───────────────────────┴────────────────────────┘

A local fork is still known to the user by its original name, whereas a
published replacement really is a different module.
"""

from __future__ import annotations

import datetime
from dataclasses import dataclass

from noticekit.dependency import (
    UNKNOWN_VERSION_TIME,
    DependencyRecord,
    Override,
    ResolvedDependency,
)
from noticekit.overrides import Overrides

__all__ = [
    'ReplaceTarget',
    'determine_url',
    'format_version_time',
    'resolve_dependency',
    'resolve_replace',
]


@dataclass(frozen=True)
class ReplaceTarget:
    """Effective identity of a manifest record after ``replace``.

    Attributes:
        name: Module path to report and to look overrides up by.
        version: Version to report.
        dir: Directory holding the module's files.
        time: Creation time of the module that is actually used.
        local_replacement: Whether the replacement is a local directory.
    """

    name: str
    version: str
    dir: str
    time: datetime.datetime | None = None
    local_replacement: bool = False


def resolve_replace(record: DependencyRecord) -> ReplaceTarget:
    """Apply the record's ``replace`` directive, if any."""
    replacement = record.replace
    if replacement is None:
        return ReplaceTarget(
            name=record.path,
            version=record.version,
            dir=record.dir,
            time=record.time,
        )

    # Relative paths ("./x", "../x") mark a replacement on the local filesystem.
    if replacement.path.startswith('.'):
        return ReplaceTarget(
            name=record.path,
            version=record.version,
            dir=replacement.dir,
            time=replacement.time,
            local_replacement=True,
        )

    return ReplaceTarget(
        name=replacement.path,
        version=replacement.version,
        dir=replacement.dir,
        time=replacement.time,
    )


def format_version_time(time: datetime.datetime | None) -> str:
    """Format a version time as RFC 3339, or ``"unknown"``."""
    if time is None:
        return UNKNOWN_VERSION_TIME
    if time.tzinfo is None:
        time = time.replace(tzinfo=datetime.timezone.utc)
    text = time.replace(microsecond=0).isoformat()
    if text.endswith('+00:00'):
        text = text[: -len('+00:00')] + 'Z'
    return text


def determine_url(override_url: str, module_path: str) -> str:
    """Return the project URL of a module.

    Args:
        override_url: URL from an override; wins when non-empty.
        module_path: Module path the URL is derived from.
    """
    if override_url:
        return override_url

    parts = module_path.split('/')
    if parts[0] == 'github.com':
        # github.com/owner/repo/sub/pkg 404s; the repository root does not.
        if len(parts) > 3:
            return 'https://' + '/'.join(parts[:3])
        return 'https://' + module_path
    if parts[0] == 'k8s.io' and len(parts) > 1:
        return 'https://github.com/kubernetes/' + parts[1]
    return 'https://' + module_path


def resolve_dependency(
    record: DependencyRecord,
    overrides: Overrides,
) -> ResolvedDependency:
    """Merge a manifest record, its replace directive and its override.

    Override fields win over discovered ones when non-empty. The licence
    fields are copied verbatim; locating and classifying happen later.

    Args:
        record: The manifest record.
        overrides: Overrides keyed by module path.

    Returns:
        A :class:`ResolvedDependency` with an empty licence type unless
        the override supplies one.
    """
    target = resolve_replace(record)
    override = overrides.get(target.name) or Override(name=target.name)

    return ResolvedDependency(
        name=target.name,
        version=override.version or target.version,
        version_time=override.version_time or format_version_time(target.time),
        dir=override.dir or target.dir,
        url=determine_url(override.url, target.name),
        licence_file=override.licence_file,
        licence_type=override.licence_type,
        licence_text_override_file=override.licence_text_override_file,
        local_replacement=target.local_replacement,
        indirect=record.indirect,
    )
