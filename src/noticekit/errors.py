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

"""Exception hierarchy for noticekit.

Every error raised on purpose by noticekit derives from
:class:`NoticeKitError`, so the CLI can report it and exit non-zero
without a traceback. Errors tied to a single dependency carry its name
in :attr:`DependencyError.dependency` so the operator knows which
override entry to add.

Hierarchy::

    NoticeKitError
    ├── ParseError               malformed manifest / overrides / rules / config
    │   ├── ManifestError        bad record in a JSON object stream
    │   └── UnsafePathError      path escapes its containment root
    ├── NotFoundError            a required file does not exist
    │   └── LicenceNotFoundError no licence-like file in a dependency
    ├── ClassificationError      licence text could not be classified
    ├── PolicyViolation          licence not on either allow-list
    ├── ScanError                filesystem failure while searching
    ├── DetectionErrors          every failure of a collect-all run
    ├── RenderError              template rendering failed
    └── UrlValidationError       one or more URLs are unreachable
"""

from __future__ import annotations

from collections.abc import Sequence

__all__ = [
    'ClassificationError',
    'DependencyError',
    'DetectionErrors',
    'LicenceNotFoundError',
    'ManifestError',
    'NoticeKitError',
    'NotFoundError',
    'ParseError',
    'PolicyViolation',
    'RenderError',
    'ScanError',
    'UnsafePathError',
    'UrlValidationError',
]


class NoticeKitError(Exception):
    """Base class for all noticekit errors."""


class DependencyError(NoticeKitError):
    """An error attributable to one dependency.

    Attributes:
        dependency: Module path of the offending dependency, or ``""``
            when the error is not tied to a dependency.
    """

    def __init__(self, message: str, *, dependency: str = '') -> None:
        """Initialize with a message and the offending dependency name."""
        self.dependency = dependency
        super().__init__(message)


class ParseError(NoticeKitError):
    """Raised when an input document is malformed.

    Attributes:
        source: File name (or ``"<stream>"``) of the document.
        errors: Individual problems found in the document.
    """

    def __init__(self, source: str, errors: Sequence[str] | str) -> None:
        """Initialize with the document source and one or more problems."""
        self.source = source
        self.errors = [errors] if isinstance(errors, str) else list(errors)
        if len(self.errors) == 1:
            super().__init__(f'{source}: {self.errors[0]}')
        else:
            bullet_list = '\n'.join(f'  - {e}' for e in self.errors)
            super().__init__(f'{source} has {len(self.errors)} error(s):\n{bullet_list}')


class ManifestError(ParseError):
    """Raised when a record in a JSON object stream is malformed.

    Attributes:
        offset: Character offset of the bad record in the stream.
    """

    def __init__(self, source: str, offset: int, detail: str) -> None:
        """Initialize with the stream name, offset and problem."""
        self.offset = offset
        super().__init__(source, f'invalid record at offset {offset}: {detail}')


class UnsafePathError(ParseError, DependencyError):
    """Raised when a path reference escapes its containment root.

    Attributes:
        path: The offending reference as written.
        root: The directory the reference had to stay within.
    """

    def __init__(self, path: str, root: str, *, dependency: str = '') -> None:
        """Initialize with the rejected reference and its root."""
        self.path = path
        self.root = root
        owner = f' of {dependency}' if dependency else ''
        ParseError.__init__(self, path, f'licence file reference{owner} escapes {root}')
        # ParseError chains into DependencyError.__init__, which resets it.
        self.dependency = dependency


class NotFoundError(DependencyError):
    """Raised when a required file does not exist."""


class LicenceNotFoundError(NotFoundError):
    """Raised when no licence-like file exists in a dependency."""


class ClassificationError(DependencyError):
    """Raised when a licence file cannot be read or classified."""


class PolicyViolation(DependencyError):
    """Raised when a dependency uses a licence the rules do not allow.

    Attributes:
        licence: The disallowed licence identifier.
    """

    def __init__(self, dependency: str, licence: str) -> None:
        """Initialize with the dependency and its disallowed licence."""
        self.licence = licence
        super().__init__(
            f'dependency {dependency} uses licence {licence} which is not allowed by the rules file',
            dependency=dependency,
        )


class ScanError(DependencyError):
    """Raised when the filesystem cannot be walked."""


class DetectionErrors(NoticeKitError):
    """Raised by a collect-all detection run with at least one failure.

    Attributes:
        errors: Every failure, in manifest order.
    """

    def __init__(self, errors: Sequence[NoticeKitError]) -> None:
        """Initialize with the collected failures."""
        self.errors = list(errors)
        bullet_list = '\n'.join(f'  - {e}' for e in self.errors)
        super().__init__(f'licence detection failed for {len(self.errors)} dependencies:\n{bullet_list}')


class RenderError(NoticeKitError):
    """Raised when a template cannot be loaded or rendered."""


class UrlValidationError(NoticeKitError):
    """Raised when dependency URLs are unreachable.

    Attributes:
        failures: Mapping from URL to a short reason.
    """

    def __init__(self, failures: dict[str, str]) -> None:
        """Initialize with the failed URLs."""
        self.failures = dict(failures)
        bullet_list = '\n'.join(f'  - {url}: {reason}' for url, reason in sorted(self.failures.items()))
        super().__init__(f'{len(self.failures)} dependency URL(s) failed validation:\n{bullet_list}')
