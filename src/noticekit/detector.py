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

r"""Determine and check the licence of every dependency.

Each manifest record goes through the same stages, direct dependencies
first, then indirect ones::

    record ─→ resolve ─→ locate ─→ classify ─→ policy ─→ ResolvedDependency
             (replace +   (skipped   (skipped
              override)    if file    if type
                           given)     given)

Where an override names a licence file, it is joined under the
dependency directory and may not escape it. When the override carries
its own licence text (``licenceTextOverrideFile``) that file is used
as-is.

Failure handling:

    ┌──────────────────┬─────────────────────────────────────────────┐
    │ Mode             │ Behaviour                                   │
    ├──────────────────┼─────────────────────────────────────────────┤
    │ fail_fast=True   │ First error in manifest order is raised;    │
    │ (default)        │ no partial result.                          │
    │ fail_fast=False  │ Every dependency is processed; all errors   │
    │                  │ are raised together as DetectionErrors.     │
    └──────────────────┴─────────────────────────────────────────────┘

With ``workers > 1`` dependencies are processed on a thread pool. The
result order and the error reported are the same as a sequential run.
"""

from __future__ import annotations

import contextlib
import dataclasses
from collections.abc import Callable, Iterator, Sequence
from concurrent.futures import ThreadPoolExecutor
from typing import IO

from noticekit.classify import LicenceClassifier
from noticekit.dependency import DependencyList, DependencyRecord, ParsedManifest, ResolvedDependency
from noticekit.errors import (
    ClassificationError,
    DetectionErrors,
    LicenceNotFoundError,
    NoticeKitError,
    PolicyViolation,
    ScanError,
    UnsafePathError,
)
from noticekit.locate import find_licence_file, secure_join
from noticekit.logging import get_logger
from noticekit.manifest import parse_manifest
from noticekit.overrides import Overrides
from noticekit.replace import resolve_dependency
from noticekit.rules import Ruleset

__all__ = [
    'detect',
    'detect_licence',
]

log = get_logger('noticekit.detector')


def detect_licence(
    record: DependencyRecord,
    classifier: LicenceClassifier,
    rules: Ruleset,
    overrides: Overrides,
) -> ResolvedDependency:
    """Resolve one manifest record and establish its licence.

    Raises:
        ScanError: The dependency directory cannot be searched.
        UnsafePathError: An override licence file escapes the directory.
        LicenceNotFoundError: No licence file and no override type.
        ClassificationError: The licence file cannot be classified.
        PolicyViolation: The licence is not allowed by *rules*.
    """
    dep = resolve_dependency(record, overrides)
    name = dep.name

    if not dep.dir:
        # No directory to search or to join an override licence file under.
        if not dep.licence_text_override_file:
            dep = dataclasses.replace(dep, licence_file='')
    elif not dep.licence_file:
        try:
            dep = dataclasses.replace(dep, licence_file=find_licence_file(dep.dir))
        except LicenceNotFoundError:
            pass
        except ScanError as exc:
            raise ScanError(
                f'failed to find licence file for {name} in {dep.dir}: {exc}',
                dependency=name,
            ) from exc
    elif not dep.licence_text_override_file:
        try:
            dep = dataclasses.replace(dep, licence_file=secure_join(dep.dir, dep.licence_file))
        except UnsafePathError as exc:
            raise UnsafePathError(exc.path, exc.root, dependency=name) from exc

    if not dep.licence_type:
        if not dep.licence_file:
            raise LicenceNotFoundError(
                f'no licence file found for {name}. Add an override entry with licence type to continue.',
                dependency=name,
            )
        try:
            licence = classifier.classify(dep.licence_file)
        except ClassificationError as exc:
            raise ClassificationError(
                f'failed to detect licence type of {name} from {dep.licence_file}: {exc}',
                dependency=name,
            ) from exc
        if not licence:
            raise ClassificationError(
                f'licence unknown for {name}. Add an override entry with licence type to continue.',
                dependency=name,
            )
        dep = dataclasses.replace(dep, licence_type=licence)

    if not rules.is_allowed(dep.licence_type):
        raise PolicyViolation(name, dep.licence_type)

    log.debug(
        'dependency_resolved',
        name=name,
        version=dep.version,
        licence=dep.licence_type,
        licence_file=dep.licence_file,
    )
    return dep


def _outcomes(
    records: Sequence[DependencyRecord],
    work: Callable[[DependencyRecord], ResolvedDependency],
    workers: int,
) -> Iterator[ResolvedDependency | NoticeKitError]:
    """Yield the result or error of *work* for each record, in order."""
    if workers <= 1:
        for record in records:
            try:
                yield work(record)
            except NoticeKitError as exc:
                yield exc
        return

    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix='noticekit') as pool:
        futures = [pool.submit(work, record) for record in records]
        try:
            for future in futures:
                try:
                    yield future.result()
                except NoticeKitError as exc:
                    yield exc
        finally:
            for future in futures:
                future.cancel()


def detect(
    manifest: ParsedManifest | IO[str] | IO[bytes] | str | bytes,
    classifier: LicenceClassifier,
    rules: Ruleset,
    overrides: Overrides,
    *,
    include_indirect: bool = False,
    fail_fast: bool = True,
    workers: int = 1,
) -> DependencyList:
    """Determine the licence of every dependency in a manifest.

    Args:
        manifest: A parsed manifest, or the raw ``go list -m -json``
            output to parse.
        classifier: Classifier used when no override names the licence.
        rules: Licences that are allowed.
        overrides: Manual corrections keyed by module path.
        include_indirect: Also process indirect dependencies. Only used
            when *manifest* still has to be parsed.
        fail_fast: Stop at the first failing dependency. When ``False``
            every dependency is processed before failing.
        workers: Number of threads to process dependencies with.

    Returns:
        A :class:`DependencyList` in manifest order.

    Raises:
        NoticeKitError: The first failure, when *fail_fast* is set.
        DetectionErrors: Every failure, when *fail_fast* is not set.
    """
    if not isinstance(manifest, ParsedManifest):
        manifest = parse_manifest(manifest, include_indirect=include_indirect)

    def work(record: DependencyRecord) -> ResolvedDependency:
        return detect_licence(record, classifier, rules, overrides)

    records = [*manifest.direct, *manifest.indirect]
    resolved: list[ResolvedDependency] = []
    errors: list[NoticeKitError] = []
    with contextlib.closing(_outcomes(records, work, workers)) as outcomes:
        for outcome in outcomes:
            if isinstance(outcome, NoticeKitError):
                if fail_fast:
                    raise outcome
                log.error('dependency_failed', dependency=getattr(outcome, 'dependency', ''), error=str(outcome))
                errors.append(outcome)
                continue
            resolved.append(outcome)

    if errors:
        raise DetectionErrors(errors)

    deps = DependencyList(
        direct=tuple(d for d in resolved if not d.indirect),
        indirect=tuple(d for d in resolved if d.indirect),
    )
    log.info('licences_detected', direct=len(deps.direct), indirect=len(deps.indirect))
    return deps
