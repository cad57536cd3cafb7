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

r"""Identify the licence of a licence file.

The pipeline only depends on the narrow :class:`Classifier` protocol
(``match(text) -> ranked matches``), so any engine can be plugged in.
The bundled engine, :class:`ReferenceTextClassifier`, compares word
trigrams of the candidate against a set of reference licence texts::

    candidate text ──normalize──→ shingles ─┐
                                            ├─→ |R ∩ T| / |R| ──→ confidence
    reference text ──normalize──→ shingles ─┘

Normalisation lower-cases the text, drops copyright lines (they differ
in every project) and replaces punctuation with spaces. Scoring against
the *reference's* shingles means a licence file that embeds extra text
(a title, an appendix, a second licence) still scores 1.0.

Ranking:

    ┌───────┬────────────────────────────────────────────────┐
    │ Order │ Key                                            │
    ├───────┼────────────────────────────────────────────────┤
    │ 1     │ Higher confidence                              │
    │ 2     │ Larger reference (BSD-3-Clause > BSD-2-Clause) │
    │ 3     │ Licence name                                   │
    └───────┴────────────────────────────────────────────────┘

Reference data is a set of ``<ID>.txt`` files, either the copy shipped
in ``noticekit/data/licenses`` or a directory/zip given by the caller.
"""

from __future__ import annotations

import functools
import re
import zipfile
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from noticekit.errors import ClassificationError, NotFoundError, ParseError
from noticekit.logging import get_logger

__all__ = [
    'DEFAULT_THRESHOLD',
    'Classifier',
    'LicenceClassifier',
    'LicenceMatch',
    'ReferenceTextClassifier',
    'load_classifier',
    'normalize_text',
]

log = get_logger('noticekit.classify')

#: Minimum confidence for a reference to be reported as a match.
DEFAULT_THRESHOLD = 0.85

_DATA_DIR = Path(__file__).resolve().parent / 'data' / 'licenses'

_COPYRIGHT_LINE_RE = re.compile(r'^\s*(?:copyright\s*(?:\(c\)|©|\d)|\(c\)\s*\d|©).*$', re.MULTILINE)
_NON_WORD_RE = re.compile(r'[^a-z0-9]+')

Shingle = tuple[str, ...]


@dataclass(frozen=True)
class LicenceMatch:
    """One candidate licence for a text.

    Attributes:
        name: Licence identifier (e.g. ``"MIT"``).
        confidence: Score from 0.0 to 1.0.
    """

    name: str
    confidence: float


class Classifier(Protocol):
    """A licence text classification engine."""

    def match(self, text: str) -> list[LicenceMatch]:
        """Return matches above the engine's threshold, best first."""
        ...


def normalize_text(text: str) -> list[str]:
    """Return the comparable words of a licence text."""
    text = _COPYRIGHT_LINE_RE.sub('', text.lower())
    return _NON_WORD_RE.sub(' ', text).split()


def _shingles(words: list[str], size: int = 3) -> frozenset[Shingle]:
    if len(words) < size:
        return frozenset({tuple(words)}) if words else frozenset()
    return frozenset(tuple(words[i : i + size]) for i in range(len(words) - size + 1))


class ReferenceTextClassifier:
    """Classify text by overlap with reference licence texts.

    Args:
        references: Mapping from licence identifier to its text.
        threshold: Minimum confidence for a match to be reported.

    Raises:
        ValueError: *references* is empty or a reference has no words.
    """

    def __init__(self, references: Mapping[str, str], *, threshold: float = DEFAULT_THRESHOLD) -> None:
        if not references:
            raise ValueError('at least one reference licence text is required')
        self.threshold = threshold
        self._references: dict[str, frozenset[Shingle]] = {}
        for name, text in references.items():
            shingles = _shingles(normalize_text(text))
            if not shingles:
                raise ValueError(f'reference licence text {name!r} is empty')
            self._references[name] = shingles

    @property
    def names(self) -> list[str]:
        """Identifiers of the known licences, sorted."""
        return sorted(self._references)

    def match(self, text: str) -> list[LicenceMatch]:
        """Return every reference scoring at least the threshold, best first."""
        candidate = _shingles(normalize_text(text))
        if not candidate:
            return []
        scored: list[tuple[float, int, str]] = []
        for name, reference in self._references.items():
            confidence = len(reference & candidate) / len(reference)
            if confidence >= self.threshold:
                scored.append((confidence, len(reference), name))
        scored.sort(key=lambda s: (-s[0], -s[1], s[2]))
        return [LicenceMatch(name=name, confidence=confidence) for confidence, _, name in scored]


class LicenceClassifier:
    """Turn a licence file into a single licence identifier.

    Args:
        engine: The classification engine to consult.
    """

    def __init__(self, engine: Classifier) -> None:
        self.engine = engine

    def classify(self, path: str | Path) -> str:
        """Return the identifier of the best match for the file at *path*.

        Raises:
            ClassificationError: The file cannot be read or nothing
                matches it.
        """
        try:
            text = Path(path).read_bytes().decode('utf-8', errors='replace')
        except OSError as exc:
            raise ClassificationError(f'failed to read licence content from {path}: {exc}') from exc

        matches = self.engine.match(text)
        if not matches:
            raise ClassificationError(f'failed to detect licence type of {path}')
        best = matches[0]
        log.debug('licence_classified', path=str(path), licence=best.name, confidence=round(best.confidence, 3))
        return best.name


def _read_directory(directory: Path) -> dict[str, str]:
    return {f.stem: f.read_text(encoding='utf-8') for f in sorted(directory.glob('*.txt')) if f.is_file()}


def _read_zip(archive: Path) -> dict[str, str]:
    references: dict[str, str] = {}
    with zipfile.ZipFile(archive) as zf:
        for info in zf.infolist():
            name = Path(info.filename)
            if info.is_dir() or name.suffix != '.txt':
                continue
            references[name.stem] = zf.read(info).decode('utf-8')
    return references


@functools.lru_cache(maxsize=1)
def _embedded_references() -> Mapping[str, str]:
    return _read_directory(_DATA_DIR)


def load_classifier(
    data_path: str | Path | None = None,
    *,
    threshold: float = DEFAULT_THRESHOLD,
) -> LicenceClassifier:
    """Build a classifier from reference licence texts.

    Args:
        data_path: Directory or ``.zip`` archive of ``<ID>.txt`` files.
            Defaults to the texts bundled with noticekit.
        threshold: Minimum confidence for a match.

    Returns:
        A ready :class:`LicenceClassifier`.

    Raises:
        NotFoundError: *data_path* does not exist.
        ParseError: The data cannot be read or holds no licence texts.
    """
    if not data_path:
        source = str(_DATA_DIR)
        references = _embedded_references()
    else:
        path = Path(data_path).absolute()
        source = str(path)
        if not path.exists():
            raise NotFoundError(f'licence data {path} does not exist')
        try:
            references = _read_directory(path) if path.is_dir() else _read_zip(path)
        except (OSError, UnicodeDecodeError, zipfile.BadZipFile) as exc:
            raise ParseError(source, f'failed to read licence data: {exc}') from exc

    try:
        engine = ReferenceTextClassifier(references, threshold=threshold)
    except ValueError as exc:
        raise ParseError(source, str(exc)) from exc

    log.debug('classifier_loaded', source=source, licences=len(engine.names))
    return LicenceClassifier(engine)
