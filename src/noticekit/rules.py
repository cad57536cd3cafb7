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

"""Licence allow-lists.

A ruleset names the licences dependencies may use. It has two lists
that are treated identically by the policy check; the split only
records which licences need a second look from a human:

.. code-block:: toml

    whitelist = ["Apache-2.0", "MIT"]
    yellowlist = ["MPL-2.0"]

Files ending in ``.toml`` are read as TOML, anything else as JSON with
the same keys. Without a path the ruleset shipped in
``noticekit/data/rules.toml`` is used.
"""

from __future__ import annotations

import json
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from noticekit.errors import NotFoundError, ParseError
from noticekit.logging import get_logger

__all__ = [
    'Ruleset',
    'load_rules',
]

log = get_logger('noticekit.rules')

_RULES_TOML = Path(__file__).resolve().parent / 'data' / 'rules.toml'

_LISTS = ('whitelist', 'yellowlist')


@dataclass(frozen=True)
class Ruleset:
    """Licences that dependencies are allowed to use.

    Attributes:
        whitelist: Licences allowed without review.
        yellowlist: Licences allowed subject to review.
    """

    whitelist: frozenset[str] = frozenset()
    yellowlist: frozenset[str] = frozenset()

    def is_allowed(self, licence: str) -> bool:
        """Return ``True`` if *licence* is on either list."""
        if not licence:
            return False
        return licence in self.whitelist or licence in self.yellowlist

    def needs_review(self, licence: str) -> bool:
        """Return ``True`` if *licence* is only allowed via the yellow list."""
        return licence in self.yellowlist and licence not in self.whitelist


def _validate(data: Any, source: str) -> Ruleset:  # noqa: ANN401
    if not isinstance(data, dict):
        raise ParseError(source, f'expected a table of licence lists, got {type(data).__name__}')

    errors: list[str] = []
    for key in data:
        if key not in _LISTS:
            errors.append(f'unknown key {key!r}; expected one of: {", ".join(_LISTS)}')
    lists: dict[str, frozenset[str]] = {}
    for key in _LISTS:
        value = data.get(key, [])
        if not isinstance(value, list):
            errors.append(f'{key}: expected list, got {type(value).__name__}')
        elif not all(isinstance(v, str) for v in value):
            errors.append(f'{key}: all entries must be strings')
        else:
            lists[key] = frozenset(value)
    if errors:
        raise ParseError(source, errors)
    return Ruleset(whitelist=lists['whitelist'], yellowlist=lists['yellowlist'])


def load_rules(path: str | Path | None = None) -> Ruleset:
    """Load a ruleset.

    Args:
        path: TOML or JSON rules file. Defaults to the bundled ruleset.

    Raises:
        NotFoundError: *path* does not exist.
        ParseError: The file is malformed.
    """
    rules_path = Path(path).absolute() if path else _RULES_TOML
    source = str(rules_path)
    try:
        raw = rules_path.read_bytes()
    except FileNotFoundError as exc:
        raise NotFoundError(f'rules file {rules_path} does not exist') from exc
    except OSError as exc:
        raise ParseError(source, f'failed to read rules: {exc}') from exc

    try:
        if rules_path.suffix == '.toml':
            data = tomllib.loads(raw.decode('utf-8'))
        else:
            data = json.loads(raw)
    except (UnicodeDecodeError, tomllib.TOMLDecodeError, json.JSONDecodeError) as exc:
        raise ParseError(source, f'invalid rules document: {exc}') from exc

    rules = _validate(data, source)
    log.debug('rules_loaded', path=source, whitelist=len(rules.whitelist), yellowlist=len(rules.yellowlist))
    return rules
