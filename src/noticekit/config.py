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

"""Load noticekit settings from ``noticekit.toml`` or ``pyproject.toml``.

Lookup order (first hit wins):

1. The file passed with ``--config``.
2. ``noticekit.toml`` in the working directory.
3. The ``[tool.noticekit]`` table of ``pyproject.toml`` in the working
   directory.
4. Built-in defaults.

Example ``noticekit.toml``:

.. code-block:: toml

    include_indirect = true
    overrides = "licence/overrides.ndjson"
    rules = "licence/rules.toml"
    notice_out = "NOTICE.txt"
    workers = 4

    [template_values]
    project = "my-service"
    copyright = "2019-2026 Example Inc."

Relative paths are resolved against the directory of the file they are
written in. ``-`` as an output path means stdout and is kept as-is.
Command-line flags override every value read here.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import tomlkit
import tomlkit.exceptions

from noticekit.errors import NotFoundError, ParseError
from noticekit.logging import get_logger

__all__ = [
    'CONFIG_FILENAME',
    'NoticeKitConfig',
    'load_config',
    'parse_config',
]

log = get_logger('noticekit.config')

CONFIG_FILENAME = 'noticekit.toml'
_PYPROJECT = 'pyproject.toml'

_BOOL_KEYS = frozenset({'include_indirect', 'trust_override_paths', 'validate', 'fail_fast'})
_PATH_KEYS = frozenset({
    'overrides',
    'rules',
    'licence_data',
    'notice_template',
    'notice_out',
    'deps_template',
    'deps_out',
})
_ALL_KEYS = _BOOL_KEYS | _PATH_KEYS | {'workers', 'template_values'}


@dataclass(frozen=True)
class NoticeKitConfig:
    """Resolved noticekit settings.

    Path fields are absolute (or ``""`` when unset, or ``-`` for stdout).

    Attributes:
        include_indirect: Also audit indirect dependencies.
        overrides: Override document.
        trust_override_paths: Let override licence texts live anywhere.
        rules: Rules file; ``""`` selects the bundled one.
        licence_data: Classifier reference data; ``""`` selects the
            bundled texts.
        notice_template: NOTICE template; ``""`` selects the bundled one.
        notice_out: Where to write the NOTICE; ``""`` skips it.
        deps_template: Dependency report template.
        deps_out: Where to write the dependency report.
        validate: Check that dependency URLs are reachable.
        workers: Threads used to process dependencies.
        fail_fast: Stop at the first failing dependency.
        template_values: Values exposed to templates as ``values``.
        source: File the settings were read from, if any.
    """

    include_indirect: bool = False
    overrides: str = ''
    trust_override_paths: bool = False
    rules: str = ''
    licence_data: str = ''
    notice_template: str = ''
    notice_out: str = ''
    deps_template: str = ''
    deps_out: str = ''
    validate: bool = False
    workers: int = 1
    fail_fast: bool = True
    template_values: dict[str, str] = field(default_factory=dict)
    source: Path | None = None


def _resolve_path(value: str, base: Path) -> str:
    if not value or value == '-':
        return value
    return str((base / value).absolute())


def parse_config(data: dict[str, Any], source: Path) -> NoticeKitConfig:
    """Validate a settings table read from *source*.

    Raises:
        ParseError: Unknown keys or values of the wrong type.
    """
    errors: list[str] = []
    values: dict[str, Any] = {}
    base = source.parent

    for key, value in data.items():
        if key not in _ALL_KEYS:
            errors.append(f'unknown key {key!r}')
        elif key in _BOOL_KEYS:
            if not isinstance(value, bool):
                errors.append(f'{key}: expected bool, got {type(value).__name__}')
            else:
                values[key] = value
        elif key in _PATH_KEYS:
            if not isinstance(value, str):
                errors.append(f'{key}: expected string, got {type(value).__name__}')
            else:
                values[key] = _resolve_path(value, base)
        elif key == 'workers':
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                errors.append(f'workers: expected a positive integer, got {value!r}')
            else:
                values[key] = value
        elif key == 'template_values':
            if not isinstance(value, dict):
                errors.append(f'template_values: expected table, got {type(value).__name__}')
            elif not all(isinstance(v, str) for v in value.values()):
                errors.append('template_values: all values must be strings')
            else:
                values[key] = dict(value)

    if errors:
        raise ParseError(str(source), errors)
    return NoticeKitConfig(**values, source=source)


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        text = path.read_text(encoding='utf-8')
    except FileNotFoundError as exc:
        raise NotFoundError(f'config file {path} does not exist') from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise ParseError(str(path), f'failed to read config: {exc}') from exc
    try:
        return tomlkit.parse(text).unwrap()
    except tomlkit.exceptions.TOMLKitError as exc:
        raise ParseError(str(path), f'invalid TOML: {exc}') from exc


def _tool_table(doc: dict[str, Any], path: Path) -> dict[str, Any] | None:
    table = doc.get('tool', {}).get('noticekit')
    if table is not None and not isinstance(table, dict):
        raise ParseError(str(path), '[tool.noticekit] must be a table')
    return table


def load_config(path: str | Path | None = None, cwd: str | Path | None = None) -> NoticeKitConfig:
    """Find and load noticekit settings.

    Args:
        path: Explicit settings file. A ``pyproject.toml`` is read from
            its ``[tool.noticekit]`` table.
        cwd: Directory searched when *path* is not given. Defaults to the
            current directory.

    Returns:
        The settings, or defaults when no file is found.

    Raises:
        NotFoundError: *path* does not exist.
        ParseError: The settings are malformed.
    """
    if path:
        config_path = Path(path).absolute()
        doc = _read_toml(config_path)
        if config_path.name == _PYPROJECT:
            doc = _tool_table(doc, config_path) or {}
        log.debug('config_loaded', path=str(config_path))
        return parse_config(doc, config_path)

    root = Path(cwd or '.').absolute()
    candidate = root / CONFIG_FILENAME
    if candidate.is_file():
        log.debug('config_loaded', path=str(candidate))
        return parse_config(_read_toml(candidate), candidate)

    pyproject = root / _PYPROJECT
    if pyproject.is_file():
        table = _tool_table(_read_toml(pyproject), pyproject)
        if table is not None:
            log.debug('config_loaded', path=str(pyproject))
            return parse_config(table, pyproject)

    return NoticeKitConfig()
