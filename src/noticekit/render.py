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

r"""Render NOTICE files and dependency reports with Jinja2.

Templates receive the :class:`~noticekit.dependency.DependencyList` as
``deps`` and the helpers below, available both as functions and as
filters (``{{ line('=') }}`` or ``{{ '=' | line }}``):

    ┌──────────────────────┬───────────────────────────────────────────┐
    │ Helper               │ Result                                    │
    ├──────────────────────┼───────────────────────────────────────────┤
    │ current_year()       │ "2026"                                    │
    │ line(ch)             │ ch repeated 80 times                      │
    │ licence_text(dep)    │ header + contents of the licence file     │
    │ canonical_version(v) │ v1 → v1.0.0, v1.2.3-pre+meta → v1.2.3     │
    │ revision(v)          │ commit of a pseudo-version, else ""       │
    │ values.get(key)      │ value given with --template-value, or ""  │
    └──────────────────────┴───────────────────────────────────────────┘

Two templates are bundled: ``notice.txt.j2`` (a NOTICE file) and
``dependencies.csv.j2`` (one CSV row per dependency). An undefined
variable raises :class:`~noticekit.errors.RenderError`.
"""

from __future__ import annotations

import datetime
import os
import re
import sys
from collections.abc import Iterable, Iterator, Mapping
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateError

from noticekit.dependency import DependencyList, ResolvedDependency
from noticekit.errors import RenderError
from noticekit.logging import get_logger

__all__ = [
    'DEPENDENCIES_TEMPLATE',
    'NOTICE_TEMPLATE',
    'TemplateValues',
    'canonical_version',
    'current_year',
    'go_mod_cache',
    'licence_text',
    'line',
    'parse_template_value',
    'render',
    'render_template',
    'revision',
    'write_output',
]

log = get_logger('noticekit.render')

#: Bundled NOTICE template.
NOTICE_TEMPLATE = 'notice.txt.j2'

#: Bundled CSV dependency report template.
DEPENDENCIES_TEMPLATE = 'dependencies.csv.j2'

_TEMPLATE_DIR = Path(__file__).resolve().parent / 'data' / 'templates'

_LINE_WIDTH = 80

_VERSION_RE = re.compile(r'^v(\d+)(?:\.(\d+))?(?:\.(\d+))?(?:[-+].*)?$')

# vX.Y.Z-<timestamp>-<hex commit>, optionally followed by -suffix or +build.
_PSEUDO_VERSION_RE = re.compile(r'^v\d+(?:\.\d+){0,2}-\d+-([0-9a-f]+)(?:[-+].*)?$')


def current_year() -> str:
    """Return the current year."""
    return str(datetime.date.today().year)


def line(ch: str) -> str:
    """Return a separator line of *ch*."""
    return ch * _LINE_WIDTH


def canonical_version(version: str) -> str:
    """Return ``vMAJOR.MINOR.PATCH`` for *version*, or ``""`` if invalid."""
    m = _VERSION_RE.match(version)
    if m is None:
        return ''
    major, minor, patch = m.groups()
    return f'v{major}.{minor or 0}.{patch or 0}'


def revision(version: str) -> str:
    """Return the commit hash embedded in a pseudo-version, or ``""``."""
    m = _PSEUDO_VERSION_RE.match(version)
    return m.group(1) if m else ''


def go_mod_cache() -> str:
    """Return the Go module cache directory.

    Follows the go tool: ``$GOMODCACHE``, else ``$GOPATH/pkg/mod`` (first
    entry of ``GOPATH``), else ``~/go/pkg/mod``.
    """
    cache = os.environ.get('GOMODCACHE')
    if cache:
        return cache
    gopath = os.environ.get('GOPATH', '').split(os.pathsep)[0]
    if not gopath:
        gopath = str(Path.home() / 'go')
    return os.path.join(gopath, 'pkg', 'mod')


def licence_text(dep: ResolvedDependency) -> str:
    """Return a header followed by the contents of the dependency's licence file.

    Raises:
        RenderError: The licence file cannot be read.
    """
    if not dep.licence_file:
        return 'No licence file provided.'

    if dep.licence_text_override_file:
        header = 'Contents of provided licence file'
    else:
        header = 'Contents of probable licence file ' + dep.licence_file.replace(go_mod_cache(), '$GOMODCACHE')

    try:
        contents = Path(dep.licence_file).read_text(encoding='utf-8', errors='replace')
    except OSError as exc:
        raise RenderError(f'failed to read licence file {dep.licence_file} of {dep.name}: {exc}') from exc
    return f'{header}:\n\n{contents}'


def parse_template_value(text: str) -> tuple[str, str] | None:
    """Parse a ``key=value`` pair.

    Returns:
        The pair, or ``None`` for an empty string.

    Raises:
        ValueError: The key or the value is missing.
    """
    if not text:
        return None
    key, sep, value = text.partition('=')
    if not sep or not key or not value:
        raise ValueError(f'invalid template value {text!r}: expected key=value')
    return key, value


class TemplateValues:
    """User-supplied ``key=value`` pairs exposed to templates as ``values``.

    Later pairs with the same key win.
    """

    def __init__(self, pairs: Iterable[tuple[str, str]] = ()) -> None:
        self._pairs: list[tuple[str, str]] = list(pairs)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, str]) -> TemplateValues:
        """Build from a mapping, e.g. the ``template_values`` config table."""
        return cls(mapping.items())

    def add(self, text: str) -> None:
        """Parse and add a ``key=value`` pair; an empty string is ignored.

        Raises:
            ValueError: The key or the value is missing.
        """
        pair = parse_template_value(text)
        if pair is not None:
            self._pairs.append(pair)

    def get(self, key: str) -> str:
        """Return the value of *key*, or ``""`` if it was never set."""
        for k, v in reversed(self._pairs):
            if k == key:
                return v
        return ''

    def __len__(self) -> int:
        return len(self._pairs)

    def __iter__(self) -> Iterator[tuple[str, str]]:
        return iter(self._pairs)


def _environment(directory: Path) -> Environment:
    # Plain-text output; HTML escaping would corrupt licence texts.
    env = Environment(  # noqa: S701
        loader=FileSystemLoader(str(directory)),
        autoescape=False,
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    helpers = {
        'current_year': current_year,
        'line': line,
        'licence_text': licence_text,
        'canonical_version': canonical_version,
        'revision': revision,
    }
    env.globals.update(helpers)
    env.filters.update(helpers)
    return env


def render(
    deps: DependencyList,
    template_path: str | Path | None = None,
    *,
    values: TemplateValues | None = None,
    builtin: str = NOTICE_TEMPLATE,
) -> str:
    """Render *deps* with a template and return the text.

    Args:
        deps: The dependencies to render.
        template_path: A Jinja2 template file. Defaults to the bundled
            template named by *builtin*.
        values: User template values.
        builtin: Bundled template used when *template_path* is not set.

    Raises:
        RenderError: The template cannot be loaded or rendered.
    """
    if template_path:
        path = Path(template_path).absolute()
        directory, name = path.parent, path.name
    else:
        directory, name = _TEMPLATE_DIR, builtin

    env = _environment(directory)
    try:
        template = env.get_template(name)
        return template.render(deps=deps, values=values or TemplateValues())
    except TemplateError as exc:
        raise RenderError(f'failed to render template {directory / name}: {exc}') from exc


def write_output(text: str, output_path: str | Path) -> None:
    """Write *text* to *output_path*; ``-`` means stdout.

    Raises:
        RenderError: The file cannot be written.
    """
    if str(output_path) == '-':
        sys.stdout.write(text)
        sys.stdout.flush()
        return
    try:
        Path(output_path).write_text(text, encoding='utf-8')
    except OSError as exc:
        raise RenderError(f'failed to create output file {output_path}: {exc}') from exc


def render_template(
    deps: DependencyList,
    template_path: str | Path | None,
    output_path: str | Path,
    *,
    values: TemplateValues | None = None,
    builtin: str = NOTICE_TEMPLATE,
) -> None:
    """Render *deps* and write the result to *output_path*."""
    text = render(deps, template_path, values=values, builtin=builtin)
    write_output(text, output_path)
    log.info('template_rendered', template=str(template_path or builtin), output=str(output_path))
