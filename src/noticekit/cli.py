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

"""The ``noticekit`` command.

Reads ``go list -m -json all`` output, determines the licence of every
dependency, enforces the rules and writes the requested reports::

    go list -m -json all | noticekit --include-indirect \\
        --overrides overrides.ndjson --notice-out NOTICE.txt --summary

Exit codes:

    ┌──────┬──────────────────────────────────────────────────────────┐
    │ Code │ Meaning                                                  │
    ├──────┼──────────────────────────────────────────────────────────┤
    │ 0    │ Every dependency has an allowed licence.                 │
    │ 1    │ Detection, policy, rendering or URL validation failed.   │
    │ 2    │ Invalid command line.                                    │
    └──────┴──────────────────────────────────────────────────────────┘

Flags override values read from ``noticekit.toml`` (see
:mod:`noticekit.config`).
"""

from __future__ import annotations

import argparse
import dataclasses
import sys
from collections.abc import Sequence
from io import StringIO

from rich.console import Console
from rich.table import Table
from rich.text import Text

from noticekit import __version__
from noticekit.classify import load_classifier
from noticekit.config import NoticeKitConfig, load_config
from noticekit.dependency import DependencyList
from noticekit.detector import detect
from noticekit.errors import NoticeKitError, NotFoundError
from noticekit.logging import configure_logging, get_logger
from noticekit.manifest import parse_manifest
from noticekit.overrides import load_overrides
from noticekit.render import DEPENDENCIES_TEMPLATE, TemplateValues, parse_template_value, render_template
from noticekit.rules import Ruleset, load_rules
from noticekit.validate import validate_urls

__all__ = [
    'build_parser',
    'format_summary',
    'main',
    'print_summary',
]

log = get_logger('noticekit.cli')


def _template_value(text: str) -> tuple[str, str] | None:
    try:
        return parse_template_value(text)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def _positive_int(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        value = 0
    if value < 1:
        raise argparse.ArgumentTypeError(f'expected a positive integer, got {text!r}')
    return value


def build_parser() -> argparse.ArgumentParser:
    """Return the argument parser for ``noticekit``."""
    parser = argparse.ArgumentParser(
        prog='noticekit',
        description='Audit the licences of Go module dependencies and render a NOTICE file.',
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument(
        '-i',
        '--in',
        dest='input',
        default='-',
        metavar='FILE',
        help='Output of "go list -m -json all" (default: stdin).',
    )
    parser.add_argument(
        '--include-indirect',
        action='store_true',
        default=None,
        help='Also audit indirect dependencies.',
    )
    parser.add_argument('--overrides', metavar='FILE', help='Override document (JSON object stream).')
    parser.add_argument(
        '--trust-override-paths',
        action='store_true',
        default=None,
        help='Allow override licence texts outside the override document directory.',
    )
    parser.add_argument('--rules', metavar='FILE', help='Rules file (TOML or JSON). Default: bundled rules.')
    parser.add_argument(
        '--licence-data',
        metavar='PATH',
        help='Directory or zip of reference licence texts. Default: bundled texts.',
    )
    parser.add_argument('--notice-template', metavar='FILE', help='Jinja2 template for the NOTICE file.')
    parser.add_argument('--notice-out', metavar='FILE', help='Write the NOTICE here ("-" for stdout).')
    parser.add_argument('--deps-template', metavar='FILE', help='Jinja2 template for the dependency report.')
    parser.add_argument('--deps-out', metavar='FILE', help='Write the dependency report here ("-" for stdout).')
    parser.add_argument(
        '--template-value',
        action='append',
        type=_template_value,
        default=[],
        metavar='KEY=VALUE',
        help='Value exposed to templates as values.get(KEY). Repeatable.',
    )
    parser.add_argument(
        '--validate',
        action='store_true',
        default=None,
        help='Check that every dependency URL is reachable.',
    )
    parser.add_argument(
        '--collect-errors',
        action='store_true',
        default=None,
        help='Report every failing dependency instead of stopping at the first.',
    )
    parser.add_argument('--workers', type=_positive_int, metavar='N', help='Threads used to process dependencies.')
    parser.add_argument('--summary', action='store_true', help='Print a table of dependencies to stderr.')
    parser.add_argument('--config', metavar='FILE', help='Settings file (default: ./noticekit.toml).')
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument('-v', '--verbose', action='store_true', help='Debug logging.')
    verbosity.add_argument('-q', '--quiet', action='store_true', help='Only log warnings and errors.')
    parser.add_argument('--json-log', action='store_true', help='Log as JSON lines.')
    return parser


def _merge(cfg: NoticeKitConfig, args: argparse.Namespace) -> NoticeKitConfig:
    """Apply command-line flags on top of file settings."""
    changes: dict[str, object] = {}
    for key in (
        'include_indirect',
        'overrides',
        'trust_override_paths',
        'rules',
        'licence_data',
        'notice_template',
        'notice_out',
        'deps_template',
        'deps_out',
        'validate',
        'workers',
    ):
        value = getattr(args, key)
        if value is not None:
            changes[key] = value
    if args.collect_errors is not None:
        changes['fail_fast'] = not args.collect_errors
    return dataclasses.replace(cfg, **changes)


def print_summary(deps: DependencyList, rules: Ruleset, console: Console | None = None) -> None:
    """Print a table of resolved dependencies.

    Args:
        deps: The dependencies to list.
        rules: Used to flag licences that need review.
        console: Rich :class:`Console` to print to. Defaults to stderr.
    """
    if console is None:
        console = Console(stderr=True)

    table = Table(
        show_header=True,
        header_style='bold',
        show_edge=False,
        pad_edge=False,
        expand=True,
    )
    table.add_column('Module', min_width=30, ratio=3, style='bold')
    table.add_column('Version', min_width=10)
    table.add_column('Licence', min_width=12)
    table.add_column('Kind', width=8)
    table.add_column('Licence file', ratio=2, style='dim')

    for dep in deps.all():
        style = 'yellow' if rules.needs_review(dep.licence_type) else 'green'
        table.add_row(
            dep.name,
            dep.version,
            Text(dep.licence_type, style=style),
            'indirect' if dep.indirect else 'direct',
            dep.licence_file or '-',
        )

    console.print(table)
    review = sum(1 for dep in deps.all() if rules.needs_review(dep.licence_type))
    console.print(f'\n{len(deps)} dependencies, {review} with licences that need review.')


def format_summary(deps: DependencyList, rules: Ruleset, *, color: bool = False) -> str:
    """Return the output of :func:`print_summary` as a string."""
    buf = StringIO()
    console = Console(file=buf, force_terminal=color, width=160)
    print_summary(deps, rules, console=console)
    return buf.getvalue().rstrip('\n')


def _run(settings: NoticeKitConfig, args: argparse.Namespace) -> None:
    overrides = load_overrides(settings.overrides, trust_paths=settings.trust_override_paths)
    rules = load_rules(settings.rules or None)
    classifier = load_classifier(settings.licence_data or None)

    if args.input == '-':
        manifest = parse_manifest(sys.stdin, include_indirect=settings.include_indirect, source='<stdin>')
    else:
        try:
            with open(args.input, 'rb') as f:
                manifest = parse_manifest(f, include_indirect=settings.include_indirect, source=args.input)
        except FileNotFoundError as exc:
            raise NotFoundError(f'manifest {args.input} does not exist') from exc

    deps = detect(
        manifest,
        classifier,
        rules,
        overrides,
        fail_fast=settings.fail_fast,
        workers=settings.workers,
    )

    values = TemplateValues([
        *settings.template_values.items(),
        *(pair for pair in args.template_value if pair is not None),
    ])

    if settings.notice_out:
        render_template(deps, settings.notice_template or None, settings.notice_out, values=values)
    if settings.deps_out:
        render_template(
            deps,
            settings.deps_template or None,
            settings.deps_out,
            values=values,
            builtin=DEPENDENCIES_TEMPLATE,
        )
    if settings.validate:
        validate_urls(deps)
    if args.summary:
        print_summary(deps, rules)


def main(argv: Sequence[str] | None = None) -> int:
    """Run ``noticekit`` and return its exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(verbose=args.verbose, quiet=args.quiet, json_log=args.json_log)

    try:
        settings = _merge(load_config(args.config), args)
        _run(settings, args)
    except NoticeKitError as exc:
        log.debug('noticekit_failed', error=str(exc), dependency=getattr(exc, 'dependency', ''))
        Console(stderr=True).print(Text.assemble(('error', 'bold red'), f': {exc}'))
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
