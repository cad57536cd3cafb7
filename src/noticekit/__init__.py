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

r"""Licence audit and NOTICE generation for Go module dependencies.

Pipeline::

    go list -m -json all
          │
          ▼
    parse_manifest ──→ detect ──→ DependencyList ──→ render_template
                         │                      └──→ validate_urls
          overrides ─────┤
          classifier ────┤
          rules ─────────┘

Usage::

    from noticekit import (
        detect,
        load_classifier,
        load_overrides,
        load_rules,
        render_template,
    )

    with open('deps.json', 'rb') as f:
        deps = detect(
            f,
            load_classifier(),
            load_rules(),
            load_overrides('overrides.ndjson'),
            include_indirect=True,
        )
    render_template(deps, None, 'NOTICE.txt')
"""

__version__ = '0.1.0'

from noticekit.classify import LicenceClassifier, load_classifier
from noticekit.dependency import DependencyList, ResolvedDependency
from noticekit.detector import detect
from noticekit.errors import NoticeKitError
from noticekit.manifest import parse_manifest
from noticekit.overrides import load_overrides
from noticekit.render import render_template
from noticekit.rules import Ruleset, load_rules
from noticekit.validate import validate_urls

__all__ = [
    '__version__',
    'DependencyList',
    'LicenceClassifier',
    'NoticeKitError',
    'ResolvedDependency',
    'Ruleset',
    'detect',
    'load_classifier',
    'load_overrides',
    'load_rules',
    'parse_manifest',
    'render_template',
    'validate_urls',
]
