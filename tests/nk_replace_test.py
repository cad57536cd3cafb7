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

"""Tests for noticekit.replace."""

from __future__ import annotations

import datetime

from noticekit.dependency import DependencyRecord, Override
from noticekit.replace import determine_url, format_version_time, resolve_dependency, resolve_replace

_T1 = datetime.datetime(2020, 7, 7, 12, 34, 56, tzinfo=datetime.timezone.utc)
_T2 = datetime.datetime(2021, 1, 2, 3, 4, 5, tzinfo=datetime.timezone.utc)


class TestResolveReplace:
    """Tests for resolve_replace()."""

    def test_no_replace(self) -> None:
        """The record itself is used."""
        rec = DependencyRecord(path='example.com/a', version='v1.0.0', dir='/mod/a', time=_T1)
        target = resolve_replace(rec)
        assert (target.name, target.version, target.dir, target.time) == ('example.com/a', 'v1.0.0', '/mod/a', _T1)
        assert target.local_replacement is False

    def test_local_replacement(self) -> None:
        """A ./ or ../ replacement keeps the original identity."""
        for local in ('./a-fork', '../a-fork'):
            rec = DependencyRecord(
                path='example.com/a',
                version='v1.0.0',
                dir='/mod/a',
                time=_T1,
                replace=DependencyRecord(path=local, dir='/src/a-fork', time=_T2),
            )
            target = resolve_replace(rec)
            assert target.name == 'example.com/a'
            assert target.version == 'v1.0.0'
            assert target.dir == '/src/a-fork'
            assert target.time == _T2
            assert target.local_replacement is True

    def test_published_replacement(self) -> None:
        """A module replacement takes over the identity."""
        rec = DependencyRecord(
            path='example.com/a',
            version='v1.0.0',
            dir='/mod/a',
            replace=DependencyRecord(path='github.com/me/a', version='v1.2.0', dir='/mod/me-a', time=_T2),
        )
        target = resolve_replace(rec)
        assert (target.name, target.version, target.dir) == ('github.com/me/a', 'v1.2.0', '/mod/me-a')
        assert target.local_replacement is False


class TestDetermineUrl:
    """Tests for determine_url()."""

    def test_override_wins(self) -> None:
        """An override URL is returned unchanged."""
        assert determine_url('https://custom.example', 'github.com/a/b') == 'https://custom.example'

    def test_github_repo(self) -> None:
        """A repository path maps directly."""
        assert determine_url('', 'github.com/elazarl/goproxy') == 'https://github.com/elazarl/goproxy'

    def test_github_subpackage_trimmed(self) -> None:
        """Sub-packages are trimmed to the repository."""
        assert determine_url('', 'github.com/elazarl/goproxy/ext') == 'https://github.com/elazarl/goproxy'
        assert determine_url('', 'github.com/a/b/v2/c') == 'https://github.com/a/b'

    def test_k8s(self) -> None:
        """k8s.io modules live under github.com/kubernetes."""
        assert determine_url('', 'k8s.io/client-go') == 'https://github.com/kubernetes/client-go'

    def test_other(self) -> None:
        """Anything else is prefixed with https://."""
        assert determine_url('', 'golang.org/x/sys') == 'https://golang.org/x/sys'


class TestFormatVersionTime:
    """Tests for format_version_time()."""

    def test_unknown(self) -> None:
        """No time is reported as unknown."""
        assert format_version_time(None) == 'unknown'

    def test_utc(self) -> None:
        """UTC is rendered with a Z suffix."""
        assert format_version_time(_T1) == '2020-07-07T12:34:56Z'

    def test_offset(self) -> None:
        """Other offsets are kept."""
        t = datetime.datetime(2020, 7, 7, 12, 0, tzinfo=datetime.timezone(datetime.timedelta(hours=2)))
        assert format_version_time(t) == '2020-07-07T12:00:00+02:00'

    def test_microseconds_dropped(self) -> None:
        """Sub-second precision is dropped."""
        assert format_version_time(_T1.replace(microsecond=123)) == '2020-07-07T12:34:56Z'


class TestResolveDependency:
    """Tests for resolve_dependency()."""

    def test_without_override(self) -> None:
        """Discovered values are used."""
        rec = DependencyRecord(path='github.com/a/b', version='v1.0.0', dir='/mod/b', time=_T1)
        dep = resolve_dependency(rec, {})
        assert dep.name == 'github.com/a/b'
        assert dep.version == 'v1.0.0'
        assert dep.version_time == '2020-07-07T12:34:56Z'
        assert dep.dir == '/mod/b'
        assert dep.url == 'https://github.com/a/b'
        assert dep.licence_file == ''
        assert dep.licence_type == ''

    def test_override_precedence(self) -> None:
        """Non-empty override fields win."""
        rec = DependencyRecord(path='github.com/a/b', version='v1.0.0', dir='/mod/b')
        override = Override(
            name='github.com/a/b',
            dir='/src/b',
            version='v9.9.9',
            version_time='2022-02-02T00:00:00Z',
            url='https://b.example',
            licence_file='LICENSE.md',
            licence_type='MIT',
        )
        dep = resolve_dependency(rec, {'github.com/a/b': override})
        assert dep.dir == '/src/b'
        assert dep.version == 'v9.9.9'
        assert dep.version_time == '2022-02-02T00:00:00Z'
        assert dep.url == 'https://b.example'
        assert dep.licence_file == 'LICENSE.md'
        assert dep.licence_type == 'MIT'

    def test_override_looked_up_by_effective_name(self) -> None:
        """A published replacement uses the replacement's override."""
        rec = DependencyRecord(
            path='example.com/a',
            version='v1.0.0',
            dir='/mod/a',
            replace=DependencyRecord(path='github.com/me/a', version='v1.2.0', dir='/mod/me-a'),
        )
        overrides = {
            'example.com/a': Override(name='example.com/a', licence_type='GPL-3.0'),
            'github.com/me/a': Override(name='github.com/me/a', licence_type='MIT'),
        }
        dep = resolve_dependency(rec, overrides)
        assert dep.name == 'github.com/me/a'
        assert dep.licence_type == 'MIT'

    def test_local_replacement_flag(self) -> None:
        """Local replacements are flagged and keep the original name."""
        rec = DependencyRecord(
            path='example.com/a',
            version='v1.0.0',
            dir='/mod/a',
            replace=DependencyRecord(path='../a', dir='/src/a'),
        )
        dep = resolve_dependency(rec, {})
        assert dep.name == 'example.com/a'
        assert dep.dir == '/src/a'
        assert dep.local_replacement is True
        assert dep.version_time == 'unknown'

    def test_indirect_flag(self) -> None:
        """The indirect flag is carried over."""
        rec = DependencyRecord(path='example.com/a', version='v1.0.0', dir='/mod/a', indirect=True)
        assert resolve_dependency(rec, {}).indirect is True
