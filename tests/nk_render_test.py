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

"""Tests for noticekit.render."""

from __future__ import annotations

import datetime
from pathlib import Path

import pytest
from noticekit.dependency import DependencyList, ResolvedDependency
from noticekit.errors import RenderError
from noticekit.render import (
    DEPENDENCIES_TEMPLATE,
    TemplateValues,
    canonical_version,
    current_year,
    go_mod_cache,
    licence_text,
    line,
    parse_template_value,
    render,
    render_template,
    revision,
    write_output,
)


def _dep(tmp_path: Path, name: str, **kwargs: object) -> ResolvedDependency:
    licence = tmp_path / name.replace('/', '_') / 'LICENSE'
    licence.parent.mkdir(parents=True, exist_ok=True)
    licence.write_text(f'licence of {name}\n')
    fields: dict[str, object] = {
        'name': name,
        'version': 'v1.0.0',
        'version_time': '2020-01-14T19:47:44Z',
        'url': f'https://{name}',
        'licence_file': str(licence),
        'licence_type': 'MIT',
    }
    fields.update(kwargs)
    return ResolvedDependency(**fields)  # type: ignore[arg-type]


class TestCanonicalVersion:
    """Tests for canonical_version."""

    @pytest.mark.parametrize(
        ('version', 'want'),
        [
            ('v1', 'v1.0.0'),
            ('v1.1', 'v1.1.0'),
            ('v3.2.1', 'v3.2.1'),
            ('v3.2.1-meta', 'v3.2.1'),
            ('v1-meta', 'v1.0.0'),
            ('v1.2-meta', 'v1.2.0'),
            ('v1.2.3-meta', 'v1.2.3'),
            ('v1+meta', 'v1.0.0'),
            ('v1.2+meta', 'v1.2.0'),
            ('v1.2.3+meta', 'v1.2.3'),
            ('v1.2.3+incompatible', 'v1.2.3'),
            ('v1.2.3-20200707-123456abc', 'v1.2.3'),
        ],
    )
    def test_canonical(self, version: str, want: str) -> None:
        """Missing components are filled in and suffixes dropped."""
        assert canonical_version(version) == want

    @pytest.mark.parametrize('version', ['', '1.2.3', 'latest', 'v', 'vx.y'])
    def test_invalid(self, version: str) -> None:
        """An invalid version yields an empty string."""
        assert canonical_version(version) == ''


class TestRevision:
    """Tests for revision."""

    @pytest.mark.parametrize(
        ('version', 'want'),
        [
            ('v1', ''),
            ('v3.2.1-meta', ''),
            ('v1-meta', ''),
            ('v1.2-meta', ''),
            ('v1.2.3-meta', ''),
            ('v1+meta', ''),
            ('v1.2+meta', ''),
            ('v1.2.3+meta', ''),
            ('v1.2.3+incompatible', ''),
            ('v1.2.3-20200707-123456abc', '123456abc'),
            ('v1.2.3-20200707-123456abc-meta', '123456abc'),
            ('v1.2.3-20200707-123456abc+meta', '123456abc'),
            ('v1.2.3-20200707-123456abc+incompatible', '123456abc'),
            ('v1.2.3-20200707-oops123456abc', ''),
        ],
    )
    def test_revision(self, version: str, want: str) -> None:
        """Only pseudo-versions carry a revision."""
        assert revision(version) == want


class TestHelpers:
    """Tests for the small template helpers."""

    def test_line(self) -> None:
        """Separator lines are 80 characters wide."""
        assert line('=') == '=' * 80

    def test_current_year(self) -> None:
        """The year is today's."""
        assert current_year() == str(datetime.date.today().year)

    def test_go_mod_cache_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """GOMODCACHE wins."""
        monkeypatch.setenv('GOMODCACHE', '/cache')
        monkeypatch.setenv('GOPATH', '/gopath')
        assert go_mod_cache() == '/cache'

    def test_go_mod_cache_gopath(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """The first GOPATH entry is used without GOMODCACHE."""
        monkeypatch.delenv('GOMODCACHE', raising=False)
        monkeypatch.setenv('GOPATH', '/first:/second')
        assert go_mod_cache() == '/first/pkg/mod'

    def test_go_mod_cache_default(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        """Without either variable the cache is under ~/go."""
        monkeypatch.delenv('GOMODCACHE', raising=False)
        monkeypatch.delenv('GOPATH', raising=False)
        monkeypatch.setenv('HOME', str(tmp_path))
        assert go_mod_cache() == str(tmp_path / 'go' / 'pkg' / 'mod')


class TestLicenceText:
    """Tests for licence_text."""

    def test_no_file(self) -> None:
        """A dependency without a licence file says so."""
        dep = ResolvedDependency(name='a', version='v1', licence_type='MIT')
        assert licence_text(dep) == 'No licence file provided.'

    def test_probable_file_in_cache(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        """Paths inside the module cache are shown relative to $GOMODCACHE."""
        cache = tmp_path / 'mod'
        licence = cache / 'example.com' / 'a@v1.0.0' / 'LICENSE'
        licence.parent.mkdir(parents=True)
        licence.write_text('MIT terms\n')
        monkeypatch.setenv('GOMODCACHE', str(cache))
        dep = ResolvedDependency(name='example.com/a', version='v1.0.0', licence_file=str(licence))
        assert licence_text(dep) == (
            'Contents of probable licence file $GOMODCACHE/example.com/a@v1.0.0/LICENSE:\n\nMIT terms\n'
        )

    def test_provided_file(self, tmp_path: Path) -> None:
        """A licence text supplied by an override is labelled as provided."""
        licence = tmp_path / 'a.txt'
        licence.write_text('terms\n')
        dep = ResolvedDependency(
            name='a',
            version='v1',
            licence_file=str(licence),
            licence_text_override_file='a.txt',
        )
        assert licence_text(dep) == 'Contents of provided licence file:\n\nterms\n'

    def test_unreadable_file(self, tmp_path: Path) -> None:
        """A missing licence file is a RenderError."""
        dep = ResolvedDependency(name='a', version='v1', licence_file=str(tmp_path / 'gone'))
        with pytest.raises(RenderError, match='failed to read licence file'):
            licence_text(dep)


class TestTemplateValues:
    """Tests for template values."""

    def test_add(self) -> None:
        """Pairs accumulate; empty input is ignored; malformed input fails."""
        values = TemplateValues()
        values.add('foo=bar')
        values.add('baz=qux')
        values.add('')
        assert len(values) == 2
        for bad in ('invalidpair', '=novalue', 'nokey='):
            with pytest.raises(ValueError):
                values.add(bad)
        assert list(values) == [('foo', 'bar'), ('baz', 'qux')]

    def test_get(self) -> None:
        """Known keys return their value; unknown keys return ''."""
        values = TemplateValues([('foo', 'bar'), ('baz', 'qux')])
        assert values.get('foo') == 'bar'
        assert values.get('baz') == 'qux'
        assert values.get('notfound') == ''
        assert TemplateValues().get('foo') == ''

    def test_later_pair_wins(self) -> None:
        """A repeated key takes its last value."""
        values = TemplateValues.from_mapping({'project': 'a'})
        values.add('project=b')
        assert values.get('project') == 'b'

    def test_value_may_contain_equals(self) -> None:
        """Only the first '=' separates key and value."""
        assert parse_template_value('expr=a=b') == ('expr', 'a=b')
        assert parse_template_value('') is None


class TestRender:
    """Tests for rendering templates."""

    def test_notice(self, tmp_path: Path) -> None:
        """The bundled NOTICE lists direct then indirect dependencies."""
        deps = DependencyList(
            direct=(_dep(tmp_path, 'example.com/a'),),
            indirect=(_dep(tmp_path, 'example.com/b', indirect=True, licence_type='ISC'),),
        )
        text = render(deps, values=TemplateValues([('project', 'demo'), ('copyright', '2026 Demo')]))

        assert text.startswith('Copyright 2026 Demo\n')
        assert 'Third party libraries used by demo\n' in text
        assert 'Module  : example.com/a\n' in text
        assert 'Version : v1.0.0\n' in text
        assert 'Time    : 2020-01-14T19:47:44Z\n' in text
        assert 'Licence : ISC\n' in text
        assert 'licence of example.com/a\n' in text
        assert '-' * 80 in text
        assert text.index('example.com/a') < text.index('Indirect dependencies') < text.index('example.com/b')

    def test_notice_without_values(self, tmp_path: Path) -> None:
        """Without values the NOTICE has no copyright line and no indirect section."""
        text = render(DependencyList(direct=(_dep(tmp_path, 'example.com/a'),)))
        assert text.startswith('=' * 80 + '\n')
        assert 'Third party libraries used by this project\n' in text
        assert 'Indirect dependencies' not in text
        assert 'Copyright' not in text

    def test_dependencies_csv(self, tmp_path: Path) -> None:
        """The bundled CSV has one row per dependency."""
        deps = DependencyList(
            direct=(_dep(tmp_path, 'example.com/a', version='v1.2'),),
            indirect=(_dep(tmp_path, 'example.com/b', version='v0.0.0-20200707-abc123', indirect=True),),
        )
        text = render(deps, builtin=DEPENDENCIES_TEMPLATE)
        assert text.splitlines() == [
            'name,url,version,revision,licence,indirect',
            'example.com/a,https://example.com/a,v1.2.0,,MIT,false',
            'example.com/b,https://example.com/b,v0.0.0,abc123,MIT,true',
        ]

    def test_custom_template(self, tmp_path: Path) -> None:
        """A user template sees deps, values and helpers."""
        template = tmp_path / 'custom.tmpl'
        template.write_text(
            "{{ values.get('title') }}\n"
            '{% for dep in deps.all() %}\n'
            '{{ dep.name }} {{ dep.version | canonical_version }} {{ dep.licence_type }}\n'
            '{% endfor %}\n'
        )
        deps = DependencyList(direct=(_dep(tmp_path, 'example.com/a', version='v2'),))
        text = render(deps, template, values=TemplateValues([('title', 'Deps')]))
        assert text == 'Deps\nexample.com/a v2.0.0 MIT\n'

    def test_undefined_variable(self, tmp_path: Path) -> None:
        """An undefined variable is a RenderError."""
        template = tmp_path / 'bad.tmpl'
        template.write_text('{{ nope }}\n')
        with pytest.raises(RenderError, match='bad.tmpl'):
            render(DependencyList(), template)

    def test_missing_template(self, tmp_path: Path) -> None:
        """A missing template is a RenderError."""
        with pytest.raises(RenderError):
            render(DependencyList(), tmp_path / 'missing.tmpl')

    def test_syntax_error(self, tmp_path: Path) -> None:
        """A template with a syntax error is a RenderError."""
        template = tmp_path / 'broken.tmpl'
        template.write_text('{% for %}\n')
        with pytest.raises(RenderError):
            render(DependencyList(), template)

    def test_unreadable_licence(self, tmp_path: Path) -> None:
        """A licence file that vanished fails the render."""
        dep = ResolvedDependency(name='a', version='v1', licence_file=str(tmp_path / 'gone'))
        with pytest.raises(RenderError, match='failed to read licence file'):
            render(DependencyList(direct=(dep,)))


class TestWriteOutput:
    """Tests for writing rendered output."""

    def test_stdout(self, capsys: pytest.CaptureFixture[str]) -> None:
        """'-' writes to stdout."""
        write_output('hello\n', '-')
        assert capsys.readouterr().out == 'hello\n'

    def test_file(self, tmp_path: Path) -> None:
        """Other paths are written as files."""
        out = tmp_path / 'NOTICE'
        write_output('hello\n', out)
        assert out.read_text() == 'hello\n'

    def test_unwritable(self, tmp_path: Path) -> None:
        """A path in a missing directory is a RenderError."""
        with pytest.raises(RenderError, match='failed to create output file'):
            write_output('x', tmp_path / 'missing' / 'NOTICE')

    def test_render_template(self, tmp_path: Path) -> None:
        """render_template renders and writes in one step."""
        out = tmp_path / 'deps.csv'
        render_template(DependencyList(), None, out, builtin=DEPENDENCIES_TEMPLATE)
        assert out.read_text() == 'name,url,version,revision,licence,indirect\n'
