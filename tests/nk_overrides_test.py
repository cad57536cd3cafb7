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

"""Tests for noticekit.overrides."""

from __future__ import annotations

from pathlib import Path

import pytest
from noticekit.errors import NotFoundError, ParseError, UnsafePathError
from noticekit.overrides import load_overrides


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding='utf-8')
    return path


class TestLoadOverrides:
    """Tests for load_overrides()."""

    def test_empty_path(self) -> None:
        """No path means no overrides."""
        assert dict(load_overrides('')) == {}
        assert dict(load_overrides(None)) == {}

    def test_missing_file(self, tmp_path: Path) -> None:
        """A path that does not exist is an error."""
        with pytest.raises(NotFoundError):
            load_overrides(tmp_path / 'nope.ndjson')

    def test_fields(self, tmp_path: Path) -> None:
        """camelCase document keys map onto Override fields."""
        doc = _write(
            tmp_path / 'overrides.ndjson',
            '{"name": "github.com/foo/bar", "licenceType": "MIT", "url": "https://bar.example",'
            ' "version": "v2.0.0", "versionTime": "2021-01-01T00:00:00Z", "dir": "/src/bar",'
            ' "licenceFile": "docs/LICENSE"}\n'
            '{"name": "github.com/baz/qux", "licenceType": "Apache-2.0"}\n',
        )
        overrides = load_overrides(doc)
        assert set(overrides) == {'github.com/foo/bar', 'github.com/baz/qux'}
        bar = overrides['github.com/foo/bar']
        assert bar.licence_type == 'MIT'
        assert bar.url == 'https://bar.example'
        assert bar.version == 'v2.0.0'
        assert bar.version_time == '2021-01-01T00:00:00Z'
        assert bar.dir == '/src/bar'
        assert bar.licence_file == 'docs/LICENSE'
        assert bar.licence_text_override_file == ''

    def test_read_only(self, tmp_path: Path) -> None:
        """The returned mapping cannot be modified."""
        overrides = load_overrides(_write(tmp_path / 'o.ndjson', '{"name": "a"}'))
        with pytest.raises(TypeError):
            overrides['b'] = overrides['a']  # type: ignore[index]

    def test_licence_text_override_resolved(self, tmp_path: Path) -> None:
        """A licence text reference becomes an absolute licence file."""
        doc = _write(
            tmp_path / 'overrides.ndjson',
            '{"name": "example.com/vendored", "licenceTextOverrideFile": "licences/vendored.txt"}',
        )
        _write(tmp_path / 'licences' / 'vendored.txt', 'licence text')
        override = load_overrides(doc)['example.com/vendored']
        assert override.licence_text_override_file == 'licences/vendored.txt'
        assert override.licence_file == str((tmp_path / 'licences' / 'vendored.txt').resolve())
        assert Path(override.licence_file).is_absolute()
        assert override.licence_type == ''

    def test_relative_document_path(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """References resolve against the document directory, not the cwd."""
        _write(tmp_path / 'cfg' / 'o.ndjson', '{"name": "a", "licenceTextOverrideFile": "a.txt"}')
        monkeypatch.chdir(tmp_path)
        override = load_overrides('cfg/o.ndjson')['a']
        assert override.licence_file == str((tmp_path / 'cfg' / 'a.txt').resolve())

    def test_escaping_reference_rejected(self, tmp_path: Path) -> None:
        """A reference outside the document directory is rejected."""
        doc = _write(
            tmp_path / 'cfg' / 'o.ndjson',
            '{"name": "example.com/evil", "licenceTextOverrideFile": "../../etc/passwd"}',
        )
        with pytest.raises(UnsafePathError) as exc_info:
            load_overrides(doc)
        assert exc_info.value.dependency == 'example.com/evil'

    def test_absolute_reference_rerooted(self, tmp_path: Path) -> None:
        """An absolute reference stays under the document directory."""
        doc = _write(tmp_path / 'cfg' / 'o.ndjson', '{"name": "a", "licenceTextOverrideFile": "/etc/passwd"}')
        expected = str((tmp_path / 'cfg' / 'etc' / 'passwd').resolve())
        assert load_overrides(doc)['a'].licence_file == expected
        assert load_overrides(doc, trust_paths=True)['a'].licence_file == expected

    def test_explicit_root(self, tmp_path: Path) -> None:
        """An explicit root widens containment."""
        doc = _write(tmp_path / 'cfg' / 'o.ndjson', '{"name": "a", "licenceTextOverrideFile": "../shared/a.txt"}')
        override = load_overrides(doc, root=tmp_path)['a']
        assert override.licence_file == str((tmp_path / 'shared' / 'a.txt').resolve())

    def test_trusted_paths(self, tmp_path: Path) -> None:
        """trust_paths disables containment."""
        doc = _write(tmp_path / 'cfg' / 'o.ndjson', '{"name": "a", "licenceTextOverrideFile": "/etc/passwd"}')
        override = load_overrides(doc, trust_paths=True)['a']
        assert override.licence_file == str(Path('/etc/passwd').resolve())

    def test_duplicate_last_wins(self, tmp_path: Path) -> None:
        """A later entry for the same name replaces the earlier one."""
        doc = _write(
            tmp_path / 'o.ndjson',
            '{"name": "a", "licenceType": "MIT"}\n{"name": "a", "licenceType": "ISC"}',
        )
        assert load_overrides(doc)['a'].licence_type == 'ISC'

    def test_missing_name(self, tmp_path: Path) -> None:
        """An entry without a name is rejected."""
        doc = _write(tmp_path / 'o.ndjson', '{"licenceType": "MIT"}')
        with pytest.raises(ParseError, match='name'):
            load_overrides(doc)

    def test_non_string_field(self, tmp_path: Path) -> None:
        """Non-string values are rejected."""
        doc = _write(tmp_path / 'o.ndjson', '{"name": "a", "licenceType": 3}')
        with pytest.raises(ParseError, match='licenceType'):
            load_overrides(doc)

    def test_malformed_json(self, tmp_path: Path) -> None:
        """Broken JSON is a ParseError."""
        doc = _write(tmp_path / 'o.ndjson', '{"name": "a"')
        with pytest.raises(ParseError):
            load_overrides(doc)
