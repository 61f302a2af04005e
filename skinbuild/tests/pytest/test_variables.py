"""
Tests for the SCSS component flag document.
"""

from __future__ import annotations

import pytest

from skinbuild.build.components import ComponentRegistry, default_catalog
from skinbuild.build.variables import effective_flags, flag_name, synthesize, variable_document

pytestmark = pytest.mark.evergreen


@pytest.fixture
def registry() -> ComponentRegistry:
    return default_catalog().registry


class TestSynthesize:
    def test_flag_name(self):
        assert flag_name("top-bar") == "$include-top-bar-component"

    def test_every_registered_component_has_a_flag(self, registry):
        flags = effective_flags(synthesize([], registry))
        assert set(flags) == {flag_name(cid) for cid in registry}

    def test_active_flags_true_others_false(self, registry):
        active = ("grid", "orbit", "tabs")
        flags = effective_flags(synthesize(active, registry))
        for cid in registry:
            assert flags[flag_name(cid)] is (cid in active), cid

    def test_duplicates_do_not_change_result(self, registry):
        once = effective_flags(synthesize(["grid", "orbit"], registry))
        twice = effective_flags(synthesize(["grid", "orbit", "grid"], registry))
        assert once == twice

    def test_declarations_use_default(self, registry):
        document = synthesize(["grid"], registry)
        lines = document.splitlines()
        assert lines[0] == "$include-grid-component: true !default;"
        assert all(line.endswith("!default;") for line in lines)

    def test_first_declaration_wins(self):
        document = "$a: true !default;\n$a: false !default;\n$b: false !default;"
        assert effective_flags(document) == {"$a": True, "$b": False}


class TestVariableDocument:
    def test_written_then_removed(self):
        with variable_document("$x: true !default;") as path:
            assert path.suffix == ".scss"
            assert path.read_text() == "$x: true !default;"
        assert not path.exists()

    def test_removed_on_error(self):
        with pytest.raises(RuntimeError):
            with variable_document("") as path:
                raise RuntimeError("boom")
        assert not path.exists()

    def test_each_document_is_unique(self):
        with variable_document("a") as first, variable_document("b") as second:
            assert first != second
