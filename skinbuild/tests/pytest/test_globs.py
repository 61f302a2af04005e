"""
Tests for glob expansion and matching.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from skinbuild.core.globs import GlobSet, expand, expand_braces, split_base

pytestmark = pytest.mark.evergreen


def touch(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(path.name)
    return path


class TestHelpers:
    def test_expand_braces(self):
        assert expand_braces("*.{eot,ttf}") == ["*.eot", "*.ttf"]
        assert expand_braces("{a,b}/{c,d}") == ["a/c", "a/d", "b/c", "b/d"]
        assert expand_braces("plain.js") == ["plain.js"]

    def test_split_base(self):
        assert split_base("skin/assets/**/*.js") == ("skin/assets", "**/*.js")
        assert split_base("*.js") == (".", "*.js")
        assert split_base("lib/jquery.js") == ("lib/jquery.js", "")


class TestExpand:
    def test_pattern_order_and_sorted_matches(self, tmp_path):
        touch(tmp_path / "js/b.js")
        touch(tmp_path / "js/a.js")
        touch(tmp_path / "js/sub/c.js")
        touch(tmp_path / "vendor/first.js")

        result = expand(["vendor/first.js", "js/**/*.js"], tmp_path)
        names = [p.relative_to(tmp_path).as_posix() for p in result.paths]
        assert names == ["vendor/first.js", "js/a.js", "js/b.js", "js/sub/c.js"]

    def test_each_file_once(self, tmp_path):
        touch(tmp_path / "js/a.js")
        result = expand(["js/a.js", "js/*.js", "js/a.js"], tmp_path)
        assert len(result.files) == 1

    def test_missing_literals_reported(self, tmp_path):
        result = expand(["nope.js", "none/*.js"], tmp_path)
        assert result.files == []
        assert result.missing == ["nope.js"]

    def test_relative_to_glob_base(self, tmp_path):
        touch(tmp_path / "images/icons/cart.svg")
        result = expand(["images/**/*"], tmp_path)
        assert [s.relative.as_posix() for s in result.files] == ["icons/cart.svg"]

    def test_absolute_literal(self, tmp_path):
        target = touch(tmp_path / "elsewhere/vars.scss")
        result = expand([str(target)], tmp_path / "root")
        assert result.paths == [target]


class TestGlobSet:
    def test_double_star_matches_zero_or_more_dirs(self, tmp_path):
        globs = GlobSet(["skin/assets/stylesheets/**/*.scss"], tmp_path)
        assert globs.matches(tmp_path / "skin/assets/stylesheets/styles.scss")
        assert globs.matches(tmp_path / "skin/assets/stylesheets/a/b/_grid.scss")
        assert not globs.matches(tmp_path / "skin/assets/stylesheets/styles.css")
        assert not globs.matches(tmp_path / "other/styles.scss")

    def test_braces(self, tmp_path):
        globs = GlobSet(["fonts/*.{ttf,woff}"], tmp_path)
        assert globs.matches(tmp_path / "fonts/a.ttf")
        assert globs.matches(tmp_path / "fonts/a.woff")
        assert not globs.matches(tmp_path / "fonts/a.eot")

    def test_base_dirs(self, tmp_path):
        globs = GlobSet(["a/b/**/*.js", "a/c.js", "{x,y}/*.js"], tmp_path)
        assert globs.base_dirs() == [tmp_path / "a/b", tmp_path / "a", tmp_path / "x", tmp_path / "y"]
