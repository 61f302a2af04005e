"""
Tests for the skinbuild command line.
"""

from __future__ import annotations

import json

import pytest

from skinbuild.cli import TASK_COMMANDS, create_parser, main
from skinbuild.core.utils import log

pytestmark = pytest.mark.evergreen


@pytest.fixture(autouse=True)
def _reset_logger():
    use_color, verbose = log._use_color, log.verbose
    yield
    log.verbose = verbose
    log.set_color(use_color)


@pytest.fixture
def config_file(make_config, project_root):
    make_config([{"package": "acme", "theme": "default", "components": ["orbit"]}])
    path = project_root / "skinbuild.json"
    path.write_text(json.dumps({
        "sites": [{"package": "acme", "theme": "default", "components": ["orbit"]}],
    }))
    return path


class TestParser:
    def test_commands(self):
        parser = create_parser()
        for name in (*TASK_COMMANDS, "inspect"):
            assert parser.parse_args([name]).command == name

    def test_no_command(self):
        args = create_parser().parse_args([])
        assert args.command is None
        assert args.production is None

    def test_global_options(self):
        args = create_parser().parse_args(
            ["--production", "-v", "--extension", "hooks:extend", "-c", "site.yaml", "clean"]
        )
        assert args.production is True
        assert args.verbose is True
        assert args.extension == "hooks:extend"
        assert str(args.config) == "site.yaml"

    def test_unknown_command_exits(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args(["deploy"])


class TestMain:
    def test_clean(self, config_file):
        skin = config_file.parent / "skin/frontend/acme/default"
        (skin / "css").mkdir(parents=True)
        assert main(["--no-color", "--config", str(config_file), "clean"]) == 0
        assert not (skin / "css").exists()

    def test_default_build(self, config_file):
        assert main(["--no-color", "--config", str(config_file), "--production"]) == 0
        skin = config_file.parent / "skin/frontend/acme/default"
        assert (skin / "rev-manifest.json").exists()

    def test_inspect(self, config_file, capsys):
        assert main(["--no-color", "--config", str(config_file), "inspect"]) == 0
        out = capsys.readouterr().out
        assert "acme/default" in out
        assert "foundation.orbit.js" in out

    def test_inspect_lists_manifest(self, config_file, capsys):
        skin = config_file.parent / "skin/frontend/acme/default"
        (skin / "rev-manifest.json").write_text(json.dumps({"styles.css": "css/styles-0123456789.css"}))
        assert main(["--no-color", "--config", str(config_file), "inspect"]) == 0
        assert "css/styles-0123456789.css" in capsys.readouterr().out

    def test_inspect_corrupt_manifest_warns(self, config_file, capsys):
        skin = config_file.parent / "skin/frontend/acme/default"
        (skin / "rev-manifest.json").write_text("{not json")
        assert main(["--no-color", "--config", str(config_file), "inspect"]) == 0
        assert "rev-manifest.json is unreadable" in capsys.readouterr().out

    def test_inspect_unknown_component(self, tmp_path):
        path = tmp_path / "skinbuild.json"
        path.write_text(json.dumps({"sites": [{"package": "a", "theme": "b", "components": ["carousel"]}]}))
        assert main(["--no-color", "--config", str(path), "inspect"]) == 1

    def test_failures_set_exit_code(self, tmp_path):
        path = tmp_path / "skinbuild.json"
        path.write_text(json.dumps({"sites": [{"package": "a", "theme": "b", "components": ["carousel"]}]}))
        assert main(["--no-color", "--config", str(path), "stylesheets"]) == 1

    def test_missing_config(self, tmp_path):
        assert main(["--no-color", "--config", str(tmp_path / "nope.json"), "clean"]) == 1

    def test_bad_extension(self, config_file):
        assert main(["--no-color", "--config", str(config_file), "--extension", "nope", "custom"]) == 1

    def test_undecodable_script_is_a_reported_failure(self, config_file):
        script = config_file.parent / "skin/frontend/acme/default/assets/javascripts/legacy.js"
        script.write_bytes(b"\xff\xfevar a = 1;")
        assert main(["--no-color", "--config", str(config_file)]) == 1
