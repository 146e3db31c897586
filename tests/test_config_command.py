"""
Tests for `ai-commit config` driven through main().

Run with:
    pytest tests/test_config_command.py -v
"""

import json
import sys

import pytest

from ai_commit.cli import config_command
from ai_commit.cli.config_command import NoEditorFoundError, find_editor, parse_value
from ai_commit.cli.main import main
from ai_commit.config import DEFAULTS, ConfigStore
from ai_commit.process import ProcessRunner


@pytest.fixture(autouse=True)
def no_color(monkeypatch):
    monkeypatch.setattr("ai_commit.output.COLORS_ENABLED", False)


def read_json(path):
    return json.loads(path.read_text(encoding="utf-8"))


# ---------------------------------------------------------------------------
# File selection and seeding
# ---------------------------------------------------------------------------

class TestActiveFile:

    def test_seeds_global_and_creates_local(self, project, home, capsys):
        assert main(["config", "list"]) == 0
        assert read_json(ConfigStore.global_path()) == DEFAULTS
        assert read_json(project / ".ai-commit.json") == DEFAULTS
        out = capsys.readouterr().out
        assert ".ai-commit.json) is being operated." in out
        assert "Operate successfully." in out

    def test_global_flag(self, project, home):
        assert main(["config", "set", "generator", "claude", "--global"]) == 0
        assert read_json(ConfigStore.global_path())["generator"] == "claude"
        assert not (project / ".ai-commit.json").exists()

    def test_explicit_file_wins_over_global(self, project, home, tmp_path):
        target = tmp_path / "custom.json"
        assert main(["config", "set", "generator", "command", "-g", "--file", str(target)]) == 0
        assert read_json(target)["generator"] == "command"
        assert read_json(ConfigStore.global_path())["generator"] == "ollama"

    def test_malformed_file_fails(self, project, home, capsys):
        (project / ".ai-commit.json").write_text("{broken")
        assert main(["config", "get", "generator"]) == 1
        assert "Could not parse" in capsys.readouterr().err


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------

class TestActions:

    def test_set_then_get(self, project, home, capsys):
        assert main(["config", "set", "provider.name", "openai"]) == 0
        capsys.readouterr()
        assert main(["config", "get", "provider.name"]) == 0
        assert "openai" in capsys.readouterr().out.splitlines()

    @pytest.mark.parametrize("raw, stored, printed", [
        ("3", 3, "3"),
        ("0", 0, "0"),
        ("false", False, "false"),
        ("null", None, "null"),
        ("openai", "openai", "openai"),
    ])
    def test_typed_values(self, project, home, capsys, raw, stored, printed):
        assert main(["config", "set", "value", raw]) == 0
        assert read_json(project / ".ai-commit.json")["value"] == stored
        capsys.readouterr()
        main(["config", "get", "value"])
        assert printed in capsys.readouterr().out.splitlines()

    def test_get_mapping_pretty_prints(self, project, home, capsys):
        main(["config", "set", "provider", '{"name": "openai"}'])
        capsys.readouterr()
        main(["config", "get", "provider"])
        assert '{\n    "name": "openai"\n}' in capsys.readouterr().out

    def test_get_without_key_prints_whole_tree(self, project, home, capsys):
        main(["config", "get"])
        out = capsys.readouterr().out
        assert '"generators": {' in out

    def test_get_missing_key_fails(self, project, home, capsys):
        assert main(["config", "get", "nope"]) == 1
        assert "nope" in capsys.readouterr().err

    def test_unset(self, project, home):
        main(["config", "set", "provider.name", "openai"])
        assert main(["config", "unset", "provider.name"]) == 0
        assert read_json(project / ".ai-commit.json")["provider"] == {}

    def test_unset_missing_key_succeeds(self, project, home):
        assert main(["config", "unset", "never.set"]) == 0

    @pytest.mark.parametrize("action", ["set", "unset"])
    def test_key_required(self, project, home, capsys, action):
        assert main(["config", action]) == 1
        assert "Please specify the parameter key." in capsys.readouterr().err

    def test_set_through_scalar_fails_without_writing(self, project, home, capsys):
        main(["config", "set", "generator", "ollama"])
        before = (project / ".ai-commit.json").read_text()
        assert main(["config", "set", "generator.name", "x"]) == 1
        assert (project / ".ai-commit.json").read_text() == before
        assert "generator" in capsys.readouterr().err

    def test_list(self, project, home, capsys):
        main(["config", "set", "no_verify", "true"])
        capsys.readouterr()
        assert main(["config", "list"]) == 0
        lines = capsys.readouterr().out.splitlines()
        assert "[generator] ollama" in lines
        assert "[generators.ollama.model] mistral:7b" in lines
        assert "[generators.claude.api_key] null" in lines
        assert "[no_verify] true" in lines

    def test_unsupported_action(self, project, home, capsys):
        assert main(["config", "frobnicate"]) == 1
        assert "frobnicate" in capsys.readouterr().err


# ---------------------------------------------------------------------------
# edit
# ---------------------------------------------------------------------------

class TestEdit:

    def test_runs_editor_on_active_file(self, project, home, monkeypatch):
        calls = []

        def fake_interactive(self, command, error_message=None, *, cwd=None):
            calls.append(command)

        monkeypatch.setattr(ProcessRunner, "run_interactive", fake_interactive)
        assert main(["config", "edit", "--editor", "nano"]) == 0
        assert len(calls) == 1
        assert calls[0].startswith("nano ")
        assert ".ai-commit.json" in calls[0]

    @pytest.mark.skipif(sys.platform == "win32", reason="relies on the POSIX `false` utility")
    def test_failing_editor_exits_non_zero(self, project, home, capsys):
        assert main(["config", "edit", "--editor", "false"]) == 1
        assert "false" in capsys.readouterr().err

    def test_no_editor_found(self, project, home, monkeypatch, capsys):
        monkeypatch.delenv("VISUAL", raising=False)
        monkeypatch.delenv("EDITOR", raising=False)
        monkeypatch.setattr(config_command.sys, "platform", "linux")
        monkeypatch.setattr(config_command.shutil, "which", lambda name: None)
        assert main(["config", "edit"]) == 1
        assert "No editor found or specified." in capsys.readouterr().err


class TestFindEditor:

    def test_explicit_wins(self, monkeypatch):
        monkeypatch.setenv("EDITOR", "vim")
        assert find_editor("code --wait") == "code --wait"

    def test_environment(self, monkeypatch):
        monkeypatch.delenv("VISUAL", raising=False)
        monkeypatch.setenv("EDITOR", "emacs")
        assert find_editor() == "emacs"

    def test_first_available_fallback(self, monkeypatch):
        monkeypatch.delenv("VISUAL", raising=False)
        monkeypatch.delenv("EDITOR", raising=False)
        monkeypatch.setattr(config_command.sys, "platform", "linux")
        monkeypatch.setattr(config_command.shutil, "which", lambda name: "/usr/bin/vi" if name == "vi" else None)
        assert find_editor() == "vi"

    def test_none_available(self, monkeypatch):
        monkeypatch.delenv("VISUAL", raising=False)
        monkeypatch.delenv("EDITOR", raising=False)
        monkeypatch.setattr(config_command.sys, "platform", "linux")
        monkeypatch.setattr(config_command.shutil, "which", lambda name: None)
        with pytest.raises(NoEditorFoundError):
            find_editor()


class TestParseValue:

    @pytest.mark.parametrize("raw, expected", [
        ("3", 3),
        ("1.5", 1.5),
        ("true", True),
        ("null", None),
        ('["a"]', ["a"]),
        ("openai", "openai"),
        ("mistral:7b", "mistral:7b"),
        (None, None),
    ])
    def test_parse(self, raw, expected):
        assert parse_value(raw) == expected
