"""Tests for the command-line entry point"""
import importlib
import json

import pytest

# grove.cli re-exports the main() function, which shadows the submodule attribute
cli_main = importlib.import_module("grove.cli.main")
from grove.cli.args import parse_args
from grove.cli.main import build_config, main


@pytest.fixture(autouse=True)
def no_signal_handler(monkeypatch):
    monkeypatch.setattr(cli_main, "install_signal_handler", lambda: None)


@pytest.fixture
def in_project(bare_project, monkeypatch):
    monkeypatch.chdir(bare_project.main_path)
    return bare_project


class TestArgs:
    def test_aliases(self):
        assert parse_args(["ls"]).command == "ls"
        assert parse_args(["rm", "topic"]).name == "topic"

    def test_prune_options(self):
        args = parse_args(["prune", "--older-than", "2w", "--dry-run", "--workers", "4"])
        config = build_config(args)
        assert config.older_than == "2w"
        assert config.dry_run is True
        assert config.workers == 4
        assert config.base_branch is None

    def test_list_has_no_prune_options(self):
        config = build_config(parse_args(["list"]))
        assert config.dry_run is False
        assert config.older_than is None

    @pytest.mark.parametrize("argv", [[], ["prune", "--workers", "0"], ["pr", "abc"]])
    def test_usage_errors_exit(self, argv):
        with pytest.raises(SystemExit):
            parse_args(argv)


class TestMain:
    def test_go_prints_bare_path(self, in_project, capsys):
        assert main(["go", "feature"]) == 0
        assert capsys.readouterr().out.strip() == str(in_project.feature_path)

    def test_unknown_worktree_is_an_error(self, in_project, capsys):
        assert main(["go", "nowhere"]) == 1
        assert "not found" in capsys.readouterr().out

    def test_list_json(self, in_project, capsys):
        assert main(["list", "--json"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert {item["branch"] for item in data} == {"main", "feature"}

    def test_conflicting_prune_policy(self, in_project, capsys):
        assert main(["prune", "--base", "main", "--older-than", "30d"]) == 1
        assert "cannot be used together" in capsys.readouterr().out

    def test_prune_dry_run(self, in_project, add_worktree, capsys):
        path = add_worktree("merged")

        assert main(["prune", "--dry-run", "--base", "main"]) == 0

        assert path.exists()
        assert "dry run" in capsys.readouterr().out

    def test_remove_with_yes(self, in_project):
        assert main(["rm", "-y", "feature"]) == 0
        assert not in_project.feature_path.exists()

    def test_outside_project(self, temp_dir, monkeypatch, capsys):
        monkeypatch.chdir(temp_dir)
        assert main(["list"]) == 1
        assert "Not in a grove repository" in capsys.readouterr().out

    def test_init_rejects_bad_url(self, temp_dir, monkeypatch, capsys):
        monkeypatch.chdir(temp_dir)
        assert main(["init", "nonsense"]) == 1
        assert "Invalid git URL" in capsys.readouterr().out
