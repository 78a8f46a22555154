"""Tests for copying untracked files into new worktrees"""
import json

from grove.services.copy_config import CopyConfig, copy_matching_files, load_copy_config


def _write_config(root, data):
    (root / ".grove.json").write_text(json.dumps(data))


class TestLoadCopyConfig:
    def test_missing_file(self, temp_dir):
        assert load_copy_config(temp_dir) is None

    def test_valid_config(self, temp_dir):
        _write_config(temp_dir, {"copy": {"include": [".env"], "exclude": ["*.log"], "source": "develop"}})

        config = load_copy_config(temp_dir)

        assert config == CopyConfig(include=[".env"], exclude=["*.log"], source="develop")

    def test_no_include_patterns(self, temp_dir):
        _write_config(temp_dir, {"copy": {"exclude": ["*.log"]}})
        assert load_copy_config(temp_dir) is None

    def test_invalid_json_is_ignored(self, temp_dir, caplog):
        (temp_dir / ".grove.json").write_text("{not json")

        assert load_copy_config(temp_dir) is None
        assert "Ignoring" in caplog.text

    def test_wrong_types_are_ignored(self, temp_dir):
        _write_config(temp_dir, {"copy": {"include": ".env"}})
        assert load_copy_config(temp_dir) is None


class TestCopyMatchingFiles:
    def test_copies_selected_files(self, temp_dir):
        source = temp_dir / "main"
        target = temp_dir / "topic"
        (source / "config").mkdir(parents=True)
        target.mkdir()
        (source / ".env").write_text("SECRET=1\n")
        (source / "config" / "app.local.json").write_text("{}")
        (source / "debug.log").write_text("noise")
        (source / "README.md").write_text("# readme")

        config = CopyConfig(include=[".env", "config/*.local.json", "*.log"], exclude=["*.log"])
        copied = copy_matching_files(config, source, target)

        assert sorted(copied) == [".env", "config/app.local.json"]
        assert (target / ".env").read_text() == "SECRET=1\n"
        assert not (target / "debug.log").exists()
        assert not (target / "README.md").exists()

    def test_never_overwrites(self, temp_dir):
        source = temp_dir / "main"
        target = temp_dir / "topic"
        source.mkdir()
        target.mkdir()
        (source / ".env").write_text("from main")
        (target / ".env").write_text("local")

        copied = copy_matching_files(CopyConfig(include=[".env"]), source, target)

        assert copied == []
        assert (target / ".env").read_text() == "local"

    def test_skips_git_metadata(self, temp_dir):
        source = temp_dir / "main"
        target = temp_dir / "topic"
        (source / ".git").mkdir(parents=True)
        target.mkdir()
        (source / ".git" / "config").write_text("[core]")

        copied = copy_matching_files(CopyConfig(include=["*"]), source, target)

        assert copied == []
        assert not (target / ".git").exists()
