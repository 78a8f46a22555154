"""Tests for WorktreeService"""
import shutil
from datetime import datetime, timezone
from unittest.mock import patch

import git
import pytest

from grove.constants import EPOCH
from grove.exceptions import GitOperationError, RemovalFailedError
from grove.models.worktree import WorktreeRecord
from grove.services.git.worktrees import WorktreeService, get_created_time


class TestListWorktrees:
    """Test listing against a real bare clone."""

    def test_lists_worktrees_without_bare_entry(self, bare_project, mock_config):
        service = WorktreeService(bare_project.bare_path, mock_config)
        worktrees = service.list_worktrees()

        assert [wt.path for wt in worktrees] == [str(bare_project.main_path), str(bare_project.feature_path)]
        assert [wt.branch for wt in worktrees] == ["main", "feature"]
        assert worktrees[0].is_main is True
        assert worktrees[1].is_main is False
        assert all(len(wt.head) == 40 for wt in worktrees)

    def test_clean_worktrees(self, bare_project, mock_config):
        service = WorktreeService(bare_project.bare_path, mock_config)
        assert not any(wt.is_dirty for wt in service.list_worktrees())

    def test_untracked_file_is_dirty(self, bare_project, mock_config):
        (bare_project.feature_path / "notes.txt").write_text("scratch\n")
        service = WorktreeService(bare_project.bare_path, mock_config)
        by_branch = {wt.branch: wt for wt in service.list_worktrees()}
        assert by_branch["feature"].is_dirty is True
        assert by_branch["main"].is_dirty is False

    def test_modified_file_is_dirty(self, bare_project, mock_config):
        (bare_project.main_path / "README.md").write_text("changed\n")
        service = WorktreeService(bare_project.bare_path, mock_config)
        assert service.list_worktrees()[0].is_dirty is True

    def test_creation_time_known(self, bare_project, mock_config):
        service = WorktreeService(bare_project.bare_path, mock_config)
        now = datetime.now(timezone.utc)
        for wt in service.list_worktrees():
            assert wt.has_known_creation_time
            assert (now - wt.created_at).total_seconds() < 3600

    def test_locked_worktree(self, bare_project, mock_config):
        bare_project.repo.git.worktree("lock", str(bare_project.feature_path))
        service = WorktreeService(bare_project.bare_path, mock_config)
        assert service.list_worktrees()[1].is_locked is True

    def test_missing_directory_is_warned_not_fatal(self, bare_project, mock_config):
        shutil.rmtree(bare_project.feature_path)
        service = WorktreeService(bare_project.bare_path, mock_config)
        worktrees = service.list_worktrees()

        feature = worktrees[1]
        assert feature.is_dirty is False
        assert feature.created_at == EPOCH
        assert feature.is_prunable is True
        assert len(service.warnings) == 1
        assert str(bare_project.feature_path) in service.warnings[0]

    def test_default_branch_worktree_is_main(self, bare_project, add_worktree, mock_config):
        bare_project.repo.git.update_ref("refs/remotes/origin/develop", "main")
        bare_project.repo.git.symbolic_ref("refs/remotes/origin/HEAD", "refs/remotes/origin/develop")
        add_worktree("develop")
        service = WorktreeService(bare_project.bare_path, mock_config)

        by_branch = {wt.branch: wt for wt in service.list_worktrees()}
        assert by_branch["develop"].is_main is True
        assert by_branch["main"].is_main is True
        assert by_branch["feature"].is_main is False
        assert [wt.is_main for wt in service.stream_worktrees()] == [wt.is_main for wt in by_branch.values()]

    def test_sequential_matches_parallel(self, bare_project, add_worktree, mock_config):
        for name in ("one", "two", "three"):
            add_worktree(name)
        parallel = WorktreeService(bare_project.bare_path, {**mock_config, "workers": 4}).list_worktrees()
        sequential = WorktreeService(bare_project.bare_path, {**mock_config, "sequential": True}).list_worktrees()
        assert [wt.path for wt in parallel] == [wt.path for wt in sequential]
        assert [wt.branch for wt in parallel] == ["main", "feature", "one", "two", "three"]

    def test_stream_yields_same_records(self, bare_project, mock_config):
        service = WorktreeService(bare_project.bare_path, mock_config)
        streamed = list(service.stream_worktrees())
        assert [wt.path for wt in streamed] == [wt.path for wt in service.list_worktrees()]

    def test_stream_is_lazy(self, bare_project, mock_config):
        service = WorktreeService(bare_project.bare_path, mock_config)
        with patch.object(service, "complete_worktree_info", side_effect=lambda r: r) as complete:
            stream = service.stream_worktrees()
            first = next(stream)
            assert first.branch == "main"
            assert complete.call_count == 1

    def test_listing_failure_raises(self, temp_dir, mock_config):
        service = WorktreeService(temp_dir / "missing.git", mock_config)
        with pytest.raises((GitOperationError, git.exc.NoSuchPathError)):
            service.list_worktrees()

    def test_listing_git_error_is_wrapped(self, bare_project, mock_config):
        service = WorktreeService(bare_project.bare_path, mock_config)
        error = git.exc.GitCommandError(["git", "worktree", "list"], 128, b"fatal: broken")
        with patch.object(service, "_get_repo") as get_repo:
            get_repo.return_value.git.worktree.side_effect = error
            with pytest.raises(GitOperationError) as exc_info:
                service.list_worktrees()
        assert "fatal: broken" in str(exc_info.value)


class TestFindWorktree:
    """Test name resolution against real worktrees."""

    def test_by_branch(self, bare_project, mock_config):
        service = WorktreeService(bare_project.bare_path, mock_config)
        assert service.find_worktree_by_name("feature").path == str(bare_project.feature_path)

    def test_not_found(self, bare_project, mock_config):
        service = WorktreeService(bare_project.bare_path, mock_config)
        assert service.find_worktree_by_name("nope") is None


class TestAddRemoveWorktree:
    """Test creating and removing worktrees."""

    def test_add_existing_branch(self, bare_project, source_repo, mock_config):
        bare_project.repo.git.branch("topic", "main")
        service = WorktreeService(bare_project.bare_path, mock_config)
        path = bare_project.root / "topic"

        service.add_worktree(path, "topic")

        assert path.is_dir()
        assert [wt.branch for wt in service.list_worktrees()][-1] == "topic"

    def test_add_new_branch(self, bare_project, mock_config):
        service = WorktreeService(bare_project.bare_path, mock_config)
        path = bare_project.root / "brand-new"
        service.add_worktree(path, "brand-new", create_branch=True)
        assert bare_project.repo.git.rev_parse("--verify", "refs/heads/brand-new")

    def test_add_missing_branch_fails(self, bare_project, mock_config):
        service = WorktreeService(bare_project.bare_path, mock_config)
        with pytest.raises(GitOperationError) as exc_info:
            service.add_worktree(bare_project.root / "ghost", "ghost")
        assert exc_info.value.branch == "ghost"

    def test_remove_clean_worktree(self, bare_project, mock_config):
        service = WorktreeService(bare_project.bare_path, mock_config)
        service.remove_worktree(str(bare_project.feature_path))
        assert not bare_project.feature_path.exists()
        assert [wt.branch for wt in service.list_worktrees()] == ["main"]

    def test_remove_dirty_requires_force(self, bare_project, mock_config):
        (bare_project.feature_path / "feature.txt").write_text("edited\n")
        service = WorktreeService(bare_project.bare_path, mock_config)

        with pytest.raises(RemovalFailedError):
            service.remove_worktree(str(bare_project.feature_path))
        assert bare_project.feature_path.exists()

        service.remove_worktree(str(bare_project.feature_path), force=True)
        assert not bare_project.feature_path.exists()

    def test_remove_unknown_path(self, bare_project, temp_dir, mock_config):
        service = WorktreeService(bare_project.bare_path, mock_config)
        with pytest.raises(RemovalFailedError) as exc_info:
            service.remove_worktree(str(temp_dir / "not-a-worktree"))
        assert exc_info.value.path == str(temp_dir / "not-a-worktree")

    def test_prune_worktrees(self, bare_project, mock_config):
        shutil.rmtree(bare_project.feature_path)
        service = WorktreeService(bare_project.bare_path, mock_config)
        success, error = service.prune_worktrees()
        assert success is True
        assert error is None
        assert [wt.branch for wt in service.list_worktrees()] == ["main"]


class TestGetCreatedTime:
    """Test creation time lookup."""

    def test_existing_directory(self, temp_dir):
        created = get_created_time(temp_dir)
        assert created.tzinfo is not None
        assert created != EPOCH

    def test_missing_directory(self, temp_dir):
        assert get_created_time(temp_dir / "missing") == EPOCH


class TestWorktreeRecord:
    """Test record helpers."""

    def test_to_dict_uses_camel_case(self):
        record = WorktreeRecord(path="/r/a", branch="a", head="abc", is_dirty=True)
        data = record.to_dict()
        assert data["isDirty"] is True
        assert data["createdAt"] is None
        assert set(data) == {"path", "branch", "head", "createdAt", "isDirty", "isLocked", "isPrunable", "isMain"}

    def test_records_are_immutable(self):
        record = WorktreeRecord(path="/r/a", branch="a", head="abc")
        with pytest.raises(Exception):
            record.branch = "b"
