"""Pytest fixtures for grove tests"""
import tempfile
from pathlib import Path
from types import SimpleNamespace

import git
import pytest

from grove.services.git.discovery import clear_discovery_cache


def _commit_file(worktree_path, filename, content, message):
    """Write a file in a worktree and commit it. Returns the commit SHA."""
    repo = git.Repo(worktree_path)
    try:
        target = Path(worktree_path) / filename
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content)
        repo.git.add(filename)
        repo.git.commit("-m", message)
        return repo.git.rev_parse("HEAD")
    finally:
        repo.close()


@pytest.fixture(autouse=True)
def clean_discovery_cache():
    """Discovery caches its result in the environment; isolate every test."""
    clear_discovery_cache()
    yield
    clear_discovery_cache()


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        # Resolve so paths reported by git match (e.g. /tmp -> /private/tmp)
        yield Path(tmpdir).resolve()


@pytest.fixture
def mock_config():
    """Create a mock configuration dictionary."""
    return {
        'verbose': False,
        'debug': False,
        'main_branches': ['main', 'master'],
        'dry_run': False,
        'force': False,
        'yes': True,
        'sequential': False,
        'workers': None,
        'github_token': 'test_token_for_testing',
    }


@pytest.fixture
def source_repo(temp_dir):
    """Create a regular repository with a main and a feature branch to clone from."""
    repo_path = temp_dir / "source"
    repo_path.mkdir()

    repo = git.Repo.init(repo_path)
    repo.config_writer().set_value("user", "name", "Test User").release()
    repo.config_writer().set_value("user", "email", "test@example.com").release()

    (repo_path / "README.md").write_text("# Test Repository\n")
    repo.index.add(["README.md"])
    repo.index.commit("Initial commit")
    repo.git.branch('-M', 'main')

    repo.git.checkout('-b', 'feature')
    (repo_path / "feature.txt").write_text("Feature content\n")
    repo.index.add(["feature.txt"])
    repo.index.commit("Add feature")
    repo.git.checkout('main')

    yield repo
    repo.close()


@pytest.fixture
def bare_project(temp_dir, source_repo):
    """Create a grove project: <root>/project.git plus main and feature worktrees."""
    root = temp_dir / "project"
    root.mkdir()
    bare_path = root / "project.git"

    bare = git.Repo.clone_from(source_repo.working_dir, str(bare_path), bare=True)
    bare.config_writer().set_value("user", "name", "Test User").release()
    bare.config_writer().set_value("user", "email", "test@example.com").release()

    main_path = root / "main"
    feature_path = root / "feature"
    bare.git.worktree("add", str(main_path), "main")
    bare.git.worktree("add", str(feature_path), "feature")

    yield SimpleNamespace(
        root=root,
        bare_path=bare_path,
        repo=bare,
        main_path=main_path,
        feature_path=feature_path,
    )
    bare.close()


@pytest.fixture
def commit_file():
    """Write a file in a worktree and commit it; returns the commit SHA."""
    return _commit_file


@pytest.fixture
def add_worktree(bare_project):
    """Factory adding a worktree on a new branch started from main."""
    def _add(branch, start="main"):
        path = bare_project.root / branch
        bare_project.repo.git.worktree("add", "-b", branch, str(path), start)
        return path
    return _add
