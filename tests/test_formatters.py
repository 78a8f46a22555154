"""Tests for display formatters"""
from datetime import datetime, timedelta, timezone

import pytest

from grove.constants import EPOCH, SYMBOL_DIRTY, SYMBOL_LOCKED, WorktreeStyleType
from grove.formatters import (
    format_created_time,
    format_path_with_tilde,
    format_removal_items,
    format_worktree_status,
    format_worktree_symbols,
    get_worktree_style_type,
    truncate_path,
)
from grove.models.prune import PruneCandidate, PruneReason
from grove.models.worktree import WorktreeRecord

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def _record(**kwargs):
    return WorktreeRecord(path="/r/topic", branch="topic", head="a" * 40, **kwargs)


class TestFormatCreatedTime:
    @pytest.mark.parametrize("delta,expected", [
        (timedelta(minutes=1), "1 minute ago"),
        (timedelta(minutes=30), "30 minutes ago"),
        (timedelta(hours=1), "1 hour ago"),
        (timedelta(hours=5), "5 hours ago"),
        (timedelta(days=1), "1 day ago"),
        (timedelta(days=3), "3 days ago"),
        (timedelta(days=14), "2 weeks ago"),
        (timedelta(days=45), "2024-04-17"),
    ])
    def test_relative(self, delta, expected):
        assert format_created_time(NOW - delta, now=NOW) == expected

    def test_unknown(self):
        assert format_created_time(EPOCH, now=NOW) == "unknown"


class TestPaths:
    def test_tilde_replaces_home(self, monkeypatch):
        monkeypatch.setenv("HOME", "/home/dev")
        assert format_path_with_tilde("/home/dev/src/grove") == "~/src/grove"
        assert format_path_with_tilde("/home/dev") == "~"

    def test_tilde_only_at_boundary(self, monkeypatch):
        monkeypatch.setenv("HOME", "/home/dev")
        assert format_path_with_tilde("/home/developer/src") == "/home/developer/src"
        assert format_path_with_tilde("/srv/home/dev") == "/srv/home/dev"

    def test_truncate_keeps_tail(self):
        assert truncate_path("/a/very/long/path/to/worktree", 12) == ".../worktree"
        assert truncate_path("/short", 12) == "/short"


class TestStatus:
    def test_clean(self):
        assert format_worktree_status(_record()) == "clean"
        assert format_worktree_symbols(_record()) == ""

    def test_flags(self):
        record = _record(is_dirty=True, is_locked=True, is_prunable=True)
        assert format_worktree_status(record) == "dirty, locked, prunable"
        symbols = format_worktree_symbols(record)
        assert SYMBOL_DIRTY in symbols and SYMBOL_LOCKED in symbols

    def test_style_type_priority(self):
        assert get_worktree_style_type(_record(is_main=True, is_dirty=True)) == WorktreeStyleType.MAIN
        assert get_worktree_style_type(_record(is_locked=True, is_dirty=True)) == WorktreeStyleType.LOCKED
        assert get_worktree_style_type(_record(is_dirty=True)) == WorktreeStyleType.DIRTY
        assert get_worktree_style_type(_record()) == WorktreeStyleType.REGULAR

    def test_removal_items(self):
        candidates = [
            PruneCandidate(_record(), PruneReason.MERGED),
            PruneCandidate(_record(is_dirty=True), PruneReason.AGED),
        ]
        lines = format_removal_items(candidates).splitlines()
        assert lines[0] == "  • topic (merged) /r/topic"
        assert lines[1] == "  • topic (older than cutoff, uncommitted changes) /r/topic"
