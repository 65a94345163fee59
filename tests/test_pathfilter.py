"""Tests for PathFilter decisions and the filtered walk."""

from pytoolagent.util.fs import walk
from pytoolagent.util.pathfilter import DEFAULT_EXCLUDES, PathFilter


class TestPathFilter:

    def test_defaults(self):
        f = PathFilter()
        assert f.include_git is False
        assert f.include_hidden is False
        assert f.excludes == DEFAULT_EXCLUDES

    def test_plain_paths_are_included(self):
        f = PathFilter()
        assert f.should_include("src/main.py", False)
        assert f.should_include("src", True)

    def test_git_excluded_even_when_hidden_allowed(self):
        f = PathFilter(include_hidden=True)
        assert not f.should_include(".git", True)
        assert not f.should_include("sub/.git/config", False)
        assert f.should_skip_dir(".git")

    def test_git_included_when_enabled(self):
        f = PathFilter(include_git=True, include_hidden=True)
        assert f.should_include(".git/HEAD", False)
        assert not f.should_skip_dir(".git")

    def test_include_git_alone_still_hides_dot_git(self):
        # .git is also a hidden name, so the hidden rule still applies
        f = PathFilter(include_git=True)
        assert not f.should_include(".git", True)

    def test_hidden_entries(self):
        f = PathFilter()
        assert not f.should_include(".env", False)
        assert not f.should_include("pkg/.cache", True)
        assert f.should_include(".", True)
        assert PathFilter(include_hidden=True).should_include(".env", False)

    def test_exclude_matches_base_or_segment(self):
        f = PathFilter()
        assert not f.should_include("node_modules", True)
        assert not f.should_include("web/node_modules/x.js", False)
        assert f.should_include("node_modules_backup", True)
        assert f.should_skip_dir("build")

    def test_from_args_explicit_exclude_replaces_defaults(self):
        f = PathFilter.from_args({"exclude": ["tmp"]})
        assert f.excludes == frozenset({"tmp"})
        assert f.should_include("node_modules", True)
        assert not f.should_include("tmp", True)

    def test_from_args_missing_exclude_keeps_defaults(self):
        f = PathFilter.from_args({"include_hidden": True})
        assert f.include_hidden is True
        assert f.excludes == DEFAULT_EXCLUDES

    def test_decisions_are_repeatable(self):
        f = PathFilter()
        first = [f.should_include(p, False) for p in ("a", ".b", "vendor/c")]
        second = [f.should_include(p, False) for p in ("a", ".b", "vendor/c")]
        assert first == second == [True, False, False]


class TestWalk:

    def test_walk_order_and_pruning(self, tmp_path):
        (tmp_path / "b").mkdir()
        (tmp_path / "b" / "z.txt").write_text("z")
        (tmp_path / "a.txt").write_text("a")
        (tmp_path / "node_modules").mkdir()
        (tmp_path / "node_modules" / "x.js").write_text("x")

        got = [(rel, is_dir) for rel, _, is_dir in walk(tmp_path, PathFilter())]
        assert got == [("a.txt", False), ("b", True), ("b/z.txt", False)]

    def test_skipped_directory_is_never_entered(self, tmp_path, monkeypatch):
        (tmp_path / "vendor").mkdir()
        (tmp_path / "vendor" / "lib.go").write_text("package lib")

        seen = []

        class Recording(PathFilter):
            def should_include(self, rel_path, is_dir=False):
                seen.append(rel_path)
                return super().should_include(rel_path, is_dir)

        list(walk(tmp_path, Recording()))
        assert "vendor/lib.go" not in seen
