"""Tests for the tree module."""

from project_packer.tree import build_tree, render_tree


class TestRenderTree:
    """Tests for render_tree."""

    def test_shared_prefix(self):
        """Test two files under one folder."""
        assert render_tree(["src/x.js", "src/y.js"]) == (
            "Root/\n"
            "└── src\n"
            "    ├── x.js\n"
            "    └── y.js\n"
        )

    def test_empty_input(self):
        """Test no paths render as an empty string."""
        assert render_tree([]) == ""

    def test_single_path_has_no_root_line(self):
        """Test a lone file omits the Root/ line."""
        assert render_tree(["a/b.txt"]) == "└── a\n    └── b.txt\n"
        assert render_tree(["only.txt"]) == "└── only.txt\n"

    def test_continuation_prefixes(self):
        """Test non-last branches carry a vertical bar to descendants."""
        tree = render_tree(["p/a/one.py", "p/a/two.py", "p/b.py"])

        assert tree == (
            "Root/\n"
            "└── p\n"
            "    ├── a\n"
            "    │   ├── one.py\n"
            "    │   └── two.py\n"
            "    └── b.py\n"
        )

    def test_insertion_order_not_sorted(self):
        """Test children keep first-seen order."""
        tree = render_tree(["z.txt", "a.txt", "m/x.txt"])

        lines = tree.splitlines()
        assert lines == ["Root/", "├── z.txt", "├── a.txt", "└── m", "    └── x.txt"]

    def test_first_seen_position_wins(self):
        """Test a folder seen again later stays at its first position."""
        tree = render_tree(["a/1.txt", "b.txt", "a/2.txt"])

        assert tree.splitlines() == ["Root/", "├── a", "│   ├── 1.txt", "│   └── 2.txt", "└── b.txt"]

    def test_backslashes_normalized(self):
        """Test Windows separators render the same as forward slashes."""
        assert render_tree(["src\\x.js", "src\\y.js"]) == render_tree(["src/x.js", "src/y.js"])

    def test_deterministic(self):
        """Test the same input always renders identically."""
        paths = ["a/b.txt", "a/c.txt"]
        assert render_tree(paths) == render_tree(list(paths))


class TestBuildTree:
    """Tests for build_tree."""

    def test_nested_mapping(self):
        """Test leaves are empty dicts."""
        assert build_tree(["a/b", "a/c/d"]) == {"a": {"b": {}, "c": {"d": {}}}}

    def test_empty_segments_skipped(self):
        """Test doubled slashes do not create blank nodes."""
        assert build_tree(["a//b"]) == {"a": {"b": {}}}
