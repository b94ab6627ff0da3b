"""Tests for the session module."""

from datetime import datetime

import pytest

from project_packer.bundle import decode_bundle
from project_packer.session import PackSession


@pytest.fixture
def session():
    """A session holding a small project."""
    s = PackSession()
    s.add_file("proj/a.py", "A")
    s.add_file("proj/b.py", "B")
    return s


class TestPackSession:
    """Tests for PackSession."""

    def test_project_name_from_first_file(self, session):
        """Test the first nested path names the project."""
        assert session.project_name == "proj"

    def test_duplicate_path_replaces_and_moves_last(self, session):
        """Test last-written-wins on duplicate paths."""
        session.add_file("proj/a.py", "A2")

        assert [(e.path, e.content) for e in session] == [("proj/b.py", "B"), ("proj/a.py", "A2")]
        assert len(session) == 2

    def test_backslash_paths_share_key(self, session):
        """Test Windows and POSIX spellings are the same entry."""
        session.add_file("proj\\a.py", "A3")

        assert len(session) == 2
        assert "proj\\a.py" in session

    def test_selection_controls_encode(self, session):
        """Test unselected files are left out of the bundle."""
        session.set_selected("proj/a.py", False)

        files = decode_bundle(session.encode()).files

        assert [f.path for f in files] == ["proj/b.py"]

    def test_set_selected_unknown_path(self, session):
        """Test selecting an unknown path raises KeyError."""
        with pytest.raises(KeyError):
            session.set_selected("nope", True)

    def test_toggle_all(self, session):
        """Test toggle selects all if any is unselected, else clears all."""
        session.set_selected("proj/a.py", False)

        assert session.toggle_all() is True
        assert all(e.selected for e in session)

        assert session.toggle_all() is False
        assert session.selected_entries() == []

    def test_extra_files(self, session):
        """Test extra files land under Extra_Files/."""
        entry = session.add_extra_file("/tmp/notes.txt", "n")

        assert entry.path == "Extra_Files/notes.txt"
        assert session.project_name == "proj"

    def test_extra_files_on_empty_session(self):
        """Test an extras-only session is named Mixed_Files."""
        s = PackSession()
        s.add_extra_file("notes.txt", "n")

        assert s.project_name == "Mixed_Files"

    def test_extra_files_keep_explicit_name(self):
        """Test an explicitly named session keeps its name."""
        s = PackSession(project_name="notes")
        s.add_extra_file("todo.txt", "t")

        assert s.project_name == "notes"
        assert s.bundle_filename(datetime(2025, 1, 2, 3, 4)) == "notes_20250102_0304.txt"

    def test_ignore_rules_replaced(self, session):
        """Test loading ignore text replaces the session's rules."""
        session.load_ignore_text("*.py\n")
        assert session.is_ignored("proj/c.py")

        session.load_ignore_text("*.md\n")
        assert not session.is_ignored("proj/c.py")

    def test_bundle_filename(self, session):
        """Test bundle names combine project and timestamp."""
        name = session.bundle_filename(datetime(2025, 1, 2, 3, 4))

        assert name == "proj_20250102_0304.txt"

    def test_token_estimate(self, session):
        """Test the estimate covers the full encoded bundle."""
        assert session.token_estimate() > 0
        assert session.token_estimate() == -(-len(session.encode()) // 4)

    def test_remove(self, session):
        """Test entries can be removed."""
        session.remove("proj/a.py")

        assert "proj/a.py" not in session
