"""
Bundle session state for project-packer.

`PackSession` owns the mutable state a packing run accumulates: the ordered
file map, the active path filter and the current project name. The codec
functions it calls stay pure; the session only decides what to feed them.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from datetime import datetime

from .bundle import encode_bundle, suggest_project_name
from .config import (
    DEFAULT_PROJECT_NAME,
    EXTRA_FILES_DIR,
    MIXED_PROJECT_NAME,
    FileEntry,
)
from .filters import PathFilter
from .utils import estimate_tokens, format_timestamp, normalize_path, safe_file_stem


class PackSession:
    """
    Ordered, path-keyed collection of files to bundle.

    Adding a path that already exists replaces the old entry and moves it to
    the end, so the most recently added version is the one encoded.
    """

    def __init__(
        self,
        path_filter: PathFilter | None = None,
        project_name: str = DEFAULT_PROJECT_NAME,
    ):
        self.path_filter = path_filter or PathFilter()
        self.project_name = project_name
        self._entries: dict[str, FileEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[FileEntry]:
        return iter(self._entries.values())

    def __contains__(self, path: object) -> bool:
        return isinstance(path, str) and normalize_path(path) in self._entries

    def load_ignore_text(self, text: str) -> None:
        """Replace the active ignore rules with those parsed from `text`."""
        self.path_filter = self.path_filter.with_ignore_text(text)

    def is_ignored(self, path: str) -> bool:
        return self.path_filter.should_ignore(path)

    def add_file(self, path: str, content: str, selected: bool = True) -> FileEntry:
        """
        Add or replace a file.

        The first file added to a session with the default name sets the
        project name from its leading folder.

        Args:
            path: Relative path (either separator)
            content: Text content
            selected: Initial selection state

        Returns:
            The stored entry
        """
        path = normalize_path(path)
        if not self._entries and self.project_name == DEFAULT_PROJECT_NAME:
            self.project_name = suggest_project_name(path, DEFAULT_PROJECT_NAME)

        self._entries.pop(path, None)
        entry = FileEntry(path=path, content=content, selected=selected)
        self._entries[path] = entry
        return entry

    def add_extra_file(self, name: str, content: str) -> FileEntry:
        """
        Add a loose file under the virtual `Extra_Files/` folder.

        Args:
            name: File name (any directory part is dropped)
            content: Text content

        Returns:
            The stored entry
        """
        base_name = normalize_path(name).rsplit("/", 1)[-1]
        entry = self.add_file(f"{EXTRA_FILES_DIR}/{base_name}", content)
        if self.project_name in (DEFAULT_PROJECT_NAME, EXTRA_FILES_DIR):
            self.project_name = MIXED_PROJECT_NAME
        return entry

    def remove(self, path: str) -> None:
        self._entries.pop(normalize_path(path), None)

    def set_selected(self, path: str, selected: bool) -> None:
        """
        Include or exclude one file from the next encode.

        Raises:
            KeyError: If the path is not in the session
        """
        self._entries[normalize_path(path)].selected = selected

    def toggle_all(self) -> bool:
        """
        Select everything if anything is unselected, otherwise deselect all.

        Returns:
            The selection state applied to every entry
        """
        target = any(not entry.selected for entry in self._entries.values())
        for entry in self._entries.values():
            entry.selected = target
        return target

    def selected_entries(self) -> list[FileEntry]:
        return [entry for entry in self._entries.values() if entry.selected]

    def encode(self) -> str:
        return encode_bundle(self._entries.values())

    def token_estimate(self) -> int:
        return estimate_tokens(self.encode())

    def bundle_filename(self, now: datetime | None = None) -> str:
        """File name for the bundle, e.g. `myproj_20250101_0930.txt`."""
        stem = safe_file_stem(self.project_name, DEFAULT_PROJECT_NAME)
        return f"{stem}_{format_timestamp(now)}.txt"

    def extend(self, entries: Iterable[FileEntry]) -> None:
        for entry in entries:
            self.add_file(entry.path, entry.content, entry.selected)
