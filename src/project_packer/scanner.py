"""
File scanner module for project-packer.

Walks a local directory, loads the root ignore-pattern file before filtering,
and reads surviving files as text into `FileEntry` objects.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Generator, Optional

import pathspec

from .config import (
    DEFAULT_MAX_FILE_BYTES,
    DEFAULT_PROJECT_NAME,
    IGNORE_FILE_NAME,
    OVERSIZED_PLACEHOLDER,
    Config,
    FileEntry,
    ScanStats,
    SkippedEntry,
)
from .errors import SkipReason
from .filters import PathFilter
from .session import PackSession
from .utils import is_binary_file, normalize_path, read_file_safe

logger = logging.getLogger(__name__)


def load_ignore_text(root_path: Path, ignore_file: Optional[Path] = None) -> Optional[str]:
    """
    Read ignore-pattern file text for a scan.

    Args:
        root_path: Root directory being scanned
        ignore_file: Explicit ignore file; defaults to `<root>/.gitignore`

    Returns:
        File text, or None if there is no readable ignore file
    """
    candidate = ignore_file if ignore_file is not None else root_path / IGNORE_FILE_NAME
    if not candidate.is_file():
        return None
    try:
        text, _ = read_file_safe(candidate)
    except OSError as e:
        logger.warning("Could not read ignore file %s: %s", candidate, e)
        return None
    return text


class FileScanner:
    """
    Scans a directory for files to bundle.

    Handles denylists, ignore-file rules, exclude globs, binary detection and
    the per-file size ceiling.
    """

    def __init__(
        self,
        root_path: Path,
        path_filter: Optional[PathFilter] = None,
        exclude_globs: Optional[set[str]] = None,
        max_file_bytes: int = DEFAULT_MAX_FILE_BYTES,
        include_root_name: bool = True,
    ):
        """
        Initialize the scanner.

        Args:
            root_path: Root directory to scan
            path_filter: Filter with the active ignore rules already loaded
            exclude_globs: Gitwildmatch patterns relative to `root_path`
            max_file_bytes: Files above this size keep a placeholder instead of content
            include_root_name: Prefix entry paths with the root folder name
        """
        self.root_path = root_path.resolve()
        self.path_filter = path_filter or PathFilter()
        self.exclude_globs = exclude_globs or set()
        self.max_file_bytes = max_file_bytes
        self.include_root_name = include_root_name

        self._exclude_spec: Optional[pathspec.PathSpec] = None
        if self.exclude_globs:
            self._exclude_spec = pathspec.PathSpec.from_lines("gitwildmatch", sorted(self.exclude_globs))

        self.stats = ScanStats()

    def _entry_path(self, rel_path: str) -> str:
        if self.include_root_name and self.root_path.name:
            return f"{self.root_path.name}/{rel_path}"
        return rel_path

    def _skip(self, path: str, reason: SkipReason, detail: str = "") -> None:
        self.stats.skipped.append(SkippedEntry(path=path, reason=reason, detail=detail))

    def scan(self) -> Generator[FileEntry, None, None]:
        """
        Scan the directory and yield file entries.

        Yields:
            FileEntry objects for each included file, in sorted walk order
        """
        for file_path in self._walk_files():
            self.stats.files_scanned += 1

            try:
                rel_path = normalize_path(str(file_path.relative_to(self.root_path)))
            except ValueError:
                continue

            entry_path = self._entry_path(rel_path)

            if self.path_filter.should_ignore(rel_path):
                self.stats.files_skipped_ignored += 1
                continue

            if self._exclude_spec is not None and self._exclude_spec.match_file(rel_path):
                self.stats.files_skipped_glob += 1
                continue

            try:
                size = file_path.stat().st_size
            except OSError as e:
                logger.warning("Skipped unreadable file %s: %s", entry_path, e)
                self.stats.files_skipped_unreadable += 1
                self._skip(entry_path, SkipReason.UNREADABLE_FILE, str(e))
                continue

            if size > self.max_file_bytes:
                logger.info("Oversized file %s (%d bytes), using placeholder", entry_path, size)
                self.stats.files_oversized += 1
                self.stats.files_included += 1
                self._skip(entry_path, SkipReason.OVERSIZED_FILE, f"{size} bytes")
                yield FileEntry(
                    path=entry_path,
                    content=OVERSIZED_PLACEHOLDER.format(size=size, limit=self.max_file_bytes),
                )
                continue

            if is_binary_file(file_path):
                logger.warning("Skipped binary file: %s", entry_path)
                self.stats.files_skipped_unreadable += 1
                self._skip(entry_path, SkipReason.UNREADABLE_FILE, "binary content")
                continue

            try:
                content, _ = read_file_safe(file_path)
            except OSError as e:
                logger.warning("Skipped unreadable file %s: %s", entry_path, e)
                self.stats.files_skipped_unreadable += 1
                self._skip(entry_path, SkipReason.UNREADABLE_FILE, str(e))
                continue

            self.stats.files_included += 1
            self.stats.total_bytes_included += size
            yield FileEntry(path=entry_path, content=content)

    def _walk_files(self) -> Generator[Path, None, None]:
        """
        Walk the directory depth-first and yield file paths.

        Entries are visited in name order so output is stable across runs.
        Denylisted directories are pruned without being entered.
        """
        dirs_to_process = [self.root_path]

        while dirs_to_process:
            current_dir = dirs_to_process.pop()

            try:
                with os.scandir(current_dir) as entries:
                    entries_list = sorted(entries, key=lambda e: e.name)
            except OSError as e:
                logger.warning("Cannot list directory %s: %s", current_dir, e)
                continue

            subdirs = []
            for entry in entries_list:
                try:
                    if entry.is_symlink():
                        continue

                    entry_path = Path(entry.path)

                    if entry.is_dir():
                        if entry.name in self.path_filter.ignore_dirs:
                            continue
                        subdirs.append(entry_path)
                    elif entry.is_file():
                        yield entry_path
                except OSError:
                    continue

            # Reversed so the stack pops subdirectories in name order
            dirs_to_process.extend(reversed(subdirs))


def scan_directory(config: Config) -> tuple[PackSession, ScanStats]:
    """
    Scan a directory into a fresh bundle session.

    The ignore-pattern file is loaded before any file is filtered.

    Returns:
        Tuple of (PackSession, ScanStats)
    """
    path_filter = PathFilter(
        ignore_dirs=config.ignore_dirs,
        ignore_suffixes=config.ignore_suffixes,
    )
    if config.respect_ignore_file or config.ignore_file is not None:
        ignore_text = load_ignore_text(config.path, config.ignore_file)
        if ignore_text is not None:
            path_filter = path_filter.with_ignore_text(ignore_text)
            logger.debug("Loaded %d ignore rules", len(path_filter.rules))

    scanner = FileScanner(
        root_path=config.path,
        path_filter=path_filter,
        exclude_globs=config.exclude_globs,
        max_file_bytes=config.max_file_bytes,
        include_root_name=config.include_root_name,
    )

    session = PackSession(
        path_filter=path_filter,
        project_name=config.path.name or DEFAULT_PROJECT_NAME,
    )
    session.extend(scanner.scan())
    return session, scanner.stats
