"""
Archive writing for decoded bundles.

Materializes `(path, content)` pairs as a zip file or as files under a
directory. A failure on one entry is recorded and the remaining entries are
still written.
"""

from __future__ import annotations

import logging
import zipfile
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from .config import DEFAULT_UNPACK_NAME, FileEntry
from .errors import ArchiveWriteFailure
from .utils import format_timestamp, safe_file_stem

logger = logging.getLogger(__name__)


@dataclass
class ArchiveReport:
    """Result of writing decoded files.

    Attributes:
        target: The zip file or directory written to.
        written: Paths written successfully, in order.
        failures: One `ArchiveWriteFailure` per entry that could not be written.
    """

    target: Path
    written: list[str] = field(default_factory=list)
    failures: list[ArchiveWriteFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


def _last_write_wins(files: Iterable[FileEntry]) -> dict[str, str]:
    contents: dict[str, str] = {}
    for entry in files:
        contents[entry.path] = entry.content
    return contents


def archive_filename(base_name: str, now: datetime | None = None) -> str:
    """Zip file name for a decoded bundle, e.g. `myproj_20250101_0930.zip`."""
    return f"{safe_file_stem(base_name, DEFAULT_UNPACK_NAME)}_{format_timestamp(now)}.zip"


def write_zip(
    files: Iterable[FileEntry],
    base_name: str,
    output_dir: Path,
    now: datetime | None = None,
) -> ArchiveReport:
    """
    Write decoded files into a new zip archive.

    Args:
        files: Decoded entries; a repeated path keeps its last content
        base_name: Suggested project name used in the archive file name
        output_dir: Directory the archive is created in (created if missing)
        now: Timestamp for the file name (defaults to now)

    Returns:
        ArchiveReport for the zip file

    Raises:
        OSError: If the archive file itself cannot be created
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    target = output_dir / archive_filename(base_name, now)
    report = ArchiveReport(target=target)

    with zipfile.ZipFile(target, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for path, content in _last_write_wins(files).items():
            try:
                zf.writestr(path, content.encode("utf-8"))
            except (OSError, ValueError, zipfile.BadZipFile) as e:
                logger.warning("Failed to add %s to archive: %s", path, e)
                report.failures.append(ArchiveWriteFailure(path, str(e)))
                continue
            report.written.append(path)

    return report


def extract_to_directory(files: Iterable[FileEntry], dest: Path) -> ArchiveReport:
    """
    Write decoded files below `dest`, creating parent directories as needed.

    Any path that would resolve outside `dest` is refused as a failure.

    Args:
        files: Decoded entries; a repeated path keeps its last content
        dest: Extraction root

    Returns:
        ArchiveReport for the directory
    """
    dest.mkdir(parents=True, exist_ok=True)
    root = dest.resolve()
    report = ArchiveReport(target=root)

    for path, content in _last_write_wins(files).items():
        target = (root / path).resolve()
        if root not in target.parents:
            logger.warning("Refusing to write outside %s: %s", root, path)
            report.failures.append(ArchiveWriteFailure(path, "path escapes the output directory"))
            continue
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with open(target, "w", encoding="utf-8", newline="") as f:
                f.write(content)
        except OSError as e:
            logger.warning("Failed to write %s: %s", path, e)
            report.failures.append(ArchiveWriteFailure(path, str(e)))
            continue
        report.written.append(path)

    return report
