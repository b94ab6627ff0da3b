"""
Exception hierarchy and per-entry skip reasons for project-packer.

Only whole-operation failures are raised. Problems with a single file or frame
are recorded as a `SkipReason` and the operation carries on.
"""

from __future__ import annotations

from enum import Enum


class PackerError(Exception):
    """Base exception for all project-packer errors."""

    pass


class NoMarkersFound(PackerError):
    """Raised when a bundle contains no recognizable file marker."""

    def __init__(self, message: str | None = None):
        super().__init__(
            message
            or "No file markers found. Each file must start with a line like: "
            "=== File: path/to/file.ext ==="
        )


class ArchiveWriteFailure(PackerError):
    """
    A single archive or extraction entry could not be written.

    Attributes:
        path: Bundle path of the entry that failed
        reason: Human-readable explanation
    """

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to write '{path}': {reason}")


class ConfigError(PackerError):
    """Raised when a config file exists but cannot be used."""

    pass


class SkipReason(str, Enum):
    """Why a single entry was left out of (or degraded in) a result."""

    EMPTY_OR_UNSAFE_PATH = "empty_or_unsafe_path"
    UNREADABLE_FILE = "unreadable_file"
    OVERSIZED_FILE = "oversized_file"
    IGNORED = "ignored"
    EXCLUDED_GLOB = "excluded_glob"
