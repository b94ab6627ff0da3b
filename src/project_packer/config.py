"""
Configuration models and defaults for project-packer.

Holds the static denylists, bundle format constants and the small dataclasses
shared by the filter, codec, scanner and archive layers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from .errors import SkipReason

# Directory names excluded anywhere in a path
DEFAULT_IGNORE_DIRS: frozenset[str] = frozenset(
    {
        # Version control
        ".git",
        ".svn",
        ".hg",
        # IDE/Editor
        ".idea",
        ".vscode",
        ".settings",
        # Dependencies
        "node_modules",
        "bower_components",
        "vendor",
        ".pub-cache",
        # Build outputs
        "build",
        "dist",
        "out",
        "target",
        "bin",
        "obj",
        ".gradle",
        ".dart_tool",
        ".next",
        ".nuxt",
        # Python
        "__pycache__",
        ".venv",
        "venv",
        "env",
        ".pytest_cache",
        # Scratch
        "tmp",
        "temp",
        "logs",
        "coverage",
        # Native mobile shells
        "ios",
        "android",
    }
)

# File-name suffixes excluded (compared case-insensitively)
DEFAULT_IGNORE_SUFFIXES: tuple[str, ...] = (
    # Images
    ".png",
    ".jpg",
    ".jpeg",
    ".gif",
    ".svg",
    ".ico",
    ".webp",
    # Audio/video
    ".mp4",
    ".mp3",
    ".wav",
    # Documents
    ".pdf",
    ".doc",
    ".docx",
    ".xls",
    ".xlsx",
    ".ppt",
    ".pptx",
    # Archives
    ".zip",
    ".tar",
    ".gz",
    ".7z",
    ".rar",
    # Native/compiled
    ".exe",
    ".dll",
    ".so",
    ".dylib",
    ".class",
    ".jar",
    # Databases
    ".db",
    ".sqlite",
    ".sqlite3",
    # Lock files
    ".lock",
    "package-lock.json",
    "yarn.lock",
    "pnpm-lock.yaml",
    # OS metadata
    ".ds_store",
)

# Bundle format
BUNDLE_HEADER = "Project Structure:\n"
SEPARATOR_LINE = "=" * 48
MARKER_TEMPLATE = "=== File: {path} ==="

# Naming
IGNORE_FILE_NAME = ".gitignore"
EXTRA_FILES_DIR = "Extra_Files"
DEFAULT_PROJECT_NAME = "project_context"
MIXED_PROJECT_NAME = "Mixed_Files"
DEFAULT_UNPACK_NAME = "project_unpacked"

# Resource policy
DEFAULT_MAX_FILE_BYTES = 1_048_576  # 1 MiB
OVERSIZED_PLACEHOLDER = "[File omitted: {size:,} bytes exceeds the {limit:,} byte limit]"

PROMPT_HINT = """\
Please modify the code and reply strictly in Project Packer format (a "Project Structure" block followed by "=== File: path ===" markers).

Important formatting rules:
1. Output raw plain text. Do not wrap the code in a JSON string and do not escape it.
2. Do not write line breaks as \\n or quotes as \\". Keep the original line breaks and indentation.
3. Output every file in full. Do not omit or abbreviate any file content.
"""


@dataclass(frozen=True)
class IgnoreRule:
    """One parsed line of an ignore-pattern file.

    Attributes:
        pattern: The rule text with any single trailing slash removed.
        is_directory: Whether the original line ended with a slash.
    """

    pattern: str
    is_directory: bool = False


@dataclass
class FileEntry:
    """A file as it lives in a bundle session.

    Attributes:
        path: Relative path using forward slashes.
        content: Text content (verbatim, or a placeholder for oversized files).
        selected: Whether the entry is included in the next encode.
    """

    path: str
    content: str
    selected: bool = True


@dataclass
class SkippedEntry:
    """A file or frame that was left out of (or degraded in) a result."""

    path: str
    reason: SkipReason
    detail: str = ""


@dataclass
class ScanStats:
    """Statistics from scanning a directory into a bundle session.

    Attributes:
        files_scanned: Total file paths visited during traversal.
        files_included: Files that became session entries.
        files_skipped_ignored: Files excluded by denylists or ignore rules.
        files_skipped_glob: Files excluded by user exclude globs.
        files_skipped_unreadable: Binary or unreadable files that were omitted.
        files_oversized: Files kept with placeholder content.
        total_bytes_included: Bytes of real content read into the session.
        skipped: Detailed list of per-entry problems (unreadable/oversized).
    """

    files_scanned: int = 0
    files_included: int = 0
    files_skipped_ignored: int = 0
    files_skipped_glob: int = 0
    files_skipped_unreadable: int = 0
    files_oversized: int = 0
    total_bytes_included: int = 0
    skipped: list[SkippedEntry] = field(default_factory=list)


@dataclass
class Config:
    """Resolved settings for one `pack` run.

    Attributes:
        path: Directory to scan.
        extra_ignore_dirs: Directory names added to `DEFAULT_IGNORE_DIRS`.
        extra_ignore_suffixes: Suffixes added to `DEFAULT_IGNORE_SUFFIXES`.
        exclude_globs: Gitwildmatch globs applied relative to `path`.
        max_file_bytes: Size ceiling above which content becomes a placeholder.
        respect_ignore_file: Whether the root ignore file is loaded.
        ignore_file: Explicit ignore-pattern file (overrides the root one).
        include_root_name: Whether bundle paths start with the folder name.
        output_dir: Directory generated files are written to.
    """

    path: Path
    extra_ignore_dirs: set[str] = field(default_factory=set)
    extra_ignore_suffixes: set[str] = field(default_factory=set)
    exclude_globs: set[str] = field(default_factory=set)
    max_file_bytes: int = DEFAULT_MAX_FILE_BYTES
    respect_ignore_file: bool = True
    ignore_file: Path | None = None
    include_root_name: bool = True
    output_dir: Path = field(default_factory=lambda: Path("./out"))

    def __post_init__(self) -> None:
        """Validate and normalize configuration after initialization.

        Raises:
            ValueError: If `path` does not exist or is not a directory, or if
                `max_file_bytes` is not positive.
        """
        self.path = Path(self.path).resolve()
        if not self.path.exists():
            raise ValueError(f"Path does not exist: {self.path}")
        if not self.path.is_dir():
            raise ValueError(f"Path is not a directory: {self.path}")
        if self.max_file_bytes <= 0:
            raise ValueError("max_file_bytes must be positive")

        self.output_dir = Path(self.output_dir).resolve()
        self.extra_ignore_suffixes = {s.lower() for s in self.extra_ignore_suffixes}

    @property
    def ignore_dirs(self) -> frozenset[str]:
        return DEFAULT_IGNORE_DIRS | frozenset(self.extra_ignore_dirs)

    @property
    def ignore_suffixes(self) -> tuple[str, ...]:
        return DEFAULT_IGNORE_SUFFIXES + tuple(sorted(self.extra_ignore_suffixes))
