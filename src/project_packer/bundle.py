"""
Bundle encoding and decoding for project-packer.

A bundle is plain text:

    Project Structure:
    <tree>

    ================================================

    === File: path/to/file.ext ===
    <content>

Decoding is tolerant of the ways pasted or LLM-edited text tends to drift:
fences made of any run of 3+ `=` or `-`, loose spacing around `File:`,
CRLF line endings, and whole-bundle JSON escaping.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass, field

from .config import (
    BUNDLE_HEADER,
    DEFAULT_UNPACK_NAME,
    MARKER_TEMPLATE,
    SEPARATOR_LINE,
    FileEntry,
    SkippedEntry,
)
from .errors import NoMarkersFound, SkipReason
from .tree import render_tree
from .utils import normalize_path

logger = logging.getLogger(__name__)

# One marker line. Anchored to a line and unable to cross one, so matching
# cost stays linear in the line length.
MARKER_PATTERN = re.compile(
    r"^[=-]{3,}[ \t]*File:[ \t]*(?P<path>[^\r\n]*?)[ \t]*[=-]{3,}[ \t]*\r?$",
    re.MULTILINE,
)

# The marker line's own line break
_LEADING_BREAK = re.compile(r"\A[ \t]*\r?\n")
# The content's last line break plus the blank separator line
_FRAME_TRAILER = re.compile(r"(?:\r?\n[ \t]*){1,2}\Z")

_DRIVE_PREFIX = re.compile(r"^[A-Za-z]:(?=/)")
_LEADING_ROOT = re.compile(r"^(?:\./|/)+")
_REPEATED_SLASHES = re.compile(r"/{2,}")

_ESCAPE_SEQUENCE = re.compile(r"\\([nrt\"'\\])")
_ESCAPES = {"n": "\n", "r": "\r", "t": "\t", '"': '"', "'": "'", "\\": "\\"}


@dataclass(frozen=True)
class Marker:
    """A recognized marker line and its character offsets."""

    path: str
    start: int
    end: int


@dataclass
class DecodeResult:
    """Outcome of decoding a bundle.

    Attributes:
        files: Recovered entries in marker order.
        project_name: Advisory name for the archive or output folder.
        recognized: Number of marker lines found.
        skipped: Frames that were dropped, with the reason.
    """

    files: list[FileEntry] = field(default_factory=list)
    project_name: str = DEFAULT_UNPACK_NAME
    recognized: int = 0
    skipped: list[SkippedEntry] = field(default_factory=list)

    @property
    def decoded(self) -> int:
        return len(self.files)

    def summary(self) -> str:
        return f"decoded {self.decoded} of {self.recognized} recognized entries"


def suggest_project_name(path: str | None, default: str) -> str:
    """
    Suggest a project name from a bundle path.

    Args:
        path: First path of a bundle (or None)
        default: Name used when the path is not nested

    Returns:
        The first segment of a nested path, else `default`
    """
    if not path:
        return default
    parts = [p for p in normalize_path(path).split("/") if p]
    if len(parts) > 1:
        return parts[0]
    return default


def encode_bundle(entries: Iterable[FileEntry]) -> str:
    """
    Concatenate the tree and framed file contents into one bundle string.

    Only selected entries are emitted. Content is written verbatim.

    Args:
        entries: Ordered file entries

    Returns:
        Bundle text
    """
    selected = [entry for entry in entries if entry.selected]
    paths = [normalize_path(entry.path) for entry in selected]

    parts = [BUNDLE_HEADER, render_tree(paths), "\n\n", SEPARATOR_LINE, "\n\n"]
    for path, entry in zip(paths, selected):
        parts.append(MARKER_TEMPLATE.format(path=path))
        parts.append("\n")
        parts.append(entry.content)
        parts.append("\n\n")
    return "".join(parts)


def find_markers(text: str) -> list[Marker]:
    """Return every marker line in `text`, in order."""
    return [
        Marker(path=match.group("path").strip(), start=match.start(), end=match.end())
        for match in MARKER_PATTERN.finditer(text)
    ]


def sanitize_path(raw_path: str) -> str | None:
    """
    Make a marker path safe to write below an extraction root.

    Backslashes become slashes, leading `./`, `/` and drive prefixes are
    stripped, and `.`/`..` segments are blanked out so they cannot climb.

    Args:
        raw_path: Path as captured from a marker line

    Returns:
        The relative path, or None if nothing file-like remains
    """
    path = normalize_path(raw_path.strip())
    path = _DRIVE_PREFIX.sub("", path)
    path = _LEADING_ROOT.sub("", path)

    segments = ["" if segment in (".", "..") else segment for segment in path.split("/")]
    path = _REPEATED_SLASHES.sub("/", "/".join(segments)).lstrip("/")

    if not path or path.endswith("/"):
        return None
    return path


def clean_content(span: str) -> str:
    """Strip the framing line breaks around one file's content span."""
    span = _LEADING_BREAK.sub("", span, count=1)
    return _FRAME_TRAILER.sub("", span, count=1)


def unmangle_bundle(text: str) -> str:
    """
    Undo whole-bundle escaping applied by a chat tool or LLM.

    Handles a bundle wrapped in quotes (a JSON string literal is decoded as
    such) and literal `\\n`-style escapes standing in for real line breaks.

    Args:
        text: Pasted text that produced no markers

    Returns:
        Best-effort unescaped text
    """
    body = text.strip()
    if len(body) >= 2 and body[0] == body[-1] and body[0] in "\"'`":
        if body[0] == '"':
            try:
                decoded = json.loads(body)
            except ValueError:
                decoded = None
            if isinstance(decoded, str):
                return decoded
        body = body[1:-1]

    if "\\n" in body:
        body = _ESCAPE_SEQUENCE.sub(lambda m: _ESCAPES[m.group(1)], body)
    return body


def decode_bundle(text: str) -> DecodeResult:
    """
    Parse bundle text back into ordered file entries.

    Each file's content runs from the end of its marker line to the start of
    the next marker (or end of text). Frames whose path is empty or names a
    directory are skipped and reported, not fatal.

    Args:
        text: Bundle text, possibly reformatted in transit

    Returns:
        DecodeResult with files, suggested project name and skip details

    Raises:
        NoMarkersFound: If no marker line can be recognized, even after
            undoing whole-bundle escaping
    """
    markers = find_markers(text)
    if not markers:
        repaired = unmangle_bundle(text)
        if repaired != text:
            markers = find_markers(repaired)
            if markers:
                logger.info("Recovered %d markers after unescaping bundle text", len(markers))
                text = repaired
    if not markers:
        raise NoMarkersFound()

    result = DecodeResult(recognized=len(markers))
    for i, marker in enumerate(markers):
        end = markers[i + 1].start if i + 1 < len(markers) else len(text)
        path = sanitize_path(marker.path)
        if path is None:
            logger.debug("Skipping frame with unusable path %r", marker.path)
            result.skipped.append(
                SkippedEntry(
                    path=marker.path,
                    reason=SkipReason.EMPTY_OR_UNSAFE_PATH,
                    detail="path is empty or names a directory",
                )
            )
            continue
        if path != marker.path:
            logger.debug("Sanitized path %r -> %r", marker.path, path)
        result.files.append(FileEntry(path=path, content=clean_content(text[marker.end:end])))

    if result.files:
        result.project_name = suggest_project_name(result.files[0].path, DEFAULT_UNPACK_NAME)
    return result
