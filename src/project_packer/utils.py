"""
Utility functions for project-packer.

Includes token estimation, encoding detection, binary sniffing, path
normalization and the timestamp used in generated file names.
"""

from __future__ import annotations

import math
from datetime import datetime
from pathlib import Path

import chardet

# CJK Unified Ideographs block counted by the token heuristic
_CJK_FIRST = 0x4E00
_CJK_LAST = 0x9FA5


def estimate_tokens(text: str) -> int:
    """Estimate an LLM token count for display.

    This is a heuristic, not a tokenizer: CJK ideographs count 1.5 tokens
    each and every other character counts a quarter token.

    Args:
        text: Input text to estimate tokens for.

    Returns:
        Approximate token count, never negative.
    """
    cjk_count = sum(1 for ch in text if _CJK_FIRST <= ord(ch) <= _CJK_LAST)
    other_count = len(text) - cjk_count
    return math.ceil(cjk_count * 1.5 + other_count * 0.25)


def detect_encoding(file_path: Path, sample_size: int = 8192) -> str:
    """Detect a likely text encoding for a file.

    Prefers UTF-8 and only asks `chardet` when strict UTF-8 decoding fails, so
    plain UTF-8 sources are not misdetected as Latin-1/CP1252.

    Args:
        file_path: Path to the file to inspect.
        sample_size: Number of bytes to sample from the start of the file.

    Returns:
        A normalized encoding label (e.g., `"utf-8"`, `"utf-8-sig"`, `"utf-16-le"`).
    """
    try:
        with open(file_path, "rb") as f:
            sample = f.read(sample_size)
    except OSError:
        return "utf-8"

    if not sample:
        return "utf-8"

    # BOM markers first
    if sample.startswith(b"\xef\xbb\xbf"):
        return "utf-8-sig"
    if sample.startswith(b"\xff\xfe"):
        return "utf-16-le"
    if sample.startswith(b"\xfe\xff"):
        return "utf-16-be"

    try:
        sample.decode("utf-8")
        return "utf-8"
    except UnicodeDecodeError:
        pass

    result = chardet.detect(sample)
    encoding_any = result.get("encoding")

    if not isinstance(encoding_any, str) or not encoding_any:
        return "utf-8"

    encoding = encoding_any.lower()
    if encoding in ("ascii", "utf-8", "utf8"):
        return "utf-8"

    return encoding


def is_binary_file(file_path: Path, sample_size: int = 8192) -> bool:
    """Heuristically determine whether a file is binary.

    A null byte is a strong binary signal; otherwise a file is binary when fewer
    than 70% of the sampled bytes are printable ASCII or common whitespace.
    UTF-8 multi-byte text is accepted when the sample decodes cleanly.

    Args:
        file_path: Path to the file to test.
        sample_size: Number of bytes to sample from the file start.

    Returns:
        True if the file is likely binary or cannot be opened.
    """
    try:
        with open(file_path, "rb") as f:
            sample = f.read(sample_size)
    except OSError:
        return True

    if not sample:
        return False

    if b"\x00" in sample:
        return True

    try:
        # A cut multi-byte sequence at the sample boundary is still text
        sample.decode("utf-8")
        return False
    except UnicodeDecodeError as e:
        if e.start >= len(sample) - 3 and e.reason == "unexpected end of data":
            return False

    printable_count = sum(
        1
        for b in sample
        if 32 <= b <= 126 or b in (9, 10, 13)  # printable + tab, newline, CR
    )

    return printable_count / len(sample) < 0.70


def read_file_safe(file_path: Path, encoding: str | None = None) -> tuple[str, str]:
    """Read a text file with encoding detection.

    Tries strict UTF-8 first, then the detected encoding with replacement
    characters. Line endings are preserved as stored on disk.

    Args:
        file_path: Path to the file to read.
        encoding: Optional explicit encoding to use (None enables auto-detection).

    Returns:
        A tuple `(content, encoding_used)`.

    Raises:
        OSError: If the file cannot be opened or read.
    """
    if encoding is not None:
        try:
            with open(file_path, encoding=encoding, errors="replace", newline="") as f:
                return f.read(), encoding
        except LookupError:
            # Unknown encoding, fall through to auto-detect
            pass

    try:
        with open(file_path, encoding="utf-8", errors="strict", newline="") as f:
            return f.read(), "utf-8"
    except UnicodeDecodeError:
        pass

    detected = detect_encoding(file_path)
    try:
        with open(file_path, encoding=detected, errors="replace", newline="") as f:
            return f.read(), detected
    except LookupError:
        with open(file_path, encoding="utf-8", errors="replace", newline="") as f:
            return f.read(), "utf-8"


def normalize_path(path: str) -> str:
    """Normalize a path for consistent cross-platform comparisons.

    Args:
        path: Path string that may contain platform-specific separators.

    Returns:
        Normalized path using forward slashes.
    """
    return path.replace("\\", "/")


def format_timestamp(now: datetime | None = None) -> str:
    """Format a timestamp as `YYYYMMDD_HHMM` for generated file names."""
    now = now or datetime.now()
    return now.strftime("%Y%m%d_%H%M")


def safe_file_stem(name: str, fallback: str) -> str:
    """Make a project name usable as a file name stem.

    Args:
        name: Suggested name (may contain separators or be empty).
        fallback: Name to use when nothing usable remains.

    Returns:
        The name with path separators and reserved characters replaced.
    """
    cleaned = "".join("_" if ch in '<>:"/\\|?*' or ord(ch) < 32 else ch for ch in name)
    cleaned = cleaned.strip(" .")
    return cleaned or fallback
