"""Tests for the utils module."""

from datetime import datetime

import pytest

from project_packer.utils import (
    detect_encoding,
    estimate_tokens,
    format_timestamp,
    is_binary_file,
    normalize_path,
    read_file_safe,
    safe_file_stem,
)


class TestEstimateTokens:
    """Tests for the token heuristic."""

    def test_cjk(self):
        """Test CJK ideographs count 1.5 each."""
        assert estimate_tokens("你好") == 3

    def test_ascii(self):
        """Test other characters count a quarter each, rounded up."""
        assert estimate_tokens("ab") == 1
        assert estimate_tokens("abcd") == 1
        assert estimate_tokens("abcde") == 2

    def test_empty(self):
        """Test empty text is zero."""
        assert estimate_tokens("") == 0

    def test_mixed(self):
        """Test a mix of CJK and other characters."""
        # 1 * 1.5 + 4 * 0.25 = 2.5
        assert estimate_tokens("中abcd") == 3

    def test_range_bounds(self):
        """Test only U+4E00..U+9FA5 count as CJK."""
        assert estimate_tokens("一") == 2
        assert estimate_tokens("龥") == 2
        assert estimate_tokens("龦") == 1
        assert estimate_tokens("あ") == 1  # Hiragana is "other"


class TestBinaryDetection:
    """Tests for is_binary_file."""

    def test_text_file(self, tmp_path):
        """Test plain text is not binary."""
        path = tmp_path / "a.txt"
        path.write_text("hello\nworld\n")

        assert not is_binary_file(path)

    def test_utf8_text(self, tmp_path):
        """Test non-ASCII UTF-8 text is not binary."""
        path = tmp_path / "zh.md"
        path.write_text("中文内容，" * 200, encoding="utf-8")

        assert not is_binary_file(path)

    def test_null_bytes(self, tmp_path):
        """Test a null byte marks the file binary."""
        path = tmp_path / "a.bin"
        path.write_bytes(b"abc\x00def")

        assert is_binary_file(path)

    def test_empty_file(self, tmp_path):
        """Test empty files count as text."""
        path = tmp_path / "empty"
        path.write_bytes(b"")

        assert not is_binary_file(path)

    def test_missing_file(self, tmp_path):
        """Test unreadable files are treated as binary."""
        assert is_binary_file(tmp_path / "missing")


class TestReadFileSafe:
    """Tests for read_file_safe and detect_encoding."""

    def test_utf8(self, tmp_path):
        """Test UTF-8 files are read strictly."""
        path = tmp_path / "a.txt"
        path.write_text("héllo", encoding="utf-8")

        assert read_file_safe(path) == ("héllo", "utf-8")

    def test_line_endings_preserved(self, tmp_path):
        """Test CRLF is not translated on read."""
        path = tmp_path / "win.txt"
        path.write_bytes(b"a\r\nb\r\n")

        content, _ = read_file_safe(path)

        assert content == "a\r\nb\r\n"

    def test_bom(self, tmp_path):
        """Test a UTF-8 BOM is detected."""
        path = tmp_path / "bom.txt"
        path.write_bytes(b"\xef\xbb\xbfhi")

        assert detect_encoding(path) == "utf-8-sig"

    def test_non_utf8_falls_back(self, tmp_path):
        """Test Latin-1 content is still returned as text."""
        path = tmp_path / "latin.txt"
        path.write_bytes("café au lait, très bien".encode("latin-1"))

        content, _ = read_file_safe(path)

        assert content.startswith("caf")
        assert "lait" in content

    def test_missing_file_raises(self, tmp_path):
        """Test missing files raise OSError."""
        with pytest.raises(OSError):
            read_file_safe(tmp_path / "missing.txt")


class TestSmallHelpers:
    """Tests for path and naming helpers."""

    def test_normalize_path(self):
        """Test backslashes become slashes."""
        assert normalize_path("a\\b\\c") == "a/b/c"

    def test_format_timestamp(self):
        """Test the YYYYMMDD_HHMM format."""
        assert format_timestamp(datetime(2024, 3, 5, 7, 9)) == "20240305_0709"

    def test_safe_file_stem(self):
        """Test reserved characters are replaced."""
        assert safe_file_stem("a/b:c", "x") == "a_b_c"
        assert safe_file_stem(" .. ", "x") == "x"
