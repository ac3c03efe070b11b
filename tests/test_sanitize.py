"""Tests for text sanitization."""

from stock_research.utils.sanitize import sanitize_text, truncate


class TestSanitizeText:
    """Tests for sanitize_text function."""

    def test_sanitize_none(self) -> None:
        """Test sanitize returns None for None input."""
        assert sanitize_text(None) is None

    def test_sanitize_strips_whitespace(self) -> None:
        """Test whitespace is stripped."""
        assert sanitize_text("  NVIDIA Corporation  ") == "NVIDIA Corporation"

    def test_sanitize_removes_control_chars(self) -> None:
        """Test control characters are removed from provider headlines."""
        assert sanitize_text("Record\x00 Revenue\x1f!") == "Record Revenue!"

    def test_sanitize_removes_high_control_chars(self) -> None:
        """Test high control characters (0x7f-0x9f) are removed."""
        assert sanitize_text("AI\x7f Demand\x9f") == "AI Demand"

    def test_sanitize_truncates_long_text(self) -> None:
        """Test long text is truncated with an ellipsis."""
        result = sanitize_text("A" * 600, max_length=500)

        assert len(result) == 503  # 500 + "..."
        assert result.endswith("...")

    def test_sanitize_short_text_untouched(self) -> None:
        """Test text under the limit is unchanged."""
        assert sanitize_text("Export controls", max_length=50) == "Export controls"


class TestTruncate:
    """Tests for truncate."""

    def test_custom_suffix(self) -> None:
        """Test the suffix used for stored error messages."""
        result = truncate("x" * 510, 500, suffix="... (truncated)")

        assert result == "x" * 500 + "... (truncated)"

    def test_exact_length_not_truncated(self) -> None:
        """Test text exactly at the limit is kept whole."""
        assert truncate("abc", 3) == "abc"
