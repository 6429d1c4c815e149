"""Tests for domain/span.py."""

from pathlib import Path

import pytest

from recursecheck.domain.span import Span


class TestSpan:
    """Tests for Span value object."""

    def test_str(self) -> None:
        assert str(Span(Path("src/lib.rs"), 10, 4)) == "src/lib.rs:10:4"

    def test_sort_key_orders_by_file_then_position(self) -> None:
        spans = [
            Span(Path("b.rs"), 1, 0),
            Span(Path("a.rs"), 9, 0),
            Span(Path("a.rs"), 2, 5),
            Span(Path("a.rs"), 2, 1),
        ]
        ordered = sorted(spans, key=lambda s: s.sort_key)
        assert [str(s) for s in ordered] == ["a.rs:2:1", "a.rs:2:5", "a.rs:9:0", "b.rs:1:0"]

    def test_sort_key_fills_missing_end(self) -> None:
        assert Span(Path("a.rs"), 3, 2).sort_key == ("a.rs", 3, 2, 3, 2)

    def test_multi_line(self) -> None:
        span = Span(Path("a.rs"), 3, 0, end_line=7, end_column=1)
        assert span.sort_key == ("a.rs", 3, 0, 7, 1)


class TestSpanValidation:
    """FAIL-FIRST validation."""

    def test_zero_line_raises(self) -> None:
        with pytest.raises(ValueError, match="line must be > 0"):
            Span(Path("a.rs"), 0, 0)

    def test_negative_column_raises(self) -> None:
        with pytest.raises(ValueError, match="column must be >= 0"):
            Span(Path("a.rs"), 1, -1)

    def test_end_before_start_raises(self) -> None:
        with pytest.raises(ValueError, match="end_line"):
            Span(Path("a.rs"), 5, 0, end_line=4)

    def test_negative_end_column_raises(self) -> None:
        with pytest.raises(ValueError, match="end_column must be >= 0"):
            Span(Path("a.rs"), 5, 0, end_column=-2)

    def test_none_file_raises(self) -> None:
        with pytest.raises(TypeError, match="file must not be None"):
            Span(None, 1, 0)  # type: ignore[arg-type]
