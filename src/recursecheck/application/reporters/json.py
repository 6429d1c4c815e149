"""JSON reporter: diagnostics → JSON string."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from recursecheck.domain.diagnostic import RecursionPattern

if TYPE_CHECKING:
    from collections.abc import Sequence

    from recursecheck.domain.diagnostic import Diagnostic
    from recursecheck.domain.span import Span


class JsonReporter:
    """JSON reporter: outputs machine-readable JSON.

    Schema matches the Diagnostic fields 1:1 with a summary added.
    """

    def __init__(self, *, indent: int | None = 2) -> None:
        """Initialize reporter.

        Args:
            indent: JSON indentation. None for compact output.
        """
        self._indent = indent

    def report(self, diagnostics: Sequence[Diagnostic]) -> str:
        """Format diagnostics as JSON string.

        Args:
            diagnostics: Diagnostics to format.

        Returns:
            JSON string with diagnostics and summary.
        """
        data = {
            "diagnostics": [_diagnostic_to_dict(d) for d in diagnostics],
            "summary": _build_summary(diagnostics),
        }
        return json.dumps(data, indent=self._indent)


def _build_summary(diagnostics: Sequence[Diagnostic]) -> dict[str, object]:
    """Build summary statistics."""
    by_pattern = {pattern.value: 0 for pattern in RecursionPattern}
    for diagnostic in diagnostics:
        by_pattern[diagnostic.pattern.value] += 1

    return {
        "total": len(diagnostics),
        "by_pattern": by_pattern,
    }


def _span_to_dict(span: Span) -> dict[str, object]:
    """Convert Span to dict."""
    return {
        "file": str(span.file),
        "line": span.line,
        "column": span.column,
        "end_line": span.end_line,
        "end_column": span.end_column,
    }


def _diagnostic_to_dict(diagnostic: Diagnostic) -> dict[str, object]:
    """Convert Diagnostic to dict."""
    return {
        "rule": diagnostic.rule_name,
        "level": diagnostic.level.value,
        "pattern": diagnostic.pattern.value,
        "function": str(diagnostic.function),
        "primary": {
            "message": diagnostic.primary_message,
            "span": _span_to_dict(diagnostic.primary_span),
        },
        "note": {
            "message": diagnostic.note_message,
            "span": _span_to_dict(diagnostic.note_span),
        },
    }
