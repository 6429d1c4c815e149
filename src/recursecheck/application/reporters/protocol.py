"""Reporter protocol: contract for all reporters."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Sequence

    from recursecheck.domain.diagnostic import Diagnostic


class ReporterProtocol(Protocol):
    """Protocol for diagnostic reporters.

    Output is str, not print(). Caller decides destination.
    """

    def report(self, diagnostics: Sequence[Diagnostic]) -> str:
        """Format diagnostics as string.

        Args:
            diagnostics: Diagnostics to format.

        Returns:
            Formatted string representation.
        """
        ...
