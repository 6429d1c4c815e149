"""Console reporter: diagnostics → rich formatted string."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from io import StringIO
from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from recursecheck.domain.diagnostic import RecursionPattern

if TYPE_CHECKING:
    from collections.abc import Sequence

    from recursecheck.domain.diagnostic import Diagnostic


@dataclass(frozen=True, slots=True)
class ConsoleConfig:
    """Configuration for console reporter.

    Attributes:
        show_summary: Show the per-pattern summary table.
        sort: Order diagnostics by source position instead of emission order.
        width: Console width in columns.
    """

    show_summary: bool = True
    sort: bool = True
    width: int = 120

    def __post_init__(self) -> None:
        """Validate invariants. FAIL-FIRST."""
        if self.width < 20:
            raise ValueError(f"width must be >= 20, got {self.width}")


class ConsoleReporter:
    """Console reporter: outputs rich formatted text.

    Output is str, not print(). Caller decides destination.
    """

    def __init__(self, config: ConsoleConfig | None = None) -> None:
        """Initialize reporter.

        Args:
            config: Reporter configuration. Uses defaults if None.
        """
        self._config = config or ConsoleConfig()

    def report(self, diagnostics: Sequence[Diagnostic]) -> str:
        """Format diagnostics as rich formatted string.

        Args:
            diagnostics: Diagnostics to format.

        Returns:
            Formatted string with colors and a summary table.
        """
        output = StringIO()
        console = Console(file=output, force_terminal=True, width=self._config.width)

        items = list(diagnostics)
        if self._config.sort:
            items.sort(key=lambda d: d.sort_key)

        self._render_header(console, items)
        for diagnostic in items:
            self._render_diagnostic(console, diagnostic)

        if self._config.show_summary and items:
            self._render_summary(console, items)

        return output.getvalue()

    def _render_header(self, console: Console, items: list[Diagnostic]) -> None:
        """Render header with total count."""
        console.print()
        console.rule("[bold]UNCONDITIONAL RECURSION[/bold]")
        console.print()
        console.print(f"[bold]Diagnostics:[/bold] {len(items)}")
        console.print()

    def _render_diagnostic(self, console: Console, diagnostic: Diagnostic) -> None:
        """Render one diagnostic: primary site, then note."""
        console.print(f"[bold yellow]warning[/bold yellow]: {diagnostic.primary_message}", highlight=False)
        console.print(f"  [cyan]-->[/cyan] {escape(str(diagnostic.primary_span))}", highlight=False)
        console.print(f"[bold]note[/bold]: {diagnostic.note_message}", highlight=False)
        console.print(f"  [cyan]-->[/cyan] {escape(str(diagnostic.note_span))}", highlight=False)
        attribute = escape(f"#[{diagnostic.level.value}({diagnostic.rule_name})]")
        console.print(f"  [dim]= note: `{attribute}`[/dim]", highlight=False)
        console.print()

    def _render_summary(self, console: Console, items: list[Diagnostic]) -> None:
        """Render per-pattern counts."""
        counts = Counter(d.pattern for d in items)

        table = Table(show_header=True, header_style="bold", box=None)
        table.add_column("Pattern", style="cyan")
        table.add_column("Count", justify="right")
        for pattern in RecursionPattern:
            if counts[pattern]:
                table.add_row(pattern.value, str(counts[pattern]))

        console.print(table)
        console.print()
