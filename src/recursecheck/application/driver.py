"""Driver: run the rule over every definition of a compilation unit."""

from __future__ import annotations

from typing import TYPE_CHECKING

from recursecheck.application.rule import DiagnosticCollector, RecursionRule

if TYPE_CHECKING:
    from recursecheck.domain.configuration import RuleConfig
    from recursecheck.domain.diagnostic import Diagnostic
    from recursecheck.domain.ports import CompilationUnit


def check_unit(
    unit: CompilationUnit,
    config: RuleConfig | None = None,
) -> tuple[Diagnostic, ...]:
    """Check all local functions of a unit with a fresh rule.

    Definitions are visited in FunctionId order so repeated runs over the
    same unit give identical output.

    Args:
        unit: Compilation unit
        config: Rule configuration (defaults if None)

    Returns:
        Diagnostics in visiting order
    """
    sink = DiagnosticCollector()
    rule = RecursionRule(unit, sink, config)

    for fn_def in sorted(unit.functions(), key=lambda f: f.fn_id.index):
        rule.check_method(fn_def)

    return sink.diagnostics
