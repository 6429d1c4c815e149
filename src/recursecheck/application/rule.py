"""Unconditional recursion rule: per-method orchestrator.

Invoked once per function definition by the driver:

    Start -> GateChecked -> Classified -> Reported | Clean

The gate is the false-positive guard: a body without exactly one exit point
is never flagged, even when one of the exits recurses.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

from recursecheck.application.default_delegates import DefaultDelegateCache
from recursecheck.application.exit_points import candidate_expr, has_conditional_return
from recursecheck.application.factory_recursion import FactoryRecursionClassifier
from recursecheck.application.operator_recursion import (
    EQ_METHOD,
    NE_METHOD,
    TO_STRING_METHOD,
    OperatorRecursionClassifier,
)
from recursecheck.application.traits import TraitRegistry
from recursecheck.domain.configuration import RuleConfig
from recursecheck.domain.diagnostic import Diagnostic, RecursionPattern

if TYPE_CHECKING:
    from recursecheck.domain.definitions import FnDef
    from recursecheck.domain.diagnostic import Finding
    from recursecheck.domain.ports import CompilationUnit, DiagnosticSink

logger = logging.getLogger(__name__)


class DiagnosticCollector:
    """In-memory DiagnosticSink. Thread-safe."""

    def __init__(self) -> None:
        """Initialize empty collector."""
        self._diagnostics: list[Diagnostic] = []
        self._lock = threading.Lock()

    def emit(self, diagnostic: Diagnostic) -> None:
        """Record one diagnostic."""
        with self._lock:
            self._diagnostics.append(diagnostic)

    @property
    def diagnostics(self) -> tuple[Diagnostic, ...]:
        """Diagnostics in emission order."""
        with self._lock:
            return tuple(self._diagnostics)

    def __len__(self) -> int:
        """Number of collected diagnostics."""
        with self._lock:
            return len(self._diagnostics)


class RecursionRule:
    """Entry point invoked once per function definition.

    Owns the per-run state: TraitRegistry and DefaultDelegateCache.
    Create one rule per run; a fresh rule rebuilds the cache.
    """

    def __init__(
        self,
        unit: CompilationUnit,
        sink: DiagnosticSink,
        config: RuleConfig | None = None,
    ) -> None:
        """Initialize rule for one compilation unit.

        Args:
            unit: Compilation unit services
            sink: Receiver of diagnostics
            config: Rule configuration (defaults if None)
        """
        if unit is None:
            raise TypeError("unit must not be None")
        if sink is None:
            raise TypeError("sink must not be None")

        self._unit = unit
        self._sink = sink
        self._config = config or RuleConfig()
        self._traits = TraitRegistry(unit, self._config)
        self._delegates = DefaultDelegateCache(unit, self._traits)
        self._operators = OperatorRecursionClassifier(unit, self._traits)
        self._factories = FactoryRecursionClassifier(unit, self._traits, self._delegates)

    @property
    def config(self) -> RuleConfig:
        """Active configuration."""
        return self._config

    @property
    def delegates(self) -> DefaultDelegateCache:
        """Delegate cache of this run."""
        return self._delegates

    def check_method(self, fn_def: FnDef) -> tuple[Diagnostic, ...]:
        """Check one definition and emit a diagnostic per finding.

        Never raises for well-formed input; anything inapplicable is clean.

        Args:
            fn_def: Function definition with its body

        Returns:
            Diagnostics emitted for this definition (also sent to the sink)
        """
        findings = self._classify(fn_def)
        diagnostics = tuple(
            Diagnostic.from_finding(found, level=self._config.level) for found in findings
        )
        for diagnostic in diagnostics:
            logger.debug(
                "%s: %s (%s) at %s",
                diagnostic.rule_name,
                fn_def.fn_id,
                diagnostic.pattern.value,
                diagnostic.note_span,
            )
            self._sink.emit(diagnostic)
        return diagnostics

    def _classify(self, fn_def: FnDef) -> list[Finding]:
        if not self._config.is_enabled:
            return []
        # Only associated functions with a body are candidates.
        if not fn_def.is_method or fn_def.body is None:
            return []

        body = fn_def.body
        expr = candidate_expr(body)
        if has_conditional_return(body, expr):
            return []

        findings: list[Finding] = []
        operator_finding: Finding | None = None
        if fn_def.name in (EQ_METHOD, NE_METHOD):
            if self._config.checks(RecursionPattern.PARTIAL_EQ):
                operator_finding = self._operators.check_partial_eq(fn_def, expr)
        elif fn_def.name == TO_STRING_METHOD:
            if self._config.checks(RecursionPattern.TO_STRING):
                operator_finding = self._operators.check_to_string(fn_def, expr)
        if operator_finding is not None:
            findings.append(operator_finding)

        if self._config.checks(RecursionPattern.DEFAULT_NEW):
            factory_finding = self._factories.check(fn_def)
            if factory_finding is not None:
                findings.append(factory_finding)

        return findings
