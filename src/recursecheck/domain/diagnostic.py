"""Diagnostic entity and lint enumerations."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from recursecheck.domain.ids import FunctionId
    from recursecheck.domain.span import Span

RULE_NAME = "unconditional_recursion"
PRIMARY_MESSAGE = "function cannot return without recursing"
NOTE_MESSAGE = "recursive call site"


class Level(Enum):
    """Lint level."""

    ALLOW = "allow"  # rule disabled
    WARN = "warn"  # advisory (default)


class RecursionPattern(Enum):
    """Recursion patterns the rule recognises."""

    PARTIAL_EQ = "partial_eq"  # eq/ne calling itself
    TO_STRING = "to_string"  # to_string calling itself
    DEFAULT_NEW = "default_new"  # new -> Default::default -> new


@dataclass(frozen=True, slots=True)
class Finding:
    """Positive classifier result before it becomes a diagnostic.

    Attributes:
        function: Definition that cannot return
        method_span: Span of that definition
        call_span: Span of the recursive expression
        pattern: Pattern that matched
    """

    function: FunctionId
    method_span: Span
    call_span: Span
    pattern: RecursionPattern


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """Unconditional recursion diagnostic with a primary span and a note.

    Attributes:
        function: Flagged definition
        pattern: Pattern that matched
        primary_span: Span of the flagged definition
        note_span: Span of the recursive call
        level: Lint level the diagnostic was emitted at
        rule_name: Lint name
        primary_message: Message at the primary span
        note_message: Message at the note span
    """

    function: FunctionId
    pattern: RecursionPattern
    primary_span: Span
    note_span: Span
    level: Level = Level.WARN
    rule_name: str = RULE_NAME
    primary_message: str = PRIMARY_MESSAGE
    note_message: str = NOTE_MESSAGE

    def __post_init__(self) -> None:
        """Validate invariants. FAIL-FIRST."""
        if self.level is Level.ALLOW:
            raise ValueError("diagnostics cannot be emitted at level ALLOW")
        if not self.rule_name:
            raise ValueError("rule_name must not be empty")
        if not self.primary_message:
            raise ValueError("primary_message must not be empty")
        if not self.note_message:
            raise ValueError("note_message must not be empty")

    @classmethod
    def from_finding(cls, finding: Finding, level: Level = Level.WARN) -> Diagnostic:
        """Build the diagnostic for a classifier finding."""
        return cls(
            function=finding.function,
            pattern=finding.pattern,
            primary_span=finding.method_span,
            note_span=finding.call_span,
            level=level,
        )

    @property
    def sort_key(self) -> tuple[object, ...]:
        """Deterministic ordering: primary span, note span, function."""
        return (self.primary_span.sort_key, self.note_span.sort_key, self.function.index)

    def __str__(self) -> str:
        """Format like a compiler diagnostic."""
        return "\n".join(
            [
                f"warning: {self.primary_message}",
                f"  --> {self.primary_span}",
                f"note: {self.note_message}",
                f"  --> {self.note_span}",
                f"  = note: `{self.level.value}({self.rule_name})`",
            ]
        )
