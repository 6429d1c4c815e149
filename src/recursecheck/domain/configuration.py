"""Rule configuration.

Defaults reproduce the lint as shipped: warn level, every pattern on,
standard-library trait paths.
"""

from __future__ import annotations

from dataclasses import dataclass

from recursecheck.domain.diagnostic import Level, RecursionPattern
from recursecheck.domain.exceptions import InvalidConfigError

PARTIAL_EQ_PATH = ("core", "cmp", "PartialEq")
TO_STRING_PATH = ("alloc", "string", "ToString")
DEFAULT_PATH = ("core", "default", "Default")


@dataclass(frozen=True, slots=True)
class RuleConfig:
    """Configuration DTO for the unconditional recursion rule.

    Immutable configuration object with FAIL-FIRST validation.

    Attributes:
        level: Lint level. ALLOW disables the rule entirely.
        patterns: Patterns to check. Must not be empty.
        partial_eq_path: Canonical path of the equality trait.
        to_string_path: Canonical path of the stringification trait.
        default_path: Canonical path of the default-construction trait.
    """

    level: Level = Level.WARN
    patterns: frozenset[RecursionPattern] = frozenset(RecursionPattern)
    partial_eq_path: tuple[str, ...] = PARTIAL_EQ_PATH
    to_string_path: tuple[str, ...] = TO_STRING_PATH
    default_path: tuple[str, ...] = DEFAULT_PATH

    def __post_init__(self) -> None:
        """Validate invariants. FAIL-FIRST."""
        if not isinstance(self.level, Level):
            raise InvalidConfigError("level", f"expected Level, got {type(self.level).__name__}")

        if not self.patterns:
            raise InvalidConfigError("patterns", "at least one pattern must be enabled")
        unknown = [p for p in self.patterns if not isinstance(p, RecursionPattern)]
        if unknown:
            raise InvalidConfigError("patterns", f"unknown patterns: {unknown!r}")

        for name in ("partial_eq_path", "to_string_path", "default_path"):
            path = getattr(self, name)
            if not isinstance(path, tuple) or not path:
                raise InvalidConfigError(name, "must be a non-empty tuple of names")
            if not all(isinstance(part, str) and part for part in path):
                raise InvalidConfigError(name, f"every segment must be a non-empty string, got {path!r}")

    @property
    def is_enabled(self) -> bool:
        """Rule runs at all."""
        return self.level is not Level.ALLOW

    def checks(self, pattern: RecursionPattern) -> bool:
        """Pattern is enabled and the rule is not allowed."""
        return self.is_enabled and pattern in self.patterns
