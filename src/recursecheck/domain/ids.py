"""Opaque identities for definitions, types, traits and expressions.

Identity is the integer index handed out by the front end.
The label is for display only and never takes part in equality,
so two definitions sharing a name stay distinct (shadowing-safe).
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True, order=True)
class _OpaqueId:
    """Base for comparable, hashable handles.

    Attributes:
        index: Identity assigned by the front end (must be >= 0)
        label: Human-readable name, excluded from comparison
    """

    index: int
    label: str = field(default="", compare=False)

    def __post_init__(self) -> None:
        """Validate invariants. FAIL-FIRST."""
        if not isinstance(self.index, int) or isinstance(self.index, bool):
            raise TypeError(f"index must be int, got {type(self.index).__name__}")
        if self.index < 0:
            raise ValueError(f"index must be >= 0, got {self.index}")

    def __str__(self) -> str:
        """Format as label#index."""
        return f"{self.label or '?'}#{self.index}"


@dataclass(frozen=True, slots=True, order=True)
class FunctionId(_OpaqueId):
    """Identity of a function or method definition."""


@dataclass(frozen=True, slots=True, order=True)
class TypeId(_OpaqueId):
    """Identity of a nominal type (struct, enum, foreign type)."""


@dataclass(frozen=True, slots=True, order=True)
class TraitId(_OpaqueId):
    """Identity of a trait definition."""


@dataclass(frozen=True, slots=True, order=True)
class ImplId(_OpaqueId):
    """Identity of an implementation block."""


@dataclass(frozen=True, slots=True, order=True)
class ExprId(_OpaqueId):
    """Identity of an expression node inside a body."""


@dataclass(frozen=True, slots=True, order=True)
class BindingId(_OpaqueId):
    """Identity of a local variable binding."""
