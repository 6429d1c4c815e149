"""Resolved types and written (HIR) types.

Ty is what the type checker infers for an expression or parameter.
HirTy is the type as written in source, e.g. the self type of an impl block
or the qualifier of a type-relative path such as `Self::default`.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from recursecheck.domain.ids import TraitId, TypeId


@dataclass(frozen=True, slots=True)
class AdtTy:
    """Nominal struct or enum type."""

    type_id: TypeId


@dataclass(frozen=True, slots=True)
class ForeignTy:
    """Opaque type declared in a foreign block."""

    type_id: TypeId


@dataclass(frozen=True, slots=True)
class RefTy:
    """Reference to another type.

    Attributes:
        inner: Referenced type
        mutable: `&mut` rather than `&`
    """

    inner: Ty
    mutable: bool = False

    def __post_init__(self) -> None:
        """Validate invariants. FAIL-FIRST."""
        if self.inner is None:
            raise TypeError("inner must not be None")


@dataclass(frozen=True, slots=True)
class PrimitiveTy:
    """Builtin scalar or string type (bool, i32, str, ...)."""

    name: str

    def __post_init__(self) -> None:
        """Validate invariants. FAIL-FIRST."""
        if not self.name:
            raise ValueError("name must not be empty")


@dataclass(frozen=True, slots=True)
class ParamTy:
    """Generic type parameter."""

    name: str

    def __post_init__(self) -> None:
        """Validate invariants. FAIL-FIRST."""
        if not self.name:
            raise ValueError("name must not be empty")


@dataclass(frozen=True, slots=True)
class ProjectionTy:
    """Associated type projection `<T as Trait>::Name`."""

    trait_id: TraitId
    name: str


Ty = AdtTy | ForeignTy | RefTy | PrimitiveTy | ParamTy | ProjectionTy


def peel_refs(ty: Ty) -> Ty:
    """Strip every reference layer from a type."""
    while isinstance(ty, RefTy):
        ty = ty.inner
    return ty


class HirTyKind(Enum):
    """Shape of a written type."""

    RESOLVED = auto()  # path resolved to a definition: Foo, crate::Foo
    SELF_ALIAS = auto()  # `Self` inside an impl block
    PROJECTION = auto()  # type-relative path through a trait: T::Assoc
    OTHER = auto()  # tuples, slices, references, ...


@dataclass(frozen=True, slots=True)
class HirTy:
    """Type as written in source.

    Attributes:
        kind: Shape of the written type
        type_id: Resolved definition for RESOLVED
        trait_id: Trait of the projection for PROJECTION
    """

    kind: HirTyKind
    type_id: TypeId | None = None
    trait_id: TraitId | None = None

    def __post_init__(self) -> None:
        """Validate invariants. FAIL-FIRST."""
        if self.kind is HirTyKind.PROJECTION and self.trait_id is None:
            raise ValueError("projection HirTy requires trait_id")
        if self.kind is not HirTyKind.RESOLVED and self.type_id is not None:
            raise ValueError(f"type_id only allowed for RESOLVED, got {self.kind.name}")

    @classmethod
    def resolved(cls, type_id: TypeId | None) -> HirTy:
        """Path type resolved to a definition (None if resolution failed)."""
        return cls(kind=HirTyKind.RESOLVED, type_id=type_id)

    @classmethod
    def self_alias(cls) -> HirTy:
        """The `Self` alias of the enclosing impl block."""
        return cls(kind=HirTyKind.SELF_ALIAS)

    @classmethod
    def projection(cls, trait_id: TraitId) -> HirTy:
        """Type-relative projection through a trait."""
        return cls(kind=HirTyKind.PROJECTION, trait_id=trait_id)

    @classmethod
    def other(cls) -> HirTy:
        """Any written type without a definition of its own."""
        return cls(kind=HirTyKind.OTHER)
