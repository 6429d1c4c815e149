"""Definitions of a compilation unit: functions, impl blocks, traits."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from recursecheck.domain.hir import Body
    from recursecheck.domain.ids import FunctionId, ImplId, TraitId
    from recursecheck.domain.span import Span
    from recursecheck.domain.types import HirTy, Ty


@dataclass(frozen=True, slots=True)
class FnDef:
    """Function or method definition.

    Attributes:
        fn_id: Identity of the definition
        name: Function name (eq, to_string, new, ...)
        span: Span of the whole definition
        has_receiver: Takes `self` in some form (instance method)
        inputs: Resolved input types, receiver first
        body: Body, None for foreign or bodiless declarations
        impl_id: Enclosing impl block, None for free functions
        is_local: Defined in the current compilation unit
    """

    fn_id: FunctionId
    name: str
    span: Span
    has_receiver: bool = False
    inputs: tuple[Ty, ...] = ()
    body: Body | None = None
    impl_id: ImplId | None = None
    is_local: bool = True

    def __post_init__(self) -> None:
        """Validate invariants. FAIL-FIRST."""
        if not self.name:
            raise ValueError("function name must not be empty")
        if self.has_receiver and not self.inputs:
            raise ValueError(f"method '{self.name}' has a receiver but no inputs")
        if self.has_receiver and self.impl_id is None:
            raise ValueError(f"method '{self.name}' has a receiver outside an impl block")
        if self.body is not None and self.body.owner != self.fn_id:
            raise ValueError(f"body of '{self.name}' is owned by {self.body.owner}")

    @property
    def is_method(self) -> bool:
        """Defined inside an impl block (associated function)."""
        return self.impl_id is not None


@dataclass(frozen=True, slots=True)
class ImplBlock:
    """Implementation block `impl [Trait for] SelfTy { items }`.

    Attributes:
        impl_id: Identity of the block
        self_ty: Implementing type as written
        trait_id: Implemented trait, None for inherent impls
        is_derived: Generated by a derive (automatically derived)
        is_blanket: Implemented for a generic parameter (`impl<T> Trait for T`)
        items: Associated functions in definition order
    """

    impl_id: ImplId
    self_ty: HirTy
    trait_id: TraitId | None = None
    is_derived: bool = False
    is_blanket: bool = False
    items: tuple[FunctionId, ...] = ()

    def __post_init__(self) -> None:
        """Validate invariants. FAIL-FIRST."""
        if self.is_derived and self.trait_id is None:
            raise ValueError("only trait impls can be derived")
        if len(set(self.items)) != len(self.items):
            raise ValueError("impl items must be unique")

    @property
    def is_trait_impl(self) -> bool:
        """Implements a trait (not inherent)."""
        return self.trait_id is not None


@dataclass(frozen=True, slots=True)
class TraitDef:
    """Trait definition.

    Attributes:
        trait_id: Identity of the trait
        path: Canonical path, e.g. ("core", "cmp", "PartialEq")
        items: Functions declared by the trait
    """

    trait_id: TraitId
    path: tuple[str, ...]
    items: tuple[FunctionId, ...] = ()

    def __post_init__(self) -> None:
        """Validate invariants. FAIL-FIRST."""
        if not self.path or not all(self.path):
            raise ValueError(f"trait path must be non-empty names, got {self.path!r}")

    @property
    def name(self) -> str:
        """Last path segment."""
        return self.path[-1]
