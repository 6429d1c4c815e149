"""Domain ports: services the rule consumes from the host front end.

The host parses, type checks and resolves; the rule only asks questions.
Every lookup returns None when the answer is unknown. Callers treat None
as "rule inapplicable", never as an error.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from recursecheck.domain.definitions import FnDef, ImplBlock
    from recursecheck.domain.diagnostic import Diagnostic
    from recursecheck.domain.hir import Expr
    from recursecheck.domain.ids import ExprId, FunctionId, ImplId, TraitId, TypeId
    from recursecheck.domain.types import HirTy, Ty


class DefinitionIndex(Protocol):
    """Enumeration and lookup of definitions."""

    def function(self, fn_id: FunctionId) -> FnDef | None:
        """Definition of a function, None if unknown."""
        ...

    def impl_block(self, impl_id: ImplId) -> ImplBlock | None:
        """Implementation block, None if unknown."""
        ...

    def functions(self) -> Iterable[FnDef]:
        """Every local function definition, in a stable order."""
        ...

    def trait_impls(self, trait_id: TraitId) -> Iterable[ImplBlock]:
        """Implementations of a trait, in a stable order."""
        ...

    def enclosing_body_owner(self, expr_id: ExprId) -> FunctionId | None:
        """Owner of the innermost body containing an expression."""
        ...


class TypeIdentity(Protocol):
    """Nominal type identity."""

    def nominal_type(self, ty: Ty) -> TypeId | None:
        """Underlying struct/enum/foreign type after peeling references."""
        ...

    def hir_ty_def(self, hir_ty: HirTy) -> TypeId | TraitId | None:
        """Definition a written type refers to.

        A resolved path yields its type; a projection yields its trait.
        """
        ...


class CallResolution(Protocol):
    """Type-check results of bodies.

    `owner` selects whose typeck results answer the question: an
    expression can only be resolved against the body that contains it.
    """

    def expr_ty(self, owner: FunctionId, expr: Expr) -> Ty | None:
        """Type of an expression."""
        ...

    def type_dependent_def(self, owner: FunctionId, expr: Expr) -> FunctionId | None:
        """Resolved target of a method call or a type-relative call."""
        ...

    def path_def(self, owner: FunctionId, expr: Expr) -> FunctionId | None:
        """Function a path expression refers to."""
        ...

    def trait_of_item(self, fn_id: FunctionId) -> TraitId | None:
        """Trait declaring or implemented by an associated function."""
        ...


class TraitLookup(Protocol):
    """Canonical-path trait lookup."""

    def trait_by_path(self, path: tuple[str, ...]) -> TraitId | None:
        """Trait at a canonical path, None if absent from the unit."""
        ...


class CompilationUnit(DefinitionIndex, TypeIdentity, CallResolution, TraitLookup, Protocol):
    """Everything the rule needs from one compilation unit."""


class DiagnosticSink(Protocol):
    """Receiver of emitted diagnostics."""

    def emit(self, diagnostic: Diagnostic) -> None:
        """Accept one diagnostic."""
        ...
