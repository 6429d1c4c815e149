"""Factory recursion classifier.

Detects the two-function cycle between a static factory and `Default`:

    impl Foo {
        fn new() -> Self {
            Self::default()      // flagged here
        }
    }

    impl Default for Foo {
        fn default() -> Self {
            Self::new()
        }
    }

The `Default` side comes from DefaultDelegateCache; this module checks
the factory side. Longer chains are not followed.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from recursecheck.application._helpers import enclosing_impl, finding
from recursecheck.application.default_delegates import DEFAULT_METHOD
from recursecheck.domain.diagnostic import RecursionPattern
from recursecheck.domain.hir import (
    Call,
    PathExpr,
    ResolvedPath,
    TypeRelativePath,
    walk_post_order,
)
from recursecheck.domain.ids import TypeId
from recursecheck.domain.types import HirTyKind

if TYPE_CHECKING:
    from recursecheck.application.default_delegates import DefaultDelegateCache
    from recursecheck.application.traits import TraitRegistry
    from recursecheck.domain.definitions import FnDef
    from recursecheck.domain.diagnostic import Finding
    from recursecheck.domain.hir import QPath
    from recursecheck.domain.ports import CompilationUnit


class FactoryRecursionClassifier:
    """Flags static factories that call back into their type's `Default`."""

    def __init__(
        self,
        unit: CompilationUnit,
        traits: TraitRegistry,
        delegates: DefaultDelegateCache,
    ) -> None:
        """Initialize classifier.

        Args:
            unit: Compilation unit services
            traits: Registry resolving the default trait
            delegates: Shared, lazily built delegate cache
        """
        self._unit = unit
        self._traits = traits
        self._delegates = delegates

    def check(self, fn_def: FnDef) -> Finding | None:
        """Check a static function of an inherent impl block.

        Args:
            fn_def: Function being checked

        Returns:
            Finding at the first `T::default()` / `Self::default()` call in
            the body when T's default impl delegates to this very function,
            None otherwise
        """
        if fn_def.has_receiver or fn_def.body is None:
            return None

        impl = enclosing_impl(self._unit, fn_def)
        if impl is None or impl.is_trait_impl:
            return None

        implemented = self._unit.hir_ty_def(impl.self_ty)
        if not isinstance(implemented, TypeId):
            return None

        # The delegate lookup triggers the one-time cache build.
        if self._delegates.get(implemented) != fn_def.fn_id:
            return None

        default_trait = self._traits.default()
        if default_trait is None:
            return None

        # Closures share the typeck results of the enclosing function.
        owner = fn_def.fn_id
        for expr in walk_post_order(fn_def.body.value, enter_closures=True):
            if not isinstance(expr, Call) or not isinstance(expr.callee, PathExpr):
                continue
            if not self._is_default_on_type(expr.callee.qpath, implemented):
                continue
            target = self._unit.path_def(owner, expr.callee)
            if target is not None and self._unit.trait_of_item(target) == default_trait:
                return finding(fn_def, expr, RecursionPattern.DEFAULT_NEW)
        return None

    def _is_default_on_type(self, qpath: QPath, implemented: TypeId) -> bool:
        """Path names `default` on the implemented type.

        Accepted forms: `Foo::default` resolved through its first segment,
        `Self::default`, and type-relative `<Foo>::default`.
        """
        match qpath:
            case ResolvedPath(segments=(first, *_, last)):
                return last.name == DEFAULT_METHOD and first.res == implemented
            case TypeRelativePath(qself=qself, segment=segment):
                if segment != DEFAULT_METHOD:
                    return False
                if qself.kind is HirTyKind.SELF_ALIAS:
                    return True
                return self._unit.hir_ty_def(qself) == implemented
            case _:
                return False
