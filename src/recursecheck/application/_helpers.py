"""Lookups shared by the classifiers."""

from __future__ import annotations

from typing import TYPE_CHECKING

from recursecheck.domain.diagnostic import Finding

if TYPE_CHECKING:
    from recursecheck.domain.definitions import FnDef, ImplBlock
    from recursecheck.domain.diagnostic import RecursionPattern
    from recursecheck.domain.hir import Expr
    from recursecheck.domain.ids import TraitId
    from recursecheck.domain.ports import DefinitionIndex


def enclosing_impl(index: DefinitionIndex, fn_def: FnDef) -> ImplBlock | None:
    """Impl block directly containing a function."""
    if fn_def.impl_id is None:
        return None
    return index.impl_block(fn_def.impl_id)


def impl_trait_id(index: DefinitionIndex, fn_def: FnDef) -> TraitId | None:
    """Trait implemented by the function's impl block.

    Derived impl blocks are skipped: generated code is presumed correct.

    Returns:
        TraitId for an authored trait impl, None otherwise
    """
    impl = enclosing_impl(index, fn_def)
    if impl is None or impl.is_derived:
        return None
    return impl.trait_id


def finding(fn_def: FnDef, expr: Expr, pattern: RecursionPattern) -> Finding:
    """Finding with the definition as primary site and `expr` as call site."""
    return Finding(
        function=fn_def.fn_id,
        method_span=fn_def.span,
        call_span=expr.span,
        pattern=pattern,
    )
