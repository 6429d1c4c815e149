"""Operator recursion classifier.

Decides whether the single exit expression of an equality or
stringification trait method calls straight back into that same method:

    impl PartialEq for Foo {
        fn eq(&self, other: &Self) -> bool {
            self == other        // or self.eq(other)
        }
    }

    impl ToString for Foo {
        fn to_string(&self) -> String {
            self.to_string()
        }
    }

One call hop only: a helper that calls back is not followed.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from recursecheck.application._helpers import finding, impl_trait_id
from recursecheck.domain.diagnostic import RecursionPattern
from recursecheck.domain.hir import Binary, BinOp, MethodCall

if TYPE_CHECKING:
    from recursecheck.application.traits import TraitRegistry
    from recursecheck.domain.definitions import FnDef
    from recursecheck.domain.diagnostic import Finding
    from recursecheck.domain.hir import Expr
    from recursecheck.domain.ids import TraitId, TypeId
    from recursecheck.domain.ports import CompilationUnit

EQ_METHOD = "eq"
NE_METHOD = "ne"
TO_STRING_METHOD = "to_string"

_OPERATOR_FOR_METHOD = {
    EQ_METHOD: BinOp.EQ,
    NE_METHOD: BinOp.NE,
}


class OperatorRecursionClassifier:
    """Classifies exit expressions of `eq`, `ne` and `to_string`.

    Stateless apart from the shared TraitRegistry.
    """

    def __init__(self, unit: CompilationUnit, traits: TraitRegistry) -> None:
        """Initialize classifier.

        Args:
            unit: Compilation unit services
            traits: Registry of well-known traits
        """
        self._unit = unit
        self._traits = traits

    def check_partial_eq(self, fn_def: FnDef, expr: Expr) -> Finding | None:
        """Check an `eq`/`ne` method whose single exit expression is `expr`.

        Preconditions: receiver plus one argument of the same nominal type,
        inside an authored impl of the equality trait.

        Args:
            fn_def: Method being checked
            expr: Its single exit expression

        Returns:
            Finding if `expr` is `self == other` (`!=` for `ne`) or a call
            of the same trait method, None otherwise
        """
        operator = _OPERATOR_FOR_METHOD.get(fn_def.name)
        if operator is None or not fn_def.has_receiver or len(fn_def.inputs) != 2:
            return None

        self_ty, other_ty = fn_def.inputs
        self_id = self._unit.nominal_type(self_ty)
        other_id = self._unit.nominal_type(other_ty)
        if self_id is None or other_id is None or self_id != other_id:
            return None

        trait_id = impl_trait_id(self._unit, fn_def)
        if trait_id is None or trait_id != self._traits.partial_eq():
            return None

        match expr:
            case Binary(op=op, left=left, right=right) if op is operator:
                is_bad = self._operand_is(fn_def, left, self_id) and self._operand_is(
                    fn_def, right, other_id
                )
            case MethodCall(name=name, args=(_,)) if name == fn_def.name:
                is_bad = self._calls_trait_item(fn_def, expr, trait_id)
            case _:
                is_bad = False

        if not is_bad:
            return None
        return finding(fn_def, expr, RecursionPattern.PARTIAL_EQ)

    def check_to_string(self, fn_def: FnDef, expr: Expr) -> Finding | None:
        """Check a `to_string` method whose single exit expression is `expr`.

        Preconditions: receiver only, inside an authored impl of the
        stringification trait.

        Args:
            fn_def: Method being checked
            expr: Its single exit expression

        Returns:
            Finding if `expr` is a `to_string()` call resolving to the
            stringification trait, None otherwise
        """
        if fn_def.name != TO_STRING_METHOD or not fn_def.has_receiver or len(fn_def.inputs) != 1:
            return None

        trait_id = impl_trait_id(self._unit, fn_def)
        if trait_id is None or trait_id != self._traits.to_string():
            return None

        match expr:
            case MethodCall(name=name, args=()) if name == fn_def.name:
                is_bad = self._calls_trait_item(fn_def, expr, trait_id)
            case _:
                is_bad = False

        if not is_bad:
            return None
        return finding(fn_def, expr, RecursionPattern.TO_STRING)

    def _operand_is(self, fn_def: FnDef, operand: Expr, type_id: TypeId) -> bool:
        """Operand's type (typeck of the method body) peels to `type_id`."""
        ty = self._unit.expr_ty(fn_def.fn_id, operand)
        if ty is None:
            return False
        return self._unit.nominal_type(ty) == type_id

    def _calls_trait_item(self, fn_def: FnDef, call: MethodCall, trait_id: TraitId) -> bool:
        """Method call resolves to an item of `trait_id`.

        Unresolved or ambiguous targets count as no match.
        """
        target = self._unit.type_dependent_def(fn_def.fn_id, call)
        if target is None:
            return False
        return self._unit.trait_of_item(target) == trait_id
