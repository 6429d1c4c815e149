"""In-memory compilation unit: reference front end for the domain ports.

UnitBuilder assembles definitions, bodies and type-check results;
build() freezes them into an InMemoryUnit that implements every port the
rule consumes. Used by tests and by embedders that already hold a typed
tree from another front end.

Type-check results are keyed by (body owner, expression). Closures share
the results of the function they appear in.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import TYPE_CHECKING

from recursecheck.domain.definitions import FnDef, ImplBlock, TraitDef
from recursecheck.domain.exceptions import DuplicateDefinitionError, UnknownDefinitionError
from recursecheck.domain.hir import (
    AddrOf,
    Arm,
    Binary,
    Block,
    Body,
    Break,
    Call,
    Closure,
    ExprStmt,
    Field,
    If,
    Let,
    Literal,
    LocalPath,
    Loop,
    Match,
    MethodCall,
    PathExpr,
    PathSegment,
    ResolvedPath,
    Return,
    StructLit,
    TypeRelativePath,
    Unary,
    walk_post_order,
)
from recursecheck.domain.ids import BindingId, ExprId, FunctionId, ImplId, TraitId, TypeId
from recursecheck.domain.span import Span
from recursecheck.domain.types import AdtTy, ForeignTy, HirTy, HirTyKind, peel_refs

if TYPE_CHECKING:
    from collections.abc import Mapping

    from recursecheck.domain.hir import BinOp, Expr, Stmt, UnOp
    from recursecheck.domain.types import Ty

_TypeckKey = tuple[FunctionId, ExprId]


@dataclass(frozen=True, slots=True)
class InMemoryUnit:
    """Immutable compilation unit implementing CompilationUnit.

    Attributes:
        fns: All functions, local and external (trait declarations)
        impls: All impl blocks
        traits: All trait definitions
        type_names: Label of every nominal type
        body_owners: Expression -> function whose body contains it
        expr_types: Typeck expression types
        type_dependent: Typeck resolutions of method calls and
            type-relative paths
    """

    fns: Mapping[FunctionId, FnDef]
    impls: Mapping[ImplId, ImplBlock]
    traits: Mapping[TraitId, TraitDef]
    type_names: Mapping[TypeId, str]
    body_owners: Mapping[ExprId, FunctionId]
    expr_types: Mapping[_TypeckKey, Ty]
    type_dependent: Mapping[_TypeckKey, FunctionId]
    _trait_items: Mapping[FunctionId, TraitId] = field(default_factory=dict)
    _traits_by_path: Mapping[tuple[str, ...], TraitId] = field(default_factory=dict)

    # -- DefinitionIndex -----------------------------------------------------

    def function(self, fn_id: FunctionId) -> FnDef | None:
        """Definition of a function, None if unknown."""
        return self.fns.get(fn_id)

    def impl_block(self, impl_id: ImplId) -> ImplBlock | None:
        """Implementation block, None if unknown."""
        return self.impls.get(impl_id)

    def functions(self) -> Iterable[FnDef]:
        """Local function definitions in FunctionId order."""
        return tuple(
            fn_def
            for fn_id, fn_def in sorted(self.fns.items(), key=lambda kv: kv[0].index)
            if fn_def.is_local
        )

    def trait_impls(self, trait_id: TraitId) -> Iterable[ImplBlock]:
        """Impl blocks of a trait in ImplId order."""
        return tuple(
            impl
            for impl_id, impl in sorted(self.impls.items(), key=lambda kv: kv[0].index)
            if impl.trait_id == trait_id
        )

    def enclosing_body_owner(self, expr_id: ExprId) -> FunctionId | None:
        """Function whose body contains the expression."""
        return self.body_owners.get(expr_id)

    # -- TypeIdentity --------------------------------------------------------

    def nominal_type(self, ty: Ty) -> TypeId | None:
        """Struct/enum/foreign type under any number of references."""
        match peel_refs(ty):
            case AdtTy(type_id=type_id) | ForeignTy(type_id=type_id):
                return type_id
            case _:
                return None

    def hir_ty_def(self, hir_ty: HirTy) -> TypeId | TraitId | None:
        """Definition a written type refers to."""
        match hir_ty.kind:
            case HirTyKind.RESOLVED:
                return hir_ty.type_id
            case HirTyKind.PROJECTION:
                return hir_ty.trait_id
            case _:
                return None

    # -- CallResolution ------------------------------------------------------

    def expr_ty(self, owner: FunctionId, expr: Expr) -> Ty | None:
        """Type of an expression in the typeck results of `owner`."""
        return self.expr_types.get((owner, expr.expr_id))

    def type_dependent_def(self, owner: FunctionId, expr: Expr) -> FunctionId | None:
        """Resolved target of a method call or type-relative path."""
        return self.type_dependent.get((owner, expr.expr_id))

    def path_def(self, owner: FunctionId, expr: Expr) -> FunctionId | None:
        """Function a path expression refers to."""
        if not isinstance(expr, PathExpr):
            return None
        match expr.qpath:
            case ResolvedPath(segments=segments):
                res = segments[-1].res
                return res if isinstance(res, FunctionId) else None
            case TypeRelativePath():
                return self.type_dependent_def(owner, expr)
            case _:
                return None

    def trait_of_item(self, fn_id: FunctionId) -> TraitId | None:
        """Trait declaring the function, None for impl and free functions."""
        return self._trait_items.get(fn_id)

    # -- TraitLookup ---------------------------------------------------------

    def trait_by_path(self, path: tuple[str, ...]) -> TraitId | None:
        """Trait at a canonical path."""
        return self._traits_by_path.get(tuple(path))

    # -- Convenience ---------------------------------------------------------

    def trait_def(self, trait_id: TraitId) -> TraitDef | None:
        """Trait definition, None if unknown."""
        return self.traits.get(trait_id)


@dataclass(slots=True)
class _PendingImpl:
    self_ty: HirTy
    trait_id: TraitId | None
    is_derived: bool
    is_blanket: bool
    items: list[FunctionId] = field(default_factory=list)


class UnitBuilder:
    """Mutable builder for InMemoryUnit.

    Hands out ids and spans, records type-check results while expressions
    are created, then freezes everything with build().

    Example:
        b = UnitBuilder()
        foo = b.type_("Foo")
        partial_eq = b.trait_(("core", "cmp", "PartialEq"), methods=("eq", "ne"))
        impl = b.impl(HirTy.resolved(foo), trait_id=partial_eq.trait_id)
        self_ = b.param("self", RefTy(AdtTy(foo)))
        other = b.param("other", RefTy(AdtTy(foo)))
        b.fn(
            "eq",
            body=b.block(tail=b.binary(BinOp.EQ, self_, other, ty=BOOL)),
            impl_id=impl,
            has_receiver=True,
            inputs=(RefTy(AdtTy(foo)), RefTy(AdtTy(foo))),
        )
        unit = b.build()
    """

    def __init__(self, file: Path | str = Path("src/lib.rs")) -> None:
        """Initialize empty builder.

        Args:
            file: Source file used for generated spans
        """
        self._file = Path(file)
        self._next_index = 0
        self._next_line = 1

        self._fns: dict[FunctionId, FnDef] = {}
        self._reserved: set[FunctionId] = set()
        self._impls: dict[ImplId, _PendingImpl] = {}
        self._traits: dict[TraitId, TraitDef] = {}
        self._type_names: dict[TypeId, str] = {}
        self._trait_items: dict[FunctionId, TraitId] = {}

        self._expr_types: dict[ExprId, Ty] = {}
        self._type_dependent: dict[ExprId, FunctionId] = {}

    # -- ids and spans -------------------------------------------------------

    def _index(self) -> int:
        index = self._next_index
        self._next_index += 1
        return index

    def span(self, lines: int = 1) -> Span:
        """Next free span of `lines` lines."""
        if lines < 1:
            raise ValueError(f"lines must be >= 1, got {lines}")
        line = self._next_line
        self._next_line += lines
        return Span(file=self._file, line=line, column=0, end_line=line + lines - 1)

    def _expr_id(self, label: str) -> ExprId:
        return ExprId(self._index(), label)

    def _record(self, expr: Expr, ty: Ty | None, target: FunctionId | None = None) -> Expr:
        if ty is not None:
            self._expr_types[expr.expr_id] = ty
        if target is not None:
            self._type_dependent[expr.expr_id] = target
        return expr

    # -- definitions ---------------------------------------------------------

    def type_(self, name: str) -> TypeId:
        """Declare a nominal type."""
        type_id = TypeId(self._index(), name)
        self._type_names[type_id] = name
        return type_id

    def trait_(self, path: tuple[str, ...], methods: tuple[str, ...] = ()) -> TraitDef:
        """Declare a trait with bodiless method declarations.

        Raises:
            DuplicateDefinitionError: If a trait already has this path
        """
        path = tuple(path)
        if not path or not all(path):
            raise ValueError(f"trait path must be non-empty names, got {path!r}")
        if any(t.path == path for t in self._traits.values()):
            raise DuplicateDefinitionError("trait", "::".join(path))

        trait_id = TraitId(self._index(), path[-1])
        items: list[FunctionId] = []
        for name in methods:
            fn_id = FunctionId(self._index(), f"{path[-1]}::{name}")
            self._fns[fn_id] = FnDef(fn_id=fn_id, name=name, span=self.span(), is_local=False)
            self._trait_items[fn_id] = trait_id
            items.append(fn_id)

        trait_def = TraitDef(trait_id=trait_id, path=path, items=tuple(items))
        self._traits[trait_id] = trait_def
        return trait_def

    def trait_method(self, trait_def: TraitDef, name: str) -> FunctionId:
        """Declared method of a trait.

        Raises:
            UnknownDefinitionError: If the trait declares no such method
        """
        for fn_id in trait_def.items:
            if self._fns[fn_id].name == name:
                return fn_id
        raise UnknownDefinitionError("trait method", f"{trait_def.name}::{name}")

    def impl(
        self,
        self_ty: HirTy,
        trait_id: TraitId | None = None,
        *,
        derived: bool = False,
        blanket: bool = False,
    ) -> ImplId:
        """Open an impl block; functions join it through fn(impl_id=...)."""
        if trait_id is not None and trait_id not in self._traits:
            raise UnknownDefinitionError("trait", trait_id)
        impl_id = ImplId(self._index(), "impl")
        self._impls[impl_id] = _PendingImpl(
            self_ty=self_ty,
            trait_id=trait_id,
            is_derived=derived,
            is_blanket=blanket,
        )
        return impl_id

    def reserve_fn(self, name: str) -> FunctionId:
        """Reserve a FunctionId before the function is defined.

        Needed for forward references: `default` calling `new` before
        `new` exists.
        """
        fn_id = FunctionId(self._index(), name)
        self._reserved.add(fn_id)
        return fn_id

    def fn(
        self,
        name: str,
        body: Expr | None = None,
        *,
        impl_id: ImplId | None = None,
        has_receiver: bool = False,
        inputs: tuple[Ty, ...] = (),
        fn_id: FunctionId | None = None,
        is_local: bool = True,
        is_coroutine: bool = False,
        span: Span | None = None,
    ) -> FnDef:
        """Define a function.

        Args:
            name: Function name
            body: Root expression of the body, None for a declaration
            impl_id: Enclosing impl block
            has_receiver: Instance method
            inputs: Input types, receiver first
            fn_id: Previously reserved id
            is_local: Defined in this unit
            is_coroutine: async body
            span: Definition span (generated if None)

        Returns:
            The registered definition

        Raises:
            DuplicateDefinitionError: If fn_id is already defined
            UnknownDefinitionError: If impl_id or fn_id was never handed out
        """
        if fn_id is None:
            fn_id = FunctionId(self._index(), name)
        elif fn_id in self._fns:
            raise DuplicateDefinitionError("function", fn_id)
        elif fn_id not in self._reserved:
            raise UnknownDefinitionError("reserved function", fn_id)

        if impl_id is not None and impl_id not in self._impls:
            raise UnknownDefinitionError("impl", impl_id)

        fn_def = FnDef(
            fn_id=fn_id,
            name=name,
            span=span or self.span(),
            has_receiver=has_receiver,
            inputs=inputs,
            body=None if body is None else Body(owner=fn_id, value=body, is_coroutine=is_coroutine),
            impl_id=impl_id,
            is_local=is_local,
        )
        self._fns[fn_id] = fn_def
        self._reserved.discard(fn_id)
        if impl_id is not None:
            self._impls[impl_id].items.append(fn_id)
        return fn_def

    # -- bindings and paths --------------------------------------------------

    def binding(self, name: str) -> BindingId:
        """Fresh local binding."""
        return BindingId(self._index(), name)

    def local(self, binding: BindingId, ty: Ty | None = None) -> PathExpr:
        """Use of a local binding."""
        expr = PathExpr(self._expr_id(binding.label), self.span(), LocalPath(binding))
        self._record(expr, ty)
        return expr

    def param(self, name: str, ty: Ty | None = None) -> PathExpr:
        """Fresh parameter binding, returned as a use of it."""
        return self.local(self.binding(name), ty)

    def path(self, *segments: tuple[str, TypeId | FunctionId | None], ty: Ty | None = None) -> PathExpr:
        """Resolved path, e.g. path(("Foo", foo), ("new", new_id))."""
        qpath = ResolvedPath(tuple(PathSegment(name, res) for name, res in segments))
        label = "::".join(name for name, _ in segments)
        expr = PathExpr(self._expr_id(label), self.span(), qpath)
        self._record(expr, ty)
        return expr

    def type_relative(
        self,
        qself: HirTy,
        segment: str,
        target: FunctionId | None = None,
        ty: Ty | None = None,
    ) -> PathExpr:
        """Type-relative path such as `Self::new`; `target` is its typeck resolution."""
        expr = PathExpr(self._expr_id(segment), self.span(), TypeRelativePath(qself, segment))
        self._record(expr, ty, target)
        return expr

    # -- expressions ---------------------------------------------------------

    def lit(self, text: str, ty: Ty | None = None) -> Literal:
        """Literal."""
        expr = Literal(self._expr_id("lit"), self.span(), text)
        self._record(expr, ty)
        return expr

    def call(self, callee: Expr, *args: Expr, ty: Ty | None = None) -> Call:
        """Direct call."""
        expr = Call(self._expr_id("call"), self.span(), callee, tuple(args))
        self._record(expr, ty)
        return expr

    def method_call(
        self,
        receiver: Expr,
        name: str,
        *args: Expr,
        target: FunctionId | None = None,
        ty: Ty | None = None,
    ) -> MethodCall:
        """Method call; `target` is its typeck resolution."""
        expr = MethodCall(self._expr_id(name), self.span(), name, receiver, tuple(args))
        self._record(expr, ty, target)
        return expr

    def binary(self, op: BinOp, left: Expr, right: Expr, ty: Ty | None = None) -> Binary:
        """Binary operation."""
        expr = Binary(self._expr_id(op.value), self.span(), op, left, right)
        self._record(expr, ty)
        return expr

    def unary(self, op: UnOp, operand: Expr, ty: Ty | None = None) -> Unary:
        """Unary operation."""
        expr = Unary(self._expr_id(op.value), self.span(), op, operand)
        self._record(expr, ty)
        return expr

    def field_(self, base: Expr, name: str, ty: Ty | None = None) -> Field:
        """Field access."""
        expr = Field(self._expr_id(name), self.span(), base, name)
        self._record(expr, ty)
        return expr

    def addr_of(self, inner: Expr, *, mutable: bool = False, ty: Ty | None = None) -> AddrOf:
        """Borrow."""
        expr = AddrOf(self._expr_id("&"), self.span(), inner, mutable)
        self._record(expr, ty)
        return expr

    def struct_lit(
        self,
        type_id: TypeId,
        fields: tuple[tuple[str, Expr], ...] = (),
        ty: Ty | None = None,
    ) -> StructLit:
        """Struct construction."""
        expr = StructLit(self._expr_id("struct"), self.span(), type_id, tuple(fields))
        self._record(expr, ty if ty is not None else AdtTy(type_id))
        return expr

    def block(self, *stmts: Stmt, tail: Expr | None = None, ty: Ty | None = None) -> Block:
        """Block with statements and optional trailing expression."""
        expr = Block(self._expr_id("block"), self.span(), tuple(stmts), tail)
        self._record(expr, ty)
        return expr

    def if_(self, cond: Expr, then: Expr, else_: Expr | None = None, ty: Ty | None = None) -> If:
        """Conditional."""
        expr = If(self._expr_id("if"), self.span(), cond, then, else_)
        self._record(expr, ty)
        return expr

    def match_(self, scrutinee: Expr, *arms: Expr | Arm, ty: Ty | None = None) -> Match:
        """Match; bare expressions become unguarded arms."""
        arm_nodes = tuple(arm if isinstance(arm, Arm) else Arm(arm) for arm in arms)
        expr = Match(self._expr_id("match"), self.span(), scrutinee, arm_nodes)
        self._record(expr, ty)
        return expr

    def loop(self, body: Block) -> Loop:
        """Unconditional loop."""
        return Loop(self._expr_id("loop"), self.span(), body)

    def break_(self, value: Expr | None = None) -> Break:
        """Break."""
        return Break(self._expr_id("break"), self.span(), value)

    def return_(self, value: Expr | None = None) -> Return:
        """Early return."""
        return Return(self._expr_id("return"), self.span(), value)

    def closure(self, body: Expr, owner: FunctionId | None = None) -> Closure:
        """Closure expression; `owner` defaults to a fresh id."""
        closure_owner = owner or FunctionId(self._index(), "{closure}")
        return Closure(self._expr_id("closure"), self.span(), closure_owner, body)

    # -- statements ----------------------------------------------------------

    def let(self, binding: BindingId, init: Expr | None = None, *, mutable: bool = False) -> Let:
        """`let` statement."""
        return Let(binding=binding, span=self.span(), init=init, mutable=mutable)

    def stmt(self, expr: Expr) -> ExprStmt:
        """Expression statement."""
        return ExprStmt(expr=expr, span=expr.span)

    # -- build ---------------------------------------------------------------

    def build(self) -> InMemoryUnit:
        """Freeze into an InMemoryUnit.

        Raises:
            UnknownDefinitionError: If a reserved function was never defined
        """
        if self._reserved:
            missing = min(self._reserved, key=lambda f: f.index)
            raise UnknownDefinitionError("function (reserved, never defined)", missing)

        impls = {
            impl_id: ImplBlock(
                impl_id=impl_id,
                self_ty=pending.self_ty,
                trait_id=pending.trait_id,
                is_derived=pending.is_derived,
                is_blanket=pending.is_blanket,
                items=tuple(pending.items),
            )
            for impl_id, pending in self._impls.items()
        }

        body_owners: dict[ExprId, FunctionId] = {}
        for fn_id, fn_def in self._fns.items():
            if fn_def.body is None:
                continue
            for expr in walk_post_order(fn_def.body.value, enter_closures=True):
                body_owners[expr.expr_id] = fn_id

        expr_types: dict[_TypeckKey, Ty] = {}
        for expr_id, ty in self._expr_types.items():
            owner = body_owners.get(expr_id)
            if owner is not None:
                expr_types[(owner, expr_id)] = ty

        type_dependent: dict[_TypeckKey, FunctionId] = {}
        for expr_id, target in self._type_dependent.items():
            owner = body_owners.get(expr_id)
            if owner is not None:
                type_dependent[(owner, expr_id)] = target

        return InMemoryUnit(
            fns=MappingProxyType(dict(self._fns)),
            impls=MappingProxyType(impls),
            traits=MappingProxyType(dict(self._traits)),
            type_names=MappingProxyType(dict(self._type_names)),
            body_owners=MappingProxyType(body_owners),
            expr_types=MappingProxyType(expr_types),
            type_dependent=MappingProxyType(type_dependent),
            _trait_items=MappingProxyType(dict(self._trait_items)),
            _traits_by_path=MappingProxyType({t.path: t.trait_id for t in self._traits.values()}),
        )
