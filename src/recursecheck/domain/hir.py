"""Typed expression tree (HIR) of function bodies.

Immutable nodes produced by the front end. Every expression carries an
ExprId and a Span; the type checker's results are keyed by ExprId and are
served through the CallResolution port, never stored on nodes.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from recursecheck.domain.ids import BindingId, ExprId, FunctionId, TypeId
    from recursecheck.domain.span import Span
    from recursecheck.domain.types import HirTy


class BinOp(Enum):
    """Binary operators."""

    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    REM = "%"
    AND = "&&"
    OR = "||"
    EQ = "=="
    NE = "!="
    LT = "<"
    LE = "<="
    GT = ">"
    GE = ">="


class UnOp(Enum):
    """Unary operators."""

    NOT = "!"
    NEG = "-"
    DEREF = "*"


# =============================================================================
# Paths
# =============================================================================


@dataclass(frozen=True, slots=True)
class PathSegment:
    """One segment of a resolved path.

    Attributes:
        name: Identifier of the segment
        res: Definition the segment resolves to, if any
    """

    name: str
    res: TypeId | FunctionId | None = None

    def __post_init__(self) -> None:
        """Validate invariants. FAIL-FIRST."""
        if not self.name:
            raise ValueError("segment name must not be empty")


@dataclass(frozen=True, slots=True)
class ResolvedPath:
    """Fully resolved path: `module::Type::item`."""

    segments: tuple[PathSegment, ...]

    def __post_init__(self) -> None:
        """Validate invariants. FAIL-FIRST."""
        if not self.segments:
            raise ValueError("path must have at least one segment")


@dataclass(frozen=True, slots=True)
class TypeRelativePath:
    """Associated item looked up on a type: `Self::item`, `Foo::item`."""

    qself: HirTy
    segment: str

    def __post_init__(self) -> None:
        """Validate invariants. FAIL-FIRST."""
        if not self.segment:
            raise ValueError("segment must not be empty")


@dataclass(frozen=True, slots=True)
class LocalPath:
    """Reference to a local variable binding."""

    binding: BindingId


QPath = ResolvedPath | TypeRelativePath | LocalPath


# =============================================================================
# Expressions
# =============================================================================


@dataclass(frozen=True, slots=True)
class ExprNode:
    """Common fields of all expressions."""

    expr_id: ExprId
    span: Span


@dataclass(frozen=True, slots=True)
class Literal(ExprNode):
    """Literal value, stored as its source text."""

    text: str = ""


@dataclass(frozen=True, slots=True)
class PathExpr(ExprNode):
    """Path used as a value: function item, constant, local variable."""

    qpath: QPath


@dataclass(frozen=True, slots=True)
class Call(ExprNode):
    """Direct call `callee(args)`."""

    callee: Expr
    args: tuple[Expr, ...] = ()


@dataclass(frozen=True, slots=True)
class MethodCall(ExprNode):
    """Method call `receiver.name(args)`; args exclude the receiver."""

    name: str
    receiver: Expr
    args: tuple[Expr, ...] = ()

    def __post_init__(self) -> None:
        """Validate invariants. FAIL-FIRST."""
        if not self.name:
            raise ValueError("method name must not be empty")


@dataclass(frozen=True, slots=True)
class Binary(ExprNode):
    """Binary operation `left op right`."""

    op: BinOp
    left: Expr
    right: Expr


@dataclass(frozen=True, slots=True)
class Unary(ExprNode):
    """Unary operation `op operand`."""

    op: UnOp
    operand: Expr


@dataclass(frozen=True, slots=True)
class Field(ExprNode):
    """Field access `base.name`."""

    base: Expr
    name: str


@dataclass(frozen=True, slots=True)
class AddrOf(ExprNode):
    """Borrow `&inner` or `&mut inner`."""

    inner: Expr
    mutable: bool = False


@dataclass(frozen=True, slots=True)
class StructLit(ExprNode):
    """Struct construction `Path { name: value, .. }`."""

    type_id: TypeId | None = None
    fields: tuple[tuple[str, Expr], ...] = ()


@dataclass(frozen=True, slots=True)
class Block(ExprNode):
    """Block `{ stmts; tail }`."""

    stmts: tuple[Stmt, ...] = ()
    tail: Expr | None = None


@dataclass(frozen=True, slots=True)
class If(ExprNode):
    """Conditional `if cond { then } else { else_ }`."""

    cond: Expr
    then: Expr
    else_: Expr | None = None


@dataclass(frozen=True, slots=True)
class Arm:
    """Match arm; the pattern is irrelevant to the analysis."""

    body: Expr
    guard: Expr | None = None


@dataclass(frozen=True, slots=True)
class Match(ExprNode):
    """Match expression."""

    scrutinee: Expr
    arms: tuple[Arm, ...] = ()


@dataclass(frozen=True, slots=True)
class Loop(ExprNode):
    """Unconditional loop; exits only through break/return."""

    body: Block


@dataclass(frozen=True, slots=True)
class Break(ExprNode):
    """Break out of a loop, optionally with a value."""

    value: Expr | None = None


@dataclass(frozen=True, slots=True)
class Return(ExprNode):
    """Early return, optionally with a value."""

    value: Expr | None = None


@dataclass(frozen=True, slots=True)
class Closure(ExprNode):
    """Closure; its body is a separate body owned by `owner`."""

    owner: FunctionId
    body: Expr


Expr = (
    Literal
    | PathExpr
    | Call
    | MethodCall
    | Binary
    | Unary
    | Field
    | AddrOf
    | StructLit
    | Block
    | If
    | Match
    | Loop
    | Break
    | Return
    | Closure
)


# =============================================================================
# Statements and bodies
# =============================================================================


@dataclass(frozen=True, slots=True)
class Let:
    """Local binding `let [mut] binding = init;`."""

    binding: BindingId
    span: Span
    init: Expr | None = None
    mutable: bool = False


@dataclass(frozen=True, slots=True)
class ExprStmt:
    """Expression evaluated for its side effects `expr;`."""

    expr: Expr
    span: Span


Stmt = Let | ExprStmt


@dataclass(frozen=True, slots=True)
class Body:
    """Body of a function or closure.

    Attributes:
        owner: Function owning the body
        value: Root expression (usually a Block)
        is_coroutine: async fn / generator body
    """

    owner: FunctionId
    value: Expr
    is_coroutine: bool = False


# =============================================================================
# Traversal helpers
# =============================================================================


def stmt_children(stmt: Stmt) -> Iterator[Expr]:
    """Expressions directly contained in a statement."""
    match stmt:
        case Let(init=init) if init is not None:
            yield init
        case ExprStmt(expr=expr):
            yield expr


def children(expr: Expr, *, enter_closures: bool = False) -> Iterator[Expr]:
    """Direct sub-expressions in evaluation order.

    Args:
        expr: Parent expression
        enter_closures: Also yield closure bodies (they are separate bodies)

    Yields:
        Child expressions
    """
    match expr:
        case Call(callee=callee, args=args):
            yield callee
            yield from args
        case MethodCall(receiver=receiver, args=args):
            yield receiver
            yield from args
        case Binary(left=left, right=right):
            yield left
            yield right
        case Unary(operand=operand):
            yield operand
        case Field(base=base):
            yield base
        case AddrOf(inner=inner):
            yield inner
        case StructLit(fields=fields):
            for _, value in fields:
                yield value
        case Block(stmts=stmts, tail=tail):
            for stmt in stmts:
                yield from stmt_children(stmt)
            if tail is not None:
                yield tail
        case If(cond=cond, then=then, else_=else_):
            yield cond
            yield then
            if else_ is not None:
                yield else_
        case Match(scrutinee=scrutinee, arms=arms):
            yield scrutinee
            for arm in arms:
                if arm.guard is not None:
                    yield arm.guard
                yield arm.body
        case Loop(body=body):
            yield body
        case Break(value=value) | Return(value=value) if value is not None:
            yield value
        case Closure(body=body) if enter_closures:
            yield body


def walk_post_order(expr: Expr, *, enter_closures: bool = False) -> Iterator[Expr]:
    """Every expression of a tree, children before parents."""
    for child in children(expr, enter_closures=enter_closures):
        yield from walk_post_order(child, enter_closures=enter_closures)
    yield expr
