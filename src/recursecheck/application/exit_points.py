"""Exit point collection for function bodies.

An exit point is an expression whose value can become the body's result:
the value of every `return` plus the trailing expression, followed through
blocks, `if` branches and `match` arms.

Structural only: no reachability analysis. Closure bodies are separate
bodies and are never entered.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from recursecheck.domain.hir import (
    Block,
    If,
    Let,
    LocalPath,
    Match,
    PathExpr,
    Return,
    children,
    stmt_children,
    walk_post_order,
)

if TYPE_CHECKING:
    from recursecheck.domain.hir import Body, Expr
    from recursecheck.domain.ids import BindingId


def collect_exit_points(body: Body) -> tuple[Expr, ...]:
    """Collect the expressions that can become the body's result.

    Tail tracking starts only for non-coroutine bodies whose value is a
    block with a trailing expression; otherwise only `return` values count.

    Args:
        body: Function body

    Returns:
        Exit expressions in source order (empty for diverging bodies)
    """
    value = body.value
    in_tail = not body.is_coroutine and isinstance(value, Block) and value.tail is not None

    exits: list[Expr] = []
    _visit(value, in_tail=in_tail, exits=exits)
    return tuple(exits)


def _visit(expr: Expr, *, in_tail: bool, exits: list[Expr]) -> None:
    match expr:
        case Return(value=value) if value is not None:
            exits.append(value)

        case Block(stmts=stmts, tail=tail) if in_tail:
            for stmt in stmts:
                for child in stmt_children(stmt):
                    _visit(child, in_tail=False, exits=exits)
            if tail is not None:
                _visit(tail, in_tail=True, exits=exits)

        case If(then=then, else_=else_) if in_tail:
            _visit(then, in_tail=True, exits=exits)
            if else_ is not None:
                _visit(else_, in_tail=True, exits=exits)

        case Match(arms=arms) if in_tail:
            for arm in arms:
                _visit(arm.body, in_tail=True, exits=exits)

        # Outside the tail: walk everything looking for `return`.
        case _ if not in_tail:
            for child in children(expr):
                _visit(child, in_tail=False, exits=exits)

        case _:
            exits.append(expr)


def has_conditional_return(body: Body, expr: Expr) -> bool:
    """Check whether the body may return through something other than `expr`.

    Args:
        body: Function body
        expr: Candidate expression (the peeled tail)

    Returns:
        False only for a single exit point that is `expr`;
        True for no exit points or any other shape
    """
    match collect_exit_points(body):
        case (single,):
            return single.expr_id != expr.expr_id
        case _:
            return True


def peel_blocks(expr: Expr) -> Expr:
    """Unwrap blocks that contain nothing but a trailing expression."""
    while isinstance(expr, Block) and not expr.stmts and expr.tail is not None:
        expr = expr.tail
    return expr


def expr_or_init(body: Body, expr: Expr) -> Expr:
    """Follow local variables to the expression they were initialised with.

    Only immutable `let` bindings with an initialiser in the same body
    are followed.

    Args:
        body: Body containing the bindings
        expr: Starting expression

    Returns:
        Initialiser expression, or `expr` itself
    """
    inits = _binding_inits(body)
    seen: set[BindingId] = set()
    while isinstance(expr, PathExpr) and isinstance(expr.qpath, LocalPath):
        binding = expr.qpath.binding
        init = inits.get(binding)
        if init is None or binding in seen:
            break
        seen.add(binding)
        expr = init
    return expr


def _binding_inits(body: Body) -> dict[BindingId, Expr]:
    """Map immutable bindings of a body to their initialisers."""
    inits: dict[BindingId, Expr] = {}
    for node in walk_post_order(body.value):
        if not isinstance(node, Block):
            continue
        for stmt in node.stmts:
            if isinstance(stmt, Let) and not stmt.mutable and stmt.init is not None:
                inits[stmt.binding] = stmt.init
    return inits


def candidate_expr(body: Body) -> Expr:
    """Expression the classifiers inspect: the body value, followed and peeled."""
    return peel_blocks(expr_or_init(body, body.value))
