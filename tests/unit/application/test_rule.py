"""Tests for RecursionRule and DiagnosticCollector.

Tests:
- Exit-point gate: zero or several exits never report
- One diagnostic per finding, with definition and call-site spans
- Configuration: level, pattern selection
- Derived impls never report
"""

import logging
import threading

import pytest

from recursecheck.application.rule import DiagnosticCollector, RecursionRule
from recursecheck.domain.configuration import RuleConfig
from recursecheck.domain.diagnostic import (
    NOTE_MESSAGE,
    PRIMARY_MESSAGE,
    RULE_NAME,
    Diagnostic,
    Level,
    RecursionPattern,
)
from recursecheck.domain.hir import BinOp
from recursecheck.domain.ids import FunctionId
from recursecheck.domain.types import HirTy
from tests.factories import (
    BOOL,
    STRING,
    add_default_new_pair,
    add_eq_method,
    add_to_string_method,
    declare_std,
    eq_self_other,
    make_builder,
    make_span,
    self_ref,
)


def make_rule(unit, config: RuleConfig | None = None) -> tuple[RecursionRule, DiagnosticCollector]:
    """Rule plus the collector it emits into."""
    sink = DiagnosticCollector()
    return RecursionRule(unit, sink, config), sink


def make_diagnostic(line: int, index: int = 0) -> Diagnostic:
    """Diagnostic at a given line."""
    return Diagnostic(
        function=FunctionId(index, "f"),
        pattern=RecursionPattern.PARTIAL_EQ,
        primary_span=make_span(line=line),
        note_span=make_span(line=line + 1),
    )


class TestDiagnosticCollector:
    """Tests for DiagnosticCollector."""

    def test_empty(self) -> None:
        sink = DiagnosticCollector()

        assert len(sink) == 0
        assert sink.diagnostics == ()

    def test_keeps_emission_order(self) -> None:
        sink = DiagnosticCollector()
        late, early = make_diagnostic(10), make_diagnostic(1)

        sink.emit(late)
        sink.emit(early)

        assert sink.diagnostics == (late, early)

    def test_concurrent_emit(self) -> None:
        sink = DiagnosticCollector()

        def emit_many(offset: int) -> None:
            for i in range(50):
                sink.emit(make_diagnostic(offset + i + 1))

        threads = [threading.Thread(target=emit_many, args=(n * 100,)) for n in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(sink) == 200


class TestRecursionRuleInit:
    """Constructor validation."""

    def test_none_unit_raises(self) -> None:
        with pytest.raises(TypeError, match="unit must not be None"):
            RecursionRule(None, DiagnosticCollector())  # type: ignore[arg-type]

    def test_none_sink_raises(self) -> None:
        with pytest.raises(TypeError, match="sink must not be None"):
            RecursionRule(make_builder().build(), None)  # type: ignore[arg-type]

    def test_default_config(self) -> None:
        rule, _ = make_rule(make_builder().build())

        assert rule.config == RuleConfig()
        assert rule.delegates.is_built is False


class TestRecursionRuleGate:
    """Exit-point gate."""

    def test_two_exits_never_report(self) -> None:
        """`if c { return self == other; } true` is not flagged."""
        b = make_builder()
        std = declare_std(b)
        foo = b.type_("Foo")
        impl = b.impl(HirTy.resolved(foo), std.partial_eq.trait_id)
        self_ = b.param("self", self_ref(foo))
        other = b.param("other", self_ref(foo))
        early = b.return_(b.binary(BinOp.EQ, self_, other, ty=BOOL))
        body = b.block(
            b.stmt(b.if_(b.lit("c", ty=BOOL), b.block(b.stmt(early)))),
            tail=b.lit("true", ty=BOOL),
        )
        fn_def = b.fn("eq", body, impl_id=impl, has_receiver=True, inputs=(self_ref(foo), self_ref(foo)))
        rule, sink = make_rule(b.build())

        assert rule.check_method(fn_def) == ()
        assert len(sink) == 0

    def test_recursive_branch_never_reports(self) -> None:
        """`if c { self == other } else { true }` is not flagged."""
        b = make_builder()
        std = declare_std(b)
        foo = b.type_("Foo")

        def tail(b, self_, other):
            return b.if_(
                b.lit("c", ty=BOOL),
                b.block(tail=b.binary(BinOp.EQ, self_, other, ty=BOOL)),
                b.block(tail=b.lit("true", ty=BOOL)),
                ty=BOOL,
            )

        fn_def = add_eq_method(b, std, foo, tail)
        rule, sink = make_rule(b.build())

        assert rule.check_method(fn_def) == ()

    def test_factory_without_tail_never_reports(self) -> None:
        """`fn new() { Self::default(); }` has no exit point and is not flagged."""
        b = make_builder()
        std = declare_std(b)
        foo = b.type_("Foo")
        default_trait_fn = b.trait_method(std.default, "default")
        new_id = b.reserve_fn("new")
        inherent = b.impl(HirTy.resolved(foo))
        back_call = b.call(b.type_relative(HirTy.self_alias(), "default", target=default_trait_fn))
        new = b.fn("new", b.block(b.stmt(back_call)), impl_id=inherent, fn_id=new_id)
        default_impl = b.impl(HirTy.resolved(foo), std.default.trait_id)
        b.fn(
            "default",
            b.block(tail=b.call(b.type_relative(HirTy.self_alias(), "new", target=new_id))),
            impl_id=default_impl,
        )
        rule, sink = make_rule(b.build())

        assert rule.check_method(new) == ()
        assert len(sink) == 0

    def test_coroutine_body_never_reports(self) -> None:
        """An async `eq` whose tail is `self == other` has no exit point."""
        b = make_builder()
        std = declare_std(b)
        foo = b.type_("Foo")
        impl = b.impl(HirTy.resolved(foo), std.partial_eq.trait_id)
        self_ = b.param("self", self_ref(foo))
        other = b.param("other", self_ref(foo))
        body = b.block(tail=b.binary(BinOp.EQ, self_, other, ty=BOOL))
        fn_def = b.fn(
            "eq",
            body,
            impl_id=impl,
            has_receiver=True,
            inputs=(self_ref(foo), self_ref(foo)),
            is_coroutine=True,
        )
        rule, sink = make_rule(b.build())

        assert rule.check_method(fn_def) == ()
        assert len(sink) == 0

    def test_free_function_is_skipped(self) -> None:
        b = make_builder()
        declare_std(b)
        fn_def = b.fn("eq", b.block(tail=b.lit("true", ty=BOOL)))
        rule, sink = make_rule(b.build())

        assert rule.check_method(fn_def) == ()

    def test_bodiless_method_is_skipped(self) -> None:
        b = make_builder()
        std = declare_std(b)
        trait_fn = b.trait_method(std.partial_eq, "eq")
        unit = b.build()
        rule, _ = make_rule(unit)

        assert rule.check_method(unit.function(trait_fn)) == ()


class TestRecursionRuleFindings:
    """Diagnostics for each pattern."""

    def test_partial_eq_reports_once(self) -> None:
        b = make_builder()
        std = declare_std(b)
        foo = b.type_("Foo")
        fn_def = add_eq_method(b, std, foo, eq_self_other())
        rule, sink = make_rule(b.build())

        diagnostics = rule.check_method(fn_def)

        assert len(diagnostics) == 1
        diagnostic = diagnostics[0]
        assert diagnostic.function == fn_def.fn_id
        assert diagnostic.pattern is RecursionPattern.PARTIAL_EQ
        assert diagnostic.primary_span == fn_def.span
        assert diagnostic.note_span == fn_def.body.value.tail.span
        assert diagnostic.rule_name == RULE_NAME
        assert diagnostic.primary_message == PRIMARY_MESSAGE
        assert diagnostic.note_message == NOTE_MESSAGE
        assert sink.diagnostics == diagnostics

    def test_ne_operator_in_eq_is_clean(self) -> None:
        b = make_builder()
        std = declare_std(b)
        foo = b.type_("Foo")
        fn_def = add_eq_method(b, std, foo, eq_self_other(BinOp.NE))
        rule, _ = make_rule(b.build())

        assert rule.check_method(fn_def) == ()

    def test_ne_operator_in_ne_reports(self) -> None:
        b = make_builder()
        std = declare_std(b)
        foo = b.type_("Foo")
        fn_def = add_eq_method(b, std, foo, eq_self_other(BinOp.NE), name="ne")
        rule, _ = make_rule(b.build())

        assert len(rule.check_method(fn_def)) == 1

    def test_let_bound_comparison_is_clean(self) -> None:
        """`let r = self == other; r` has a statement before the exit."""
        b = make_builder()
        std = declare_std(b)
        foo = b.type_("Foo")
        r = b.binding("r")

        def tail(b, self_, other):
            return b.block(b.let(r, b.binary(BinOp.EQ, self_, other, ty=BOOL)), tail=b.local(r, BOOL))

        fn_def = add_eq_method(b, std, foo, tail)
        rule, _ = make_rule(b.build())

        assert rule.check_method(fn_def) == ()

    def test_nested_block_comparison_reports(self) -> None:
        """`{ { self == other } }` peels to the comparison."""
        b = make_builder()
        std = declare_std(b)
        foo = b.type_("Foo")

        def tail(b, self_, other):
            return b.block(tail=b.binary(BinOp.EQ, self_, other, ty=BOOL))

        fn_def = add_eq_method(b, std, foo, tail)
        rule, _ = make_rule(b.build())

        assert len(rule.check_method(fn_def)) == 1

    def test_to_string_reports_once(self) -> None:
        b = make_builder()
        std = declare_std(b)
        foo = b.type_("Foo")
        trait_fn = b.trait_method(std.to_string, "to_string")

        def tail(b, self_, _other):
            return b.method_call(self_, "to_string", target=trait_fn, ty=STRING)

        fn_def = add_to_string_method(b, std, foo, tail)
        rule, _ = make_rule(b.build())

        diagnostics = rule.check_method(fn_def)

        assert [d.pattern for d in diagnostics] == [RecursionPattern.TO_STRING]

    def test_default_new_reports_on_new(self) -> None:
        b = make_builder()
        std = declare_std(b)
        foo = b.type_("Foo")
        pair = add_default_new_pair(b, std, foo)
        rule, sink = make_rule(b.build())

        new_diagnostics = rule.check_method(pair.new)
        default_diagnostics = rule.check_method(pair.default)

        assert [d.pattern for d in new_diagnostics] == [RecursionPattern.DEFAULT_NEW]
        assert new_diagnostics[0].note_span == pair.back_call.span
        assert default_diagnostics == ()
        assert len(sink) == 1

    def test_derived_impls_never_report(self) -> None:
        b = make_builder()
        std = declare_std(b)
        foo = b.type_("Foo")
        trait_fn = b.trait_method(std.to_string, "to_string")
        eq = add_eq_method(b, std, foo, eq_self_other(), derived=True)
        to_string = add_to_string_method(
            b,
            std,
            foo,
            lambda b, self_, _o: b.method_call(self_, "to_string", target=trait_fn, ty=STRING),
            derived=True,
        )
        bar = b.type_("Bar")
        pair = add_default_new_pair(b, std, bar, default_derived=True)
        rule, sink = make_rule(b.build())

        for fn_def in (eq, to_string, pair.new, pair.default):
            rule.check_method(fn_def)

        assert len(sink) == 0

    def test_finding_is_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        b = make_builder()
        std = declare_std(b)
        foo = b.type_("Foo")
        fn_def = add_eq_method(b, std, foo, eq_self_other())
        rule, _ = make_rule(b.build())

        with caplog.at_level(logging.DEBUG, logger="recursecheck.application.rule"):
            rule.check_method(fn_def)

        assert RULE_NAME in caplog.text
        assert "partial_eq" in caplog.text


class TestRecursionRuleConfig:
    """Configuration handling."""

    def test_allow_disables_rule(self) -> None:
        b = make_builder()
        std = declare_std(b)
        foo = b.type_("Foo")
        fn_def = add_eq_method(b, std, foo, eq_self_other())
        rule, sink = make_rule(b.build(), RuleConfig(level=Level.ALLOW))

        assert rule.check_method(fn_def) == ()
        assert len(sink) == 0

    def test_warn_level_is_carried(self) -> None:
        b = make_builder()
        std = declare_std(b)
        foo = b.type_("Foo")
        fn_def = add_eq_method(b, std, foo, eq_self_other())
        rule, _ = make_rule(b.build(), RuleConfig(level=Level.WARN))

        (diagnostic,) = rule.check_method(fn_def)

        assert diagnostic.level is Level.WARN
        assert str(diagnostic).startswith("warning: ")

    def test_disabled_pattern_is_skipped(self) -> None:
        b = make_builder()
        std = declare_std(b)
        foo = b.type_("Foo")
        eq = add_eq_method(b, std, foo, eq_self_other())
        pair = add_default_new_pair(b, std, foo)
        config = RuleConfig(patterns=frozenset({RecursionPattern.DEFAULT_NEW}))
        rule, _ = make_rule(b.build(), config)

        assert rule.check_method(eq) == ()
        assert len(rule.check_method(pair.new)) == 1
