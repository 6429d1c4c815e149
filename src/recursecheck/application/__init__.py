"""recursecheck application layer: the rule, its classifiers and the driver."""

from recursecheck.application.default_delegates import DefaultDelegateCache
from recursecheck.application.driver import check_unit
from recursecheck.application.exit_points import (
    collect_exit_points,
    has_conditional_return,
)
from recursecheck.application.factory_recursion import FactoryRecursionClassifier
from recursecheck.application.operator_recursion import OperatorRecursionClassifier
from recursecheck.application.rule import DiagnosticCollector, RecursionRule
from recursecheck.application.traits import TraitRegistry

__all__ = [
    "DefaultDelegateCache",
    "DiagnosticCollector",
    "FactoryRecursionClassifier",
    "OperatorRecursionClassifier",
    "RecursionRule",
    "TraitRegistry",
    "check_unit",
    "collect_exit_points",
    "has_conditional_return",
]
