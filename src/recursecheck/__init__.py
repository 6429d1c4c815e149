"""recursecheck - detect methods that cannot return without recursing."""

__version__ = "0.1.0"

from recursecheck.application.driver import check_unit
from recursecheck.application.rule import DiagnosticCollector, RecursionRule
from recursecheck.domain.configuration import RuleConfig
from recursecheck.domain.diagnostic import Diagnostic, Level, RecursionPattern

__all__ = [
    "Diagnostic",
    "DiagnosticCollector",
    "Level",
    "RecursionPattern",
    "RecursionRule",
    "RuleConfig",
    "__version__",
    "check_unit",
]
