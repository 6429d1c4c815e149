"""recursecheck domain layer.

Pure domain logic with no external dependencies.
Only imports: typing, dataclasses, enum, pathlib, collections.abc
"""

from recursecheck.domain.configuration import RuleConfig
from recursecheck.domain.definitions import FnDef, ImplBlock, TraitDef
from recursecheck.domain.diagnostic import Diagnostic, Finding, Level, RecursionPattern
from recursecheck.domain.exceptions import (
    DuplicateDefinitionError,
    InvalidConfigError,
    RecurseCheckError,
    UnknownDefinitionError,
)
from recursecheck.domain.ids import BindingId, ExprId, FunctionId, ImplId, TraitId, TypeId
from recursecheck.domain.ports import CompilationUnit, DiagnosticSink
from recursecheck.domain.span import Span

__all__ = [
    # Exceptions
    "RecurseCheckError",
    "DuplicateDefinitionError",
    "UnknownDefinitionError",
    "InvalidConfigError",
    # Enums
    "Level",
    "RecursionPattern",
    # Identities
    "BindingId",
    "ExprId",
    "FunctionId",
    "ImplId",
    "TraitId",
    "TypeId",
    # Value objects
    "Span",
    "Finding",
    "Diagnostic",
    "RuleConfig",
    # Entities
    "FnDef",
    "ImplBlock",
    "TraitDef",
    # Ports
    "CompilationUnit",
    "DiagnosticSink",
]
