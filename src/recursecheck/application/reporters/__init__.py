"""Reporters: diagnostics → string."""

from recursecheck.application.reporters.console import ConsoleConfig, ConsoleReporter
from recursecheck.application.reporters.json import JsonReporter
from recursecheck.application.reporters.protocol import ReporterProtocol

__all__ = [
    "ConsoleConfig",
    "ConsoleReporter",
    "JsonReporter",
    "ReporterProtocol",
]
