"""recursecheck infrastructure: in-memory front end."""

from recursecheck.infrastructure.unit import InMemoryUnit, UnitBuilder

__all__ = ["InMemoryUnit", "UnitBuilder"]
