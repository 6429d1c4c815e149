"""Domain exceptions: all public errors of recursecheck.

The rule itself never raises for well-formed input: an inapplicable check
is a silent early return, not an error. These exceptions report programmer
errors while a unit or a configuration is being built.
"""


class RecurseCheckError(Exception):
    """Base for all recursecheck error exceptions.

    Allows: except RecurseCheckError to catch all library errors.
    """


class DuplicateDefinitionError(RecurseCheckError, ValueError):
    """Definition id registered twice in one compilation unit.

    Attributes:
        kind: Kind of definition (function, impl, trait, type).
        ident: Offending id, formatted.
    """

    def __init__(self, kind: str, ident: object) -> None:
        """Initialize with definition kind and id."""
        self.kind = kind
        self.ident = ident
        super().__init__(f"duplicate {kind} definition: {ident}")


class UnknownDefinitionError(RecurseCheckError, KeyError):
    """Reference to an id that was never registered.

    Attributes:
        kind: Kind of definition (function, impl, trait, type).
        ident: Missing id, formatted.
    """

    def __init__(self, kind: str, ident: object) -> None:
        """Initialize with definition kind and id."""
        self.kind = kind
        self.ident = ident
        super().__init__(f"unknown {kind}: {ident}")

    def __str__(self) -> str:
        """Plain message (KeyError would repr() it)."""
        return f"unknown {self.kind}: {self.ident}"


class InvalidConfigError(RecurseCheckError, ValueError):
    """Rule configuration is invalid.

    Attributes:
        field: Offending configuration field.
        reason: Why the value is invalid.
    """

    def __init__(self, field: str, reason: str) -> None:
        """Initialize with field name and reason."""
        if not field:
            raise ValueError("field must not be empty")
        if not reason:
            raise ValueError("reason must not be empty")
        self.field = field
        self.reason = reason
        super().__init__(f"invalid config '{field}': {reason}")
