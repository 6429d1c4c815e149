"""Tests for domain exceptions."""

import pytest

from recursecheck.domain.exceptions import (
    DuplicateDefinitionError,
    InvalidConfigError,
    RecurseCheckError,
    UnknownDefinitionError,
)
from recursecheck.domain.ids import FunctionId


class TestExceptionHierarchy:
    """Every public error has the library root and a builtin base."""

    @pytest.mark.parametrize(
        ("exc", "builtin"),
        [
            (DuplicateDefinitionError("function", FunctionId(1, "f")), ValueError),
            (UnknownDefinitionError("impl", "impl#2"), KeyError),
            (InvalidConfigError("level", "bad"), ValueError),
        ],
    )
    def test_bases(self, exc: Exception, builtin: type[Exception]) -> None:
        assert isinstance(exc, RecurseCheckError)
        assert isinstance(exc, builtin)


class TestMessages:
    """Error messages and attributes."""

    def test_duplicate(self) -> None:
        exc = DuplicateDefinitionError("trait", "core::cmp::PartialEq")
        assert exc.kind == "trait"
        assert str(exc) == "duplicate trait definition: core::cmp::PartialEq"

    def test_unknown_is_not_repr_quoted(self) -> None:
        exc = UnknownDefinitionError("function", FunctionId(4, "new"))
        assert str(exc) == "unknown function: new#4"

    def test_invalid_config(self) -> None:
        exc = InvalidConfigError("patterns", "empty")
        assert exc.field == "patterns"
        assert exc.reason == "empty"
        assert str(exc) == "invalid config 'patterns': empty"

    def test_invalid_config_requires_field(self) -> None:
        with pytest.raises(ValueError, match="field must not be empty"):
            InvalidConfigError("", "reason")

    def test_invalid_config_requires_reason(self) -> None:
        with pytest.raises(ValueError, match="reason must not be empty"):
            InvalidConfigError("field", "")
