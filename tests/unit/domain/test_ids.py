"""Tests for domain/ids.py."""

import pytest

from recursecheck.domain.ids import ExprId, FunctionId, TypeId


class TestOpaqueIds:
    """Identity semantics shared by all id types."""

    def test_equal_by_index(self) -> None:
        assert FunctionId(1, "eq") == FunctionId(1, "other")

    def test_label_does_not_merge_ids(self) -> None:
        """Same name, different definitions: distinct ids."""
        assert FunctionId(1, "new") != FunctionId(2, "new")

    def test_kinds_never_compare_equal(self) -> None:
        assert FunctionId(1) != TypeId(1)

    def test_hashable(self) -> None:
        ids = {TypeId(1, "Foo"), TypeId(1, "Foo"), TypeId(2, "Bar")}
        assert len(ids) == 2

    def test_ordered_by_index(self) -> None:
        assert sorted([ExprId(3), ExprId(1), ExprId(2)]) == [ExprId(1), ExprId(2), ExprId(3)]

    def test_str(self) -> None:
        assert str(FunctionId(4, "eq")) == "eq#4"
        assert str(TypeId(0)) == "?#0"

    def test_immutable(self) -> None:
        fn_id = FunctionId(1)
        with pytest.raises(AttributeError):
            fn_id.index = 2  # type: ignore[misc]


class TestOpaqueIdValidation:
    """FAIL-FIRST validation."""

    def test_negative_index_raises(self) -> None:
        with pytest.raises(ValueError, match="index must be >= 0"):
            TypeId(-1)

    def test_non_int_index_raises(self) -> None:
        with pytest.raises(TypeError, match="index must be int"):
            TypeId("1")  # type: ignore[arg-type]

    def test_bool_index_raises(self) -> None:
        with pytest.raises(TypeError, match="index must be int"):
            TypeId(True)
