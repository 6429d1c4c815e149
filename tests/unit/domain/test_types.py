"""Tests for resolved and written types."""

import pytest

from recursecheck.domain.ids import TraitId, TypeId
from recursecheck.domain.types import (
    AdtTy,
    HirTy,
    HirTyKind,
    ParamTy,
    PrimitiveTy,
    RefTy,
    peel_refs,
)

FOO = TypeId(0, "Foo")


class TestPeelRefs:
    """Tests for peel_refs."""

    def test_strips_all_layers(self) -> None:
        assert peel_refs(RefTy(RefTy(AdtTy(FOO), mutable=True))) == AdtTy(FOO)

    def test_non_reference_unchanged(self) -> None:
        assert peel_refs(PrimitiveTy("bool")) == PrimitiveTy("bool")


class TestTyValidation:
    """FAIL-FIRST validation."""

    def test_ref_of_none_raises(self) -> None:
        with pytest.raises(TypeError, match="inner"):
            RefTy(None)  # type: ignore[arg-type]

    def test_empty_primitive_raises(self) -> None:
        with pytest.raises(ValueError, match="name"):
            PrimitiveTy("")

    def test_empty_param_raises(self) -> None:
        with pytest.raises(ValueError, match="name"):
            ParamTy("")


class TestHirTy:
    """Tests for HirTy constructors."""

    def test_resolved(self) -> None:
        hir_ty = HirTy.resolved(FOO)
        assert hir_ty.kind is HirTyKind.RESOLVED
        assert hir_ty.type_id == FOO

    def test_self_alias(self) -> None:
        assert HirTy.self_alias().kind is HirTyKind.SELF_ALIAS

    def test_projection(self) -> None:
        hir_ty = HirTy.projection(TraitId(2))
        assert hir_ty.kind is HirTyKind.PROJECTION
        assert hir_ty.trait_id == TraitId(2)

    def test_projection_without_trait_raises(self) -> None:
        with pytest.raises(ValueError, match="trait_id"):
            HirTy(kind=HirTyKind.PROJECTION)

    def test_type_id_on_alias_raises(self) -> None:
        with pytest.raises(ValueError, match="only allowed for RESOLVED"):
            HirTy(kind=HirTyKind.SELF_ALIAS, type_id=FOO)
