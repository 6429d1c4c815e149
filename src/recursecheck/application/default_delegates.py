"""Default delegate cache.

Maps each type to the function its `Default` implementation
unconditionally delegates to:

    impl Default for Foo {
        fn default() -> Self {
            Self::new()          // Foo -> Foo::new
        }
    }

Built once, on first demand, by scanning every default impl of the unit.
Immutable afterwards.
"""

from __future__ import annotations

import logging
import threading
from types import MappingProxyType
from typing import TYPE_CHECKING

from recursecheck.application.exit_points import collect_exit_points
from recursecheck.domain.hir import Call
from recursecheck.domain.ids import TypeId

if TYPE_CHECKING:
    from collections.abc import Mapping

    from recursecheck.application.traits import TraitRegistry
    from recursecheck.domain.definitions import FnDef, ImplBlock
    from recursecheck.domain.ids import FunctionId
    from recursecheck.domain.ports import CompilationUnit

logger = logging.getLogger(__name__)

DEFAULT_METHOD = "default"


class DefaultDelegateCache:
    """Build-once mapping TypeId -> delegate FunctionId.

    Single writer, many readers: the first reader builds under a lock,
    later readers see the frozen mapping without locking.
    One instance per analysis run; never invalidated.
    """

    def __init__(self, unit: CompilationUnit, traits: TraitRegistry) -> None:
        """Initialize empty, unbuilt cache.

        Args:
            unit: Compilation unit to scan
            traits: Registry resolving the default trait
        """
        self._unit = unit
        self._traits = traits
        self._entries: Mapping[TypeId, FunctionId] = MappingProxyType({})
        self._built = False
        self._lock = threading.Lock()

    def get(self, type_id: TypeId) -> FunctionId | None:
        """Delegate of a type's default impl, building the cache if needed.

        Args:
            type_id: Implementing type

        Returns:
            Function the default impl calls, None if no entry
        """
        self._ensure_built()
        return self._entries.get(type_id)

    def entries(self) -> Mapping[TypeId, FunctionId]:
        """Read-only view of all entries (builds the cache if needed)."""
        self._ensure_built()
        return self._entries

    @property
    def is_built(self) -> bool:
        """Build has completed."""
        return self._built

    @property
    def size(self) -> int:
        """Number of entries (0 before build)."""
        return len(self._entries)

    def _ensure_built(self) -> None:
        if self._built:
            return
        with self._lock:
            if self._built:
                return
            entries = self._build()
            self._entries = MappingProxyType(entries)
            self._built = True

    def _build(self) -> dict[TypeId, FunctionId]:
        """Scan all default impls of the unit."""
        default_trait = self._traits.default()
        if default_trait is None:
            logger.debug("default trait not found, delegate cache left empty")
            return {}

        entries: dict[TypeId, FunctionId] = {}
        for impl in self._unit.trait_impls(default_trait):
            if impl.is_blanket or impl.is_derived:
                continue
            self_id = self._unit.hir_ty_def(impl.self_ty)
            if not isinstance(self_id, TypeId):
                continue
            delegate = self._delegate_of(impl)
            if delegate is not None:
                entries[self_id] = delegate

        logger.debug("default delegate cache built with %d entries", len(entries))
        return entries

    def _delegate_of(self, impl: ImplBlock) -> FunctionId | None:
        """Function the impl's `default` unconditionally calls, if any."""
        method = self._default_method(impl)
        if method is None or method.body is None:
            return None

        exits = collect_exit_points(method.body)
        if len(exits) != 1 or not isinstance(exits[0], Call):
            return None
        callee = exits[0].callee

        # Resolve against the typeck results of the body holding the call.
        owner = self._unit.enclosing_body_owner(callee.expr_id)
        if owner is None:
            return None
        return self._unit.type_dependent_def(owner, callee)

    def _default_method(self, impl: ImplBlock) -> FnDef | None:
        """First local associated function named `default`, in definition order."""
        for fn_id in impl.items:
            fn_def = self._unit.function(fn_id)
            if fn_def is not None and fn_def.is_local and fn_def.name == DEFAULT_METHOD:
                return fn_def
        return None
