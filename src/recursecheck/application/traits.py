"""Trait registry: well-known traits resolved once per run."""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

from recursecheck.domain.configuration import RuleConfig

if TYPE_CHECKING:
    from recursecheck.domain.ids import TraitId
    from recursecheck.domain.ports import TraitLookup

logger = logging.getLogger(__name__)


class TraitRegistry:
    """Memoising canonical-path trait resolver.

    Misses are memoised too: a trait absent from the unit (no standard
    library, for instance) stays absent for the whole run.
    Thread-safe.
    """

    def __init__(self, lookup: TraitLookup, config: RuleConfig | None = None) -> None:
        """Initialize registry.

        Args:
            lookup: Canonical-path lookup service of the unit
            config: Rule configuration providing the canonical paths
        """
        if lookup is None:
            raise TypeError("lookup must not be None")
        self._lookup = lookup
        self._config = config or RuleConfig()
        self._resolved: dict[tuple[str, ...], TraitId | None] = {}
        self._lock = threading.Lock()

    def resolve(self, path: tuple[str, ...]) -> TraitId | None:
        """Resolve a trait by canonical path.

        Args:
            path: Canonical path, e.g. ("core", "cmp", "PartialEq")

        Returns:
            TraitId, or None if the unit has no such trait
        """
        with self._lock:
            if path in self._resolved:
                return self._resolved[path]
            trait_id = self._lookup.trait_by_path(path)
            self._resolved[path] = trait_id

        if trait_id is None:
            logger.debug("trait %s not found, dependent checks disabled", "::".join(path))
        return trait_id

    def partial_eq(self) -> TraitId | None:
        """The equality trait."""
        return self.resolve(self._config.partial_eq_path)

    def to_string(self) -> TraitId | None:
        """The stringification trait."""
        return self.resolve(self._config.to_string_path)

    def default(self) -> TraitId | None:
        """The default-construction trait."""
        return self.resolve(self._config.default_path)

    @property
    def resolved_count(self) -> int:
        """Number of memoised paths (hits and misses)."""
        with self._lock:
            return len(self._resolved)
