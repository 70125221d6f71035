# lazythumbs/services/optimizer/gate.py
from __future__ import annotations

import threading
from collections import Counter
from contextlib import contextmanager
from typing import Callable, FrozenSet, Iterator, Tuple
from uuid import UUID

from lazythumbs.common.logging import get_logger
from lazythumbs.domain.ports.optimizer import OptimizerPort

logger = get_logger(__name__)

# Sizes that exist on disk from upload time: the original and its "-scaled" stand-in
ALWAYS_ELIGIBLE: FrozenSet[str] = frozenset({"full", "scaled"})


class NullOptimizer(OptimizerPort):
    """No optimizer installed."""

    def invalidate(self, asset_id: UUID) -> None:
        return None

    def optimize(self, asset_id: UUID, is_eligible: Callable[[str], bool]) -> None:
        return None


class OptimizerGate:
    """
    Decides which sizes the optimizer may touch. Derivative sizes are ineligible by default
    because their files do not exist until requested; right after one is generated it is
    allowed for exactly one optimizer run, and only for the asset it was generated for.
    """

    def __init__(self, optimizer: OptimizerPort | None = None) -> None:
        self.optimizer: OptimizerPort = optimizer or NullOptimizer()
        self._lock = threading.Lock()
        self._allowed: Counter[Tuple[UUID, str]] = Counter()

    def is_eligible(self, asset_id: UUID, size_name: str) -> bool:
        if size_name in ALWAYS_ELIGIBLE:
            return True
        with self._lock:
            return self._allowed[(asset_id, size_name)] > 0

    def eligibility_for(self, asset_id: UUID) -> Callable[[str], bool]:
        """The `is_eligible(size_name)` predicate handed to the optimizer for one asset."""
        return lambda size_name: self.is_eligible(asset_id, size_name)

    @contextmanager
    def allow(self, asset_id: UUID, size_name: str) -> Iterator[None]:
        key = (asset_id, size_name)
        with self._lock:
            self._allowed[key] += 1
        try:
            yield
        finally:
            with self._lock:
                self._allowed[key] -= 1
                if self._allowed[key] <= 0:
                    del self._allowed[key]

    def optimize_generated(self, asset_id: UUID, size_name: str) -> bool:
        """
        Run the optimizer for a freshly generated size. Best-effort: failures are logged
        and reported as False, never raised.
        """
        with self.allow(asset_id, size_name):
            try:
                self.optimizer.invalidate(asset_id)
                self.optimizer.optimize(asset_id, self.eligibility_for(asset_id))
            except Exception as e:
                logger.warning("Optimizer failed for asset %s size %s: %s", asset_id, size_name, e)
                return False
        return True
