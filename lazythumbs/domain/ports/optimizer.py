from __future__ import annotations

from typing import Callable, Protocol
from uuid import UUID


class OptimizerPort(Protocol):
    """
    Third-party image optimizer. `is_eligible(size_name)` tells it which sizes of the asset
    it may touch; everything else must be left alone.
    """
    def invalidate(self, asset_id: UUID) -> None: ...

    def optimize(self, asset_id: UUID, is_eligible: Callable[[str], bool]) -> None: ...
