# lazythumbs/domain/entities/profile.py
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class DerivativeProfile:
    """
    Named size configuration. crop=False fits within the box; crop=True fills it exactly.
    A zero width or height leaves that axis unconstrained.
    """
    name: str
    width: int = 0
    height: int = 0
    crop: bool = False

    def __post_init__(self):
        if not self.name or not self.name.strip():
            raise ValueError("DerivativeProfile.name is required")
        if self.width < 0 or self.height < 0:
            raise ValueError("DerivativeProfile dimensions must be >= 0")
        if self.width == 0 and self.height == 0:
            raise ValueError("DerivativeProfile needs a width or a height")
