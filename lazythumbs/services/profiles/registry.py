from __future__ import annotations

from typing import Iterable, Sequence, Tuple

from lazythumbs.common.settings import Settings
from lazythumbs.domain.entities.profile import DerivativeProfile
from lazythumbs.domain.ports.profiles import ProfileRegistryPort


class StaticProfileRegistry(ProfileRegistryPort):
    """Fixed set of profiles in registration order. Names must be unique."""

    def __init__(self, profiles: Iterable[DerivativeProfile]) -> None:
        seen: set[str] = set()
        ordered: list[DerivativeProfile] = []
        for p in profiles:
            if p.name in seen:
                raise ValueError(f"Duplicate derivative profile name: {p.name!r}")
            seen.add(p.name)
            ordered.append(p)
        self._profiles: Tuple[DerivativeProfile, ...] = tuple(ordered)

    @classmethod
    def from_settings(cls, cfg: Settings) -> "StaticProfileRegistry":
        return cls(
            DerivativeProfile(name=p.name, width=p.width, height=p.height, crop=p.crop)
            for p in cfg.profiles
        )

    def list_profiles(self) -> Sequence[DerivativeProfile]:
        return self._profiles
