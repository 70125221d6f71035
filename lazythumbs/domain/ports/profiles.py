from __future__ import annotations

from typing import Protocol, Sequence

from lazythumbs.domain.entities.profile import DerivativeProfile


class ProfileRegistryPort(Protocol):
    # Registration order is significant: it breaks ties between matching profiles.
    def list_profiles(self) -> Sequence[DerivativeProfile]: ...
