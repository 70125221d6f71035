from __future__ import annotations

from typing import Protocol


class SettingsStorePort(Protocol):
    def get_flag(self, name: str, default: bool = False) -> bool: ...

    def set_flag(self, name: str, value: bool) -> None: ...

    # the on-demand generation switch
    def is_enabled(self, default: bool = False) -> bool: ...
