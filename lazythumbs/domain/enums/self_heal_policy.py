from __future__ import annotations
from enum import StrEnum

class SelfHealPolicy(StrEnum):
    copy = "copy"
    symlink = "symlink"
