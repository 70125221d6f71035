from __future__ import annotations
from enum import StrEnum

class SettingsScope(StrEnum):
    site = "site"        # single deployment
    network = "network"  # shared across a multi-deployment install
